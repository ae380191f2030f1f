#!/usr/bin/env python3
"""
Minimal setup.py for redis_asyncx extension modules.
All project metadata is defined in pyproject.toml (PEP-621).
This file only handles the optional mypyc compilation of the codec.
"""

from __future__ import annotations

import os

from setuptools.command.build_ext import build_ext


class CompiledCodecBuildExt(build_ext):
    """Custom build_ext that handles mypyc compilation."""

    def run(self):
        """Run the build process with mypyc support."""
        use_mypyc = os.environ.get("USE_MYPYC", "false").lower() == "true"

        if use_mypyc:
            try:
                from mypyc.build import mypycify

                mypyc_modules = [
                    "redis_asyncx/constants.py",
                    "redis_asyncx/parser.py",
                    "redis_asyncx/_packer.py",
                ]

                mypyc_extensions = mypycify(
                    mypyc_modules,
                    debug_level="0",
                    strip_asserts=True,
                )

                for ext in mypyc_extensions:
                    if hasattr(ext, "extra_compile_args") and "-Werror" in ext.extra_compile_args:
                        ext.extra_compile_args.remove("-Werror")

                    if not hasattr(ext, "_needs_stub"):
                        ext._needs_stub = False

                self.extensions.extend(mypyc_extensions)

            except ImportError:
                print("Warning: mypyc not available, skipping mypyc compilation")
            except Exception as e:
                print(f"Warning: mypyc compilation failed: {e}")

        super().run()


if __name__ == "__main__":
    from setuptools import setup

    setup(cmdclass={"build_ext": CompiledCodecBuildExt})
