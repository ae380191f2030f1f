"""
Decorators validating the arguments of command methods before anything
is sent to the server. All of them are disabled when
:attr:`redis_asyncx.Config.optimized` is set.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Mapping
from typing import Any

from redis_asyncx.config import Config
from redis_asyncx.exceptions import CommandSyntaxError
from redis_asyncx.typing import (
    Callable,
    Iterable,
    ParamSpec,
    TypeVar,
)

R = TypeVar("R")
P = ParamSpec("P")

#: Receives the command method, its signature and the arguments of a call
Check = Callable[[Callable[..., Any], inspect.Signature, Mapping[str, Any]], None]


class MutuallyExclusiveParametersError(CommandSyntaxError):
    def __init__(self, arguments: set[str]):
        super().__init__(
            arguments, f"The [{','.join(sorted(arguments))}] parameters are mutually exclusive."
        )


def _validator(check: Check) -> Callable[[Callable[P, R]], Callable[P, R]]:
    def wrapper(func: Callable[P, R]) -> Callable[P, R]:
        sig = inspect.signature(func)

        @functools.wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            if not Config.optimized:
                check(func, sig, sig.bind_partial(*args, **kwargs).arguments)
            return func(*args, **kwargs)

        return wrapped

    return wrapper


def mutually_exclusive_parameters(
    *exclusive_params: str,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Allow at most one of :paramref:`exclusive_params` to differ from its
    default.
    """
    primary = set(exclusive_params)

    def check(
        func: Callable[..., Any], sig: inspect.Signature, arguments: Mapping[str, Any]
    ) -> None:
        provided = {
            name
            for name in primary
            if name in arguments and arguments[name] != sig.parameters[name].default
        }
        if len(provided) > 1:
            raise MutuallyExclusiveParametersError(provided)

    return _validator(check)


def ensure_iterable_valid(argument: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Require :paramref:`argument` to be a container of values rather than a
    single :class:`str` or :class:`bytes`.
    """

    def check(
        func: Callable[..., Any], sig: inspect.Signature, arguments: Mapping[str, Any]
    ) -> None:
        value = arguments.get(argument)
        if not isinstance(value, Iterable) or isinstance(value, (str, bytes)):
            raise TypeError(
                f"{func.__name__} parameter {argument}={value!r} violates expected "
                f"iterable of type {sig.parameters[argument].annotation}"
            )

    return _validator(check)


def ensure_integers(*names: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Reject non integer values for :paramref:`names`. ``None`` is accepted
    for optional arguments and the range of the value is left for the
    server to validate.
    """

    def check(
        func: Callable[..., Any], sig: inspect.Signature, arguments: Mapping[str, Any]
    ) -> None:
        for name in names:
            value = arguments.get(name)
            if value is not None and (not isinstance(value, int) or isinstance(value, bool)):
                raise TypeError(f"{func.__name__} parameter {name}={value!r} must be an integer")

    return _validator(check)
