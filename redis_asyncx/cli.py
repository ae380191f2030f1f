"""
redis_asyncx.cli
----------------
``redis-async-cli``: a minimal redis-cli built on :class:`redis_asyncx.Client`

Run with a command to execute it once::

    $ redis-async-cli set fu bar
    OK

or without one for an interactive session.
"""

from __future__ import annotations

import functools
import logging
import shlex

import anyio
import click
from anyio import to_thread

from redis_asyncx import __version__
from redis_asyncx.client import Client
from redis_asyncx.exceptions import ConnectionError, RedisError, ResponseError
from redis_asyncx.response.types import (
    Array,
    BigNumber,
    Boolean,
    BulkString,
    Double,
    Error,
    Integer,
    Map,
    Null,
    Push,
    Set,
    SimpleString,
    Value,
    VerbatimString,
)
from redis_asyncx.typing import Awaitable, Callable

#: A parsed command waiting for a connected client to run on
Invocation = Callable[[Client], Awaitable[Value | None]]

VERBOSITY = [logging.WARNING, logging.INFO, logging.DEBUG]

#: Command names and option names are case insensitive
CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"], "token_normalize_func": str.lower}
#: Arguments that look like options are passed through as values
#: (``lrange l 0 -1``, ``get -key``)
ARGUMENT_SETTINGS = {"ignore_unknown_options": True}

_ESCAPES = str.maketrans({"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"})


def _quoted(data: bytes) -> str:
    return f'"{data.decode("utf-8", "replace").translate(_ESCAPES)}"'


def _listing(entries: list[str], marker: str, empty: str) -> str:
    if not entries:
        return empty
    width = len(str(len(entries)))
    lines = []
    for index, entry in enumerate(entries, 1):
        prefix = f"{index:>{width}}{marker} "
        first, *rest = entry.split("\n")
        lines.append(prefix + first)
        lines.extend(" " * len(prefix) + line for line in rest)
    return "\n".join(lines)


def render(value: Value) -> str:
    """
    Render a reply the way ``redis-cli`` does
    """
    if isinstance(value, SimpleString):
        return value.text
    if isinstance(value, BulkString):
        return _quoted(value.value)
    if isinstance(value, Integer):
        return f"(integer) {value.value}"
    if isinstance(value, Null):
        return "(nil)"
    if isinstance(value, Error):
        return f"(error) {value}"
    if isinstance(value, Boolean):
        return "(true)" if value.value else "(false)"
    if isinstance(value, Double):
        return f"(double) {value.value!r}"
    if isinstance(value, BigNumber):
        return f"(big number) {value.value}"
    if isinstance(value, VerbatimString):
        return value.text
    if isinstance(value, Map):
        return _listing(
            [f"{render(k)} => {render(v)}" for k, v in value], "#", "(empty hash)"
        )
    if isinstance(value, Set):
        return _listing([render(item) for item in value], "~", "(empty set)")
    if isinstance(value, (Array, Push)):
        return _listing([render(item) for item in value], ")", "(empty array)")
    return repr(value)


async def _execute(client: Client, invocation: Invocation) -> int:
    try:
        response = await invocation(client)
    except ResponseError as err:
        click.echo(f"(error) {err}")
        return 1
    except RedisError as err:
        click.echo(f"Error: {err}", err=True)
        return 1
    if response is not None:
        click.echo(render(response))
    return 0


async def _interactive(client: Client, prompt: str) -> int:
    session = click.Group(commands=cli.commands, context_settings=CONTEXT_SETTINGS)
    read_line = functools.partial(
        click.prompt, prompt, default="", show_default=False, prompt_suffix="> "
    )
    click.secho("Interactive mode. Type 'exit' to quit.", fg="green")
    while client.connection.is_connected:
        try:
            line = (await to_thread.run_sync(read_line)).strip()
        except click.Abort:
            click.echo()
            return 0
        if not line:
            continue
        if line.lower() == "exit":
            return 0
        try:
            args = shlex.split(line)
        except ValueError as err:
            click.echo(f"Invalid input: {err}", err=True)
            continue
        try:
            invocation = session.main(args, prog_name="", standalone_mode=False)
        except click.ClickException as err:
            err.show()
            continue
        if callable(invocation):
            await _execute(client, invocation)
    return 1


async def _run(host: str, port: int, invocation: Invocation | None) -> int:
    client = Client(host, port)
    try:
        await client.connect()
    except ConnectionError as err:
        click.echo(f"Could not connect to Redis at {host}:{port}: {err.__cause__ or err}", err=True)
        return 1
    async with client:
        if invocation is None:
            return await _interactive(client, f"{host}:{port}")
        return await _execute(client, invocation)


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.option(
    "--host",
    default="127.0.0.1",
    envvar="REDIS_ASYNCX_HOST",
    show_default=True,
    help="Redis server hostname.",
)
@click.option(
    "-p",
    "--port",
    default=6379,
    type=int,
    envvar="REDIS_ASYNCX_PORT",
    show_default=True,
    help="Redis server port.",
)
@click.option("-v", "--verbose", count=True, help="Increase logging verbosity.")
@click.version_option(__version__, prog_name="redis-async-cli")
def cli(host: str, port: int, verbose: int) -> None:
    """
    redis-cli compatible client. Without a COMMAND an interactive
    session is started.
    """
    logging.basicConfig(
        level=VERBOSITY[min(verbose, len(VERBOSITY) - 1)],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.result_callback()
@click.pass_context
def run(
    ctx: click.Context, invocation: Invocation | None, host: str, port: int, verbose: int
) -> None:
    ctx.exit(anyio.run(_run, host, port, invocation))


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("protover", type=int, required=False)
def hello(protover: int | None) -> Invocation:
    """Switch RESP protocol version."""
    return lambda client: client.hello(protover)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("message", required=False)
def ping(message: str | None) -> Invocation:
    """Check if the server is alive."""
    return lambda client: client.ping(message)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
def get(key: str) -> Invocation:
    """Get the value of a key."""
    return lambda client: client.get(key)


@cli.command("set", context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("value")
@click.option("--ex", type=int, help="Expire after this many seconds.")
@click.option("--px", type=int, help="Expire after this many milliseconds.")
@click.option("--nx", is_flag=True, help="Only set the key if it does not exist.")
@click.option("--xx", is_flag=True, help="Only set the key if it already exists.")
def set_(
    key: str, value: str, ex: int | None, px: int | None, nx: bool, xx: bool
) -> Invocation:
    """Set the value of a key."""
    return lambda client: client.set(key, value, ex=ex, px=px, nx=nx, xx=xx)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.option("--ex", type=int, help="Expire after this many seconds.")
@click.option("--px", type=int, help="Expire after this many milliseconds.")
@click.option("--exat", type=int, help="Expire at this unix time in seconds.")
@click.option("--pxat", type=int, help="Expire at this unix time in milliseconds.")
@click.option("--persist", is_flag=True, help="Remove the time to live of the key.")
def getex(
    key: str,
    ex: int | None,
    px: int | None,
    exat: int | None,
    pxat: int | None,
    persist: bool,
) -> Invocation:
    """Get the value of a key and optionally set its expiration."""
    return lambda client: client.getex(key, ex=ex, px=px, exat=exat, pxat=pxat, persist=persist)


@cli.command("del", context_settings=ARGUMENT_SETTINGS)
@click.argument("keys", nargs=-1, required=True)
def delete(keys: tuple[str, ...]) -> Invocation:
    """Delete keys."""
    return lambda client: client.delete(keys)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("keys", nargs=-1, required=True)
def exists(keys: tuple[str, ...]) -> Invocation:
    """Check if keys exist."""
    return lambda client: client.exists(keys)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("seconds", type=int)
def expire(key: str, seconds: int) -> Invocation:
    """Expire a key after a given number of seconds."""
    return lambda client: client.expire(key, seconds)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
def ttl(key: str) -> Invocation:
    """Get the time to live of a key."""
    return lambda client: client.ttl(key)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
def incr(key: str) -> Invocation:
    """Increment the value of a key."""
    return lambda client: client.incr(key)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
def decr(key: str) -> Invocation:
    """Decrement the value of a key."""
    return lambda client: client.decr(key)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("elements", nargs=-1, required=True)
def lpush(key: str, elements: tuple[str, ...]) -> Invocation:
    """Push values onto the head of a list."""
    return lambda client: client.lpush(key, elements)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("elements", nargs=-1, required=True)
def rpush(key: str, elements: tuple[str, ...]) -> Invocation:
    """Push values onto the tail of a list."""
    return lambda client: client.rpush(key, elements)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("count", type=int, required=False)
def lpop(key: str, count: int | None) -> Invocation:
    """Pop values from the head of a list."""
    return lambda client: client.lpop(key, count)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("count", type=int, required=False)
def rpop(key: str, count: int | None) -> Invocation:
    """Pop values from the tail of a list."""
    return lambda client: client.rpop(key, count)


@cli.command(context_settings=ARGUMENT_SETTINGS)
@click.argument("key")
@click.argument("start", type=int)
@click.argument("stop", type=int)
def lrange(key: str, start: int, stop: int) -> Invocation:
    """Get a range of values from a list."""
    return lambda client: client.lrange(key, start, stop)


@cli.command()
def clear() -> Invocation:
    """Clear the screen."""

    async def _clear(client: Client) -> None:
        click.clear()

    return _clear


def main() -> None:
    cli(prog_name="redis-async-cli")


if __name__ == "__main__":
    main()
