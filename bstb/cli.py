from __future__ import annotations

import functools
import logging
import sys
import typing

import anyio
import click
import httpx
from rich.console import Console
from rich.logging import RichHandler

from ._converter import StreamConverter
from ._exceptions import StreamConverterError
from .util import DEFAULT_BUFFER_SIZE

logger = logging.getLogger("bstb.cli")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# ---------------------------------------------------------------------------
# Header parsing helper (curl-style -H "Key: Value")
# ---------------------------------------------------------------------------


def parse_header(header: str) -> tuple[str, str]:
    """Parse a 'Key: Value' header string."""
    if ":" not in header:
        raise click.BadParameter(
            f"Invalid header format: '{header}'. Expected 'Key: Value'."
        )
    key, _, value = header.partition(":")
    return key.strip(), value.strip()


def build_client(timeout: float, follow_redirects: bool) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout, follow_redirects=follow_redirects)


# ---------------------------------------------------------------------------
# Drains
# ---------------------------------------------------------------------------


async def drain_url(
    converter: StreamConverter,
    url: str,
    *,
    headers: dict[str, str],
    timeout: float,
    follow_redirects: bool,
    as_bytes: bool,
) -> tuple[int, bytes | str]:
    """Stream a GET request for ``url`` and drain its body."""
    async with build_client(timeout, follow_redirects) as client:
        async with client.stream("GET", url, headers=headers) as response:
            logger.debug(
                "%s %s -> %d",
                response.request.method,
                response.url,
                response.status_code,
            )
            if as_bytes:
                body: bytes | str = await converter.abody_to_bytes(response)
            else:
                body = await converter.abody_to_string(response)
            return response.status_code, body


async def drain_stdin(converter: StreamConverter, as_bytes: bool) -> bytes | str:
    """Drain standard input through the reader path."""
    stdin = anyio.wrap_file(sys.stdin.buffer)
    if as_bytes:
        return await converter.aread_to_bytes(stdin)
    return await converter.aread_to_string(stdin)


def _report(
    body: bytes | str, source: str, use_rich: bool, console: Console | None
) -> None:
    if isinstance(body, str):
        click.echo(body, nl=False)
        return
    if use_rich and console is not None:
        console.print(
            f"[green]✓[/green] Drained [bold]{len(body):,}[/bold] bytes "
            f"from [cyan]{source}[/cyan]"
        )
    else:
        click.echo(f"<{len(body)} bytes>")


# ---------------------------------------------------------------------------
# CLI command
# ---------------------------------------------------------------------------


@click.command(help="Drain a URL (or '-' for stdin) into memory and print it.")
@click.argument("source")
@click.option(
    "--bytes",
    "as_bytes",
    is_flag=True,
    default=False,
    help="Report the number of bytes instead of printing the body as text.",
)
@click.option(
    "-H",
    "--header",
    "headers",
    multiple=True,
    help='Add a header, e.g. -H "Authorization: Bearer token".',
)
@click.option(
    "--follow-redirects", is_flag=True, default=False, help="Follow redirects."
)
@click.option(
    "--timeout",
    type=float,
    default=5.0,
    show_default=True,
    envvar="BSTB_TIMEOUT",
    help="Network timeout in seconds.",
)
@click.option(
    "--buffer-size",
    type=click.IntRange(min=1),
    default=DEFAULT_BUFFER_SIZE,
    show_default=True,
    envvar="BSTB_BUFFER_SIZE",
    help="Bytes requested per read when draining stdin.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output.")
@click.option(
    "--no-color", is_flag=True, default=False, help="Disable colored output."
)
def main(
    source: str,
    as_bytes: bool,
    headers: tuple[str, ...],
    follow_redirects: bool,
    timeout: float,
    buffer_size: int,
    verbose: bool,
    no_color: bool,
) -> None:
    _configure_logging(verbose)
    use_rich = not no_color and sys.stdout.isatty()
    console = Console() if use_rich else None
    converter = StreamConverter(buffer_size)

    header_dict: dict[str, str] = {}
    for h in headers:
        key, value = parse_header(h)
        header_dict[key] = value

    status_code: int | None = None
    try:
        if source == "-":
            body = anyio.run(drain_stdin, converter, as_bytes)
        else:
            kwargs: dict[str, typing.Any] = {
                "headers": header_dict,
                "timeout": timeout,
                "follow_redirects": follow_redirects,
                "as_bytes": as_bytes,
            }
            status_code, body = anyio.run(
                functools.partial(drain_url, converter, source, **kwargs)
            )
    except (StreamConverterError, httpx.HTTPError) as exc:
        if use_rich:
            Console(stderr=True).print(
                f"[bold red]{type(exc).__name__}[/bold red]: {exc}"
            )
        else:
            click.echo(f"{type(exc).__name__}: {exc}", err=True)
        sys.exit(1)

    _report(body, source, use_rich, console)

    if status_code is not None and status_code >= 400:
        sys.exit(1)
