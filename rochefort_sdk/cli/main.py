"""
rochefort_sdk.cli.main
======================

`rochefort`: command-line access to a rochefort store.

Examples
--------
    $ rochefort --url http://127.0.0.1:8000 env
    $ echo -n hello | rochefort append events --tag greeting --alloc 16
    $ rochefort get events 0 42
    $ rochefort scan events
    $ rochefort search events --tag a --tag b
    $ rochefort --protocol v1 append events --file blob.bin --id abc

Records print as JSON lines: {"offset": 0, "data": "0x68656c6c6f"}.

Configuration
-------------
- Store URL    : `--url` or env `ROCHEFORT_URL` (default: http://127.0.0.1:8000)
- Timeout      : `--timeout` or env `ROCHEFORT_TIMEOUT` seconds (default: 1.0)
- Protocol     : `--protocol` or env `ROCHEFORT_PROTOCOL` (v1 | v2, default: v2)
"""

from __future__ import annotations

import contextlib
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Optional

import typer

from ..client import Client, LegacyClient, connect
from ..config import ClientConfig
from ..errors import RochefortError, ValidationError
from ..types import Query, Tag, all_of, any_of, query_from_dict
from ..utils.bytes import to_hex
from ..version import __version__

app = typer.Typer(
    name="rochefort",
    help="rochefort store CLI: append, fetch, scan and search records.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main"]


@dataclass
class Ctx:
    config: ClientConfig


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False))


def _print_record(offset: int, data: bytes) -> None:
    _print_json({"offset": offset, "data": to_hex(data)})


def _read_input(input_file: Optional[Path]) -> bytes:
    if input_file is not None:
        return input_file.read_bytes()
    return sys.stdin.buffer.read()


@contextlib.contextmanager
def _store(ctx: typer.Context) -> Iterator[Any]:
    """Open a client for the configured dialect; report SDK errors as exit 1."""
    c: Ctx = ctx.obj
    try:
        with connect(c.config) as client:
            yield client
    except RochefortError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _require_v2(client: Any, command: str) -> Client:
    if not isinstance(client, Client):
        typer.echo(f"Error: '{command}' needs the v2 protocol", err=True)
        raise typer.Exit(2)
    return client


@app.callback()
def _root(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None, "--url", help="Store base URL.", envvar="ROCHEFORT_URL"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP timeout in seconds.", envvar="ROCHEFORT_TIMEOUT"
    ),
    protocol: Optional[str] = typer.Option(
        None, "--protocol", help="Wire dialect: v1 or v2.", envvar="ROCHEFORT_PROTOCOL"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr."),
) -> None:
    """Resolve the effective configuration for this process."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )
    try:
        config = ClientConfig.with_overrides(
            None, url=url, timeout=timeout, protocol=protocol
        )
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e
    ctx.obj = Ctx(config=config)


@app.command("version")
def version() -> None:
    """Print the SDK version."""
    typer.echo(f"rochefort-sdk {__version__}")


@app.command("env")
def env(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    c: Ctx = ctx.obj
    _print_json(c.config.to_dict())


@app.command("append")
def append(
    ctx: typer.Context,
    namespace: str = typer.Argument(..., help="Target namespace ('' is valid)."),
    input_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Input file (default: read from stdin)."
    ),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Search tag (repeatable)."),
    alloc: int = typer.Option(0, "--alloc", help="Allocated size for later modify."),
    record_id: str = typer.Option("", "--id", help="Record id (v1 only)."),
) -> None:
    """Append one record and print its offset."""
    data = _read_input(input_file)
    with _store(ctx) as client:
        if isinstance(client, LegacyClient):
            if tags or alloc:
                typer.echo("Error: --tag/--alloc need the v2 protocol", err=True)
                raise typer.Exit(2)
            offset = client.append(namespace, data, id=record_id)
        else:
            offset = client.append(namespace, data, tags=tags or (), alloc_size=alloc)
    _print_json({"offset": offset})


@app.command("get")
def get(
    ctx: typer.Context,
    namespace: str = typer.Argument(...),
    offsets: List[int] = typer.Argument(..., help="One or more offsets."),
) -> None:
    """Fetch records by offset, printed in request order."""
    with _store(ctx) as client:
        if isinstance(client, LegacyClient):
            if len(offsets) == 1:
                records = [client.get(namespace, offsets[0])]
            else:
                records = client.get_multi(namespace, offsets)
        else:
            records = client.get([(namespace, off) for off in offsets])
    for off, data in zip(offsets, records):
        _print_record(off, data)


@app.command("modify")
def modify(
    ctx: typer.Context,
    namespace: str = typer.Argument(...),
    offset: int = typer.Argument(...),
    pos: int = typer.Argument(..., help="Byte position inside the record."),
    input_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Input file (default: read from stdin)."
    ),
) -> None:
    """Overwrite part of a record in place (v2)."""
    data = _read_input(input_file)
    with _store(ctx) as client:
        _require_v2(client, "modify").modify(namespace, offset, pos, data)
    _print_json({"offset": offset, "pos": pos, "written": len(data)})


@app.command("scan")
def scan(ctx: typer.Context, namespace: str = typer.Argument(...)) -> None:
    """Stream every record of a namespace."""
    with _store(ctx) as client:
        client.scan(namespace, _print_record)


def _build_query(tags: Optional[List[str]], match_all: bool, raw: Optional[str]) -> Query:
    if raw is not None:
        if tags:
            raise typer.BadParameter("use either --query or --tag")
        try:
            return query_from_dict(json.loads(raw))
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"--query is not valid JSON: {e}") from e
        except ValidationError as e:
            raise typer.BadParameter(str(e)) from e
    if not tags:
        raise typer.BadParameter("provide --tag at least once, or --query")
    if len(tags) == 1:
        return Tag(tags[0])
    return all_of(*tags) if match_all else any_of(*tags)


@app.command("search")
def search(
    ctx: typer.Context,
    namespace: str = typer.Argument(...),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag to match (repeatable)."),
    match_all: bool = typer.Option(False, "--all", help="Require every tag instead of any."),
    raw_query: Optional[str] = typer.Option(
        None, "--query", "-q", help='Query JSON, e.g. {"or":[{"tag":"a"},{"tag":"b"}]}.'
    ),
) -> None:
    """Stream records matching a tag query (v2)."""
    query = _build_query(tags, match_all, raw_query)
    with _store(ctx) as client:
        _require_v2(client, "search").search(namespace, query, _print_record)


@app.command("compact")
def compact(ctx: typer.Context, namespace: str = typer.Argument(...)) -> None:
    """Compact a namespace (v2)."""
    with _store(ctx) as client:
        _require_v2(client, "compact").compact(namespace)
    _print_json({"namespace": namespace, "compacted": True})


@app.command("delete")
def delete(
    ctx: typer.Context,
    namespace: str = typer.Argument(...),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete a namespace and all of its records (v2)."""
    if not yes:
        typer.confirm(f"Delete namespace {namespace!r}?", abort=True)
    with _store(ctx) as client:
        _require_v2(client, "delete").delete(namespace)
    _print_json({"namespace": namespace, "deleted": True})


def main() -> None:  # pragma: no cover - thin wrapper
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
