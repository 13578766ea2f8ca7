"""
Command line for rpc-overlays.

Commands:
  - refresh          : harvest fresh examples from live endpoints into overlay files
  - apply            : write an OpenRPC document with the overlays applied
  - chain-id         : print the canonical chain id of an endpoint
  - list-generators  : show the registered example generators

Usage:
  python -m rpc_overlays.cli <command> [options]
  rpc-overlays refresh --rpc-url https://rpc-sepolia.flashbots.net
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from pydantic_settings import SettingsError

from .adapters.node_rpc import NodeRpcError
from .config import NetworkTarget, Settings, get_settings
from .errors import ContextBuildError, OverlayError
from .logging import get_logger, setup_logging
from .version import __version__

app = typer.Typer(add_completion=False, help="Keep OpenRPC examples fresh with live-network overlays")
log = get_logger(__name__)

_FATAL = (OverlayError, ContextBuildError, NodeRpcError, OSError, KeyError, ValueError)


def _settings() -> Settings:
    try:
        return get_settings()
    except (SettingsError, ValidationError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(1)


def _fail(e: Exception) -> None:
    log.error("run_failed", error=str(e), error_type=type(e).__name__)
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


def _version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main(
    overlays_dir: Optional[Path] = typer.Option(None, "--overlays-dir", help="Root overlay directory"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    version: bool = typer.Option(False, "--version", callback=_version, is_eager=True, help="Print version"),
) -> None:
    """
    Shared options for all subcommands.
    """
    settings = _settings()
    if overlays_dir is not None:
        settings.overlays_dir = overlays_dir
    setup_logging(level=(log_level or settings.log_level).upper(), log_format=settings.log_format)


@app.command("refresh")
def refresh(
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Probe this endpoint instead of OVERLAY_NETWORKS"),
    block: Optional[str] = typer.Option(None, "--block", help="Start the search at this block (hex or decimal)"),
    label: Optional[str] = typer.Option(None, "--label", help="Human-readable endpoint label"),
    only: Optional[List[str]] = typer.Option(None, "--only", help="Run only these generators (repeatable)"),
) -> None:
    """
    Harvest examples from every configured endpoint and write overlay files.
    """
    from .pipeline import refresh_examples

    settings = _settings()
    try:
        if rpc_url:
            targets = [NetworkTarget(rpc_url=rpc_url, block_number=block, label=label)]
        else:
            targets = settings.refresh_targets()
        results = asyncio.run(refresh_examples(targets, settings, generators=only or None))
    except _FATAL as e:
        _fail(e)
    for url, paths in results.items():
        typer.echo(f"{url}: {len(paths)} overlay file(s)")
        for p in paths:
            typer.echo(f"  {p}")


@app.command("apply")
def apply(
    document_path: Path = typer.Argument(..., exists=True, dir_okay=False, metavar="DOCUMENT", help="OpenRPC document (JSON)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write here instead of stdout"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Endpoint used to pick chain overlays"),
    no_chain: bool = typer.Option(False, "--no-chain", help="Apply chain-agnostic overlays only"),
) -> None:
    """
    Apply overlays to an OpenRPC document.
    """
    from .pipeline import apply_example_overlays, dump_document, load_document

    settings = _settings()
    url = None if no_chain else (rpc_url or settings.rpc_url)
    try:
        document = load_document(document_path)
        patched = asyncio.run(apply_example_overlays(document, rpc_url=url, settings=settings))
        text = dump_document(patched, out)
    except _FATAL as e:
        _fail(e)
    if out is None:
        typer.echo(text, nl=False)
    else:
        typer.echo(f"Wrote {out}")


@app.command("chain-id")
def chain_id(
    rpc_url: Optional[str] = typer.Option(None, "--rpc-url", help="Endpoint to query"),
) -> None:
    """
    Print the canonical (base-10) chain id, or "unknown".
    """
    from .chain import resolve_chain_id

    settings = _settings()
    resolved = asyncio.run(resolve_chain_id(rpc_url or settings.rpc_url, settings))
    typer.echo(resolved or "unknown")


@app.command("list-generators")
def list_generators() -> None:
    """
    List registered example generators and the methods they document.
    """
    from .examples import get_registry

    for name, entry in get_registry().items():
        typer.echo(f"{name}: {', '.join(entry.methods)}")


if __name__ == "__main__":
    app()
