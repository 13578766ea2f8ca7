"""
End-to-end flows.

Validation time
---------------
``apply_example_overlays(document, rpc_url=...)`` loads the chain-agnostic
overlays, resolves the endpoint's chain id, loads that chain's overlays
(recursively) and returns the patched copy handed to the coverage harness.

Refresh time
------------
``refresh_examples(targets)`` builds one network context per endpoint and
runs the example generators against it, writing overlay files that the
validation flow picks up next time. Endpoints are processed concurrently;
a hard failure for any of them aborts the run.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .adapters.node_rpc import connect
from .chain import resolve_chain_id
from .config import NetworkTarget, Settings
from .context import NetworkContext, NetworkContextBuilder
from .examples import run_generators
from .logging import bind_log_context, get_logger
from .overlay.actions import OverlayAction
from .overlay.engine import apply_overlays
from .overlay.loader import load_overlay_actions

log = get_logger(__name__)


# ---- Documents ----------------------------------------------------------------


def load_document(path: Union[str, Path]) -> Dict[str, Any]:
    with Path(path).open("rt", encoding="utf-8") as fh:
        return json.load(fh)


def dump_document(document: Any, path: Optional[Union[str, Path]] = None) -> str:
    text = json.dumps(document, indent=2, ensure_ascii=False, default=str) + "\n"
    if path is not None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
    return text


# ---- Validation-time overlays -----------------------------------------------------


def collect_overlay_actions(
    overlays_dir: Union[str, Path],
    chain_id: Optional[str],
) -> List[OverlayAction]:
    actions = load_overlay_actions(overlays_dir)
    if chain_id:
        actions.extend(load_overlay_actions(Path(overlays_dir) / chain_id, recursive=True))
    return actions


async def apply_example_overlays(
    document: Any,
    *,
    rpc_url: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Any:
    """Return a copy of ``document`` with global and chain-scoped overlays applied."""
    settings = settings or Settings()
    chain_id = await resolve_chain_id(rpc_url, settings)

    actions = collect_overlay_actions(settings.overlays_dir, chain_id)
    log.info("overlays_loaded", count=len(actions), chain_id=chain_id, overlays_dir=str(settings.overlays_dir))
    return apply_overlays(document, actions)


# ---- Refresh-time example generation ------------------------------------------------


async def refresh_network(
    target: NetworkTarget,
    settings: Settings,
    generators: Optional[Sequence[str]] = None,
) -> List[Path]:
    bind_log_context(rpc_url=target.rpc_url)
    async with connect(target.rpc_url, timeout_s=settings.request_timeout, headers=settings.rpc_headers) as rpc:
        ctx: NetworkContext = await NetworkContextBuilder(rpc, settings).build(target)
        paths = await run_generators(rpc, ctx, generators)
    log.info("examples_refreshed", rpc_url=target.rpc_url, chain_id=ctx.chain_id, files=len(paths))
    return paths


async def refresh_examples(
    targets: Iterable[NetworkTarget],
    settings: Optional[Settings] = None,
    *,
    generators: Optional[Sequence[str]] = None,
) -> Dict[str, List[Path]]:
    """Harvest examples for every target; returns written paths per endpoint."""
    settings = settings or Settings()
    targets = list(targets)
    results = await asyncio.gather(*(refresh_network(t, settings, generators) for t in targets))
    return {t.rpc_url: paths for t, paths in zip(targets, results)}


__all__ = [
    "load_document",
    "dump_document",
    "collect_overlay_actions",
    "apply_example_overlays",
    "refresh_network",
    "refresh_examples",
]
