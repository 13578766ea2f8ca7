from __future__ import annotations

"""
rpc_overlays.examples
=====================

A lightweight registry of example generators. Each generator reads the shared
:class:`~rpc_overlays.context.NetworkContext`, may issue a few live calls, and
returns the :class:`~rpc_overlays.overlay.writer.MethodExample` objects it
could produce. Generators are independent and best effort: when the context
lacks what they need they log a warning and return nothing, and a generator
whose calls the endpoint rejects is skipped without affecting the others.

Typical generator module usage
------------------------------
from . import generator, skip

@generator("logs", methods=("eth_getLogs",))
async def logs(rpc, ctx):
    if ctx.logs is None:
        return skip(ctx, "eth_getLogs", "no logs found")
    ...

Runner integration
------------------
    paths = await run_generators(rpc, ctx)          # every registered generator
    paths = await run_generators(rpc, ctx, ["logs"])
"""

import asyncio
import importlib
import threading
import typing as t
from dataclasses import dataclass
from pathlib import Path

from ..adapters.node_rpc import NodeRpcError
from ..logging import get_logger
from ..overlay.writer import MethodExample, write_overlay

if t.TYPE_CHECKING:  # pragma: no cover
    from ..adapters.node_rpc import NodeRpc
    from ..context import NetworkContext

log = get_logger(__name__)

GeneratorFn = t.Callable[["NodeRpc", "NetworkContext"], t.Awaitable[t.List[MethodExample]]]


@dataclass(frozen=True)
class GeneratorSpec:
    """Metadata about a registered example generator."""

    name: str
    func: GeneratorFn
    methods: t.Tuple[str, ...]
    desc: str | None = None


# ---- Global registry --------------------------------------------------------

_REGISTRY: dict[str, GeneratorSpec] = {}
_LOADED = False
_LOCK = threading.RLock()

_BUILTIN_MODULES = (
    "rpc_overlays.examples.blocks",
    "rpc_overlays.examples.transactions",
    "rpc_overlays.examples.logs",
    "rpc_overlays.examples.state",
)


def generator(
    name: str,
    *,
    methods: t.Sequence[str],
    desc: str | None = None,
    replace: bool = False,
) -> t.Callable[[GeneratorFn], GeneratorFn]:
    """Register an async example generator under ``name``."""

    def _decorate(func: GeneratorFn) -> GeneratorFn:
        with _LOCK:
            if name in _REGISTRY and not replace:
                raise ValueError(f"generator {name!r} already registered")
            _REGISTRY[name] = GeneratorSpec(name=name, func=func, methods=tuple(methods), desc=desc or func.__doc__)
        return func

    return _decorate


def ensure_loaded() -> None:
    global _LOADED
    with _LOCK:
        if _LOADED:
            return
        for mod in _BUILTIN_MODULES:
            importlib.import_module(mod)
        _LOADED = True


def get_registry() -> dict[str, GeneratorSpec]:
    ensure_loaded()
    with _LOCK:
        return dict(_REGISTRY)


def skip(ctx: "NetworkContext", method: str, reason: str) -> t.List[MethodExample]:
    log.warning("overlay_example_skipped", method=method, rpc_url=ctx.rpc_url, reason=reason)
    return []


# ---- Runner -------------------------------------------------------------------


def select(names: t.Optional[t.Iterable[str]] = None) -> t.List[GeneratorSpec]:
    registry = get_registry()
    if names is None:
        return list(registry.values())
    return [registry[n] for n in names]


async def _run_one(rpc: "NodeRpc", ctx: "NetworkContext", entry: GeneratorSpec) -> t.List[Path]:
    try:
        examples = await entry.func(rpc, ctx)
    except NodeRpcError as e:
        log.warning(
            "overlay_generator_failed",
            generator=entry.name,
            methods=list(entry.methods),
            rpc_url=ctx.rpc_url,
            error=str(e),
        )
        return []
    return [write_overlay(ctx, example) for example in examples]


async def run_generators(
    rpc: "NodeRpc",
    ctx: "NetworkContext",
    names: t.Optional[t.Iterable[str]] = None,
) -> t.List[Path]:
    """
    Run the selected generators concurrently; each one writes its overlay
    files as soon as it finishes. Returns the written paths in registry order.

    A generator whose RPC calls fail is logged and skipped. Any other error
    is re-raised once every generator has settled, so files written by the
    others stay on disk.
    """
    selected = select(names)
    outcomes = await asyncio.gather(*(_run_one(rpc, ctx, entry) for entry in selected), return_exceptions=True)
    paths: t.List[Path] = []
    errors: t.List[BaseException] = []
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            errors.append(outcome)
        else:
            paths.extend(outcome)
    if errors:
        raise errors[0]
    return paths


__all__ = [
    "GeneratorSpec",
    "generator",
    "ensure_loaded",
    "get_registry",
    "skip",
    "select",
    "run_generators",
]
