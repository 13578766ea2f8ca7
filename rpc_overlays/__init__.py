"""
RPC Overlays
============

Keeps an OpenRPC document's examples in sync with a live JSON-RPC endpoint.

This package exposes:

- ``__version__``: semantic version string
- ``apply_example_overlays()``: patch a document with the overlays on disk
- ``refresh_examples()``: harvest fresh examples from live endpoints

Prefer importing submodules directly for specific concerns:
``rpc_overlays.overlay.engine``, ``rpc_overlays.context``,
``rpc_overlays.examples``, etc.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__", "apply_example_overlays", "refresh_examples"]


async def apply_example_overlays(document, **kwargs):
    """Lazy proxy for :func:`rpc_overlays.pipeline.apply_example_overlays`."""
    from .pipeline import apply_example_overlays as _apply

    return await _apply(document, **kwargs)


async def refresh_examples(targets, settings=None, **kwargs):
    """Lazy proxy for :func:`rpc_overlays.pipeline.refresh_examples`."""
    from .pipeline import refresh_examples as _refresh

    return await _refresh(targets, settings, **kwargs)
