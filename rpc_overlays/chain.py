"""
Chain id resolution.

The canonical chain id is the base-10 string of the endpoint's ``eth_chainId``
answer; it names the chain-scoped overlay subdirectory (``overlays/1``,
``overlays/11155111``, ...).

Resolution at validation time is best effort: if the endpoint is unreachable
or answers with something unusable, callers get ``None`` and fall back to the
chain-agnostic overlays.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Union

from .adapters.node_rpc import NodeRpc, NodeRpcError, connect
from .config import Settings
from .errors import InvalidChainIdError
from .logging import get_logger

log = get_logger(__name__)

_UNSAFE_DIR_CHARS = re.compile(r"^\.|[^A-Za-z0-9_.-]")


def parse_quantity(value: Union[str, int]) -> int:
    """Parse a JSON-RPC quantity (``0x``-hex or decimal) into an int."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid quantity: {value!r}")
    if isinstance(value, int):
        return value
    s = str(value).strip()
    try:
        if s[:2].lower() in ("0x", "0o", "0b"):
            return int(s, 0)
        return int(s, 10)
    except ValueError:
        raise ValueError(f"Invalid quantity: {value!r}") from None


def to_quantity(value: int) -> str:
    return hex(value)


def normalize_chain_id(value: Any) -> str:
    """
    Return the canonical base-10 form of ``value``.

    Unparseable values are trimmed and made safe to use as a single directory
    name (path separators and a leading dot become ``_``); empty values raise
    :class:`InvalidChainIdError`.
    """
    trimmed = str(value).strip() if value is not None else ""
    if not trimmed:
        raise InvalidChainIdError("Chain ID string cannot be empty")
    try:
        return str(parse_quantity(trimmed))
    except ValueError:
        return _UNSAFE_DIR_CHARS.sub("_", trimmed)


class ChainResolver:
    """Resolve the canonical chain id of one endpoint."""

    def __init__(self, rpc: NodeRpc) -> None:
        self._rpc = rpc

    async def resolve(self) -> Optional[str]:
        try:
            raw = await self._rpc.chain_id()
        except NodeRpcError as e:
            log.warning(
                "chain_id_unavailable",
                rpc_url=self._rpc.url,
                error=str(e),
                fallback="global overlays only",
            )
            return None
        if raw is not None and (isinstance(raw, bool) or not isinstance(raw, (str, int))):
            log.warning(
                "chain_id_unavailable",
                rpc_url=self._rpc.url,
                error=f"unexpected result type {type(raw).__name__}",
                fallback="global overlays only",
            )
            return None
        try:
            return normalize_chain_id(raw)
        except InvalidChainIdError:
            log.warning(
                "chain_id_empty",
                rpc_url=self._rpc.url,
                raw=raw,
                fallback="global overlays only",
            )
            return None


async def resolve_chain_id(rpc_url: Optional[str], settings: Optional[Settings] = None) -> Optional[str]:
    """Open a short-lived client for ``rpc_url`` and resolve its chain id."""
    if not rpc_url:
        return None
    settings = settings or Settings()
    async with connect(rpc_url, timeout_s=settings.request_timeout, headers=settings.rpc_headers) as rpc:
        return await ChainResolver(rpc).resolve()


__all__ = ["parse_quantity", "to_quantity", "normalize_chain_id", "ChainResolver", "resolve_chain_id"]
