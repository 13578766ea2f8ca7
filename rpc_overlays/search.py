"""
Bounded backward searches over the chain.

Both harvester searches walk from a starting height towards genesis one block
at a time and stop at the first block satisfying a predicate. ``BackwardWalk``
owns the bound and the attempt counter; the searches only supply predicates
and decide what exhaustion means:

- ``find_block_with_transactions``: exhaustion is fatal (no sample data).
- ``find_logs_candidate``: exhaustion degrades to ``None`` (no logs context).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from .adapters.node_rpc import NodeRpc, NodeRpcError
from .chain import parse_quantity, to_quantity
from .config import DEFAULT_SEARCH_DEPTH
from .errors import ContextBuildError, SearchExhaustedError

log = logging.getLogger(__name__)

Block = Dict[str, Any]
Candidate = Tuple[str, Optional[Block]]


@dataclass(frozen=True)
class LogsContext:
    """Non-empty logs found for one block, plus the filter that produced them."""

    block_number: str
    request: Dict[str, Any]
    logs: List[Any]


class BackwardWalk:
    """
    Async iterator over ``(number_hex, block)`` for ``start, start-1, ...``.

    Stops after ``limit`` fetches or once the next height would be negative.
    Blocks are fetched without transaction bodies. ``block`` may be ``None``
    when the endpoint has no such block.
    """

    def __init__(self, rpc: NodeRpc, start: Union[str, int], limit: int = DEFAULT_SEARCH_DEPTH) -> None:
        try:
            self._next = parse_quantity(start)
        except ValueError as e:
            raise ContextBuildError(f"Invalid hex value: {start}") from e
        self._rpc = rpc
        self.limit = limit
        self.attempts = 0

    def __aiter__(self) -> AsyncIterator[Candidate]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Candidate]:
        while self.attempts < self.limit and self._next >= 0:
            candidate = to_quantity(self._next)
            self.attempts += 1
            self._next -= 1
            block = await self._rpc.get_block_by_number(candidate, False)
            yield candidate, block if isinstance(block, dict) else None


async def first_match(
    walk: BackwardWalk,
    predicate: Callable[[str, Optional[Block]], Awaitable[Any]],
) -> Optional[Tuple[str, Optional[Block], Any]]:
    """
    Consume ``walk`` until ``predicate`` returns something truthy.

    Returns ``(number_hex, block, predicate_result)`` or ``None`` when the walk
    is exhausted.
    """
    async for number, block in walk:
        outcome = await predicate(number, block)
        if outcome:
            return number, block, outcome
    return None


# ---- Block with transactions -------------------------------------------------


def _transactions(block: Optional[Block]) -> List[Any]:
    txs = block.get("transactions") if block else None
    return txs if isinstance(txs, list) else []


async def find_block_with_transactions(
    rpc: NodeRpc,
    start: Union[str, int],
    limit: int = DEFAULT_SEARCH_DEPTH,
) -> Tuple[str, Block]:
    """Return ``(number, block)`` for the first block at or below ``start`` with transactions."""
    walk = BackwardWalk(rpc, start, limit)

    async def _has_transactions(_: str, block: Optional[Block]) -> bool:
        return bool(_transactions(block))

    found = await first_match(walk, _has_transactions)
    if found is None:
        raise SearchExhaustedError("block with transactions", str(start), walk.attempts, rpc.url)
    number, block, _ = found
    if block is None:
        raise ContextBuildError(f"Block {number} was not returned by {rpc.url}")
    return str(block.get("number") or number), block


def extract_transaction_hash(block: Block) -> str:
    for tx in _transactions(block):
        if isinstance(tx, str):
            return tx
    raise ContextBuildError("Selected block does not expose transaction hashes")


# ---- Logs ------------------------------------------------------------------


async def safe_get_logs(rpc: NodeRpc, log_filter: Dict[str, Any]) -> List[Any]:
    """``eth_getLogs`` where any failure counts as zero results."""
    try:
        logs = await rpc.get_logs(log_filter)
    except NodeRpcError as e:
        log.debug("eth_getLogs failed for %s: %s", log_filter, e)
        return []
    return logs if isinstance(logs, list) else []


async def find_logs_candidate(
    rpc: NodeRpc,
    block: Block,
    fallback_number: str,
    limit: int = DEFAULT_SEARCH_DEPTH,
) -> Optional[LogsContext]:
    """
    Find a block whose ``{blockHash}`` logs query is non-empty.

    Tries ``block`` first, then walks back from the block before it. Returns
    ``None`` when the bound is exhausted.
    """
    block_hash = block.get("hash")
    if not isinstance(block_hash, str) or not block_hash:
        return None

    request = {"blockHash": block_hash}
    logs = await safe_get_logs(rpc, request)
    if logs:
        return LogsContext(str(block.get("number") or fallback_number), request, logs)

    start = parse_quantity(fallback_number) - 1
    if start < 0:
        return None
    walk = BackwardWalk(rpc, start, limit)

    async def _logs_for(_: str, candidate: Optional[Block]) -> Optional[Tuple[Dict[str, Any], List[Any]]]:
        candidate_hash = candidate.get("hash") if candidate else None
        if not isinstance(candidate_hash, str) or not candidate_hash:
            return None
        candidate_request = {"blockHash": candidate_hash}
        candidate_logs = await safe_get_logs(rpc, candidate_request)
        return (candidate_request, candidate_logs) if candidate_logs else None

    found = await first_match(walk, _logs_for)
    if found is None:
        log.debug("no logs within %d blocks below %s", walk.attempts, fallback_number)
        return None
    number, candidate, (found_request, found_logs) = found
    if candidate is None:
        raise ContextBuildError(f"Block {number} was not returned by {rpc.url}")
    return LogsContext(str(candidate.get("number") or number), found_request, found_logs)


__all__ = [
    "LogsContext",
    "BackwardWalk",
    "first_match",
    "find_block_with_transactions",
    "extract_transaction_hash",
    "safe_get_logs",
    "find_logs_candidate",
]
