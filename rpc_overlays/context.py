"""
Network context: the live sample data every example generator draws from.

``NetworkContextBuilder.build(target)`` probes one endpoint:

1. ``eth_chainId``      -> canonical chain id and chain-scoped overlay dir
2. ``eth_blockNumber``  -> start height (unless the target pins one)
3. backward walk        -> first block with transactions (fatal if none)
4. ``eth_getTransactionByHash`` on that block's first transaction
5. backward walk        -> first block with non-empty logs (optional)

The resulting :class:`NetworkContext` is immutable and lives for one refresh
run; nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .adapters.node_rpc import NodeRpc
from .chain import normalize_chain_id
from .config import NetworkTarget, Settings
from .errors import ContextBuildError
from .logging import get_logger
from .search import LogsContext, extract_transaction_hash, find_block_with_transactions, find_logs_candidate

log = get_logger(__name__)


@dataclass(frozen=True)
class NetworkContext:
    rpc_url: str
    label: str
    chain_id: str
    chain_dir: Path
    block_number: str
    block_hash: str
    block: Dict[str, Any]
    tx_hash: str
    tx_index: str = "0x0"
    sample_tx: Optional[Dict[str, Any]] = None
    logs: Optional[LogsContext] = None

    @property
    def active_account(self) -> Optional[str]:
        """The reference block's fee recipient, a known active address."""
        miner = self.block.get("miner")
        return miner if isinstance(miner, str) and miner else None


class NetworkContextBuilder:
    """Build a :class:`NetworkContext` for one endpoint."""

    def __init__(self, rpc: NodeRpc, settings: Settings) -> None:
        self._rpc = rpc
        self._settings = settings

    async def build(self, target: NetworkTarget) -> NetworkContext:
        rpc = self._rpc
        depth = self._settings.search_depth

        raw_chain_id = await rpc.chain_id()
        chain_id = normalize_chain_id(raw_chain_id)
        label = target.label or f"{target.rpc_url} (chainId {raw_chain_id})"

        head = target.block_number or await rpc.block_number()
        number, block = await find_block_with_transactions(rpc, head, depth)

        block_hash = block.get("hash")
        if not isinstance(block_hash, str):
            raise ContextBuildError("Selected block is missing a hash")
        tx_hash = extract_transaction_hash(block)

        sample_tx = await rpc.get_transaction_by_hash(tx_hash)
        logs = await find_logs_candidate(rpc, block, number, depth)

        log.info(
            "network_context_built",
            rpc_url=target.rpc_url,
            chain_id=chain_id,
            block_number=number,
            tx_hash=tx_hash,
            logs_block=logs.block_number if logs else None,
        )
        return NetworkContext(
            rpc_url=target.rpc_url,
            label=label,
            chain_id=chain_id,
            chain_dir=Path(self._settings.overlays_dir) / chain_id,
            block_number=number,
            block_hash=block_hash,
            block=block,
            tx_hash=tx_hash,
            sample_tx=sample_tx if isinstance(sample_tx, dict) else None,
            logs=logs,
        )


__all__ = ["LogsContext", "NetworkContext", "NetworkContextBuilder"]
