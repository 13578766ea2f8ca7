"""
Transaction examples built around the context's sample transaction: the first
transaction (index ``0x0``) of the reference block.
"""

from __future__ import annotations

from typing import List

from ..adapters.node_rpc import NodeRpc
from ..context import NetworkContext
from ..overlay.writer import MethodExample, param
from . import generator


@generator("transaction_by_hash", methods=("eth_getTransactionByHash",))
async def transaction_by_hash(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    tx = ctx.sample_tx if ctx.sample_tx is not None else await rpc.get_transaction_by_hash(ctx.tx_hash)
    return [
        MethodExample(
            method="eth_getTransactionByHash",
            params=[param("Transaction hash", ctx.tx_hash)],
            result_name="Transaction",
            result_value=tx,
        )
    ]


@generator("transaction_by_number_and_index", methods=("eth_getTransactionByBlockNumberAndIndex",))
async def transaction_by_number_and_index(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    tx = await rpc.get_transaction_by_block_number_and_index(ctx.block_number, ctx.tx_index)
    return [
        MethodExample(
            method="eth_getTransactionByBlockNumberAndIndex",
            params=[param("Block", ctx.block_number), param("Transaction index", ctx.tx_index)],
            result_name="Transaction",
            result_value=tx,
        )
    ]


@generator("transaction_by_hash_and_index", methods=("eth_getTransactionByBlockHashAndIndex",))
async def transaction_by_hash_and_index(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    tx = await rpc.get_transaction_by_block_hash_and_index(ctx.block_hash, ctx.tx_index)
    return [
        MethodExample(
            method="eth_getTransactionByBlockHashAndIndex",
            params=[param("Block hash", ctx.block_hash), param("Transaction index", ctx.tx_index)],
            result_name="Transaction",
            result_value=tx,
        )
    ]
