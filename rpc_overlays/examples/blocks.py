"""Block examples, both taken from the context's reference block."""

from __future__ import annotations

from typing import List

from ..adapters.node_rpc import NodeRpc
from ..context import NetworkContext
from ..overlay.writer import MethodExample, param
from . import generator


@generator("block_by_number", methods=("eth_getBlockByNumber",))
async def block_by_number(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    return [
        MethodExample(
            method="eth_getBlockByNumber",
            params=[param("Block", ctx.block_number), param("Hydrated transactions", False)],
            result_name="Block information",
            result_value=ctx.block,
        )
    ]


@generator("block_by_hash", methods=("eth_getBlockByHash",))
async def block_by_hash(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    block = await rpc.get_block_by_hash(ctx.block_hash, False)
    return [
        MethodExample(
            method="eth_getBlockByHash",
            params=[param("Block hash", ctx.block_hash), param("Hydrated transactions", False)],
            result_name="Block information",
            result_value=block,
        )
    ]
