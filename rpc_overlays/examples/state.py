"""
Account/state examples: proofs, gas estimation and access lists.

Proof and gas estimation use the context's active account (the reference
block's fee recipient). The access list replays the sample transaction's
fields.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from ..adapters.node_rpc import NodeRpc
from ..context import NetworkContext
from ..overlay.writer import MethodExample, param
from . import generator, skip

ACCESS_LIST_FIELDS = (
    "from",
    "to",
    "gas",
    "gasPrice",
    "maxFeePerGas",
    "maxPriorityFeePerGas",
    "value",
    "data",
)


@generator("proof", methods=("eth_getProof",))
async def proof(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    account = ctx.active_account
    if not account:
        return skip(ctx, "eth_getProof", "missing miner address")
    result = await rpc.get_proof(account, [], ctx.block_number)
    return [
        MethodExample(
            method="eth_getProof",
            params=[param("Address", account), param("Storage keys", []), param("Block", ctx.block_number)],
            result_name="Account proof",
            result_value=result,
        )
    ]


@generator("estimate_gas", methods=("eth_estimateGas",))
async def estimate_gas(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    sender = ctx.active_account
    if not sender:
        return skip(ctx, "eth_estimateGas", "missing miner address")
    tx = {"from": sender, "to": sender, "value": "0x0"}
    estimate = await rpc.estimate_gas(tx)
    return [
        MethodExample(
            method="eth_estimateGas",
            params=[param("Transaction", tx)],
            result_name="Estimated gas",
            result_value=estimate,
        )
    ]


def access_list_transaction(sample: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Minimal call object copied from ``sample``: only non-empty string fields
    from :data:`ACCESS_LIST_FIELDS`, EIP-1559 fees winning over ``gasPrice``.
    Returns ``None`` when ``from``/``to`` are missing.
    """
    tx: Dict[str, Any] = {}
    for field in ACCESS_LIST_FIELDS:
        value = sample.get(field)
        if isinstance(value, str) and value and value != "0x":
            tx[field] = value

    if "gasPrice" in tx and ("maxFeePerGas" in tx or "maxPriorityFeePerGas" in tx):
        del tx["gasPrice"]

    if "from" not in tx or "to" not in tx:
        return None
    return tx


@generator("access_list", methods=("eth_createAccessList",))
async def access_list(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    if not ctx.sample_tx:
        return skip(ctx, "eth_createAccessList", "no sample transaction available")
    tx = access_list_transaction(ctx.sample_tx)
    if tx is None:
        return skip(ctx, "eth_createAccessList", "sample transaction missing required fields")
    result = await rpc.create_access_list(tx, ctx.block_number)
    return [
        MethodExample(
            method="eth_createAccessList",
            params=[param("Transaction", tx), param("Block", ctx.block_number)],
            result_name="Access list information",
            result_value=result,
        )
    ]
