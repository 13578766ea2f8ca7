"""
Log and filter examples. Both need the optional logs context; without it they
are skipped with a warning.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..adapters.node_rpc import NodeRpc
from ..context import NetworkContext
from ..errors import ContextBuildError
from ..overlay.writer import MethodExample, param
from . import generator, skip


@generator("logs", methods=("eth_getLogs",))
async def logs(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    if ctx.logs is None:
        return skip(ctx, "eth_getLogs", "no logs found")
    return [
        MethodExample(
            method="eth_getLogs",
            params=[param("Filter", ctx.logs.request)],
            description=f"Logs fetched for block {ctx.logs.block_number} from {ctx.label}",
            result_name="Logs",
            result_value=ctx.logs.logs,
        )
    ]


def filter_params(ctx: NetworkContext) -> Dict[str, Any]:
    """A filter pinned to the logs block, the first log's address and first topic."""
    if ctx.logs is None or not ctx.logs.logs:
        raise ContextBuildError(f"No logs to build a filter from ({ctx.rpc_url})")
    first = ctx.logs.logs[0] if isinstance(ctx.logs.logs[0], dict) else {}
    params: Dict[str, Any] = {
        "fromBlock": ctx.logs.block_number,
        "toBlock": ctx.logs.block_number,
    }
    if isinstance(first.get("address"), str):
        params["address"] = first["address"]
    topics = first.get("topics")
    if isinstance(topics, list) and topics:
        params["topics"] = [topics[0]]
    return params


@generator("filters", methods=("eth_getFilterChanges", "eth_getFilterLogs"))
async def filters(rpc: NodeRpc, ctx: NetworkContext) -> List[MethodExample]:
    """One live filter; changes and logs are both read through its id."""
    if ctx.logs is None or not ctx.logs.logs:
        return skip(ctx, "eth_getFilterChanges/eth_getFilterLogs", "no logs to anchor filter")

    filter_id = await rpc.new_filter(filter_params(ctx))
    changes = await rpc.get_filter_changes(filter_id)
    filter_logs = await rpc.get_filter_logs(filter_id)
    return [
        MethodExample(
            method="eth_getFilterChanges",
            params=[param("Filter id", filter_id)],
            description=f"Filter changes for block {ctx.logs.block_number}",
            result_name="Filter changes",
            result_value=changes,
        ),
        MethodExample(
            method="eth_getFilterLogs",
            params=[param("Filter id", filter_id)],
            description=f"Filter logs for block {ctx.logs.block_number}",
            result_name="Filter logs",
            result_value=filter_logs,
        ),
    ]
