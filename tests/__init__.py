"""
Shared test doubles.

``FakeNode`` is a tiny in-memory Ethereum-ish JSON-RPC endpoint. It can be
used two ways:

- as a respx side effect (``router.post(URL).mock(side_effect=node)``) to
  exercise the real httpx transport, or
- through ``FakeRpc``, a ``NodeRpc`` whose ``call`` dispatches straight to the
  node, for search/context/generator tests that don't care about HTTP.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import httpx

from rpc_overlays.adapters.node_rpc import NodeRpc, NodeRpcConfig, RpcResponseError

RPC_URL = "http://node.test/rpc"
MINER = "0x" + "42" * 20
SENDER = "0x" + "11" * 20
RECIPIENT = "0x" + "22" * 20


def block_hash(number: int) -> str:
    return f"0x{number:064x}"


def tx_hash(number: int, index: int) -> str:
    return f"0x{number:060x}{index:04x}"


class JsonRpcFault(Exception):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FakeNode:
    """In-memory chain answering the eth_* methods the harvester uses."""

    def __init__(self, chain_id: Any = "0xaa36a7") -> None:
        self.chain_id = chain_id
        self.head = 0
        self.blocks: Dict[int, Optional[Dict[str, Any]]] = {}
        self.txs: Dict[str, Dict[str, Any]] = {}
        self.logs: Dict[str, List[Dict[str, Any]]] = {}
        self.failing_logs: Set[str] = set()
        self.unsupported: Set[str] = set()
        self.filters: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, List[Any]]] = []

    # ---- chain building ----------------------------------------------------

    def add_block(self, number: int, n_txs: int = 0, *, miner: Optional[str] = MINER) -> Dict[str, Any]:
        hashes = [tx_hash(number, i) for i in range(n_txs)]
        block: Dict[str, Any] = {
            "number": hex(number),
            "hash": block_hash(number),
            "parentHash": block_hash(number - 1) if number else "0x" + "00" * 32,
            "transactions": hashes,
        }
        if miner is not None:
            block["miner"] = miner
        for i, h in enumerate(hashes):
            self.txs[h] = {
                "hash": h,
                "blockNumber": hex(number),
                "blockHash": block_hash(number),
                "transactionIndex": hex(i),
                "from": SENDER,
                "to": RECIPIENT,
                "gas": "0x5208",
                "gasPrice": "0x3b9aca00",
                "maxFeePerGas": "0x77359400",
                "maxPriorityFeePerGas": "0x3b9aca00",
                "value": "0x1",
                "input": "0x",
                "nonce": "0x0",
            }
        self.blocks[number] = block
        self.head = max(self.head, number)
        return block

    def add_chain(self, numbers: Iterable[int], with_txs: Iterable[int] = ()) -> None:
        with_txs = set(with_txs)
        for n in numbers:
            self.add_block(n, 1 if n in with_txs else 0)

    def add_logs(self, number: int, count: int = 1) -> List[Dict[str, Any]]:
        entries = [
            {
                "address": "0x" + "ee" * 20,
                "topics": ["0x" + "aa" * 32, "0x" + "bb" * 32],
                "data": "0x",
                "blockNumber": hex(number),
                "blockHash": block_hash(number),
                "logIndex": hex(i),
            }
            for i in range(count)
        ]
        self.logs[block_hash(number)] = entries
        return entries

    def methods_called(self) -> List[str]:
        return [m for m, _ in self.calls]

    # ---- dispatch ----------------------------------------------------------

    def _block_by_hash(self, h: str) -> Optional[Dict[str, Any]]:
        for block in self.blocks.values():
            if block and block.get("hash") == h:
                return block
        return None

    def handle(self, method: str, params: List[Any]) -> Any:
        self.calls.append((method, params))
        if method in self.unsupported:
            raise JsonRpcFault(-32601, f"the method {method} does not exist/is not available")
        if method == "eth_chainId":
            return self.chain_id
        if method == "eth_blockNumber":
            return hex(self.head)
        if method == "eth_getBlockByNumber":
            return self.blocks.get(int(params[0], 16))
        if method == "eth_getBlockByHash":
            return self._block_by_hash(params[0])
        if method == "eth_getTransactionByHash":
            return self.txs.get(params[0])
        if method in ("eth_getTransactionByBlockNumberAndIndex", "eth_getTransactionByBlockHashAndIndex"):
            if method.endswith("NumberAndIndex"):
                block = self.blocks.get(int(params[0], 16))
            else:
                block = self._block_by_hash(params[0])
            if not block:
                return None
            index = int(params[1], 16)
            txs = block["transactions"]
            return self.txs.get(txs[index]) if index < len(txs) else None
        if method == "eth_getLogs":
            h = params[0]["blockHash"]
            if h in self.failing_logs:
                raise JsonRpcFault(-32000, "logs pruned")
            return list(self.logs.get(h, []))
        if method == "eth_newFilter":
            filter_id = hex(len(self.filters) + 1)
            self.filters[filter_id] = params[0]
            return filter_id
        if method == "eth_getFilterChanges":
            return []
        if method == "eth_getFilterLogs":
            flt = self.filters.get(params[0])
            if flt is None:
                raise JsonRpcFault(-32000, "filter not found")
            return list(self.logs.get(block_hash(int(flt["fromBlock"], 16)), []))
        if method == "eth_getProof":
            return {"address": params[0], "accountProof": ["0xf90211"], "balance": "0x0", "storageProof": []}
        if method == "eth_estimateGas":
            return "0x5208"
        if method == "eth_createAccessList":
            return {"accessList": [], "gasUsed": "0x5208"}
        raise JsonRpcFault(-32601, f"the method {method} does not exist/is not available")

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        try:
            result = self.handle(body["method"], body.get("params", []))
        except JsonRpcFault as f:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": f.code, "message": f.message}}
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


class FakeRpc(NodeRpc):
    """``NodeRpc`` wired directly to a :class:`FakeNode` (no HTTP)."""

    def __init__(self, node: FakeNode, url: str = RPC_URL) -> None:
        super().__init__(NodeRpcConfig(url=url))
        self.node = node

    async def call(self, method: str, params=None) -> Any:
        try:
            return self.node.handle(method, list(params or []))
        except JsonRpcFault as f:
            raise RpcResponseError(f.code, f.message, method=method) from f


class RecordingLogger:
    """Stand-in for a structlog logger that keeps (level, event, kv) tuples."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, str, Dict[str, Any]]] = []

    def _record(self, level: str):
        def _log(event: str, *args: Any, **kw: Any) -> None:
            self.records.append((level, event, kw))

        return _log

    def __getattr__(self, level: str):
        return self._record(level)

    def events(self, level: Optional[str] = None) -> List[str]:
        return [e for lvl, e, _ in self.records if level is None or lvl == level]


__all__ = [
    "RPC_URL",
    "MINER",
    "SENDER",
    "RECIPIENT",
    "block_hash",
    "tx_hash",
    "JsonRpcFault",
    "FakeNode",
    "FakeRpc",
    "RecordingLogger",
]
