"""
JSON-RPC client for talking to an Ethereum execution endpoint.

This adapter is intentionally small. It provides:
- an async JSON-RPC transport over HTTP(S) (httpx)
- ergonomic methods for the endpoints the example harvester uses:
  * eth_chainId / eth_blockNumber
  * eth_getBlockByNumber / eth_getBlockByHash
  * eth_getTransactionByHash / ...ByBlockNumberAndIndex / ...ByBlockHashAndIndex
  * eth_getLogs / eth_newFilter / eth_getFilterChanges / eth_getFilterLogs
  * eth_getProof / eth_estimateGas / eth_createAccessList

Notes
-----
* Requests are never retried here. A timeout, a non-2xx status or an error
  envelope surfaces to the caller; only the explicit bounded searches in
  :mod:`rpc_overlays.search` walk further.
* A ``null`` result is a valid value (e.g. an unknown block); a response with
  no ``result`` key at all is an error.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..version import __version__

HexStr = str


# ---- Errors ------------------------------------------------------------------


class NodeRpcError(Exception):
    """Any failure talking to the endpoint."""


class RpcTransportError(NodeRpcError):
    """The request never produced a JSON-RPC envelope (network, HTTP status, body)."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RpcResponseError(NodeRpcError):
    """The endpoint answered with an error envelope, or an envelope without a result."""

    def __init__(self, code: int, message: str, data: Any | None = None, *, method: Optional[str] = None):
        extra = f": {json.dumps(data)}" if data is not None else ""
        super().__init__(f"RPC error ({code}) {message}{extra}")
        self.code = code
        self.message = message
        self.data = data
        self.method = method


# ---- Transport ---------------------------------------------------------------


_DEFAULT_HEADERS = {"accept": "application/json", "user-agent": f"rpc-overlays/{__version__}"}


def _request_headers(configured: Optional[Dict[str, str]]) -> Dict[str, str]:
    return {**_DEFAULT_HEADERS, **(configured or {})}


# ---- Client ------------------------------------------------------------------


@dataclass
class NodeRpcConfig:
    url: str
    timeout_s: float = 30.0
    headers: Optional[Dict[str, str]] = None


class NodeRpc:
    """
    Minimal async JSON-RPC client for one endpoint.
    """

    def __init__(self, config: NodeRpcConfig):
        self._cfg = config
        self._id = 0
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return self._cfg.url

    # lifecycle

    async def start(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._cfg.timeout_s,
                headers=_request_headers(self._cfg.headers),
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NodeRpc":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # transport

    async def call(self, method: str, params: Sequence[Any] | None = None) -> Any:
        """
        Perform a single JSON-RPC call and return its ``result``.
        """
        if self._client is None:
            await self.start()

        assert self._client is not None

        self._id += 1
        payload = {"jsonrpc": "2.0", "id": self._id, "method": method, "params": list(params or [])}

        try:
            resp = await self._client.post(self._cfg.url, json=payload)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            raise RpcTransportError(f"RPC request to {self._cfg.url} failed: {exc}") from exc

        if not resp.is_success:
            raise RpcTransportError(
                f"RPC request to {self._cfg.url} failed with status {resp.status_code}: {resp.reason_phrase}",
                status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RpcTransportError(
                f"Non-JSON response from {self._cfg.url}: {resp.text[:256]!r}", status=resp.status_code
            ) from exc

        if not isinstance(data, dict):
            raise RpcResponseError(-32603, "Invalid JSON-RPC response type", type(data).__name__, method=method)
        if data.get("error") is not None:
            err = data["error"] if isinstance(data["error"], dict) else {"message": str(data["error"])}
            raise RpcResponseError(
                err.get("code", -32000), err.get("message", "Unknown error"), err.get("data"), method=method
            )
        if "result" not in data:
            raise RpcResponseError(
                -32603, f"RPC response from {self._cfg.url} missing result for method {method}", method=method
            )
        return data["result"]

    # eth_* helpers

    # Chain info
    async def chain_id(self) -> HexStr:
        return await self.call("eth_chainId")

    async def block_number(self) -> HexStr:
        return await self.call("eth_blockNumber")

    # Blocks
    async def get_block_by_number(self, number: HexStr, full_transactions: bool = False) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getBlockByNumber", [number, full_transactions])

    async def get_block_by_hash(self, block_hash: HexStr, full_transactions: bool = False) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getBlockByHash", [block_hash, full_transactions])

    # Transactions
    async def get_transaction_by_hash(self, tx_hash: HexStr) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionByHash", [tx_hash])

    async def get_transaction_by_block_number_and_index(self, number: HexStr, index: HexStr) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionByBlockNumberAndIndex", [number, index])

    async def get_transaction_by_block_hash_and_index(self, block_hash: HexStr, index: HexStr) -> Optional[Dict[str, Any]]:
        return await self.call("eth_getTransactionByBlockHashAndIndex", [block_hash, index])

    # Logs & filters
    async def get_logs(self, log_filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self.call("eth_getLogs", [log_filter])

    async def new_filter(self, log_filter: Dict[str, Any]) -> HexStr:
        return await self.call("eth_newFilter", [log_filter])

    async def get_filter_changes(self, filter_id: HexStr) -> List[Any]:
        return await self.call("eth_getFilterChanges", [filter_id])

    async def get_filter_logs(self, filter_id: HexStr) -> List[Any]:
        return await self.call("eth_getFilterLogs", [filter_id])

    # State
    async def get_proof(self, address: HexStr, storage_keys: List[HexStr], block: HexStr) -> Dict[str, Any]:
        return await self.call("eth_getProof", [address, storage_keys, block])

    async def estimate_gas(self, tx: Dict[str, Any]) -> HexStr:
        return await self.call("eth_estimateGas", [tx])

    async def create_access_list(self, tx: Dict[str, Any], block: HexStr) -> Dict[str, Any]:
        return await self.call("eth_createAccessList", [tx, block])


def connect(url: str, *, timeout_s: float = 30.0, headers: Optional[Dict[str, str]] = None) -> NodeRpc:
    """Build an (unstarted) client; use as ``async with connect(url) as rpc``."""
    return NodeRpc(NodeRpcConfig(url=url, timeout_s=timeout_s, headers=headers))


__all__ = [
    "NodeRpcError",
    "RpcTransportError",
    "RpcResponseError",
    "NodeRpcConfig",
    "NodeRpc",
    "connect",
]
