"""
Adapters to external systems. Today that is the JSON-RPC endpoint being probed.
"""

from .node_rpc import NodeRpc, NodeRpcConfig, NodeRpcError, RpcResponseError, RpcTransportError, connect

__all__ = ["NodeRpc", "NodeRpcConfig", "NodeRpcError", "RpcResponseError", "RpcTransportError", "connect"]
