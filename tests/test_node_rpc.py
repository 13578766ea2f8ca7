import json

import httpx
import pytest
import respx

from rpc_overlays.adapters.node_rpc import NodeRpc, NodeRpcConfig, RpcResponseError, RpcTransportError, connect

from . import RPC_URL, FakeNode


@pytest.mark.asyncio
async def test_call_posts_json_rpc_envelope():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append((body, request.headers))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x10"})

    with respx.mock(assert_all_called=False) as router:
        router.post(RPC_URL).mock(side_effect=handler)
        async with connect(RPC_URL, headers={"x-api-key": "k"}) as rpc:
            assert await rpc.block_number() == "0x10"
            assert await rpc.call("eth_blockNumber") == "0x10"

    (first, headers), (second, _) = seen
    assert first == {"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []}
    assert second["id"] == 2
    assert headers["x-api-key"] == "k"
    assert headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_typed_methods_against_fake_node():
    node = FakeNode()
    node.add_chain(range(3), with_txs=[2])
    with respx.mock(assert_all_called=False) as router:
        router.post(RPC_URL).mock(side_effect=node)
        async with connect(RPC_URL) as rpc:
            assert await rpc.chain_id() == "0xaa36a7"
            block = await rpc.get_block_by_number("0x2", False)
            assert block["number"] == "0x2"
            assert await rpc.get_block_by_hash(block["hash"]) == block
            tx = await rpc.get_transaction_by_hash(block["transactions"][0])
            assert tx["blockNumber"] == "0x2"
            assert await rpc.get_transaction_by_block_number_and_index("0x2", "0x0") == tx
    assert node.methods_called() == [
        "eth_chainId",
        "eth_getBlockByNumber",
        "eth_getBlockByHash",
        "eth_getTransactionByHash",
        "eth_getTransactionByBlockNumberAndIndex",
    ]


@pytest.mark.asyncio
async def test_null_result_is_valid():
    with respx.mock() as router:
        router.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None}))
        async with connect(RPC_URL) as rpc:
            assert await rpc.get_block_by_number("0x999") is None


@pytest.mark.asyncio
async def test_error_envelope_raises_response_error():
    payload = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": "method not found", "data": {"m": "x"}}}
    with respx.mock() as router:
        router.post(RPC_URL).mock(return_value=httpx.Response(200, json=payload))
        async with connect(RPC_URL) as rpc:
            with pytest.raises(RpcResponseError) as ei:
                await rpc.call("eth_nope")
    err = ei.value
    assert (err.code, err.message, err.data, err.method) == (-32601, "method not found", {"m": "x"}, "eth_nope")
    assert str(err) == 'RPC error (-32601) method not found: {"m": "x"}'


@pytest.mark.asyncio
async def test_missing_result_is_an_error():
    with respx.mock() as router:
        router.post(RPC_URL).mock(return_value=httpx.Response(200, json={"jsonrpc": "2.0", "id": 1}))
        async with connect(RPC_URL) as rpc:
            with pytest.raises(RpcResponseError, match="missing result"):
                await rpc.chain_id()


@pytest.mark.asyncio
async def test_http_status_is_transport_error_without_retry():
    with respx.mock() as router:
        route = router.post(RPC_URL).mock(return_value=httpx.Response(503, text="busy"))
        async with connect(RPC_URL) as rpc:
            with pytest.raises(RpcTransportError) as ei:
                await rpc.chain_id()
    assert ei.value.status == 503
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_non_json_and_connection_failures():
    with respx.mock() as router:
        router.post(RPC_URL).mock(side_effect=[httpx.Response(200, text="<html>"), httpx.ConnectError("refused")])
        rpc = NodeRpc(NodeRpcConfig(url=RPC_URL, timeout_s=1))
        try:
            with pytest.raises(RpcTransportError, match="Non-JSON"):
                await rpc.chain_id()
            with pytest.raises(RpcTransportError, match="refused"):
                await rpc.chain_id()
        finally:
            await rpc.close()
