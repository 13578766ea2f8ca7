from pathlib import Path

import yaml

from rpc_overlays.context import NetworkContext
from rpc_overlays.overlay import SetAction, apply_overlays
from rpc_overlays.overlay.loader import load_overlay_file
from rpc_overlays.overlay.writer import (
    MethodExample,
    build_overlay_action,
    default_target_for_method,
    param,
    sanitize_method_name,
    write_overlay,
)


def make_ctx(chain_dir: Path) -> NetworkContext:
    return NetworkContext(
        rpc_url="http://node.test/rpc",
        label="sepolia",
        chain_id="11155111",
        chain_dir=chain_dir,
        block_number="0x10",
        block_hash="0x" + "ab" * 32,
        block={"number": "0x10"},
        tx_hash="0x" + "cd" * 32,
    )


def test_sanitize_method_name():
    assert sanitize_method_name("eth_getLogs") == "eth_getLogs"
    assert sanitize_method_name("debug/trace call") == "debug_trace_call"
    assert sanitize_method_name("a.b-c") == "a.b-c"


def test_default_target():
    assert default_target_for_method("eth_getProof") == "$.methods[?(@.name=='eth_getProof')].examples[0]"


def test_build_action_default_description(tmp_path):
    example = MethodExample("eth_blockNumber", [], "Block number", "0x10")
    action = build_overlay_action(make_ctx(tmp_path), example)
    assert action == SetAction(
        "$.methods[?(@.name=='eth_blockNumber')].examples[0]",
        {
            "name": "eth_blockNumber",
            "description": "Example generated from sepolia at block 0x10",
            "params": [],
            "result": {"name": "Block number", "value": "0x10"},
        },
    )


def test_write_overlay_creates_chain_dir_and_round_trips(tmp_path, openrpc_doc):
    chain_dir = tmp_path / "overlays" / "11155111"
    example = MethodExample(
        "eth_chainId",
        [param("none", None)],
        "Chain id",
        "0xaa36a7",
        description="live",
    )
    path = write_overlay(make_ctx(chain_dir), example)
    assert path == chain_dir / "eth_chainId.yaml"

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert list(raw) == ["target", "set"]

    (action,) = load_overlay_file(path)
    out = apply_overlays(openrpc_doc, [action])
    assert out["methods"][0]["examples"] == [
        {
            "name": "eth_chainId",
            "description": "live",
            "params": [{"name": "none", "value": None}],
            "result": {"name": "Chain id", "value": "0xaa36a7"},
        }
    ]


def test_rewrite_replaces_previous_file(tmp_path):
    ctx = make_ctx(tmp_path)
    write_overlay(ctx, MethodExample("eth_chainId", [], "Chain id", "0x1"))
    path = write_overlay(ctx, MethodExample("eth_chainId", [], "Chain id", "0x2"))
    (action,) = load_overlay_file(path)
    assert action.value["result"]["value"] == "0x2"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["eth_chainId.yaml"]
