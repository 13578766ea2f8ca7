from pathlib import Path

import pytest
from pydantic import ValidationError

from rpc_overlays.config import DEFAULT_RPC_URL, NetworkTarget, Settings, get_settings


def test_defaults():
    s = Settings()
    assert s.rpc_url == DEFAULT_RPC_URL
    assert s.overlays_dir == Path("./overlays")
    assert s.networks == []
    assert s.search_depth == 64
    assert s.request_timeout == 30.0
    assert s.rpc_headers == {}
    assert s.refresh_targets() == [NetworkTarget(rpc_url=DEFAULT_RPC_URL)]


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("COVERAGE_RPC_URL", "http://localhost:8545")
    monkeypatch.setenv("OVERLAYS_DIR", "/tmp/ov")
    monkeypatch.setenv("OVERLAY_SEARCH_DEPTH", "5")
    monkeypatch.setenv("RPC_TIMEOUT", "2.5")
    monkeypatch.setenv("RPC_HEADERS", '{"x-api-key": "secret"}')
    s = get_settings()
    assert s.rpc_url == "http://localhost:8545"
    assert s.overlays_dir == Path("/tmp/ov")
    assert s.search_depth == 5
    assert s.request_timeout == 2.5
    assert s.rpc_headers == {"x-api-key": "secret"}
    assert get_settings() is s


def test_networks_array(monkeypatch):
    monkeypatch.setenv(
        "OVERLAY_NETWORKS",
        '[{"rpcUrl": "https://a.example", "blockNumber": 100, "label": "a"}, {"rpcUrl": "http://b.example"}]',
    )
    targets = Settings().refresh_targets()
    assert targets == [
        NetworkTarget(rpc_url="https://a.example", block_number="0x64", label="a"),
        NetworkTarget(rpc_url="http://b.example"),
    ]


def test_networks_single_object(monkeypatch):
    monkeypatch.setenv("OVERLAY_NETWORKS", '{"rpcUrl": "https://a.example", "blockNumber": "0x10"}')
    (target,) = Settings().networks
    assert target.block_number == "0x10"


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("OVERLAY_SEARCH_DEPTH=9\nLOG_FORMAT=json\n", encoding="utf-8")
    s = Settings()
    assert s.search_depth == 9
    assert s.log_format == "json"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rpcUrl": "ftp://a.example"},
        {"rpcUrl": ""},
        {"rpcUrl": "https://a.example", "blockNumber": True},
    ],
)
def test_invalid_targets(kwargs):
    with pytest.raises(ValidationError):
        NetworkTarget(**kwargs)


def test_invalid_settings(monkeypatch):
    monkeypatch.setenv("OVERLAY_SEARCH_DEPTH", "0")
    with pytest.raises(ValidationError):
        Settings()
