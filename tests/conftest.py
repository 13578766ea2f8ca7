from __future__ import annotations

import logging
from pathlib import Path

import pytest
import structlog

from rpc_overlays.config import Settings, get_settings

from . import RPC_URL, FakeNode

ENV_KEYS = (
    "COVERAGE_RPC_URL",
    "OVERLAYS_DIR",
    "OVERLAY_NETWORKS",
    "OVERLAY_SEARCH_DEPTH",
    "RPC_TIMEOUT",
    "RPC_HEADERS",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """No ambient env / .env leaks into settings; logging reset after each test."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def overlays_dir(tmp_path: Path) -> Path:
    path = tmp_path / "overlays"
    path.mkdir()
    return path


@pytest.fixture
def settings(overlays_dir: Path) -> Settings:
    return Settings(rpc_url=RPC_URL, overlays_dir=overlays_dir, search_depth=8)


@pytest.fixture
def node() -> FakeNode:
    """Ten-block chain; only block 7 carries a transaction, block 5 has logs."""
    n = FakeNode()
    n.add_chain(range(0, 10), with_txs=[7])
    n.add_logs(5, count=2)
    return n


@pytest.fixture
def openrpc_doc() -> dict:
    return {
        "openrpc": "1.2.6",
        "info": {"title": "Execution API", "version": "0.0.0"},
        "methods": [
            {
                "name": "eth_chainId",
                "params": [],
                "examples": [{"name": "stale", "params": [], "result": {"name": "Chain id", "value": "0x0"}}],
            },
            {
                "name": "eth_getLogs",
                "params": [{"name": "Filter"}],
                "examples": [{"name": "stale", "params": [], "result": {"name": "Logs", "value": []}}],
            },
            {"name": "eth_coinbase", "params": [], "examples": []},
        ],
    }
