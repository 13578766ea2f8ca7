from __future__ import annotations

"""
Configuration loader for rpc-overlays.

- Reads environment variables (optionally from `.env`) via pydantic-settings.
- Describes refresh targets as typed ``NetworkTarget`` models.
- Exposes a cached `get_settings()` accessor for the CLI edge; library code
  receives a ``Settings`` instance explicitly.

Environment variables:
    COVERAGE_RPC_URL       (str)                 - Endpoint probed for chain id / default refresh target
    OVERLAYS_DIR           (path, "./overlays")  - Root overlay directory
    OVERLAY_NETWORKS       (json object|array)   - [{"rpcUrl": "...", "blockNumber": "0x10", "label": "sepolia"}]
    OVERLAY_SEARCH_DEPTH   (int, default 64)     - Backward-walk bound for block/log searches
    RPC_TIMEOUT            (float, default 30)   - Per-request timeout in seconds
    RPC_HEADERS            (json object)         - Extra HTTP headers sent with every request
    LOG_LEVEL              (str, default "INFO")
    LOG_FORMAT             ("console"|"json")

Notes
-----
- OVERLAY_NETWORKS accepts a single object as well as an array.
- Invalid JSON in OVERLAY_NETWORKS is a hard error at load time.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RPC_URL = "https://rpc-sepolia.flashbots.net"
DEFAULT_SEARCH_DEPTH = 64


# ----------------------------- Models ---------------------------------------- #


class NetworkTarget(BaseModel):
    """One endpoint to harvest examples from."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rpc_url: str = Field(alias="rpcUrl", min_length=1)
    block_number: Optional[str] = Field(default=None, alias="blockNumber")
    label: Optional[str] = None

    @field_validator("block_number", mode="before")
    @classmethod
    def _coerce_block(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("blockNumber must be a number or a hex string")
        if isinstance(v, int):
            return hex(v)
        return v

    @field_validator("rpc_url")
    @classmethod
    def _check_scheme(cls, v: str) -> str:
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(f"rpcUrl must start with http:// or https://, got: {v!r}")
        return v


# --------------------------------- Settings ---------------------------------- #


class Settings(BaseSettings):
    rpc_url: str = Field(
        DEFAULT_RPC_URL,
        validation_alias=AliasChoices("COVERAGE_RPC_URL", "rpc_url"),
        description="Endpoint used for chain id resolution and as the default refresh target",
    )
    overlays_dir: Path = Field(
        Path("./overlays"),
        validation_alias=AliasChoices("OVERLAYS_DIR", "overlays_dir"),
    )
    networks: List[NetworkTarget] = Field(
        default_factory=list,
        validation_alias=AliasChoices("OVERLAY_NETWORKS", "networks"),
    )
    search_depth: int = Field(
        DEFAULT_SEARCH_DEPTH,
        ge=1,
        validation_alias=AliasChoices("OVERLAY_SEARCH_DEPTH", "search_depth"),
    )
    request_timeout: float = Field(
        30.0,
        gt=0,
        validation_alias=AliasChoices("RPC_TIMEOUT", "request_timeout"),
    )
    rpc_headers: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("RPC_HEADERS", "rpc_headers"),
    )
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field("console", description="console or json")

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    @field_validator("networks", mode="before")
    @classmethod
    def _single_network(cls, v: Any) -> Any:
        if v is None or v == "":
            return []
        if isinstance(v, dict):
            return [v]
        return v

    def refresh_targets(self) -> List[NetworkTarget]:
        """Configured networks, or the default endpoint when none are set."""
        if self.networks:
            return list(self.networks)
        return [NetworkTarget(rpc_url=self.rpc_url)]


# ------------------------------- Accessor API -------------------------------- #


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = [
    "DEFAULT_RPC_URL",
    "DEFAULT_SEARCH_DEPTH",
    "NetworkTarget",
    "Settings",
    "get_settings",
]
