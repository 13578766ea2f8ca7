"""
Overlay writer: persist a harvested example as a chain-scoped overlay file.

Every example becomes a single ``set`` action aimed at the method's first
example slot and is written to ``<chain_dir>/<method>.yaml``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import yaml

from ..logging import get_logger
from .actions import SetAction

if TYPE_CHECKING:  # pragma: no cover
    from ..context import NetworkContext

log = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass(frozen=True)
class MethodExample:
    """One OpenRPC example pairing, as produced by a generator."""

    method: str
    params: List[Dict[str, Any]]
    result_name: str
    result_value: Any
    description: Optional[str] = None
    target: Optional[str] = None


def param(name: str, value: Any) -> Dict[str, Any]:
    return {"name": name, "value": value}


def sanitize_method_name(method: str) -> str:
    return _UNSAFE_CHARS.sub("_", method)


def default_target_for_method(method: str) -> str:
    return f"$.methods[?(@.name=='{method}')].examples[0]"


def build_overlay_action(ctx: "NetworkContext", example: MethodExample) -> SetAction:
    description = example.description or f"Example generated from {ctx.label} at block {ctx.block_number}"
    return SetAction(
        target=example.target or default_target_for_method(example.method),
        value={
            "name": example.method,
            "description": description,
            "params": list(example.params),
            "result": {"name": example.result_name, "value": example.result_value},
        },
    )


def dump_overlay(action: SetAction) -> str:
    return yaml.safe_dump(
        action.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=float("inf"),
    )


def write_overlay(ctx: "NetworkContext", example: MethodExample) -> Path:
    """Serialize ``example`` under ``ctx.chain_dir`` and return the file path."""
    path = Path(ctx.chain_dir) / f"{sanitize_method_name(example.method)}.yaml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_overlay(build_overlay_action(ctx, example)), encoding="utf-8")
    log.info("overlay_written", method=example.method, path=str(path), rpc_url=ctx.rpc_url)
    return path


__all__ = [
    "MethodExample",
    "param",
    "sanitize_method_name",
    "default_target_for_method",
    "build_overlay_action",
    "dump_overlay",
    "write_overlay",
]
