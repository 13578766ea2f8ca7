"""
Overlay actions: the declarative mutations stored in overlay files.

Wire form (JSON or YAML), exactly one of ``set`` / ``merge`` / ``remove``:

    - target: "$.methods[?(@.name=='eth_chainId')].examples[0]"
      set: {name: "example", params: [], result: {name: "chainId", value: "0x1"}}
    - target: "$.info"
      merge: {version: "1.2.3"}
    - target: "$.methods[?(@.name=='eth_coinbase')]"
      remove: true
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from ..errors import OverlayFormatError

_KINDS = ("set", "merge", "remove")


@dataclass(frozen=True)
class SetAction:
    target: str
    value: Any

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "set": self.value}


@dataclass(frozen=True)
class MergeAction:
    target: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "merge": dict(self.fields)}


@dataclass(frozen=True)
class RemoveAction:
    target: str

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "remove": True}


OverlayAction = Union[SetAction, MergeAction, RemoveAction]


def parse_action(raw: Any, *, source: Optional[str] = None) -> OverlayAction:
    """Validate one action mapping and return the typed action."""
    if isinstance(raw, (SetAction, MergeAction, RemoveAction)):
        return raw
    if not isinstance(raw, Mapping):
        raise OverlayFormatError(f"overlay action must be a mapping, got {type(raw).__name__}", source=source)

    target = raw.get("target")
    if not isinstance(target, str) or not target.strip():
        raise OverlayFormatError("overlay action needs a non-empty string 'target'", source=source)

    kinds = [k for k in _KINDS if k in raw]
    if len(kinds) != 1:
        raise OverlayFormatError(
            f"overlay action for {target} must have exactly one of set/merge/remove, got {kinds or 'none'}",
            source=source,
        )
    unknown = sorted(set(raw) - {"target", *_KINDS})
    if unknown:
        raise OverlayFormatError(f"overlay action for {target} has unknown keys {unknown}", source=source)

    kind = kinds[0]
    if kind == "set":
        return SetAction(target, raw["set"])
    if kind == "merge":
        payload = raw["merge"]
        if not isinstance(payload, Mapping):
            raise OverlayFormatError(f"'merge' for {target} must be a mapping", source=source)
        return MergeAction(target, dict(payload))
    if raw["remove"] is not True:
        raise OverlayFormatError(f"'remove' for {target} must be true", source=source)
    return RemoveAction(target)


def parse_actions(raw: Any, *, source: Optional[str] = None) -> List[OverlayAction]:
    """Normalize a single action or a list of actions into a list."""
    if raw is None:
        raise OverlayFormatError("overlay source is empty", source=source)
    items = raw if isinstance(raw, list) else [raw]
    return [parse_action(item, source=source) for item in items]


__all__ = [
    "SetAction",
    "MergeAction",
    "RemoveAction",
    "OverlayAction",
    "parse_action",
    "parse_actions",
]
