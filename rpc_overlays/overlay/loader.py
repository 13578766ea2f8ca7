"""
Overlay loader: read overlay actions from a directory tree.

Layout
------
    overlays/
      global-fix.yaml          <- chain-agnostic, always loaded
      11155111/                <- chain-specific, loaded when the endpoint is on that chain
        eth_getLogs.yaml
        nested/anything.json

- Hidden entries (leading dot) are skipped.
- Only .json / .yaml / .yml files are parsed (extension is case-insensitive).
- Subdirectories are visited only when ``recursive=True``.
- A missing directory yields no actions; overlays are optional.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Union

import yaml

from ..errors import OverlayFormatError
from .actions import OverlayAction, parse_actions

log = logging.getLogger(__name__)

OVERLAY_EXTENSIONS = ("json", "yaml", "yml")


def _extension(path: Path) -> str:
    return path.suffix[1:].lower()


def parse_overlay_text(text: str, ext: str, *, source: str = "<string>") -> List[OverlayAction]:
    """Parse the contents of one overlay file."""
    try:
        raw: Any = json.loads(text) if ext == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise OverlayFormatError(f"cannot parse overlay: {e}", source=source) from e
    return parse_actions(raw, source=source)


def load_overlay_file(path: Union[str, Path]) -> List[OverlayAction]:
    p = Path(path)
    return parse_overlay_text(p.read_text(encoding="utf-8"), _extension(p), source=str(p))


def load_overlay_actions(directory: Union[str, Path], recursive: bool = False) -> List[OverlayAction]:
    """
    Load every overlay action under ``directory``.

    Entries are visited in sorted name order; actions keep file order, then
    in-file order.
    """
    root = Path(directory)
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        log.debug("overlay directory %s does not exist", root)
        return []

    actions: List[OverlayAction] = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            if recursive:
                actions.extend(load_overlay_actions(entry, recursive=True))
            continue
        if not entry.is_file() or _extension(entry) not in OVERLAY_EXTENSIONS:
            continue
        actions.extend(load_overlay_file(entry))
    return actions


__all__ = ["OVERLAY_EXTENSIONS", "parse_overlay_text", "load_overlay_file", "load_overlay_actions"]
