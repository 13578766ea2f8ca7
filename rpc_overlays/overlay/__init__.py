"""
Overlay subsystem: path resolution, actions, the mutation engine and the
on-disk loader/writer.
"""

from __future__ import annotations

from .actions import MergeAction, OverlayAction, RemoveAction, SetAction, parse_action, parse_actions
from .engine import apply_overlays
from .loader import load_overlay_actions
from .path import Match, find, resolve

__all__ = [
    "OverlayAction",
    "SetAction",
    "MergeAction",
    "RemoveAction",
    "parse_action",
    "parse_actions",
    "apply_overlays",
    "load_overlay_actions",
    "Match",
    "find",
    "resolve",
]
