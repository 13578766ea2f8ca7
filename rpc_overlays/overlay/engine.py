"""
Overlay mutation engine.

``apply_overlays(document, actions)`` deep-copies ``document`` and applies the
actions left to right. Each action resolves its target against the document
as left by the previous actions, then mutates every match:

- ``set``    replaces the slot (array element or object member)
- ``merge``  shallow-merges into an object slot (absent/null counts as ``{}``)
- ``remove`` deletes the slot; array elements after it shift down

The first failing action aborts the call. The caller's document is never
touched, so a failure leaves nothing half-applied from the caller's view.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Iterable, List, Mapping, TypeVar, Union

from ..errors import MergeTargetError, RootMutationError
from .actions import MergeAction, OverlayAction, RemoveAction, SetAction, parse_action
from .path import Match, resolve

log = logging.getLogger(__name__)

T = TypeVar("T")


def _removal_order(matches: List[Match]) -> List[Match]:
    # Highest array index first so earlier deletions don't shift later targets.
    return sorted(
        matches,
        key=lambda m: m.key if isinstance(m.parent, list) else -1,
        reverse=True,
    )


def apply_action(match: Match, action: OverlayAction) -> None:
    """Mutate a single resolved location in place."""
    if match.is_root:
        raise RootMutationError(action.target)

    parent, key = match.parent, match.key

    if isinstance(action, RemoveAction):
        del parent[key]
        return

    if isinstance(action, MergeAction):
        if isinstance(parent, list):
            raise MergeTargetError(action.target, match.path, "parent is an array")
        current = parent.get(key)
        if current is not None and not isinstance(current, dict):
            raise MergeTargetError(action.target, match.path, f"current value is {type(current).__name__}")
        parent[key] = {**(current or {}), **copy.deepcopy(action.fields)}
        return

    parent[key] = copy.deepcopy(action.value)


def apply_overlays(document: T, actions: Iterable[Union[OverlayAction, Mapping[str, Any]]]) -> T:
    """Return a patched deep copy of ``document``."""
    doc = copy.deepcopy(document)
    for raw in actions:
        action = parse_action(raw)
        matches = resolve(doc, action.target)
        if isinstance(action, RemoveAction):
            matches = _removal_order(matches)
        for match in matches:
            apply_action(match, action)
        log.debug("overlay action %s applied to %d location(s)", type(action).__name__, len(matches))
    return doc


__all__ = ["apply_action", "apply_overlays", "SetAction", "MergeAction", "RemoveAction"]
