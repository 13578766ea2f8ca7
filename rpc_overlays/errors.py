"""
Error hierarchy for rpc-overlays.

Two families live here:

- ``OverlayError`` and its subclasses are *authoring* errors: a broken path
  expression, a target that matches nothing, a merge into an array, a
  malformed overlay file. They are always fatal to the call that raised them.
- ``ContextBuildError`` and its subclasses abort the example harvest for one
  endpoint (no block with transactions, unusable chain id).

Remote failures (HTTP status, JSON-RPC error envelopes) are defined next to
the transport in :mod:`rpc_overlays.adapters.node_rpc`.

Usage
-----
    from rpc_overlays.errors import NoMatchError

    raise NoMatchError("$.methods[0]")
"""

from __future__ import annotations

from typing import Optional


class OverlayError(Exception):
    """Base class for overlay authoring errors."""


class PathSyntaxError(OverlayError, ValueError):
    """The path expression does not follow the supported grammar."""

    def __init__(self, expression: str, position: int, reason: str) -> None:
        super().__init__(f"Invalid path {expression!r} at position {position}: {reason}")
        self.expression = expression
        self.position = position
        self.reason = reason


class NoMatchError(OverlayError, LookupError):
    """The path expression resolved to zero locations."""

    def __init__(self, expression: str) -> None:
        super().__init__(f"Path {expression} did not match anything")
        self.expression = expression


class RootMutationError(OverlayError):
    """An action tried to replace, merge into, or remove the document root."""

    def __init__(self, target: str) -> None:
        super().__init__(f"Cannot mutate root node for {target}")
        self.target = target


class MergeTargetError(OverlayError, TypeError):
    """A merge action hit an array slot or a non-object value."""

    def __init__(self, target: str, path: str, reason: str) -> None:
        super().__init__(f"Cannot merge object at {path} ({target}): {reason}")
        self.target = target
        self.path = path
        self.reason = reason


class OverlayFormatError(OverlayError, ValueError):
    """An overlay file (or in-memory action mapping) is malformed."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(f"{source}: {message}" if source else message)
        self.source = source


class ContextBuildError(Exception):
    """The network context for an endpoint could not be assembled."""


class SearchExhaustedError(ContextBuildError):
    """A bounded backward search ran out of attempts."""

    def __init__(self, what: str, start: str, attempts: int, rpc_url: str) -> None:
        super().__init__(f"Failed to find {what} near {start} after {attempts} attempts ({rpc_url})")
        self.what = what
        self.start = start
        self.attempts = attempts
        self.rpc_url = rpc_url


class InvalidChainIdError(ContextBuildError, ValueError):
    """The endpoint reported an empty or unusable chain id."""


__all__ = [
    "OverlayError",
    "PathSyntaxError",
    "NoMatchError",
    "RootMutationError",
    "MergeTargetError",
    "OverlayFormatError",
    "ContextBuildError",
    "SearchExhaustedError",
    "InvalidChainIdError",
]
