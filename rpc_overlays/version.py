"""
Version metadata for rpc-overlays.

``__version__`` is the semantic version used for packaging and for the
User-Agent header sent to remote endpoints.
"""

from __future__ import annotations

# Bump this when making a release; use semver (MAJOR.MINOR.PATCH)
__version__ = "0.1.0"

__all__ = ["__version__"]
