"""
Logging for rpc-overlays.

Every event goes through structlog and ends up on one stdlib handler
(stderr), so the CLI's stdout stays reserved for command output such as the
patched document. Plain ``logging`` records from third-party libraries and
from our own debug-only modules share the same renderer.

    from rpc_overlays.logging import get_logger, setup_logging

    setup_logging(level="DEBUG", log_format="json")
    log = get_logger(__name__)
    log.info("overlay_written", method="eth_getLogs", path="overlays/1/eth_getLogs.yaml")

During a refresh the endpoint URL is bound with :func:`bind_log_context`, so
every event emitted while harvesting one endpoint carries ``rpc_url``.

Header values configured through RPC_HEADERS usually hold API keys; any
event key that looks like a credential is masked before rendering.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

import structlog
from structlog.typing import EventDict, Processor

_MASK = "***"
_SECRET_KEYS = frozenset({"authorization", "api_key", "apikey", "token", "password", "secret", "headers", "rpc_headers"})
_NOISY_LOGGERS = ("asyncio", "httpcore", "httpx")


def _mask_credentials(_: Any, __: str, event_dict: EventDict) -> EventDict:
    for key, value in event_dict.items():
        if value is not None and key.lower() in _SECRET_KEYS:
            event_dict[key] = _MASK
    return event_dict


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _mask_credentials,
    ]


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(*, level: Optional[str | int] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structlog on top of stdlib logging. Calling it again replaces
    the previous configuration.

    ``level`` falls back to $LOG_LEVEL then INFO; ``log_format`` ("console" or
    "json") falls back to $LOG_FORMAT then console.
    """
    level = level or os.getenv("LOG_LEVEL", "").upper() or "INFO"
    log_format = (log_format or os.getenv("LOG_FORMAT") or "console").lower()
    shared = _shared_processors()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, _renderer(log_format)],
            foreign_pre_chain=shared,
        )
    )

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Lazy structlog logger over the stdlib logger ``name``."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def bind_log_context(**kv: Any) -> None:
    structlog.contextvars.bind_contextvars(**kv)


__all__ = ["setup_logging", "get_logger", "bind_log_context"]
