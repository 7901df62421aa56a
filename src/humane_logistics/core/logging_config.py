"""Logging setup for the pipeline, the CLI and the API.

structlog and the stdlib ``logging`` module share one root handler, so a
record looks the same whichever API emitted it::

    structlog.get_logger(__name__).info("ingest: cycle started", collectors=2)
    logging.getLogger(__name__).warning("retrying %s", url)

Records are newline-delimited JSON on stdout.  At ``DEBUG`` level the
console renderer is used instead.

While an ingest or rescan cycle is running, :data:`cycle_id_var` holds the
cycle's ID and every record carries it as ``cycle_id``.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

cycle_id_var: ContextVar[str | None] = ContextVar("cycle_id", default=None)
"""ID of the pipeline cycle currently running in this context, if any."""

REDACTED = "[REDACTED]"

_SECRET_MARKERS = ("api_key", "authorization", "bearer", "credential", "password", "secret", "token")

_QUIET_LOGGERS = ("aiosqlite", "httpcore", "httpx", "uvicorn.access")


def _is_secret_key(key: object) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in _SECRET_MARKERS)


def _redact_secrets(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Mask values whose key looks like a credential.

    Top-level keys and the keys of dict values one level down are checked,
    case-insensitively.
    """
    for key, value in list(event_dict.items()):
        if _is_secret_key(key):
            event_dict[key] = REDACTED
        elif isinstance(value, dict):
            for nested in [k for k in value if _is_secret_key(k)]:
                value[nested] = REDACTED
    return event_dict


def _add_cycle_id(
    logger: WrappedLogger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    cycle_id = cycle_id_var.get()
    if cycle_id is not None:
        event_dict.setdefault("cycle_id", cycle_id)
    return event_dict


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        _add_cycle_id,
        _redact_secrets,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(log_level: str = "INFO") -> None:
    """Install the shared handler on the root logger and configure structlog.

    Safe to call repeatedly: existing root handlers are replaced.

    Args:
        log_level: Level name, case-insensitive.  Unknown names fall back
            to ``INFO``.
    """
    level_name = log_level.upper()
    level = getattr(logging, level_name, logging.INFO)
    console = level_name == "DEBUG"

    renderer: Processor = (
        structlog.dev.ConsoleRenderer(colors=True) if console else structlog.processors.JSONRenderer()
    )
    pre_chain = _pre_chain()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    if not console:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
