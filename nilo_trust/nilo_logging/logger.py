"""
Structured JSON logging for the scoring engine.

Every line carries timestamp, level, logger and event_type. Inside an
analysis, target_context() binds target_kind / target_id through contextvars,
so provider calls, cache lookups and aggregation logs all name the target
without passing it around. Target ids are cut to 16 characters on output.

Uses only Python stdlib logging and structlog; no nilo_trust imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json (default) or console
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

TARGET_ID_LOG_CHARS = 16


def short_target_id(target_id: str) -> str:
    s = str(target_id)
    return s[:TARGET_ID_LOG_CHARS] + "..." if len(s) > TARGET_ID_LOG_CHARS else s


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _shorten_target_id(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Truncate target_id (mint, wallet or owner/name) to a log-friendly prefix."""
    target_id = event_dict.get("target_id")
    if target_id is not None and not str(target_id).endswith("..."):
        event_dict["target_id"] = short_target_id(target_id)
    return event_dict


def configure_structlog() -> None:
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
        _shorten_target_id,
    ]
    if LOG_FORMAT == "json":
        shared_processors.append(structlog.processors.JSONRenderer())
    else:
        shared_processors.append(
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        )
    structlog.configure(
        processors=shared_processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("engine_analyze_done", risk_level="low", normalized_score=85)

    Output (JSON): {"event_type": "engine_analyze_done", "target_kind": "token",
    "target_id": "So11111111111111...", "normalized_score": 85, "level": "info", ...}
    """
    return structlog.get_logger(name).bind(logger=name)


@contextmanager
def target_context(kind: str, target_id: str) -> Iterator[None]:
    """
    Bind target_kind / target_id for every log call in this context.

    asyncio tasks copy the context when created, so provider calls gathered
    inside the block inherit the binding.
    """
    with structlog.contextvars.bound_contextvars(
        target_kind=kind, target_id=short_target_id(target_id)
    ):
        yield
