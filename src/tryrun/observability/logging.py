"""Structured stage logging built on structlog.

Output goes to stderr so the executed artifact owns stdout. Every pipeline run binds an
``invocation_id`` through :func:`invocation_scope`; each stage emits its own event name
(``install_started``, ``executable_found``, ...), so log lines map one-to-one to stages.
"""

from __future__ import annotations

import logging
import os
import sys
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, Any, Final

import structlog

from tryrun.constants import DEFAULT_LOG_LEVEL, LOG_FORMATS

_DEFAULT_LOGGER_NAME: Final[str] = "tryrun"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Process-wide logging settings."""

    level: int | str = DEFAULT_LOG_LEVEL
    format: str = "console"
    stream: IO[str] | None = None
    no_color: bool = False


def setup_logging(config: LoggingConfig | None = None) -> structlog.typing.FilteringBoundLogger:
    """Configure structlog once for the process and return the package logger."""

    cfg = config or LoggingConfig()
    level = _parse_log_level(cfg.level)
    log_format = _validate_log_format(cfg.format)
    stream = cfg.stream if cfg.stream is not None else sys.stderr

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=_color_allowed(stream, cfg.no_color))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
    processors.append(renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger(_DEFAULT_LOGGER_NAME)


def setup_logging_from_config(
    settings: Mapping[str, object] | None,
    *,
    stream: IO[str] | None = None,
    no_color: bool = False,
) -> structlog.typing.FilteringBoundLogger:
    """Configure logging from the ``[logging]`` section of the effective config."""

    cfg = dict(settings or {})
    raw_level = cfg.get("level", DEFAULT_LOG_LEVEL)
    raw_format = cfg.get("format", "console")
    return setup_logging(
        LoggingConfig(
            level=raw_level if isinstance(raw_level, (int, str)) else DEFAULT_LOG_LEVEL,
            format=raw_format if isinstance(raw_format, str) else "console",
            stream=stream,
            no_color=no_color,
        )
    )


def ensure_logging_configured() -> None:
    """Install the default stderr setup unless the caller already configured structlog."""

    if not structlog.is_configured():
        setup_logging()


def reset_logging() -> None:
    """Drop any structlog configuration and bound context."""

    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


@contextmanager
def invocation_scope(package_name: str, *, invocation_id: str | None = None) -> Iterator[str]:
    """Bind ``invocation_id`` and ``package_name`` to every event logged in scope."""

    resolved_id = invocation_id or uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(
        invocation_id=resolved_id,
        package_name=package_name,
    ):
        yield resolved_id


def _color_allowed(stream: IO[str], no_color_flag: bool) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


def _parse_log_level(value: int | str) -> int:
    if isinstance(value, bool):
        raise ValueError("level must be int or str, got bool")
    if isinstance(value, int):
        return value

    if not isinstance(value, str):
        raise ValueError(f"level must be int or str, got {type(value).__name__}")

    normalized = value.strip().upper()
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed

    raise ValueError(f"unsupported logging level {value!r}")


def _validate_log_format(value: str) -> str:
    normalized = value.strip().lower() if isinstance(value, str) else ""
    if normalized not in LOG_FORMATS:
        expected = ", ".join(LOG_FORMATS)
        raise ValueError(f"unsupported log format {value!r}; expected one of: {expected}")
    return normalized


__all__ = [
    "LoggingConfig",
    "ensure_logging_configured",
    "invocation_scope",
    "reset_logging",
    "setup_logging",
    "setup_logging_from_config",
]
