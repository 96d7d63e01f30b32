"""
tryrun — unit tests for observability logging

File: tests/unit/observability/test_logging.py

Purpose
- Validate structlog configuration: level filtering, JSON rendering on a private stream,
  and invocation context binding.

Non-functional requirements
- Offline and deterministic.
"""

from __future__ import annotations

import io
import json

import pytest
import structlog

from tryrun.observability.logging import (
    LoggingConfig,
    ensure_logging_configured,
    invocation_scope,
    setup_logging,
    setup_logging_from_config,
)


def _json_lines(stream: io.StringIO) -> list[dict[str, object]]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.mark.unit
def test_json_format_writes_one_object_per_event() -> None:
    stream = io.StringIO()
    logger = setup_logging(LoggingConfig(level="INFO", format="json", stream=stream))

    logger.info("install_started", command=["cargo", "install", "ripgrep"])

    (event,) = _json_lines(stream)
    assert event["event"] == "install_started"
    assert event["level"] == "info"
    assert event["command"] == ["cargo", "install", "ripgrep"]
    assert "timestamp" in event


@pytest.mark.unit
def test_level_filters_lower_events() -> None:
    stream = io.StringIO()
    logger = setup_logging(LoggingConfig(level="WARNING", format="json", stream=stream))

    logger.info("run_started")
    logger.debug("noise")
    logger.warning("sandbox_cleanup_failed")

    assert [event["event"] for event in _json_lines(stream)] == ["sandbox_cleanup_failed"]


@pytest.mark.unit
def test_default_setup_writes_warnings_to_stderr_only(
    capsys: pytest.CaptureFixture[str],
) -> None:
    ensure_logging_configured()
    logger = structlog.get_logger("tryrun")

    logger.info("run_started")
    logger.warning("sandbox_cleanup_failed")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "run_started" not in captured.err
    assert "sandbox_cleanup_failed" in captured.err


@pytest.mark.unit
def test_ensure_logging_configured_keeps_existing_setup() -> None:
    stream = io.StringIO()
    setup_logging(LoggingConfig(level="INFO", format="json", stream=stream))

    ensure_logging_configured()
    structlog.get_logger("tryrun").info("run_started")

    assert [event["event"] for event in _json_lines(stream)] == ["run_started"]


@pytest.mark.unit
def test_invocation_scope_binds_and_unbinds_context() -> None:
    stream = io.StringIO()
    setup_logging(LoggingConfig(level="DEBUG", format="json", stream=stream))
    logger = structlog.get_logger("tryrun.tests")

    with invocation_scope("ripgrep", invocation_id="abc123") as invocation_id:
        logger.info("executable_found")
    logger.info("after_scope")

    inside, outside = _json_lines(stream)
    assert invocation_id == "abc123"
    assert inside["invocation_id"] == "abc123"
    assert inside["package_name"] == "ripgrep"
    assert "invocation_id" not in outside
    assert "package_name" not in outside


@pytest.mark.unit
def test_invocation_scope_generates_short_hex_ids() -> None:
    with invocation_scope("tool") as first, invocation_scope("tool") as second:
        assert len(first) == 12
        int(first, 16)
        assert first != second


@pytest.mark.unit
def test_console_format_without_color_is_plain_text() -> None:
    stream = io.StringIO()
    logger = setup_logging(LoggingConfig(level="INFO", format="console", stream=stream))

    logger.info("sandbox_acquired", sandbox_root="/tmp/tryrun-x")

    output = stream.getvalue()
    assert "sandbox_acquired" in output
    assert "sandbox_root=/tmp/tryrun-x" in output
    assert "\x1b[" not in output


@pytest.mark.unit
def test_setup_from_config_section() -> None:
    stream = io.StringIO()
    logger = setup_logging_from_config({"level": "debug", "format": "json"}, stream=stream)

    logger.debug("install_finished", exit_status=0)

    (event,) = _json_lines(stream)
    assert event["level"] == "debug"
    assert event["exit_status"] == 0


@pytest.mark.unit
@pytest.mark.parametrize("level", ["LOUD", True, 1.5])
def test_unsupported_level_is_rejected(level: object) -> None:
    with pytest.raises(ValueError, match="level"):
        setup_logging(LoggingConfig(level=level, stream=io.StringIO()))  # type: ignore[arg-type]


@pytest.mark.unit
def test_unsupported_format_is_rejected() -> None:
    with pytest.raises(ValueError, match="unsupported log format"):
        setup_logging(LoggingConfig(format="xml", stream=io.StringIO()))
