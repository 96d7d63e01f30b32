"""Executable CLI entrypoint for ``tryrun``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from tryrun.config import ConfigLoadError, ConfigValidationError
from tryrun.errors import (
    DirectoryCreationError,
    ExecutableNotFound,
    InstallFailed,
    InvalidPackageName,
    ProcessSpawnError,
    SandboxError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Process exit codes for tool-level failures.

    On success the tool exits with the executed artifact's own status instead, so these
    values can collide with a child's status; they are only meaningful alongside the
    stderr message.
    """

    SUCCESS = 0
    USAGE_ERROR = 2
    CONFIG_ERROR = 3
    SANDBOX_ERROR = 4
    SPAWN_ERROR = 5
    INSTALL_FAILED = 6
    EXECUTABLE_NOT_FOUND = 7
    DIRECTORY_ERROR = 8
    INTERNAL_ERROR = 70
    INTERRUPTED = 130


_EXCEPTION_ROUTES: tuple[tuple[type[BaseException], ExitCode], ...] = (
    (InvalidPackageName, ExitCode.USAGE_ERROR),
    (ConfigLoadError, ExitCode.CONFIG_ERROR),
    (ConfigValidationError, ExitCode.CONFIG_ERROR),
    (SandboxError, ExitCode.SANDBOX_ERROR),
    (ProcessSpawnError, ExitCode.SPAWN_ERROR),
    (InstallFailed, ExitCode.INSTALL_FAILED),
    (ExecutableNotFound, ExitCode.EXECUTABLE_NOT_FOUND),
    (DirectoryCreationError, ExitCode.DIRECTORY_ERROR),
    (KeyboardInterrupt, ExitCode.INTERRUPTED),
)


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Entrypoint used by ``python -m tryrun`` and the ``tryrun`` console script."""

    try:
        from tryrun.ui.cli import run_cli

        return run_cli(argv)
    except SystemExit as exc:
        return _normalize_exit_code(exc.code)
    except BaseException as exc:  # noqa: BLE001 - CLI boundary normalization.
        exit_code = _route_exception(exc)
        _emit_failure(exc, exit_code)
        return int(exit_code)


def _normalize_exit_code(raw_code: object) -> int:
    if raw_code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(raw_code, int):
        return raw_code
    if isinstance(raw_code, str) and raw_code.strip():
        _write_stderr(raw_code.strip())
    return int(ExitCode.INTERNAL_ERROR)


def _route_exception(exc: BaseException) -> ExitCode:
    for item in _iter_exception_chain(exc):
        for error_type, exit_code in _EXCEPTION_ROUTES:
            if isinstance(item, error_type):
                return exit_code
    return ExitCode.INTERNAL_ERROR


def _iter_exception_chain(exc: BaseException) -> list[BaseException]:
    seen: set[int] = set()
    items: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None:
        marker = id(current)
        if marker in seen:
            break
        seen.add(marker)
        items.append(current)
        if current.__cause__ is not None:
            current = current.__cause__
            continue
        if current.__context__ is not None and not current.__suppress_context__:
            current = current.__context__
            continue
        break
    return items


def _emit_failure(exc: BaseException, exit_code: ExitCode) -> None:
    if exit_code is ExitCode.INTERNAL_ERROR:
        traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
        return
    if exit_code is ExitCode.INTERRUPTED:
        _write_stderr("tryrun: interrupted")
        return
    _write_stderr(f"tryrun: {str(exc).strip() or exc.__class__.__name__}")


def _write_stderr(message: str) -> None:
    sys.stderr.write(message.rstrip("\n") + "\n")


__all__ = ["ExitCode", "cli_entrypoint"]
