"""Typed failure kinds for each pipeline stage.

Every error is fatal: the pipeline aborts on the first one, releases the sandbox, and
surfaces the error to the caller. ``str(error)`` always starts with the stage name so a
reader can tell which step failed.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class TryRunError(RuntimeError):
    """Base error for all pipeline stage failures."""

    stage: str = "pipeline"

    def __init__(self, message: str) -> None:
        self.detail = message
        super().__init__(f"{self.stage}: {message}")


class InvalidPackageName(TryRunError):
    """Raised when the package name fails the identifier grammar."""

    stage = "validate"

    def __init__(self, package_name: str) -> None:
        self.package_name = package_name
        super().__init__(
            f"invalid package name {package_name!r}; expected an ASCII letter or digit "
            "followed by letters, digits, '_' or '-'"
        )


class SandboxError(TryRunError):
    """Base error for sandbox lifecycle failures."""

    stage = "sandbox"


class SandboxCreationError(SandboxError):
    """Raised when the temporary sandbox directory cannot be created."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"unable to create sandbox directory: {reason}")


class SandboxCleanupError(SandboxError):
    """Raised when the sandbox tree cannot be removed."""

    def __init__(self, root: Path, reason: str) -> None:
        self.root = root
        super().__init__(f"unable to remove sandbox {root!s}: {reason}")


class ProcessSpawnError(TryRunError):
    """Raised when the installer or the located executable cannot be launched."""

    def __init__(self, *, stage: str, command: Sequence[str], reason: str) -> None:
        self.stage = stage
        self.command = tuple(command)
        self.reason = reason
        program = self.command[0] if self.command else "<empty>"
        super().__init__(f"failed to launch {program!r}: {reason}")


class InstallFailed(TryRunError):
    """Raised when the package manager ran but did not exit with status zero."""

    stage = "install"

    def __init__(self, *, package_name: str, status_code: int | None) -> None:
        self.package_name = package_name
        self.status_code = status_code
        rendered = "no status (terminated by signal)" if status_code is None else status_code
        super().__init__(
            f"failed to install {package_name!r}, returned with status code: {rendered}"
        )


class ExecutableNotFound(TryRunError):
    """Raised when install succeeded but produced no same-named artifact."""

    stage = "locate"

    def __init__(self, *, package_name: str, search_dir: Path, reason: str | None = None) -> None:
        self.package_name = package_name
        self.search_dir = search_dir
        message = f"could not find an executable named {package_name!r} in {search_dir!s}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DirectoryCreationError(TryRunError):
    """Raised when the run working directory cannot be created."""

    stage = "run"

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"unable to create working directory {path!s}: {reason}")


def describe_os_error(exc: OSError) -> str:
    """Render an OS error as ``"<strerror>: <filename>"`` when both are known."""

    if exc.strerror and exc.filename is not None:
        return f"{exc.strerror}: {exc.filename}"
    text = str(exc).strip()
    return text or type(exc).__name__


__all__ = [
    "DirectoryCreationError",
    "ExecutableNotFound",
    "InstallFailed",
    "InvalidPackageName",
    "ProcessSpawnError",
    "SandboxCleanupError",
    "SandboxCreationError",
    "SandboxError",
    "TryRunError",
    "describe_os_error",
]
