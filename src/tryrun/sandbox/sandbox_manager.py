"""Scoped acquisition and guaranteed release of the per-invocation sandbox tree."""

from __future__ import annotations

import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from tryrun.constants import DEFAULT_BIN_DIR, DEFAULT_CWD_DIR, DEFAULT_SANDBOX_PREFIX
from tryrun.domain.models import Sandbox
from tryrun.errors import SandboxCleanupError, SandboxCreationError, describe_os_error

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType


class SandboxManager:
    """Own exactly one temporary sandbox directory for the lifetime of an invocation.

    The directory gets a unique name from :mod:`tempfile`, so concurrent invocations never
    share a tree. ``bin/`` and ``cwd/`` are not created here; the installer and the runner
    create them as needed. Release is idempotent and removes read-only entries too. If the
    interpreter exits without unwinding, the :class:`tempfile.TemporaryDirectory`
    finalizer still removes the tree on a best-effort basis.
    """

    def __init__(
        self,
        *,
        temp_dir: Path | str | None = None,
        prefix: str = DEFAULT_SANDBOX_PREFIX,
        bin_dir_name: str = DEFAULT_BIN_DIR,
        cwd_dir_name: str = DEFAULT_CWD_DIR,
        logger: Any | None = None,
    ) -> None:
        self._temp_dir = Path(temp_dir) if temp_dir else None
        self._prefix = prefix
        self._bin_dir_name = bin_dir_name
        self._cwd_dir_name = cwd_dir_name
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._handle: tempfile.TemporaryDirectory[str] | None = None
        self._sandbox: Sandbox | None = None

    @property
    def sandbox(self) -> Sandbox | None:
        return self._sandbox

    def acquire(self) -> Sandbox:
        if self._handle is not None:
            raise RuntimeError("sandbox already acquired; a manager owns a single sandbox")
        try:
            handle = tempfile.TemporaryDirectory(prefix=self._prefix, dir=self._temp_dir)
        except OSError as exc:
            raise SandboxCreationError(describe_os_error(exc)) from exc

        root = Path(handle.name).resolve()
        self._handle = handle
        self._sandbox = Sandbox.at(
            root,
            bin_dir_name=self._bin_dir_name,
            cwd_dir_name=self._cwd_dir_name,
        )
        self._logger.info("sandbox_acquired", sandbox_root=str(root))
        return self._sandbox

    def release(self) -> None:
        handle = self._handle
        if handle is None:
            return
        root = Path(handle.name).resolve()
        try:
            handle.cleanup()
        except OSError as exc:
            raise SandboxCleanupError(root, describe_os_error(exc)) from exc
        finally:
            self._handle = None
        self._logger.info("sandbox_released", sandbox_root=str(root))

    def __enter__(self) -> Sandbox:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.release()
            return
        # Another error is already unwinding; it must reach the caller unchanged.
        try:
            self.release()
        except SandboxCleanupError as cleanup_exc:
            self._logger.error(
                "sandbox_cleanup_failed",
                sandbox_root=str(cleanup_exc.root),
                error=str(cleanup_exc),
                pending_error=type(exc).__name__,
            )


@contextmanager
def acquire_sandbox(
    *,
    temp_dir: Path | str | None = None,
    prefix: str = DEFAULT_SANDBOX_PREFIX,
    bin_dir_name: str = DEFAULT_BIN_DIR,
    cwd_dir_name: str = DEFAULT_CWD_DIR,
    logger: Any | None = None,
) -> Iterator[Sandbox]:
    """Yield a fresh :class:`Sandbox` and delete it on every exit path."""

    manager = SandboxManager(
        temp_dir=temp_dir,
        prefix=prefix,
        bin_dir_name=bin_dir_name,
        cwd_dir_name=cwd_dir_name,
        logger=logger,
    )
    with manager as sandbox:
        yield sandbox


__all__ = [
    "SandboxManager",
    "acquire_sandbox",
]
