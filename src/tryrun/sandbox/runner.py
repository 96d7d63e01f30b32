"""Locate the installed executable and run it once in a fresh working directory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from tryrun.constants import DEFAULT_CWD_DIR
from tryrun.domain.models import RunOutcome
from tryrun.errors import (
    DirectoryCreationError,
    ExecutableNotFound,
    ProcessSpawnError,
    describe_os_error,
)
from tryrun.sandbox.installer import SubprocessCommandRunner, normalize_returncode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tryrun.domain.models import Sandbox
    from tryrun.sandbox.installer import CommandRunner


def find_executable(package_name: str, search_dir: Path | str) -> Path:
    """Return the first entry of ``search_dir`` whose file stem equals ``package_name``.

    The scan is a single non-recursive pass in directory iteration order, which the
    filesystem does not define. When two entries share a stem (``tool`` and ``tool.exe``)
    the result depends on that order; no sorting is applied.
    """

    directory = Path(search_dir)
    try:
        with os.scandir(directory) as entries:
            for entry in entries:
                if Path(entry.name).stem == package_name:
                    return directory / entry.name
    except OSError as exc:
        raise ExecutableNotFound(
            package_name=package_name,
            search_dir=directory,
            reason=describe_os_error(exc),
        ) from exc
    raise ExecutableNotFound(package_name=package_name, search_dir=directory)


def prepare_working_directory(sandbox_root: Path | str, name: str = DEFAULT_CWD_DIR) -> Path:
    """Create the fresh working directory for the executed artifact."""

    path = Path(sandbox_root) / name
    try:
        path.mkdir()
    except OSError as exc:
        raise DirectoryCreationError(path, describe_os_error(exc)) from exc
    return path


def run_executable(
    executable: Path | str,
    args: Sequence[str] = (),
    *,
    cwd: Path | str,
    runner: CommandRunner | None = None,
) -> RunOutcome:
    """Spawn ``executable`` with ``args`` verbatim in ``cwd`` and wait for it to exit.

    No shell is involved and the environment is inherited unchanged. A child killed by
    a signal yields ``exit_status=None``; that is passed through, not raised.
    """

    command_runner = runner or SubprocessCommandRunner()
    executable_path = Path(executable)
    forwarded = tuple(args)
    argv = (str(executable_path), *forwarded)
    try:
        returncode = command_runner.run(argv, cwd=Path(cwd))
    except OSError as exc:
        raise ProcessSpawnError(stage="run", command=argv, reason=describe_os_error(exc)) from exc

    exit_status = normalize_returncode(returncode)
    return RunOutcome(
        executable=executable_path,
        args=forwarded,
        exit_status=exit_status,
        signal=-returncode if exit_status is None else None,
    )


class ArtifactRunner:
    """Locate the package's executable in ``Sandbox.bin_dir`` and run it once."""

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        logger: Any | None = None,
    ) -> None:
        self._runner = runner or SubprocessCommandRunner()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def locate(self, package_name: str, sandbox: Sandbox) -> Path:
        self._logger.info("executable_search_started", search_dir=str(sandbox.bin_dir))
        executable = find_executable(package_name, sandbox.bin_dir)
        self._logger.info("executable_found", executable=str(executable))
        return executable

    def run(self, package_name: str, sandbox: Sandbox, args: Sequence[str] = ()) -> RunOutcome:
        executable = self.locate(package_name, sandbox)

        cwd = prepare_working_directory(sandbox.root, sandbox.cwd_dir.name)
        self._logger.info("working_directory_created", cwd=str(cwd))

        self._logger.info("run_started", executable=str(executable), args=list(args))
        outcome = run_executable(executable, args, cwd=cwd, runner=self._runner)
        self._logger.info(
            "run_finished",
            exit_status=outcome.exit_status,
            signal=outcome.signal,
        )
        return outcome


__all__ = [
    "ArtifactRunner",
    "find_executable",
    "prepare_working_directory",
    "run_executable",
]
