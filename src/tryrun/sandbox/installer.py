"""Install a package into a sandbox root through the external package manager."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from tryrun.constants import DEFAULT_INSTALL_PROGRAM, DEFAULT_ROOT_FLAG
from tryrun.domain.models import InstallOutcome
from tryrun.errors import InstallFailed, ProcessSpawnError, describe_os_error

if TYPE_CHECKING:
    from collections.abc import Sequence


class CommandRunner(Protocol):
    """Injectable blocking process runner used for deterministic/offline testing.

    Returns the raw ``subprocess`` return code, negative when the process was terminated
    by a signal on POSIX. Raises :class:`OSError` when the command cannot be spawned.
    """

    def run(self, command: Sequence[str], *, cwd: Path | None = None) -> int: ...


class SubprocessCommandRunner:
    """Default command runner backed by ``subprocess.run``.

    Standard streams are inherited so the package manager's progress and the executed
    artifact's output reach the terminal unchanged. There is no timeout.
    """

    def run(self, command: Sequence[str], *, cwd: Path | None = None) -> int:
        completed = subprocess.run(list(command), cwd=cwd, check=False)
        return completed.returncode


def normalize_returncode(returncode: int) -> int | None:
    """Map POSIX negative ``returncode`` values (signal termination) to ``None``."""

    if returncode < 0:
        return None
    return returncode


@dataclass(frozen=True, slots=True)
class InstallCommand:
    """Shape of the package-manager invocation: ``program... extra... name flag root``."""

    program: tuple[str, ...] = DEFAULT_INSTALL_PROGRAM
    root_flag: str = DEFAULT_ROOT_FLAG
    extra_args: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        program = tuple(self.program)
        if not program or not program[0].strip():
            raise ValueError("install program must not be empty")
        if not self.root_flag.strip():
            raise ValueError("root_flag must not be empty")
        object.__setattr__(self, "program", program)
        object.__setattr__(self, "extra_args", tuple(self.extra_args))

    def build(self, package_name: str, sandbox_root: Path | str) -> tuple[str, ...]:
        return (
            *self.program,
            *self.extra_args,
            package_name,
            self.root_flag,
            str(sandbox_root),
        )


class Installer:
    """Run the install command synchronously and classify the outcome by exit status.

    The installer does not inspect what the package manager writes; it relies on the
    convention that executables land under ``<sandbox_root>/bin``. A non-zero status is
    always fatal. Missing packages, network failures and build failures are not told
    apart.
    """

    def __init__(
        self,
        command: InstallCommand | None = None,
        *,
        runner: CommandRunner | None = None,
        logger: Any | None = None,
    ) -> None:
        self._command = command or InstallCommand()
        self._runner = runner or SubprocessCommandRunner()
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    @property
    def command(self) -> InstallCommand:
        return self._command

    def install(self, package_name: str, sandbox_root: Path | str) -> InstallOutcome:
        argv = self._command.build(package_name, sandbox_root)
        self._logger.info("install_started", sandbox_root=str(sandbox_root), command=list(argv))
        try:
            returncode = self._runner.run(argv)
        except OSError as exc:
            raise ProcessSpawnError(
                stage="install",
                command=argv,
                reason=describe_os_error(exc),
            ) from exc

        status = normalize_returncode(returncode)
        outcome = InstallOutcome(command=argv, exit_status=status)
        self._logger.info("install_finished", exit_status=status, succeeded=outcome.succeeded)
        if not outcome.succeeded:
            raise InstallFailed(package_name=package_name, status_code=status)
        return outcome


def install(
    package_name: str,
    sandbox_root: Path | str,
    *,
    command: InstallCommand | None = None,
    runner: CommandRunner | None = None,
) -> InstallOutcome:
    """Install ``package_name`` into ``sandbox_root`` with a one-off :class:`Installer`."""

    return Installer(command, runner=runner).install(package_name, sandbox_root)


__all__ = [
    "CommandRunner",
    "InstallCommand",
    "Installer",
    "SubprocessCommandRunner",
    "install",
    "normalize_returncode",
]
