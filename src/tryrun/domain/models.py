"""Frozen value types for one invocation; none outlive the process."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tryrun.constants import SIGNAL_EXIT_BASE

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class InvocationRequest:
    """Package to install plus the arguments forwarded to its executable."""

    package_name: str
    pass_through_args: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.package_name, str):
            raise TypeError("package_name must be a string")
        args = tuple(self.pass_through_args)
        for item in args:
            if not isinstance(item, str):
                raise TypeError("pass_through_args must contain only strings")
        object.__setattr__(self, "pass_through_args", args)

    @classmethod
    def from_args(cls, package_name: str, args: Sequence[str] = ()) -> InvocationRequest:
        return cls(package_name=package_name, pass_through_args=tuple(args))


@dataclass(frozen=True, slots=True)
class Sandbox:
    """Exclusively owned temporary tree scoping the install and the run."""

    root: Path
    bin_dir: Path
    cwd_dir: Path

    @classmethod
    def at(cls, root: Path, *, bin_dir_name: str = "bin", cwd_dir_name: str = "cwd") -> Sandbox:
        return cls(root=root, bin_dir=root / bin_dir_name, cwd_dir=root / cwd_dir_name)


@dataclass(frozen=True, slots=True)
class InstallOutcome:
    """Exit status of the package-manager process; ``None`` when signal-terminated."""

    command: tuple[str, ...]
    exit_status: int | None

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0


@dataclass(frozen=True, slots=True)
class RunOutcome:
    """Final result of an invocation: the located executable's exit status.

    ``exit_status`` is ``None`` when the child was terminated by a signal, in which case
    ``signal`` holds the signal number when the platform reports one.
    """

    executable: Path
    args: tuple[str, ...]
    exit_status: int | None
    signal: int | None = None

    @property
    def terminated_by_signal(self) -> bool:
        return self.exit_status is None

    @property
    def process_exit_code(self) -> int:
        """Exit code the tool itself should report for this outcome."""

        if self.exit_status is not None:
            return self.exit_status
        if self.signal is not None:
            return SIGNAL_EXIT_BASE + self.signal
        return 1


__all__ = [
    "InstallOutcome",
    "InvocationRequest",
    "RunOutcome",
    "Sandbox",
]
