"""Sequential install-run-discard pipeline.

Stages run strictly in order and the first failure aborts the invocation:

1. validate the package name (no side effect before this passes),
2. acquire a fresh sandbox directory,
3. install the package into the sandbox root,
4. locate ``bin/<package>``, create ``cwd/`` and run the executable.

The sandbox is released exactly once on the way out, whatever happened in between.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from tryrun.config.schema import default_config
from tryrun.constants import DEFAULT_BIN_DIR, DEFAULT_CWD_DIR, DEFAULT_SANDBOX_PREFIX
from tryrun.domain.models import InvocationRequest, RunOutcome
from tryrun.observability.logging import ensure_logging_configured, invocation_scope
from tryrun.sandbox.installer import CommandRunner, InstallCommand, Installer
from tryrun.sandbox.runner import ArtifactRunner
from tryrun.sandbox.sandbox_manager import SandboxManager
from tryrun.validation import require_valid_package_name


@dataclass(frozen=True, slots=True)
class PipelineSettings:
    """Immutable knobs for one pipeline, usually derived from the effective config."""

    install_command: InstallCommand = field(default_factory=InstallCommand)
    temp_dir: Path | None = None
    sandbox_prefix: str = DEFAULT_SANDBOX_PREFIX
    bin_dir_name: str = DEFAULT_BIN_DIR
    cwd_dir_name: str = DEFAULT_CWD_DIR

    @classmethod
    def from_config(cls, config: Mapping[str, Any] | None = None) -> PipelineSettings:
        effective: Mapping[str, Any] = config if config is not None else default_config()
        installer = effective["installer"]
        sandbox = effective["sandbox"]
        temp_dir = sandbox.get("temp_dir") or None
        return cls(
            install_command=InstallCommand(
                program=tuple(installer["command"]),
                root_flag=installer["root_flag"],
                extra_args=tuple(installer["extra_args"]),
            ),
            temp_dir=Path(temp_dir) if temp_dir else None,
            sandbox_prefix=sandbox["prefix"],
            bin_dir_name=sandbox["bin_dir"],
            cwd_dir_name=sandbox["cwd_dir"],
        )


class TryRunPipeline:
    """Compose validation, sandbox, installer and runner into one blocking call."""

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        *,
        runner: CommandRunner | None = None,
        logger: Any | None = None,
    ) -> None:
        self._settings = settings or PipelineSettings()
        if logger is None:
            ensure_logging_configured()
            logger = structlog.get_logger(__name__)
        self._logger = logger
        self._installer = Installer(
            self._settings.install_command,
            runner=runner,
            logger=self._logger,
        )
        self._artifact_runner = ArtifactRunner(runner=runner, logger=self._logger)

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    def run(self, request: InvocationRequest) -> RunOutcome:
        with invocation_scope(request.package_name):
            package_name = require_valid_package_name(request.package_name)
            self._logger.info("package_name_validated")

            manager = SandboxManager(
                temp_dir=self._settings.temp_dir,
                prefix=self._settings.sandbox_prefix,
                bin_dir_name=self._settings.bin_dir_name,
                cwd_dir_name=self._settings.cwd_dir_name,
                logger=self._logger,
            )
            with manager as sandbox:
                self._installer.install(package_name, sandbox.root)
                return self._artifact_runner.run(
                    package_name,
                    sandbox,
                    request.pass_through_args,
                )


def run_once(
    package_name: str,
    args: Sequence[str] = (),
    *,
    settings: PipelineSettings | None = None,
    runner: CommandRunner | None = None,
    logger: Any | None = None,
) -> RunOutcome:
    """Install ``package_name``, run its executable with ``args`` and discard everything."""

    pipeline = TryRunPipeline(settings, runner=runner, logger=logger)
    return pipeline.run(InvocationRequest.from_args(package_name, args))


__all__ = [
    "PipelineSettings",
    "TryRunPipeline",
    "run_once",
]
