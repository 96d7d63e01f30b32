"""
tryrun — sandbox stages

File: src/tryrun/sandbox/__init__.py

Purpose
- Sandbox lifecycle, isolated install, artifact discovery and one-shot execution.

Functional requirements
- The sandbox tree is removed on every exit path.
- Install and run block until the child process exits; there is no timeout.
"""

from tryrun.sandbox.installer import (
    CommandRunner,
    InstallCommand,
    Installer,
    SubprocessCommandRunner,
    install,
)
from tryrun.sandbox.runner import (
    ArtifactRunner,
    find_executable,
    prepare_working_directory,
    run_executable,
)
from tryrun.sandbox.sandbox_manager import SandboxManager, acquire_sandbox

__all__ = [
    "ArtifactRunner",
    "CommandRunner",
    "InstallCommand",
    "Installer",
    "SandboxManager",
    "SubprocessCommandRunner",
    "acquire_sandbox",
    "find_executable",
    "install",
    "prepare_working_directory",
    "run_executable",
]
