"""Stable constants shared across tryrun stages."""

from __future__ import annotations

from typing import Final

# Schema version for ``tryrun.toml``.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default external package-manager invocation.
DEFAULT_INSTALL_PROGRAM: Final[tuple[str, ...]] = ("cargo", "install")
DEFAULT_ROOT_FLAG: Final[str] = "--root"

# Sandbox layout.
DEFAULT_SANDBOX_PREFIX: Final[str] = "tryrun-"
DEFAULT_BIN_DIR: Final[str] = "bin"
DEFAULT_CWD_DIR: Final[str] = "cwd"

# Logging defaults; quiet unless asked.
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"
LOG_FORMATS: Final[tuple[str, ...]] = ("console", "json")

# Shell convention for children terminated by a signal.
SIGNAL_EXIT_BASE: Final[int] = 128

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_BIN_DIR",
    "DEFAULT_CWD_DIR",
    "DEFAULT_INSTALL_PROGRAM",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_ROOT_FLAG",
    "DEFAULT_SANDBOX_PREFIX",
    "LOG_FORMATS",
    "SIGNAL_EXIT_BASE",
]
