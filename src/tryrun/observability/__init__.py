"""Public observability primitives: structured stage logging."""

from tryrun.observability.logging import (
    LoggingConfig,
    ensure_logging_configured,
    invocation_scope,
    reset_logging,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "LoggingConfig",
    "ensure_logging_configured",
    "invocation_scope",
    "reset_logging",
    "setup_logging",
    "setup_logging_from_config",
]
