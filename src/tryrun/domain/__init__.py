"""
tryrun — domain types

File: src/tryrun/domain/__init__.py

Purpose
- Transient value types shared by the pipeline stages.
- Keep the domain layer free of IO side effects.
"""

from tryrun.domain.models import InstallOutcome, InvocationRequest, RunOutcome, Sandbox

__all__ = [
    "InstallOutcome",
    "InvocationRequest",
    "RunOutcome",
    "Sandbox",
]
