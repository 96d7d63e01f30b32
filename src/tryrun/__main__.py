"""Module entrypoint for ``python -m tryrun``."""

from __future__ import annotations

from tryrun.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
