"""Shared fixtures: logging isolation and a scriptable stand-in for the package manager."""

from __future__ import annotations

import os
import sys
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from tryrun.observability.logging import reset_logging

# Exits with its first argument, or 42 when called without arguments.
EXIT_WITH_FIRST_ARG = '#!/bin/sh\nexit "${1:-42}"\n'

_INSTALLER_SOURCE = '''\
import os
import sys
from pathlib import Path

EXIT_CODE = {exit_code!r}
ARTIFACT = {artifact!r}
ARTIFACT_NAME = {artifact_name!r}


def main(argv):
    package, root_flag, root = argv[-3:]
    if root_flag != "--root":
        return 64
    if ARTIFACT is not None:
        bin_dir = Path(root) / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        target = bin_dir / (ARTIFACT_NAME or package)
        target.write_text(ARTIFACT, encoding="utf-8")
        os.chmod(target, 0o755)
    return EXIT_CODE


raise SystemExit(main(sys.argv[1:]))
'''

FakeInstallerFactory = Callable[..., list[str]]


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    reset_logging()
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _isolate_tryrun_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("TRYRUN_"):
            monkeypatch.delenv(name)


@pytest.fixture
def sandbox_parent(tmp_path: Path) -> Path:
    """Directory the tests point ``sandbox.temp_dir`` at, so leaks are observable."""

    parent = tmp_path / "sandboxes"
    parent.mkdir()
    return parent


@pytest.fixture
def fake_installer(tmp_path: Path) -> FakeInstallerFactory:
    """Return a factory producing an install command that mimics ``cargo install --root``.

    The generated installer writes ``ARTIFACT`` to ``<root>/bin/<package>`` (or
    ``artifact_name``) and exits with ``exit_code``. ``artifact=None`` installs nothing.
    """

    def _make(
        *,
        exit_code: int = 0,
        artifact: str | None = EXIT_WITH_FIRST_ARG,
        artifact_name: str | None = None,
    ) -> list[str]:
        script = tmp_path / f"fake_installer_{uuid.uuid4().hex[:8]}.py"
        script.write_text(
            _INSTALLER_SOURCE.format(
                exit_code=exit_code,
                artifact=artifact,
                artifact_name=artifact_name,
            ),
            encoding="utf-8",
        )
        return [sys.executable, str(script)]

    return _make
