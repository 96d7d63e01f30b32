"""
tryrun — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file and to the invoking directory.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tryrun.config import (
    ConfigLoadError,
    ConfigValidationError,
    default_config,
    dump_effective_config,
    load_config,
)


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.mark.unit
def test_defaults_without_any_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded == default_config()
    assert loaded["installer"]["command"] == ["cargo", "install"]
    assert loaded["logging"]["level"] == "WARNING"


@pytest.mark.unit
def test_default_file_in_cwd_is_picked_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_config(tmp_path / "tryrun.toml", '[installer]\nextra_args = ["--locked"]\n')
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["installer"]["extra_args"] == ["--locked"]
    assert loaded["installer"]["command"] == ["cargo", "install"]


@pytest.mark.unit
def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "tryrun.toml"
    _write_config(
        config_path,
        """
[logging]
level = "ERROR"
format = "json"

[sandbox]
prefix = "from-file-"
""".strip(),
    )

    from_file = load_config(config_path, environ={})
    assert from_file["logging"]["level"] == "ERROR"
    assert from_file["logging"]["format"] == "json"
    assert from_file["sandbox"]["prefix"] == "from-file-"

    from_env = load_config(
        config_path,
        environ={"TRYRUN_LOGGING_LEVEL": "info", "TRYRUN_SANDBOX_PREFIX": "from-env-"},
    )
    assert from_env["logging"]["level"] == "INFO"
    assert from_env["sandbox"]["prefix"] == "from-env-"

    from_cli = load_config(
        config_path,
        environ={"TRYRUN_LOGGING_LEVEL": "info"},
        cli_overrides={"logging.level": "DEBUG", "sandbox.prefix": None},
    )
    assert from_cli["logging"]["level"] == "DEBUG"
    assert from_cli["sandbox"]["prefix"] == "from-file-"
    assert from_cli["logging"]["format"] == "json"


@pytest.mark.unit
def test_env_lists_are_split_like_a_shell(tmp_path: Path) -> None:
    loaded = load_config(
        _empty_config(tmp_path),
        environ={
            "TRYRUN_INSTALLER_COMMAND": "cargo +nightly install",
            "TRYRUN_INSTALLER_EXTRA_ARGS": "--locked --features 'a b'",
        },
    )

    assert loaded["installer"]["command"] == ["cargo", "+nightly", "install"]
    assert loaded["installer"]["extra_args"] == ["--locked", "--features", "a b"]


@pytest.mark.unit
def test_env_integer_coercion_names_the_variable(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="TRYRUN_META_SCHEMA_VERSION"):
        load_config(_empty_config(tmp_path), environ={"TRYRUN_META_SCHEMA_VERSION": "one"})


@pytest.mark.unit
def test_env_list_with_broken_quoting_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="TRYRUN_INSTALLER_COMMAND"):
        load_config(_empty_config(tmp_path), environ={"TRYRUN_INSTALLER_COMMAND": "cargo 'install"})


@pytest.mark.unit
def test_empty_install_command_from_env_fails_validation(tmp_path: Path) -> None:
    with pytest.raises(ConfigValidationError, match="installer.command"):
        load_config(_empty_config(tmp_path), environ={"TRYRUN_INSTALLER_COMMAND": ""})


@pytest.mark.unit
def test_unrelated_env_vars_are_ignored(tmp_path: Path) -> None:
    loaded = load_config(
        _empty_config(tmp_path),
        environ={"TRYRUN_UNKNOWN_THING": "x", "PATH": "/usr/bin"},
    )
    assert loaded == default_config()


@pytest.mark.unit
def test_explicit_missing_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "missing.toml", environ={})


@pytest.mark.unit
def test_invalid_toml_is_an_error(tmp_path: Path) -> None:
    config_path = tmp_path / "tryrun.toml"
    _write_config(config_path, "[installer\ncommand = ")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.unit
def test_unknown_fields_in_file_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "tryrun.toml"
    _write_config(config_path, "[sandbox]\ntimeout = 5\n")

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == ["sandbox.timeout"]


@pytest.mark.unit
def test_file_temp_dir_is_relative_to_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_dir = tmp_path / "conf"
    config_path = config_dir / "tryrun.toml"
    _write_config(config_path, '[sandbox]\ntemp_dir = "scratch"\n')
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    loaded = load_config(config_path, environ={})

    assert loaded["sandbox"]["temp_dir"] == str(config_dir.resolve() / "scratch")


@pytest.mark.unit
def test_override_temp_dir_is_relative_to_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / "conf" / "tryrun.toml"
    _write_config(config_path, '[sandbox]\ntemp_dir = "scratch"\n')
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)

    loaded = load_config(config_path, environ={}, cli_overrides={"sandbox.temp_dir": "sb"})

    assert loaded["sandbox"]["temp_dir"] == str(Path.cwd() / "sb")


@pytest.mark.unit
def test_empty_temp_dir_means_system_default(tmp_path: Path) -> None:
    loaded = load_config(_empty_config(tmp_path), environ={"TRYRUN_SANDBOX_TEMP_DIR": "  "})
    assert loaded["sandbox"]["temp_dir"] == ""


@pytest.mark.unit
def test_tuple_cli_overrides_become_lists(tmp_path: Path) -> None:
    loaded = load_config(
        _empty_config(tmp_path),
        environ={},
        cli_overrides={"installer.extra_args": ("--locked", "--force")},
    )
    assert loaded["installer"]["extra_args"] == ["--locked", "--force"]


@pytest.mark.unit
def test_dump_is_deterministic_json(tmp_path: Path) -> None:
    first = dump_effective_config(load_config(_empty_config(tmp_path), environ={}))
    second = dump_effective_config(load_config(_empty_config(tmp_path), environ={}))

    assert first == second
    assert json.loads(first) == default_config()
    assert first.startswith('{"installer":')


def _empty_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "empty.toml"
    _write_config(config_path, "")
    return config_path
