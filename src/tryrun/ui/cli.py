"""Command-line interface for tryrun."""

from __future__ import annotations

import argparse
import shlex
import sys
from collections.abc import Sequence
from typing import Any, Final

from tryrun import __version__
from tryrun.config import ConfigLoadError, dump_effective_config, load_config
from tryrun.constants import LOG_FORMATS
from tryrun.domain.models import InvocationRequest
from tryrun.observability.logging import setup_logging_from_config
from tryrun.pipeline import PipelineSettings, TryRunPipeline

_VERBOSITY_LEVELS: Final[tuple[str, ...]] = ("INFO", "DEBUG")
_ARGS_SEPARATOR: Final[str] = "--"


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse surface: tryrun options, the package, then pass-through args."""

    parser = argparse.ArgumentParser(
        prog="tryrun",
        description=(
            "Install a package into a temporary root, run its executable once, and "
            "delete everything afterwards.\n\n"
            "Everything after PACKAGE is passed to the executable verbatim, including\n"
            "arguments that start with '-'.\n\n"
            "Examples:\n"
            "  tryrun ripgrep --version\n"
            "  tryrun --installer 'cargo +nightly install' status-return 99\n"
            "  tryrun -v hyperfine -- --help\n"
            "  tryrun --install-arg=--locked ripgrep --version\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a TOML config file (default: ./tryrun.toml if present).",
    )
    parser.add_argument(
        "--installer",
        default=None,
        help="Install program, split like a shell command (default: 'cargo install').",
    )
    parser.add_argument(
        "--root-flag",
        default=None,
        help="Flag that passes the install root to the installer (default: --root).",
    )
    parser.add_argument(
        "--install-arg",
        dest="install_args",
        action="append",
        default=None,
        metavar="ARG",
        help=(
            "Extra argument for the installer, placed before the package name. "
            "Repeatable. Use the = form for flags: --install-arg=--locked."
        ),
    )
    parser.add_argument(
        "--temp-dir",
        default=None,
        help="Directory in which the sandbox is created (default: system temp dir).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for tryrun's own stage logs (default: WARNING).",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Log output format on stderr.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log verbosity (-v: INFO, -vv: DEBUG).",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored log output (also respects NO_COLOR env var).",
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        default=False,
        help="Print the effective config as JSON and exit without installing anything.",
    )
    parser.add_argument("package", nargs="?", metavar="PACKAGE", help="Package to install")
    parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        metavar="ARGS",
        help="Arguments to pass to the executable being tried",
    )
    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, run the pipeline, and return the process exit code."""

    parser = build_parser()
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    namespace = parser.parse_args(raw_argv)
    config = load_config(namespace.config_path, cli_overrides=_cli_overrides(namespace))

    if namespace.show_config:
        sys.stdout.write(dump_effective_config(config) + "\n")
        return 0
    if namespace.package is None:
        parser.error("the following arguments are required: PACKAGE")

    setup_logging_from_config(config["logging"], no_color=namespace.no_color)
    request = InvocationRequest.from_args(namespace.package, forwarded_args(raw_argv, namespace))
    pipeline = TryRunPipeline(PipelineSettings.from_config(config))
    outcome = pipeline.run(request)
    return outcome.process_exit_code


def forwarded_args(argv: Sequence[str], namespace: argparse.Namespace) -> list[str]:
    """Return the argv tokens typed after PACKAGE, minus one leading ``--``.

    ``namespace.args`` is always a suffix of ``argv``, but depending on the Python
    version argparse may already have eaten the ``--`` that directly follows PACKAGE.
    Slicing ``argv`` itself keeps the result independent of that.
    """

    raw = list(argv)
    index = len(raw) - len(namespace.args)
    while index > 0 and raw[index - 1] == _ARGS_SEPARATOR:
        index -= 1
    if index > 0 and raw[index - 1] == namespace.package:
        return pass_through_args(raw[index:])
    return pass_through_args(namespace.args)


def pass_through_args(raw: Sequence[str]) -> list[str]:
    """Drop one leading ``--`` separator; everything else is forwarded untouched."""

    args = list(raw)
    if args and args[0] == _ARGS_SEPARATOR:
        return args[1:]
    return args


def _cli_overrides(namespace: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {
        "installer.root_flag": namespace.root_flag,
        "installer.extra_args": namespace.install_args,
        "sandbox.temp_dir": namespace.temp_dir,
        "logging.format": namespace.log_format,
    }
    if namespace.installer is not None:
        try:
            overrides["installer.command"] = shlex.split(namespace.installer)
        except ValueError as exc:
            raise ConfigLoadError(f"--installer must be a shell-style command: {exc}") from exc
    if namespace.log_level is not None:
        overrides["logging.level"] = namespace.log_level
    elif namespace.verbose:
        index = min(namespace.verbose, len(_VERBOSITY_LEVELS)) - 1
        overrides["logging.level"] = _VERBOSITY_LEVELS[index]
    return overrides


__all__ = ["build_parser", "forwarded_args", "pass_through_args", "run_cli"]
