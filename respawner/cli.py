"""
Command-line entry point.

Usage:
    respawner [-f FILE] [-c COMMAND] [-n CYCLES] [--config PATH] [--log-level LEVEL]

Exit codes: 0 on normal exit or --help, 2 on invalid arguments or config,
128 + signal number when an unbounded run is ended by SIGTERM/SIGINT.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from typing import Any

from . import __version__
from .config import SupervisorConfig, load_config
from .exceptions import ConfigError
from .lifecycle import LifecycleController
from .log import LogConfig, LogConstants, LogError, quick_console_logger
from .loop import PollLoop
from .state import SupervisorState

PROG = "respawner"


class DefaultsHelpFormatter(argparse.HelpFormatter):
    """Help formatter that appends non-None defaults to each option's help."""

    def _get_help_string(self, action: argparse.Action) -> str:
        help_text = action.help or ""
        if action.default is not argparse.SUPPRESS and action.default is not None:
            return help_text + f" (default: {action.default})"
        return help_text


def _cycles(value: str) -> int:
    try:
        cycles = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid cycles value: {value}") from None
    if cycles < 0:
        raise argparse.ArgumentTypeError(f"invalid cycles value: {value}")
    return cycles


def build_parser(defaults: SupervisorConfig | None = None) -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Args:
        defaults: Settings shown and used as option defaults (e.g. from a
            config file). Built-in defaults if None.
    """
    defaults = defaults or SupervisorConfig()
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Keep one background process running and restart it whenever "
            "the trigger file appears."
        ),
        formatter_class=DefaultsHelpFormatter,
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="trigger_file",
        metavar="PATH",
        default=defaults.trigger_file,
        help="trigger file to poll for",
    )
    parser.add_argument(
        "-c",
        "--cmd",
        "--command",
        dest="command",
        metavar="CMDLINE",
        default=defaults.command,
        help="shell command line to run as the managed process",
    )
    parser.add_argument(
        "-n",
        "--cycles",
        "--test-cycles",
        dest="cycles",
        metavar="N",
        type=_cycles,
        default=defaults.cycles,
        help="run N poll ticks, then stop the managed process and exit; "
        "omit to run until SIGTERM/SIGINT",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="YAML config file with 'supervisor' and 'logging' sections",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LogConstants.LEVEL_NAMES),
        help="log level (overrides the config file)",
    )
    parser.add_argument(
        "--version", action="version", version=f"{PROG} {__version__}"
    )
    return parser


def _load_file_config(
    argv: Sequence[str] | None,
) -> tuple[dict[str, Any], argparse.ArgumentParser]:
    """Pre-parse --config so the file's settings become option defaults."""
    pre = argparse.ArgumentParser(prog=PROG, add_help=False)
    pre.add_argument("--config")
    known, _ = pre.parse_known_args(argv)
    if known.config is None:
        return {}, pre
    try:
        raw = load_config(known.config)
    except ConfigError as e:
        pre.error(str(e))
    return raw, pre


def parse_args(
    argv: Sequence[str] | None = None,
) -> tuple[SupervisorConfig, LogConfig]:
    """
    Parse command-line arguments into supervisor and logging settings.

    Exits with status 2 on invalid arguments or config, and with status 0
    after printing --help.
    """
    raw, pre = _load_file_config(argv)
    try:
        defaults = SupervisorConfig.from_config(raw)
        log_config = LogConfig.from_config(raw)
    except (ConfigError, LogError) as e:
        pre.error(str(e))

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    try:
        config = defaults.replace(
            trigger_file=args.trigger_file,
            command=args.command,
            cycles=args.cycles,
        )
    except ConfigError as e:
        parser.error(str(e))

    if args.log_level is not None:
        log_config = LogConfig.from_params(
            args.log_level, micros=log_config.micros, colors=log_config.colors
        )
    return config, log_config


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the supervisor.

    Returns:
        Process exit code
    """
    config, log_config = parse_args(argv)
    lg = quick_console_logger(PROG, log_config)

    controller = LifecycleController(
        SupervisorState(),
        lg,
        grace_period=config.grace_period,
        grace_poll=config.grace_poll,
    )
    loop = PollLoop(config, controller, lg)
    loop.run()

    if loop.stop_signal is not None:
        return 128 + loop.stop_signal
    return 0


def cli() -> None:
    sys.exit(main())
