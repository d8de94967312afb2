"""
Command line entry point for dumpapp
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import TYPE_CHECKING

from dumpapp.adb import stetho_open
from dumpapp.config import LOG_LEVELS
from dumpapp.config import DumpappConfig
from dumpapp.errors import ConfigurationError
from dumpapp.errors import report_error
from dumpapp.session import DumpappSession

if TYPE_CHECKING:
    from collections.abc import Mapping
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Options consumed locally; everything from the first other token on is the
# command and is forwarded untouched, including options such as --help.
_LOCAL_OPTIONS = ("-p", "--process", "--log-level")


def split_local_options(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    local: list[str] = []
    index = 0
    while index < len(argv) and argv[index] in _LOCAL_OPTIONS:
        option = argv[index]
        if index + 1 >= len(argv):
            if option in ("-p", "--process"):
                raise ConfigurationError("Missing <process>", config_key="process")
            raise ConfigurationError(f"Missing value for {option}", config_key=option)
        local.extend(argv[index : index + 2])
        index += 2
    return local, list(argv[index:])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dumpapp",
        description="Run a dumpapp command inside a stetho-enabled Android process",
        add_help=False,
    )
    parser.add_argument(
        "-p",
        "--process",
        type=str,
        help="Process to connect to (default: $STETHO_PROCESS or the only one running)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        metavar="LEVEL",
        help=(
            "Log level for dumpapp's own diagnostics, "
            f"one of {', '.join(LOG_LEVELS)} (default: WARNING)"
        ),
    )
    return parser


def load_config(argv: Sequence[str], environ: Mapping[str, str]) -> tuple[DumpappConfig, list[str]]:
    """Combine the environment and the local options into a config and a command."""
    local, command = split_local_options(argv)
    args = build_parser().parse_args(local)
    config = DumpappConfig.from_environ(environ)
    if args.process is not None:
        config.process = args.process
    if args.log_level is not None:
        config.log_level = args.log_level
    config.validate()
    return config, command


def run(config: DumpappConfig, command: Sequence[str]) -> int:
    """Open the target process and relay ``command``; return its exit status."""
    adb = stetho_open(config.device, config.process, config.port, host=config.host)
    with adb:
        return DumpappSession(adb).run(command)


def main(argv: Sequence[str] | None = None) -> None:
    """
    Main entry point for the dumpapp client
    """
    if argv is None:
        argv = sys.argv[1:]
    # Log to stderr only; stdout carries the remote command's output.
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    try:
        config, command = load_config(argv, os.environ)
        logging.getLogger().setLevel(config.log_level)
        status = run(config, command)
    except KeyboardInterrupt:
        logger.info("dumpapp interrupted by user")
        status = 130
    except Exception as e:
        status = report_error(e, sys.stderr)
    sys.exit(status)
