"""
Command line entry point.

Usage::

    python -m nse_converter --source-dir=<vendor files> --destination-dir=<data folder>

When either directory is left blank both are prompted for interactively.
"""

import argparse
import sys
from pathlib import Path
from typing import Callable, Optional

from .config.loader import ConfigLoader
from .converter import convert_directory
from .errors import ConfigurationError, DataQualityError, SystemFailureError
from .logging.config import configure_logging, get_logger

logger = get_logger(__name__)

BANNER = """\
NSE Converter: intraday bar converter
==============================================
Transforms vendor 1-minute text files into the LEAN data format.
Parameters required: --source-dir= --destination-dir=
   1> Source directory of the unzipped vendor files.
   2> Destination LEAN data folder (typically Lean/Data).

NOTE: THIS WILL OVERWRITE ANY EXISTING FILES.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nse_converter",
        description="Convert vendor intraday bar files into the LEAN data layout.",
    )
    parser.add_argument("--source-dir", default="", help="Directory of vendor .txt files")
    parser.add_argument("--destination-dir", default="", help="Root of the LEAN data folder")
    parser.add_argument("--config-dir", type=Path, default=None,
                        help="Directory holding converter.yaml (default: the project config folder, else ./config)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR or CRITICAL")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines")
    return parser


def prompt_directories(input_fn: Callable[[str], str] = input) -> tuple[str, str]:
    """Ask the operator for both directories; end of input counts as blank."""
    try:
        source_dir = input_fn("1. Source NSE source directory: ").strip()
        destination_dir = input_fn("2. Destination LEAN Data directory: ").strip()
    except EOFError:
        return "", ""
    return source_dir, destination_dir


def _cli_overrides(args: argparse.Namespace) -> dict:
    logging_overrides = {}
    if args.log_level:
        logging_overrides["level"] = args.log_level
    if args.json_logs:
        logging_overrides["format_json"] = True
    return {"logging": logging_overrides} if logging_overrides else {}


def main(argv: Optional[list[str]] = None, input_fn: Callable[[str], str] = input) -> int:
    """Run the converter; returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader.create(args.config_dir).load(_cli_overrides(args))
    except ConfigurationError as e:
        configure_logging()
        logger.error("Invalid configuration", parameter=e.parameter, error=str(e))
        return 1

    configure_logging(level=config.logging.level, format_json=config.logging.format_json)
    print(BANNER)

    source_dir, destination_dir = args.source_dir, args.destination_dir
    if not source_dir.strip() or not destination_dir.strip():
        source_dir, destination_dir = prompt_directories(input_fn)

    try:
        convert_directory(source_dir, destination_dir, config=config)
    except (ConfigurationError, DataQualityError, SystemFailureError):
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
