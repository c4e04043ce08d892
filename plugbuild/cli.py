"""CLI entrypoint for plugbuild."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import default_config
from .logging import configure_logging, get_logger
from .orchestrator import Orchestrator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugbuild",
        description="Bundle every JavaScript plugin under js/src into a standalone UMD file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root containing js/src (defaults to current directory).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Build all plugins and exit non-zero if any of them fails."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        config = default_config(args.path)
        report = Orchestrator().run(config)
    except Exception as exc:
        logger.error("Build failed", exc_info=exc)
        parser.exit(1, f"plugbuild failed: {exc}\n")

    print(f"[{parser.prog}] finished: {report.elapsed:.3f}s")


if __name__ == "__main__":
    main(sys.argv[1:])
