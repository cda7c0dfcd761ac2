"""
Entry point for the ``rave`` command.

Subcommands register themselves through ``register_*_parser`` functions and
are dispatched to ``handle_*_command`` functions returning an exit code.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

import pydantic

from ravegraph import __version__
from ravegraph.cli.backlog import (
    handle_controls_command,
    handle_trends_command,
    handle_work_command,
    register_backlog_parsers,
)
from ravegraph.cli.claims import handle_claim_command, handle_claims_command, register_claim_parsers
from ravegraph.cli.dashboard import handle_dashboard_command, register_dashboard_parser
from ravegraph.cli.db import handle_db_command, register_db_parser
from ravegraph.cli.evidence import handle_evidence_command, register_evidence_parser
from ravegraph.config import get_settings
from ravegraph.core.errors import ConfigurationError, main_with_error_handling
from ravegraph.logging import configure_logging

HANDLERS: dict[str, Callable[[argparse.Namespace], int]] = {
    "dashboard": handle_dashboard_command,
    "controls": handle_controls_command,
    "work": handle_work_command,
    "trends": handle_trends_command,
    "evidence": handle_evidence_command,
    "claim": handle_claim_command,
    "claims": handle_claims_command,
    "db": handle_db_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rave", description="Ravegraph work dashboard CLI")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        help="Log level (default: RAVEGRAPH_LOG_LEVEL, or warning for the CLI)",
    )
    subparsers = parser.add_subparsers(dest="command")

    register_dashboard_parser(subparsers)
    register_backlog_parsers(subparsers)
    register_evidence_parser(subparsers)
    register_claim_parsers(subparsers)
    register_db_parser(subparsers)

    return parser


@main_with_error_handling()
def run(args: argparse.Namespace) -> int:
    try:
        settings = get_settings()
    except pydantic.ValidationError as exc:
        raise ConfigurationError(f"invalid RAVEGRAPH_ settings: {exc}") from exc

    # Keep the terminal quiet unless asked; the tool server logs at the configured level.
    configure_logging(args.log_level or "warning", fmt=settings.log_format)
    return HANDLERS[args.command](args)


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
