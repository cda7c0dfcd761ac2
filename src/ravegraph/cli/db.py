"""
CLI commands for store housekeeping.

Usage:
    rave db check    # Can we reach the store?
    rave db init     # Create missing tables (local and test stores)

Production schemas are managed with alembic (``alembic upgrade head``).
"""

from __future__ import annotations

import argparse

from ravegraph.app import App
from ravegraph.cli.helpers import run_with_app
from ravegraph.cli.ux import error, success
from ravegraph.core.errors import ExitCode


def db_check_command() -> int:
    async def action(app: App) -> bool:
        return await app.database.ping()

    if run_with_app(action, check_store=False):
        success("Store is reachable")
        return 0
    error("Cannot reach the store. Check RAVEGRAPH_DATABASE_URL and that the database is running.")
    return ExitCode.DATABASE_ERROR


def db_init_command() -> int:
    async def action(app: App) -> None:
        await app.database.create_schema()

    run_with_app(action)
    success("Schema created")
    return 0


def register_db_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register db subcommand parser."""
    parser = subparsers.add_parser("db", help="Store housekeeping")
    db_subparsers = parser.add_subparsers(dest="db_command")
    db_subparsers.add_parser("check", help="Check store connectivity")
    db_subparsers.add_parser("init", help="Create missing tables")


def handle_db_command(args: argparse.Namespace) -> int:
    command = getattr(args, "db_command", None)
    if command == "check":
        return db_check_command()
    if command == "init":
        return db_init_command()
    print("Usage: rave db {check,init}")
    return 1
