"""
CLI commands for backlog reads: controls, work items and readiness trends.

Usage:
    rave controls --service-id checkout-api --status PROPOSED
    rave work --type REMEDIATION --format json
    rave trends --days-back 7
"""

from __future__ import annotations

import argparse
from typing import Any

from ravegraph.app import App
from ravegraph.cli.dashboard import TREND_SYMBOLS
from ravegraph.cli.helpers import drop_none, run_with_app
from ravegraph.cli.ux import print_json, print_table
from ravegraph.domain.models import (
    ControlStatus,
    ControlType,
    Priority,
    WorkStatus,
    WorkType,
)


def controls_command(output_format: str = "table", **filters: Any) -> int:
    async def action(app: App):
        return await app.controls.list_controls(drop_none(**filters))

    controls = run_with_app(action)
    if output_format == "json":
        print_json(controls)
        return 0

    print_table(
        f"Controls ({len(controls)})",
        ["ID", "Type", "Priority", "Status", "Service", "Incident", "Title"],
        [
            [c.id, c.control_type, c.priority, c.status, c.service_id, c.incident_id, c.title]
            for c in controls
        ],
    )
    return 0


def work_command(output_format: str = "table", **filters: Any) -> int:
    async def action(app: App):
        return await app.work_items.list_work_items(drop_none(**filters))

    items = run_with_app(action)
    if output_format == "json":
        print_json(items)
        return 0

    print_table(
        f"Work Items ({len(items)})",
        ["ID", "Type", "Status", "Service", "Control", "External", "Title"],
        [
            [
                w.id,
                w.work_type,
                w.status,
                w.service_id,
                w.control_id,
                f"{w.external_system}:{w.external_id}" if w.external_id else None,
                w.title,
            ]
            for w in items
        ],
    )
    return 0


def trends_command(output_format: str = "table", **filters: Any) -> int:
    async def action(app: App):
        return await app.readiness.get_trends(drop_none(**filters))

    trends = run_with_app(action)
    if output_format == "json":
        print_json(trends)
        return 0

    print_table(
        "Readiness Trends",
        ["Service", "Current", "Previous", "Trend", "Samples"],
        [
            [
                t.service_name,
                f"{t.current_score:.1f}",
                None if t.previous_score is None else f"{t.previous_score:.1f}",
                TREND_SYMBOLS[t.trend],
                len(t.scores),
            ]
            for t in trends
        ],
    )
    return 0


def _add_format_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def register_backlog_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register controls, work and trends subcommand parsers."""
    controls = subparsers.add_parser("controls", help="List resilience controls")
    controls.add_argument("--service-id", help="Filter by service")
    controls.add_argument("--status", choices=[s.value for s in ControlStatus])
    controls.add_argument("--priority", choices=[p.value for p in Priority])
    controls.add_argument(
        "--type", dest="control_type", choices=[t.value for t in ControlType]
    )
    controls.add_argument("--incident-id", type=int, help="Filter by originating incident")
    _add_format_argument(controls)

    work = subparsers.add_parser("work", help="List incident-derived work items")
    work.add_argument("--service-id", help="Filter by service")
    work.add_argument("--status", choices=[s.value for s in WorkStatus])
    work.add_argument("--type", dest="work_type", choices=[t.value for t in WorkType])
    work.add_argument("--control-id", type=int, help="Filter by control")
    work.add_argument("--incident-id", type=int, help="Filter by originating incident")
    _add_format_argument(work)

    trends = subparsers.add_parser("trends", help="Show readiness trends per service")
    trends.add_argument("--service-id", help="Filter by service")
    trends.add_argument("--days-back", type=int, help="History window in days (default: 30)")
    _add_format_argument(trends)


def handle_controls_command(args: argparse.Namespace) -> int:
    return controls_command(
        output_format=args.output_format,
        service_id=args.service_id,
        status=args.status,
        priority=args.priority,
        control_type=args.control_type,
        incident_id=args.incident_id,
    )


def handle_work_command(args: argparse.Namespace) -> int:
    return work_command(
        output_format=args.output_format,
        service_id=args.service_id,
        status=args.status,
        work_type=args.work_type,
        control_id=args.control_id,
        incident_id=args.incident_id,
    )


def handle_trends_command(args: argparse.Namespace) -> int:
    return trends_command(
        output_format=args.output_format,
        service_id=args.service_id,
        days_back=args.days_back,
    )
