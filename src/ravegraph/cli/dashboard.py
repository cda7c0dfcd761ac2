"""
CLI command for the work dashboard.

Usage:
    rave dashboard                   # All services
    rave dashboard checkout-api      # One service
    rave dashboard --format json     # Wire format
"""

from __future__ import annotations

import argparse

from ravegraph.app import App
from ravegraph.cli.helpers import drop_none, run_with_app
from ravegraph.cli.ux import console, header, print_counts, print_json, print_table
from ravegraph.domain.models import TrendDirection, WorkDashboard

TREND_SYMBOLS = {
    TrendDirection.IMPROVING: "[green]↑ improving[/green]",
    TrendDirection.DECLINING: "[red]↓ declining[/red]",
    TrendDirection.STABLE: "→ stable",
    TrendDirection.NEW: "[cyan]new[/cyan]",
}


def dashboard_command(service_id: str | None = None, output_format: str = "table") -> int:
    """
    Show the work dashboard.

    Args:
        service_id: Restrict every section to one service
        output_format: "table" or "json"

    Returns:
        Exit code (0 for success)
    """

    async def action(app: App) -> WorkDashboard:
        return await app.dashboard.get_dashboard(drop_none(service_id=service_id))

    dashboard = run_with_app(action)

    if output_format == "json":
        print_json(dashboard)
    else:
        _print_text(dashboard, service_id)
    return 0


def _print_text(dashboard: WorkDashboard, service_id: str | None) -> None:
    header(f"Work Dashboard: {service_id}" if service_id else "Work Dashboard")

    summary = dashboard.summary
    console.print(
        f"Controls: [bold]{summary.total_controls}[/bold]  "
        f"Work items: [bold]{summary.total_work_items}[/bold]  "
        f"Services tracked: [bold]{summary.services_tracked}[/bold]  "
        f"Avg readiness: [bold]{summary.avg_readiness_score:.1f}[/bold]"
    )
    console.print()

    backlog = dashboard.resilience_backlog
    print_table(
        "Resilience Backlog",
        ["ID", "Type", "Priority", "Status", "Service", "Title"],
        [
            [c.id, c.control_type, c.priority, c.status, c.service_id, c.title]
            for c in backlog.controls
        ],
    )
    print_counts("By type", backlog.count_by_type)
    print_counts("By priority", backlog.count_by_priority)
    print_counts("By status", backlog.count_by_status)
    console.print()

    work = dashboard.incident_work
    print_table(
        "Incident Work",
        ["ID", "Type", "Status", "Service", "Assignee", "Title"],
        [
            [w.id, w.work_type, w.status, w.service_id, w.assigned_to, w.title]
            for w in work.work_items
        ],
    )
    print_counts("By status", work.count_by_status)
    print_counts("By type", work.count_by_type)
    console.print()

    print_table(
        "Readiness Trends",
        ["Service", "Current", "Previous", "Trend"],
        [
            [
                t.service_name,
                f"{t.current_score:.1f}",
                None if t.previous_score is None else f"{t.previous_score:.1f}",
                TREND_SYMBOLS[t.trend],
            ]
            for t in dashboard.readiness_trends
        ],
    )


def register_dashboard_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register dashboard subcommand parser."""
    parser = subparsers.add_parser("dashboard", help="Show the work dashboard")
    parser.add_argument("service_id", nargs="?", help="Restrict to one service")
    parser.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )


def handle_dashboard_command(args: argparse.Namespace) -> int:
    """Handle dashboard command from CLI args."""
    return dashboard_command(
        service_id=getattr(args, "service_id", None),
        output_format=getattr(args, "output_format", "table"),
    )
