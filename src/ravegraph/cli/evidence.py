"""
CLI commands for the evidence ledger.

Usage:
    rave evidence add --service-id checkout-api --type MONITORING \\
        --source prometheus --confidence 80 --tag slo --ttl-hours 24 \\
        --body '{"availability": 99.95}'
    rave evidence get 12
    rave evidence search --service-id checkout-api --tag slo --fresh-only
    rave evidence delete 12
"""

from __future__ import annotations

import argparse
from typing import Any

from ravegraph.app import App
from ravegraph.cli.helpers import drop_none, parse_json_object, run_with_app
from ravegraph.cli.ux import print_json, print_table, success
from ravegraph.domain.models import EvidenceItem, EvidenceType


def evidence_add_command(body: str = "{}", tags: list[str] | None = None, **fields: Any) -> int:
    data = drop_none(**fields)
    data["body"] = parse_json_object(body, "--body")
    data["tags"] = tags or []

    async def action(app: App) -> EvidenceItem:
        return await app.evidence.upsert_evidence(data)

    item = run_with_app(action)
    success(f"{'Updated' if 'id' in data else 'Added'} evidence {item.id}")
    print_json(item)
    return 0


def evidence_get_command(evidence_id: int) -> int:
    async def action(app: App) -> EvidenceItem:
        return await app.evidence.get_evidence(evidence_id)

    print_json(run_with_app(action))
    return 0


def evidence_search_command(output_format: str = "table", **filters: Any) -> int:
    async def action(app: App) -> list[EvidenceItem]:
        return await app.evidence.search_evidence(drop_none(**filters))

    items = run_with_app(action)
    if output_format == "json":
        print_json(items)
        return 0

    print_table(
        f"Evidence ({len(items)})",
        ["ID", "Service", "Type", "Source", "Tags", "Confidence", "Collected", "Fresh"],
        [
            [
                e.id,
                e.service_id,
                e.evidence_type,
                e.source,
                ", ".join(e.tags),
                e.confidence,
                e.collected_at.isoformat(timespec="seconds"),
                "yes" if e.is_fresh() else "[red]expired[/red]",
            ]
            for e in items
        ],
    )
    return 0


def evidence_delete_command(evidence_id: int) -> int:
    async def action(app: App) -> None:
        await app.evidence.delete_evidence(evidence_id)

    run_with_app(action)
    success(f"Deleted evidence {evidence_id}")
    return 0


def register_evidence_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register evidence subcommand parser."""
    parser = subparsers.add_parser("evidence", help="Manage evidence items")
    evidence_subparsers = parser.add_subparsers(dest="evidence_command")

    add = evidence_subparsers.add_parser("add", help="Add evidence, or replace it with --id")
    add.add_argument("--id", type=int, help="Existing evidence id to replace")
    add.add_argument("--service-id", required=True)
    add.add_argument(
        "--type", dest="evidence_type", required=True, choices=[t.value for t in EvidenceType]
    )
    add.add_argument("--source", required=True, help="Where the evidence came from")
    add.add_argument("--body", default="{}", help="JSON object payload")
    add.add_argument("--tag", dest="tags", action="append", help="Tag (repeatable)")
    add.add_argument("--confidence", type=int, required=True, help="0-100")
    add.add_argument("--ttl-hours", type=int, help="Hours until the evidence expires")
    add.add_argument("--collected-at", help="ISO-8601 timestamp (default: now)")

    get = evidence_subparsers.add_parser("get", help="Show one evidence item")
    get.add_argument("evidence_id", type=int)

    search = evidence_subparsers.add_parser("search", help="Search evidence")
    search.add_argument("--service-id")
    search.add_argument("--type", dest="evidence_type", choices=[t.value for t in EvidenceType])
    search.add_argument("--tag", dest="tags", action="append", help="Match any of these tags")
    search.add_argument("--fresh-only", action="store_true", help="Hide expired evidence")
    search.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
    )

    delete = evidence_subparsers.add_parser("delete", help="Delete an evidence item")
    delete.add_argument("evidence_id", type=int)


def handle_evidence_command(args: argparse.Namespace) -> int:
    """Handle evidence command from CLI args."""
    command = getattr(args, "evidence_command", None)
    if command == "add":
        return evidence_add_command(
            body=args.body,
            tags=args.tags,
            id=args.id,
            service_id=args.service_id,
            evidence_type=args.evidence_type,
            source=args.source,
            confidence=args.confidence,
            ttl_hours=args.ttl_hours,
            collected_at=args.collected_at,
        )
    if command == "get":
        return evidence_get_command(args.evidence_id)
    if command == "search":
        return evidence_search_command(
            output_format=args.output_format,
            service_id=args.service_id,
            evidence_type=args.evidence_type,
            tags=args.tags,
            fresh_only=args.fresh_only,
        )
    if command == "delete":
        return evidence_delete_command(args.evidence_id)
    print("Usage: rave evidence {add,get,search,delete}")
    return 1
