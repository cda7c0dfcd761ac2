"""
CLI commands for claims.

Usage:
    rave claim add --service-id checkout-api --title "Alerts page on-call" \\
        --section monitoring --status PASS --confidence 70 --evidence-id 12
    rave claim get 3
    rave claim link 3 12 14
    rave claim unlink 3 14
    rave claim delete 3
    rave claims --service-id checkout-api --status FAIL
"""

from __future__ import annotations

import argparse
from typing import Any

from ravegraph.app import App
from ravegraph.cli.helpers import drop_none, run_with_app
from ravegraph.cli.ux import print_json, print_table, success
from ravegraph.domain.models import Claim, ClaimStatus, ClaimWithEvidence


def claim_add_command(**fields: Any) -> int:
    data = drop_none(**fields)

    async def action(app: App) -> Claim:
        return await app.claims.upsert_claim(data)

    claim = run_with_app(action)
    success(f"{'Updated' if 'id' in data else 'Added'} claim {claim.id}")
    print_json(claim)
    return 0


def claim_get_command(claim_id: int) -> int:
    async def action(app: App) -> ClaimWithEvidence:
        return await app.claims.get_claim(claim_id)

    print_json(run_with_app(action))
    return 0


def claim_link_command(claim_id: int, evidence_ids: list[int], unlink: bool = False) -> int:
    async def action(app: App) -> None:
        if unlink:
            await app.claims.unlink_evidence(claim_id, evidence_ids)
        else:
            await app.claims.link_evidence(claim_id, evidence_ids)

    run_with_app(action)
    verb = "Unlinked" if unlink else "Linked"
    success(f"{verb} evidence {', '.join(map(str, evidence_ids))} on claim {claim_id}")
    return 0


def claim_delete_command(claim_id: int) -> int:
    async def action(app: App) -> None:
        await app.claims.delete_claim(claim_id)

    run_with_app(action)
    success(f"Deleted claim {claim_id}")
    return 0


def claims_command(output_format: str = "table", **filters: Any) -> int:
    async def action(app: App) -> list[Claim]:
        return await app.claims.list_claims(drop_none(**filters))

    claims = run_with_app(action)
    if output_format == "json":
        print_json(claims)
        return 0

    print_table(
        f"Claims ({len(claims)})",
        ["ID", "Service", "Section", "Status", "Confidence", "Title"],
        [[c.id, c.service_id, c.section, c.status, c.confidence, c.title] for c in claims],
    )
    return 0


def register_claim_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register claim and claims subcommand parsers."""
    parser = subparsers.add_parser("claim", help="Manage claims")
    claim_subparsers = parser.add_subparsers(dest="claim_command")

    add = claim_subparsers.add_parser("add", help="Add a claim, or replace it with --id")
    add.add_argument("--id", type=int, help="Existing claim id to replace")
    add.add_argument("--service-id", required=True)
    add.add_argument("--title", required=True)
    add.add_argument("--section", required=True, help="Readiness section the claim covers")
    add.add_argument("--status", choices=[s.value for s in ClaimStatus])
    add.add_argument("--confidence", type=int, help="0-100 (default: 0)")
    add.add_argument("--reason")
    add.add_argument(
        "--evidence-id",
        dest="evidence_ids",
        type=int,
        action="append",
        help="Supporting evidence id (repeatable; on update replaces existing links)",
    )

    get = claim_subparsers.add_parser("get", help="Show a claim with its evidence")
    get.add_argument("claim_id", type=int)

    delete = claim_subparsers.add_parser("delete", help="Delete a claim")
    delete.add_argument("claim_id", type=int)

    for name, help_text in (("link", "Link evidence to a claim"), ("unlink", "Unlink evidence")):
        link = claim_subparsers.add_parser(name, help=help_text)
        link.add_argument("claim_id", type=int)
        link.add_argument("evidence_ids", type=int, nargs="+")

    claims = subparsers.add_parser("claims", help="List claims")
    claims.add_argument("--service-id")
    claims.add_argument("--section")
    claims.add_argument("--status", choices=[s.value for s in ClaimStatus])
    claims.add_argument(
        "--format",
        "-f",
        dest="output_format",
        choices=["table", "json"],
        default="table",
    )


def handle_claim_command(args: argparse.Namespace) -> int:
    """Handle claim command from CLI args."""
    command = getattr(args, "claim_command", None)
    if command == "add":
        return claim_add_command(
            id=args.id,
            service_id=args.service_id,
            title=args.title,
            section=args.section,
            status=args.status,
            confidence=args.confidence,
            reason=args.reason,
            evidence_ids=args.evidence_ids,
        )
    if command == "get":
        return claim_get_command(args.claim_id)
    if command == "delete":
        return claim_delete_command(args.claim_id)
    if command in ("link", "unlink"):
        return claim_link_command(args.claim_id, args.evidence_ids, unlink=command == "unlink")
    print("Usage: rave claim {add,get,delete,link,unlink}")
    return 1


def handle_claims_command(args: argparse.Namespace) -> int:
    return claims_command(
        output_format=args.output_format,
        service_id=args.service_id,
        section=args.section,
        status=args.status,
    )
