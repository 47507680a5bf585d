"""Admin CLI for the analytics report and the feedback board.

Usage::

    python -m toolbench.cli analytics --days 14
    python -m toolbench.cli analytics --json
    python -m toolbench.cli feedback list --status new
    python -m toolbench.cli feedback set-status 3f2c... done --note "shipped"

Logging is raised to WARNING and written to stderr, so stdout carries only
command output (the JSON report stays machine-readable).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from toolbench.config.settings import Settings
from toolbench.interfaces.feedback_provider import IFeedbackProvider
from toolbench.models.feedback import FeedbackStatus
from toolbench.providers.storage import build_blob_store, build_feedback_provider
from toolbench.services.analytics_service import AnalyticsService, clamp_days
from toolbench.utils.errors import ToolbenchError
from toolbench.utils.logging import configure_logging

_STATUSES = [status.value for status in FeedbackStatus]


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_analytics(args: argparse.Namespace, analytics: AnalyticsService) -> int:
    report = await analytics.build_report(clamp_days(args.days))

    if args.json:
        print(json.dumps(report.model_dump(by_alias=True, mode="json"), indent=2))
        return 0

    summary = report.summary
    print(f"Usage over the last {summary.days} day(s)")
    print("=" * 40)
    print(f"  API calls:       {summary.total_api_calls}")
    print(f"  Page views:      {summary.total_page_views}")
    print(f"  Provider calls:  {summary.total_provider_calls}")
    print(f"  Unique users:    {summary.unique_users}")

    if report.tool_usage:
        print("\n  Tool usage:")
        for key, counter in sorted(report.tool_usage.items(), key=lambda kv: -kv[1].total):
            print(f"    {key:<40} {counter.total}")

    if report.provider_usage:
        print("\n  Provider usage:")
        for key, counter in sorted(report.provider_usage.items(), key=lambda kv: -kv[1].total):
            print(f"    {key:<40} {counter.total}")

    return 0


async def _handle_feedback_list(args: argparse.Namespace, feedback: IFeedbackProvider) -> int:
    items = await feedback.list_items()
    if args.status:
        items = [item for item in items if item.status == args.status]

    if not items:
        print("No feedback items.")
        return 0

    for item in items:
        print(f"{item.id}  [{item.status}] {item.type}: {item.title}")
        print(f"    tool={item.tool}  by={item.submitted_by}  created={item.created_at}")
        if item.admin_note:
            print(f"    note: {item.admin_note}")
    return 0


async def _handle_feedback_set_status(args: argparse.Namespace, feedback: IFeedbackProvider) -> int:
    updated = await feedback.update_item(args.id, status=args.status, admin_note=args.note)
    if updated is None:
        print(f"Error: feedback item {args.id} not found", file=sys.stderr)
        return 1

    print(f"{updated.id} -> {updated.status}")
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m toolbench.cli",
        description="Inspect toolbench usage analytics and triage feedback.",
    )
    subparsers = parser.add_subparsers(dest="command")

    analytics_parser = subparsers.add_parser("analytics", help="Print the usage report")
    analytics_parser.add_argument("--days", type=int, default=7, help="Days to include (1-30)")
    analytics_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    feedback_parser = subparsers.add_parser("feedback", help="Feedback board commands")
    feedback_sub = feedback_parser.add_subparsers(dest="feedback_command")

    list_parser = feedback_sub.add_parser("list", help="List feedback items, newest first")
    list_parser.add_argument("--status", choices=_STATUSES, help="Only show items with this status")

    status_parser = feedback_sub.add_parser("set-status", help="Change an item's status")
    status_parser.add_argument("id", help="Feedback item ID")
    status_parser.add_argument("status", choices=_STATUSES)
    status_parser.add_argument("--note", default=None, help="Admin note to attach")

    return parser


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    blob_store = build_blob_store(app_settings)

    if args.command == "analytics":
        return await _handle_analytics(args, AnalyticsService(blob_store=blob_store))

    feedback = build_feedback_provider(app_settings, blob_store)
    await feedback.initialize()
    if args.feedback_command == "list":
        return await _handle_feedback_list(args, feedback)
    return await _handle_feedback_set_status(args, feedback)


def main(argv: list[str] | None = None, app_settings: Settings | None = None) -> int:
    """Parse *argv*, run the command and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None or (args.command == "feedback" and args.feedback_command is None):
        parser.print_help()
        return 1

    app_settings = app_settings or Settings()
    configure_logging(log_level="WARNING", json_output=False, stream=sys.stderr)

    try:
        return asyncio.run(_run(args, app_settings))
    except ToolbenchError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
