"""Command-line ingestion tool.

Subcommands::

    humane-logistics ingest --topic "Typhoon Yagi" --start 9/4/2024 --end 11/30/2024 [--analyze]
    humane-logistics rescan --topic "Typhoon Yagi" [--repeat 5]
    humane-logistics stats  --topic "Typhoon Yagi"

``ingest`` without ``--analyze`` is "search only"; with it, every collected
item is enriched before it is saved.  ``rescan`` analyzes items already in
the store, one page per repository per pass, and stops early once a pass
updates nothing and reaches the end of the pending items.  Each command
prints its report as JSON on stdout.

Exit status is 1 when the store cannot be reached or the pipeline is
misconfigured, 0 otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Any, Sequence

import structlog

from humane_logistics.collectors.base import parse_date_bound
from humane_logistics.config.settings import Settings, get_settings
from humane_logistics.core.exceptions import ConfigurationError, RepositoryUnavailableError
from humane_logistics.core.logging_config import configure_logging
from humane_logistics.pipeline.factory import build_orchestrator
from humane_logistics.pipeline.orchestrator import AnalysisOrchestrator

logger = structlog.get_logger(__name__)

DEFAULT_TOPIC = "Typhoon Yagi"
DEFAULT_START = "9/4/2024"
DEFAULT_END = "11/30/2024"


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, default=str, ensure_ascii=False), flush=True)


def _date_arg(value: str) -> datetime:
    parsed = parse_date_bound(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r} (use M/D/YYYY or YYYY-MM-DD)")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="humane-logistics",
        description="Collect, analyze and summarise disaster-response media coverage.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    ingest = subparsers.add_parser("ingest", help="Collect items for a topic and save them.")
    ingest.add_argument("--topic", default=DEFAULT_TOPIC, help="Search topic.")
    ingest.add_argument("--start", type=_date_arg, default=DEFAULT_START, help="Start date, e.g. 9/4/2024.")
    ingest.add_argument("--end", type=_date_arg, default=DEFAULT_END, help="End date, e.g. 11/30/2024.")
    ingest.add_argument(
        "--analyze",
        action="store_true",
        help="Enrich each item before saving (search + analyze).",
    )

    rescan = subparsers.add_parser("rescan", help="Analyze items already in the store.")
    rescan.add_argument("--topic", default=DEFAULT_TOPIC, help="Topic to rescan.")
    rescan.add_argument(
        "--repeat",
        type=int,
        default=1,
        help="Maximum number of passes; stops early once a pass updates nothing and reaches the end.",
    )

    stats = subparsers.add_parser("stats", help="Print the dashboard summary for a topic.")
    stats.add_argument("--topic", default=DEFAULT_TOPIC, help="Topic to summarise.")

    return parser


async def _run_ingest(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> None:
    report = await orchestrator.ingest_cycle(args.topic, args.start, args.end, args.analyze)
    _emit({"command": "ingest", **report.to_dict()})


async def _run_rescan(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> None:
    for pass_number in range(1, max(1, args.repeat) + 1):
        report = await orchestrator.rescan_cycle(args.topic)
        _emit({"command": "rescan", "pass": pass_number, **report.to_dict()})
        if report.cancelled or (report.updated == 0 and not report.more_pending):
            break


async def _run_stats(orchestrator: AnalysisOrchestrator, args: argparse.Namespace) -> None:
    summary = await orchestrator.dashboard_summary(args.topic)
    _emit({"command": "stats", **summary.to_dict()})


_COMMANDS = {
    "ingest": _run_ingest,
    "rescan": _run_rescan,
    "stats": _run_stats,
}


async def run(args: argparse.Namespace, settings: Settings) -> None:
    orchestrator = await build_orchestrator(settings)
    try:
        await _COMMANDS[args.command](orchestrator, args)
    finally:
        await orchestrator.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        asyncio.run(run(args, settings))
    except (RepositoryUnavailableError, ConfigurationError) as exc:
        logger.error("cli: fatal pipeline error", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
