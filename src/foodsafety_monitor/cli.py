"""Command-line entry point for the food-safety media pipeline.

Usage:
    foodsafety-monitor all [--days N] [--since YYYY-MM-DD] [--sources all|fsn,fda,...]
    foodsafety-monitor fsn|fsm|fda|fsis|cdc [--days N] [--since YYYY-MM-DD]
    foodsafety-monitor fda --limit 50
    foodsafety-monitor fsm --topics 305,306

The JSON list of media items is written to stdout; diagnostics go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .aggregator import fetch_all
from .config import ALL_SOURCES, MonitorConfig
from .http_client import HTTPClient
from .logging_config import get_logger, setup_logging
from .models import FetchOptions, MediaItem
from .sources import COLLECTOR_REGISTRY

logger = get_logger("cli")


def _since_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def _integer(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer {value!r}") from exc


def _non_negative_int(value: str) -> int:
    number = _integer(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {number}")
    return number


def _positive_int(value: str) -> int:
    number = _integer(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def _source_list(value: str) -> Optional[List[str]]:
    if value.strip().lower() == "all":
        return None
    sources = [part.strip() for part in value.split(",") if part.strip()]
    unknown = [source for source in sources if source not in ALL_SOURCES]
    if unknown:
        raise argparse.ArgumentTypeError(
            f"unknown source(s): {', '.join(unknown)}; choose from {', '.join(ALL_SOURCES)}"
        )
    return sources


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--days", type=_non_negative_int, help="Look back N days")
    common.add_argument("--since", type=_since_date, help="Only items on or after YYYY-MM-DD (overrides --days)")

    parser = argparse.ArgumentParser(
        prog="foodsafety-monitor",
        description="Fetch, normalize and merge food-safety news, recalls and outbreak reports",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=MonitorConfig.DEFAULT_CONFIG_PATH,
        help="Path to the sources configuration file",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    all_parser = subparsers.add_parser("all", parents=[common], help="All sources, deduplicated and merged")
    all_parser.add_argument(
        "--sources",
        type=_source_list,
        default=None,
        help="Comma separated source keys or 'all' (default: all)",
    )

    subparsers.add_parser("fsn", parents=[common], help="Food Safety News RSS")
    fsm_parser = subparsers.add_parser("fsm", parents=[common], help="Food Safety Magazine topic feeds")
    fsm_parser.add_argument("--topics", help="Comma separated topic ids, e.g. 305,306")
    fda_parser = subparsers.add_parser("fda", parents=[common], help="openFDA food recalls")
    fda_parser.add_argument("--limit", type=_positive_int, help="Maximum number of recalls")
    subparsers.add_parser("fsis", parents=[common], help="USDA FSIS recalls with openFDA fallback")
    subparsers.add_parser("cdc", parents=[common], help="CDC outbreak investigations")

    return parser


def _collector_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if getattr(args, "limit", None) is not None:
        overrides["limit"] = args.limit
    if getattr(args, "topics", None):
        overrides["topics"] = [topic.strip() for topic in args.topics.split(",") if topic.strip()]
    return overrides


async def run(args: argparse.Namespace, config: MonitorConfig) -> List[MediaItem]:
    options = FetchOptions(days=args.days, since=args.since)

    if args.command == "all":
        return await fetch_all(options, enabled_sources=args.sources, config=config)

    collector_cls = COLLECTOR_REGISTRY[args.command]
    kwargs = {**config.source_options(args.command), **_collector_overrides(args)}
    collector = collector_cls(HTTPClient(config.http_config()), **kwargs)
    items = await collector.fetch(options)
    return [replace(item, dedup_key=None) for item in items]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(level, int):
        parser.error(f"invalid log level: {args.log_level}")
    setup_logging(log_file=args.log_file, level=level)

    config = MonitorConfig(args.config)
    if config.config_path.exists():
        logger.info("Loaded configuration from %s", config.config_path)

    items = asyncio.run(run(args, config))
    json.dump([item.to_dict() for item in items], sys.stdout, indent=2, ensure_ascii=False)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
