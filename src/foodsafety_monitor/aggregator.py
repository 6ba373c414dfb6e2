"""Aggregator orchestrating all media collectors."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from .collector import BaseCollector
from .config import MonitorConfig
from .dedup import deduplicate_and_merge
from .http_client import HTTPClient
from .logging_config import get_logger
from .models import (
    SEVERITY_RANK,
    AggregationResult,
    CollectionResult,
    CollectorError,
    CollectorStats,
    FetchOptions,
    MediaItem,
)
from .sources import build_collectors

logger = get_logger("aggregator")


def sort_items(items: Sequence[MediaItem]) -> List[MediaItem]:
    """Sort newest first; undated items last; high severity first on ties."""
    by_severity = sorted(items, key=lambda item: -SEVERITY_RANK.get(item.severity, 1))
    return sorted(by_severity, key=lambda item: item.date or "", reverse=True)


class MediaAggregator:
    """Runs collectors concurrently and merges their output.

    Each collector is isolated: a collector that fails, or even raises
    past its own error handling, contributes an empty list and an error
    entry instead of aborting the aggregate fetch.
    """

    def __init__(self, collectors: Optional[List[BaseCollector]] = None) -> None:
        self.collectors = collectors or []

    def register(self, collector: BaseCollector) -> None:
        if collector not in self.collectors:
            self.collectors.append(collector)
            logger.info("Registered collector: %s", collector.name)

    async def collect_all(self, options: Optional[FetchOptions] = None) -> AggregationResult:
        """Fetch from every enabled collector, then deduplicate and sort."""
        options = options or FetchOptions()
        active = [collector for collector in self.collectors if collector.enabled]

        if not active:
            logger.warning("No active collectors to run")
            return AggregationResult(items=[], raw_item_count=0)

        results = await self._collect_concurrent(active, options)

        raw_items: List[MediaItem] = []
        errors: List[CollectorError] = []
        stats = {}
        success = True
        for result in results:
            raw_items.extend(result.items)
            stats[result.collector_name] = result.stats
            errors.extend(result.stats.errors)
            if result.success:
                logger.info("%s: %s items", result.collector_name, result.item_count)
            else:
                success = False
                logger.warning("%s: FAILED - %s", result.collector_name, result.error_message)

        logger.info("Total raw items: %s", len(raw_items))
        merged = deduplicate_and_merge(raw_items)
        logger.info("After dedup: %s unique items", len(merged))

        items = [replace(item, dedup_key=None) for item in sort_items(merged)]

        if errors:
            logger.warning("Collection had %s errors", len(errors))
            for error in errors[:10]:
                logger.warning("  - %s: %s - %s", error.collector_name, error.error_type, error.message)
            if len(errors) > 10:
                logger.warning("  ... and %s more errors", len(errors) - 10)

        return AggregationResult(
            items=items,
            raw_item_count=len(raw_items),
            stats=stats,
            errors=errors,
            success=success,
        )

    async def fetch_all(self, options: Optional[FetchOptions] = None) -> List[MediaItem]:
        result = await self.collect_all(options)
        return result.items

    async def _collect_concurrent(
        self,
        collectors: List[BaseCollector],
        options: FetchOptions,
    ) -> List[CollectionResult]:
        results = await asyncio.gather(
            *(collector.collect(options) for collector in collectors),
            return_exceptions=True,
        )

        processed: List[CollectionResult] = []
        for collector, result in zip(collectors, results):
            if isinstance(result, Exception):
                logger.error("Collector %s raised exception: %s", collector.name, result)
                now = datetime.now(timezone.utc)
                stats = CollectorStats(collector_name=collector.name, started_at=now, completed_at=now)
                stats.add_error(
                    CollectorError(
                        collector_name=collector.name,
                        error_type=type(result).__name__,
                        message=str(result),
                    )
                )
                processed.append(
                    CollectionResult(
                        collector_name=collector.name,
                        items=[],
                        stats=stats,
                        success=False,
                        error_message=str(result),
                    )
                )
            else:
                processed.append(result)
        return processed


async def fetch_all(
    options: Optional[FetchOptions] = None,
    *,
    enabled_sources: Optional[Iterable[str]] = None,
    config: Optional[MonitorConfig] = None,
    http_client: Optional[HTTPClient] = None,
) -> List[MediaItem]:
    """Fetch, merge and sort items from the enabled media sources.

    Without ``days`` or ``since`` the configured default window (one day
    unless configured otherwise) is used for every source.
    """
    config = config or MonitorConfig.defaults()
    options = options or FetchOptions()
    if options.days is None and options.since is None:
        options = FetchOptions(days=config.default_days)

    http_client = http_client or HTTPClient(config.http_config())
    collectors = build_collectors(http_client, config=config, enabled_sources=enabled_sources)
    return await MediaAggregator(collectors).fetch_all(options)
