"""Base collector implementation for food-safety media sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .categorization import CategoryClassifier
from .http_client import HTTPClient
from .logging_config import get_logger
from .models import (
    CATEGORIES,
    SEVERITIES,
    CollectionResult,
    CollectorError,
    CollectorStats,
    FetchOptions,
    MediaItem,
)


class BaseCollector(ABC):
    """Abstract base class for all media source collectors.

    ``collect`` is the adapter boundary: any failure raised while collecting
    is logged and turned into an empty, unsuccessful ``CollectionResult`` so
    that one unavailable source never aborts an aggregate fetch.
    """

    #: Short key used on the command line and in configuration.
    source_key: str = ""
    #: Human readable provider name placed in ``MediaItem.sources``.
    source_name: str = ""
    #: Window used when the caller passes neither ``days`` nor ``since``.
    default_days: int = 7

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        classifier: Optional[CategoryClassifier] = None,
        enabled: bool = True,
    ) -> None:
        self.http_client = http_client or HTTPClient()
        self.classifier = classifier or CategoryClassifier()
        self.enabled = enabled
        self.logger = get_logger(self.name)

    @property
    def name(self) -> str:
        return self.source_key or self.__class__.__name__

    async def fetch(self, options: Optional[FetchOptions] = None) -> List[MediaItem]:
        """Fetch normalized items; never raises for operational failures."""
        result = await self.collect(options)
        return result.items

    async def collect(self, options: Optional[FetchOptions] = None) -> CollectionResult:
        """Execute collection and return items together with run stats."""
        options = options or FetchOptions()
        stats = CollectorStats(collector_name=self.name, started_at=datetime.now(timezone.utc))

        try:
            self.logger.info("Starting collection for %s", self.name)
            items = [item for item in await self._collect_items(options, stats) if self._is_valid(item)]
            stats.items_collected = len(items)
            stats.completed_at = datetime.now(timezone.utc)

            self.logger.info(
                "Collection completed for %s: %s items, %s errors, %s requests, %.2fs",
                self.name,
                stats.items_collected,
                len(stats.errors),
                stats.http_requests,
                stats.duration_seconds or 0.0,
            )
            return CollectionResult(collector_name=self.name, items=items, stats=stats, success=True)

        except Exception as exc:
            self.logger.error("Collection failed for %s: %s: %s", self.name, type(exc).__name__, exc)
            stats.completed_at = datetime.now(timezone.utc)
            stats.add_error(
                CollectorError(
                    collector_name=self.name,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            )
            return CollectionResult(
                collector_name=self.name,
                items=[],
                stats=stats,
                success=False,
                error_message=str(exc),
            )

    @abstractmethod
    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        """Collect items from the source.

        Implementations may raise; ``collect`` handles the failure.
        """

    def cutoff(self, options: FetchOptions) -> datetime:
        return options.cutoff(self.default_days)

    async def get_text(
        self,
        url: str,
        stats: CollectorStats,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        response = await self.http_client.get_async(
            url, params=params, headers=headers, timeout=timeout, stats=stats
        )
        return response.text

    async def try_get_text(
        self,
        url: str,
        stats: CollectorStats,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Optional[str]:
        """Fetch URL content, recording the error and returning None on failure."""
        try:
            return await self.get_text(url, stats, params=params, headers=headers, timeout=timeout)
        except httpx.HTTPError as exc:
            self.record_error(stats, exc, url=url)
            return None

    def record_error(self, stats: CollectorStats, exc: BaseException, *, url: Optional[str] = None) -> None:
        stats.add_error(
            CollectorError(
                collector_name=self.name,
                error_type=type(exc).__name__,
                message=str(exc),
                url=url,
            )
        )
        if url:
            self.logger.warning("Failed to fetch %s: %s", url, exc)
        else:
            self.logger.warning("%s: %s", type(exc).__name__, exc)

    def _is_valid(self, item: MediaItem) -> bool:
        valid = (
            bool(item.sources)
            and bool(item.source_urls)
            and item.category in CATEGORIES
            and item.severity in SEVERITIES
        )
        if not valid:
            self.logger.warning("Dropping malformed item from %s: %r", self.name, item.title)
        return valid
