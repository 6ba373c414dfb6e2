"""CDC outbreak investigation collector.

CDC has restructured its site several times, so three independent
strategies run concurrently and their results are unioned:

1. the CDC content syndication (media) API, queried with several phrasings;
2. known outbreak listing pages, tried in order until one yields links;
3. CDC RSS/podcast feeds.

Listing pages carry no dates, so their items are undated and flagged with
``date_estimated``. They are dropped for short windows (one day or less
without an explicit ``since``).
"""

from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Set
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from ..collector import BaseCollector
from ..http_client import HTTPClient
from ..models import CATEGORY_OUTBREAK, CollectorStats, FetchOptions, MediaItem
from ..normalizer import (
    extract_case_count,
    extract_pathogen,
    extract_states,
    make_dedup_key,
    parse_datetime,
    strip_markup,
)
from ..rss import entry_link, entry_published_at, fetch_feed
from .registry import register_collector

MEDIA_API_URL = "https://tools.cdc.gov/api/v2/resources/media"
MEDIA_API_QUERIES: Sequence[Dict[str, Any]] = (
    {"topic": "food safety"},
    {"q": "foodborne outbreak"},
    {"q": "food recall outbreak"},
)

OUTBREAK_PAGE_URLS: Sequence[str] = (
    "https://www.cdc.gov/food-safety/investigation/index.html",
    "https://www.cdc.gov/food-safety/outbreaks/index.html",
    "https://www.cdc.gov/foodsafety/outbreaks/multistate-outbreaks/outbreaks-list.html",
    "https://www.cdc.gov/foodborne-outbreaks/index.html",
)

FEED_URLS: Sequence[str] = (
    "https://tools.cdc.gov/api/v2/resources/media/316422.rss",
    "https://www2c.cdc.gov/podcasts/feed.asp?feedid=395",
)

OUTBREAK_LINK_PATTERN = re.compile(r"outbreak|investigation|salmonella|listeria|e\.\s*coli", re.IGNORECASE)
MIN_LINK_TEXT_LENGTH = 16
PAGE_TIMEOUT_SECONDS = 10.0


@register_collector("cdc")
class CDCOutbreakCollector(BaseCollector):
    """Collect CDC foodborne outbreak reports via three concurrent strategies."""

    source_name = "CDC"
    default_days = 1
    base_url = "https://www.cdc.gov/"

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        media_api_url: str = MEDIA_API_URL,
        page_urls: Optional[Sequence[str]] = None,
        feed_urls: Optional[Sequence[str]] = None,
        max_results: int = 25,
        **kwargs: Any,
    ) -> None:
        super().__init__(http_client, **kwargs)
        self.media_api_url = media_api_url
        self.page_urls = list(page_urls or OUTBREAK_PAGE_URLS)
        self.feed_urls = list(feed_urls or FEED_URLS)
        self.max_results = max_results

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        cutoff = self.cutoff(options)

        strategy_names = ("media_api", "outbreak_pages", "rss")
        results = await asyncio.gather(
            self._from_media_api(cutoff, stats),
            self._from_outbreak_pages(stats),
            self._from_feeds(cutoff, stats),
            return_exceptions=True,
        )

        batches: List[List[MediaItem]] = []
        for strategy_name, result in zip(strategy_names, results):
            if isinstance(result, Exception):
                self.logger.warning("Strategy %s failed: %s", strategy_name, result)
                self.record_error(stats, result)
                batches.append([])
            else:
                batches.append(result)
        media_items, page_items, feed_items = batches

        if options.is_short_window(self.default_days):
            page_items = [item for item in page_items if item.date]

        unique: List[MediaItem] = []
        seen: Set[str] = set()
        for item in [*media_items, *page_items, *feed_items]:
            key = item.dedup_key or item.source_urls[0]
            if key in seen:
                continue
            seen.add(key)
            unique.append(item)

        if not unique:
            self.logger.warning("No outbreak items found via any strategy; CDC may have restructured again")
        return unique

    def _build_item(
        self,
        title: str,
        description: str,
        url: str,
        *,
        date: Optional[str],
        date_estimated: bool = False,
    ) -> MediaItem:
        text = f"{title} {description}"
        return MediaItem(
            sources=[self.source_name],
            source_urls=[url],
            title=title,
            summary=description,
            date=date,
            date_estimated=date_estimated,
            category=CATEGORY_OUTBREAK,
            severity=self.classifier.outbreak_severity(text),
            pathogen=extract_pathogen(text),
            states=extract_states(text),
            case_count=extract_case_count(text),
            dedup_key=make_dedup_key(title),
        )

    async def _from_media_api(self, cutoff: datetime, stats: CollectorStats) -> List[MediaItem]:
        items: List[MediaItem] = []
        seen_ids: Set[str] = set()

        for query in MEDIA_API_QUERIES:
            params = {**query, "mediatype": "html", "max": self.max_results, "sort": "-datePublished"}
            try:
                response = await self.http_client.get_async(self.media_api_url, params=params, stats=stats)
                payload = response.json()
            except (httpx.HTTPError, json.JSONDecodeError) as exc:
                self.logger.warning("Media API query %s failed", query)
                self.record_error(stats, exc, url=self.media_api_url)
                continue

            results = payload.get("results") if isinstance(payload, dict) else None
            for result in results or []:
                if not isinstance(result, dict):
                    continue
                item = self._parse_media_result(result, cutoff, seen_ids)
                if item:
                    items.append(item)
        return items

    def _parse_media_result(
        self, result: Dict[str, Any], cutoff: datetime, seen_ids: Set[str]
    ) -> Optional[MediaItem]:
        result_id = str(result.get("id", ""))
        if result_id and result_id in seen_ids:
            return None
        if result_id:
            seen_ids.add(result_id)

        best_date = parse_datetime(result.get("dateModified")) or parse_datetime(result.get("datePublished"))
        if best_date is None:
            return None
        if best_date.tzinfo is None:
            best_date = best_date.replace(tzinfo=timezone.utc)
        if best_date < cutoff:
            return None

        title = strip_markup(result.get("name"))
        description = strip_markup(result.get("description"))
        if not self.classifier.is_relevant(f"{title} {description}"):
            return None

        url = result.get("sourceUrl") or result.get("targetUrl") or self.base_url
        return self._build_item(title, description, url, date=best_date.date().isoformat())

    async def _from_outbreak_pages(self, stats: CollectorStats) -> List[MediaItem]:
        for page_url in self.page_urls:
            html = await self.try_get_text(page_url, stats, timeout=PAGE_TIMEOUT_SECONDS)
            if not html:
                continue
            items = self._parse_outbreak_links(html, page_url)
            if items:
                return items
        return []

    def _parse_outbreak_links(self, html: str, page_url: str) -> List[MediaItem]:
        soup = BeautifulSoup(html, "lxml")
        items: List[MediaItem] = []
        for anchor in soup.find_all("a", href=True):
            text = strip_markup(anchor.get_text(" "))
            if len(text) < MIN_LINK_TEXT_LENGTH or not OUTBREAK_LINK_PATTERN.search(text):
                continue
            url = urljoin(page_url, anchor["href"])
            items.append(self._build_item(text, text, url, date=None, date_estimated=True))
        return items

    async def _from_feeds(self, cutoff: datetime, stats: CollectorStats) -> List[MediaItem]:
        for feed_url in self.feed_urls:
            try:
                feed = await fetch_feed(feed_url, http_client=self.http_client, stats=stats, timeout=PAGE_TIMEOUT_SECONDS)
            except (httpx.HTTPError, ValueError) as exc:
                self.record_error(stats, exc, url=feed_url)
                continue
            return [item for item in (self._parse_feed_entry(entry, cutoff) for entry in feed.entries) if item]
        return []

    def _parse_feed_entry(self, entry: Any, cutoff: datetime) -> Optional[MediaItem]:
        published = entry_published_at(entry)
        if published is None or published < cutoff:
            return None
        link = entry_link(entry)
        if not link:
            return None

        title = strip_markup(entry.get("title"))
        description = strip_markup(entry.get("summary") or entry.get("description"))
        if not self.classifier.is_relevant(f"{title} {description}"):
            return None
        return self._build_item(title, description, link, date=published.date().isoformat())
