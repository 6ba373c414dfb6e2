"""Food Safety Magazine collector (one RSS feed per topic)."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import httpx

from ..collector import BaseCollector
from ..http_client import HTTPClient
from ..models import (
    CATEGORY_ALERT,
    CATEGORY_RECALL,
    CATEGORY_RESEARCH,
    CollectorStats,
    FetchOptions,
    MediaItem,
)
from ..normalizer import extract_pathogen, make_dedup_key, strip_markup
from ..rss import entry_link, entry_published_at, fetch_feed
from .registry import register_collector

# Topic id -> (default category, display name)
TOPICS: Dict[str, Tuple[str, str]] = {
    "305": (CATEGORY_RECALL, "Recall/Crisis"),
    "306": (CATEGORY_RESEARCH, "Risk Assessment"),
    "309": (CATEGORY_ALERT, "Chemical"),
    "311": (CATEGORY_ALERT, "Allergen"),
    "312": (CATEGORY_RESEARCH, "Microbiological"),
    "313": (CATEGORY_ALERT, "Physical"),
}


@register_collector("fsm")
class FoodSafetyMagazineCollector(BaseCollector):
    """Collect articles from the Food Safety Magazine topic feeds.

    Topic feeds are fetched concurrently and fail independently. Each
    topic carries a default category; the topic display name becomes the
    item's tag. Articles listed under several topics are kept once, under
    the first topic in the requested order.
    """

    source_name = "Food Safety Magazine"
    default_days = 7
    feed_url_template = "https://www.food-safety.com/rss/topic/{topic_id}"

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        topics: Optional[Sequence[Union[str, int]]] = None,
        feed_url_template: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(http_client, **kwargs)
        self.topics = [str(topic).strip() for topic in (topics or TOPICS.keys()) if str(topic).strip()]
        if feed_url_template:
            self.feed_url_template = feed_url_template

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        cutoff = self.cutoff(options)
        results = await asyncio.gather(
            *(self._collect_topic(topic_id, cutoff, stats) for topic_id in self.topics),
            return_exceptions=True,
        )

        items: List[MediaItem] = []
        seen_urls: Set[str] = set()
        for topic_id, topic_items in zip(self.topics, results):
            if isinstance(topic_items, Exception):
                self.logger.warning("Topic %s failed: %s", topic_id, topic_items)
                self.record_error(stats, topic_items, url=self.feed_url_template.format(topic_id=topic_id))
                continue
            for item in topic_items:
                url = item.source_urls[0]
                if url in seen_urls:
                    continue
                seen_urls.add(url)
                items.append(item)

        items.sort(key=lambda item: item.date or "", reverse=True)
        return items

    def topic_info(self, topic_id: str) -> Tuple[str, str]:
        return TOPICS.get(topic_id, (CATEGORY_RESEARCH, f"Topic {topic_id}"))

    async def _collect_topic(self, topic_id: str, cutoff: datetime, stats: CollectorStats) -> List[MediaItem]:
        url = self.feed_url_template.format(topic_id=topic_id)
        category, topic_name = self.topic_info(topic_id)

        try:
            feed = await fetch_feed(url, http_client=self.http_client, stats=stats)
        except (httpx.HTTPError, ValueError) as exc:
            self.logger.warning("Topic %s (%s) failed", topic_id, topic_name)
            self.record_error(stats, exc, url=url)
            return []

        items: List[MediaItem] = []
        for entry in feed.entries:
            item = self._parse_entry(entry, cutoff, category, topic_name)
            if item:
                items.append(item)
        return items

    def _parse_entry(self, entry: Any, cutoff: datetime, category: str, topic_name: str) -> Optional[MediaItem]:
        published = entry_published_at(entry)
        if published is None or published < cutoff:
            return None

        link = entry_link(entry)
        if not link:
            return None

        title = strip_markup(entry.get("title"))
        description = strip_markup(entry.get("summary") or entry.get("description"))

        return MediaItem(
            sources=[self.source_name],
            source_urls=[link],
            title=title,
            summary=description,
            date=published.date().isoformat(),
            category=category,
            severity=self.classifier.severity(title, description),
            pathogen=extract_pathogen(f"{title} {description}"),
            tags=[topic_name],
            dedup_key=make_dedup_key(title),
        )
