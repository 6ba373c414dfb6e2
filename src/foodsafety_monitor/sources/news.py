"""Food Safety News RSS collector."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from ..collector import BaseCollector
from ..http_client import HTTPClient
from ..models import CollectorStats, FetchOptions, MediaItem
from ..normalizer import extract_pathogen, make_dedup_key, strip_markup
from ..rss import entry_link, entry_published_at, entry_tags, fetch_feed
from .registry import register_collector


@register_collector("fsn")
class FoodSafetyNewsCollector(BaseCollector):
    """Collect articles published on the Food Safety News feed."""

    source_name = "Food Safety News"
    default_days = 7
    feed_url = "https://www.foodsafetynews.com/rss/"

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        feed_url: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(http_client, **kwargs)
        if feed_url:
            self.feed_url = feed_url

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        cutoff = self.cutoff(options)
        self.logger.info("Fetching RSS feed: %s", self.feed_url)
        feed = await fetch_feed(self.feed_url, http_client=self.http_client, stats=stats)

        items: List[MediaItem] = []
        for entry in feed.entries:
            item = self._parse_entry(entry, cutoff)
            if item:
                items.append(item)
        return items

    def _parse_entry(self, entry: Any, cutoff: datetime) -> Optional[MediaItem]:
        published = entry_published_at(entry)
        if published is None or published < cutoff:
            return None

        link = entry_link(entry)
        if not link:
            return None

        title = strip_markup(entry.get("title"))
        description = strip_markup(entry.get("summary") or entry.get("description"))
        tags = entry_tags(entry)

        return MediaItem(
            sources=[self.source_name],
            source_urls=[link],
            title=title,
            summary=description,
            date=published.date().isoformat(),
            category=self.classifier.categorize(title, description, tags),
            severity=self.classifier.severity(title, description),
            pathogen=extract_pathogen(f"{title} {description}"),
            tags=tags,
            dedup_key=make_dedup_key(title),
        )
