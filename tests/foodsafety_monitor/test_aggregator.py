"""Tests for the media aggregator."""

from typing import List

import httpx
import pytest

from foodsafety_monitor.aggregator import MediaAggregator, fetch_all, sort_items
from foodsafety_monitor.collector import BaseCollector
from foodsafety_monitor.config import MonitorConfig
from foodsafety_monitor.models import CollectorStats, FetchOptions, MediaItem


class FixedCollector(BaseCollector):
    """Collector that returns a fixed set of items."""

    def __init__(self, key, items):
        super().__init__()
        self.source_key = key
        self.items = items

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        return [MediaItem(**vars(item)) for item in self.items]


class FailingCollector(BaseCollector):
    source_key = "failing"

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        raise RuntimeError("Collector failure")


class RaisingCollector(BaseCollector):
    """Collector whose boundary itself raises."""

    source_key = "raising"

    async def collect(self, options=None):
        raise RuntimeError("boom")

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        return []


def item(title, *, date=None, severity="low", url=None, source="Test", dedup_key=None):
    return MediaItem(
        sources=[source],
        source_urls=[url or f"https://example.com/{title.replace(' ', '-').lower()}"],
        title=title,
        date=date,
        severity=severity,
        dedup_key=dedup_key,
    )


def test_sort_items_newest_first_then_severity():
    items = [
        item("undated story", severity="high"),
        item("older low", date="2024-03-01"),
        item("newer low", date="2024-03-05"),
        item("newer high", date="2024-03-05", severity="high"),
        item("newer medium", date="2024-03-05", severity="medium"),
    ]

    ordered = [entry.title for entry in sort_items(items)]

    assert ordered == ["newer high", "newer medium", "newer low", "older low", "undated story"]


@pytest.mark.asyncio
async def test_collect_all_handles_partial_failures():
    aggregator = MediaAggregator(
        [
            FixedCollector("fixed", [item("Listeria in cheese", date="2024-03-05", dedup_key="listeriaincheese")]),
            FailingCollector(),
            RaisingCollector(),
        ]
    )

    result = await aggregator.collect_all(FetchOptions(days=7))

    assert result.success is False
    assert [entry.title for entry in result.items] == ["Listeria in cheese"]
    assert result.items[0].dedup_key is None
    assert {error.collector_name for error in result.errors} == {"failing", "raising"}
    assert result.stats["fixed"].items_collected == 1


@pytest.mark.asyncio
async def test_collect_all_merges_across_collectors():
    shared_url = "https://example.com/shared"
    aggregator = MediaAggregator(
        [
            FixedCollector("one", [item("Egg recall widens", date="2024-03-05", url=shared_url, source="FDA")]),
            FixedCollector("two", [item("Another headline", date="2024-03-04", url=shared_url, source="CDC")]),
        ]
    )

    items = await aggregator.fetch_all(FetchOptions(days=7))

    assert len(items) == 1
    assert items[0].sources == ["FDA", "CDC"]


@pytest.mark.asyncio
async def test_collect_all_without_collectors():
    result = await MediaAggregator().collect_all()
    assert result.items == []
    assert result.raw_item_count == 0


@pytest.mark.asyncio
async def test_fetch_all_resolves_empty_when_fda_times_out(fake_http):
    client = fake_http({"api.fda.gov": httpx.ReadTimeout("timed out")})

    items = await fetch_all(
        FetchOptions(days=1),
        enabled_sources=["fda"],
        config=MonitorConfig.defaults(),
        http_client=client,
    )

    assert items == []
    assert client.requested("api.fda.gov") == 1
    assert len(client.requests) == 1


@pytest.mark.asyncio
async def test_fetch_all_ignores_unknown_sources(fake_http):
    client = fake_http({})

    items = await fetch_all(FetchOptions(days=1), enabled_sources=["nope"], http_client=client)

    assert items == []
    assert client.requests == []
