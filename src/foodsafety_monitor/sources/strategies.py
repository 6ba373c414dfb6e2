"""Pluggable page strategies for scraping pages without a schema contract.

A strategy inspects a fetched page and either returns structured items or
``None`` to signal "not applicable, try the next one". A fallback chain is
an ordered list of strategies evaluated until one produces a result, which
keeps format-specific brittleness out of the orchestration logic.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from ..logging_config import get_logger
from ..models import MediaItem

logger = get_logger("strategies")


class PageStrategy(Protocol):
    """Extracts items from a page, or returns None to defer to the next strategy."""

    name: str

    def parse(self, html: str, *, page_url: str, cutoff: datetime) -> Optional[List[MediaItem]]:
        ...


def run_page_strategies(
    strategies: Sequence[PageStrategy],
    html: str,
    *,
    page_url: str,
    cutoff: datetime,
) -> Optional[List[MediaItem]]:
    """Return the first non-empty result of ``strategies``, or None."""
    for strategy in strategies:
        try:
            items = strategy.parse(html, page_url=page_url, cutoff=cutoff)
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Page strategy %s failed on %s: %s", strategy.name, page_url, exc)
            continue
        if items:
            logger.debug("Page strategy %s produced %s items", strategy.name, len(items))
            return items
    return None
