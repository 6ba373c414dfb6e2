"""Duplicate detection and field-level merging of media items.

Different outlets report the same recall or outbreak with different titles
and URLs. Two items are considered duplicates when any one of a fixed set of
predicates holds (shared recall number, shared URL, equal dedup key, same
pathogen with similar product, similar title, same recalling firm).

Clustering is a greedy single pass: each incoming item is compared against
the running merged representative of every existing cluster, in cluster
creation order, and joins the first cluster that matches. Because the
representative accumulates URLs, tags and optional fields from all of its
members, an item may join a cluster through a field contributed by any
earlier member.
"""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Set

from .logging_config import get_logger
from .models import SEVERITY_RANK, MediaItem

logger = get_logger("dedup")

PRODUCT_SIMILARITY_THRESHOLD = 0.5
TITLE_SIMILARITY_THRESHOLD = 0.6
MIN_TOKEN_LENGTH = 3

_NON_WORD_RE = re.compile(r"[^a-z0-9\s]")

MERGEABLE_FIELDS = (
    "pathogen",
    "product",
    "states",
    "recall_number",
    "classification",
    "case_count",
    "recalling_firm",
)


def _unique_preserve_order(values: Iterable[str]) -> List[str]:
    """Return unique truthy values while preserving their first-seen order."""
    seen: Set[str] = set()
    result: List[str] = []
    for value in values:
        if not value:
            continue
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _tokens(text: str) -> Set[str]:
    cleaned = _NON_WORD_RE.sub("", text.lower())
    return {word for word in cleaned.split() if len(word) >= MIN_TOKEN_LENGTH}


def text_similarity(a: Optional[str], b: Optional[str]) -> float:
    """Word overlap relative to the smaller word set, in ``[0, 1]``.

    Short titles therefore match longer ones that contain all their words.
    """
    if not a or not b:
        return 0.0
    words_a = _tokens(a)
    words_b = _tokens(b)
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / min(len(words_a), len(words_b))


def are_duplicates(a: MediaItem, b: MediaItem) -> bool:
    """Check whether two items likely describe the same event or recall."""
    if a.recall_number and b.recall_number and a.recall_number == b.recall_number:
        return True

    if set(a.source_urls) & set(b.source_urls):
        return True

    if a.dedup_key and b.dedup_key and a.dedup_key == b.dedup_key:
        return True

    if a.pathogen and b.pathogen and a.pathogen == b.pathogen:
        if a.product and b.product and text_similarity(a.product, b.product) > PRODUCT_SIMILARITY_THRESHOLD:
            return True

    if text_similarity(a.title, b.title) > TITLE_SIMILARITY_THRESHOLD:
        return True

    if a.recalling_firm and b.recalling_firm:
        if a.recalling_firm.lower() == b.recalling_firm.lower():
            return True

    return False


def merge_items(primary: MediaItem, secondary: MediaItem) -> MediaItem:
    """Merge ``secondary`` into a copy of ``primary``.

    Title, date and category keep the primary's framing. Sources, URLs and
    tags are unioned; empty optional fields are filled from the secondary;
    the longer summary and the higher severity win.
    """
    updates = {
        "sources": _unique_preserve_order([*primary.sources, *secondary.sources]),
        "source_urls": _unique_preserve_order([*primary.source_urls, *secondary.source_urls]),
        "tags": _unique_preserve_order([*primary.tags, *secondary.tags]),
    }

    for name in MERGEABLE_FIELDS:
        if not getattr(primary, name) and getattr(secondary, name):
            value = getattr(secondary, name)
            updates[name] = list(value) if isinstance(value, list) else value

    if secondary.summary and len(secondary.summary) > len(primary.summary or ""):
        updates["summary"] = secondary.summary

    if SEVERITY_RANK.get(secondary.severity, 0) > SEVERITY_RANK.get(primary.severity, 0):
        updates["severity"] = secondary.severity

    return replace(primary, **updates)


def deduplicate_and_merge(items: Sequence[MediaItem]) -> List[MediaItem]:
    """Cluster duplicates greedily and return one merged item per cluster."""
    clusters: List[MediaItem] = []

    for item in items:
        for index, representative in enumerate(clusters):
            if are_duplicates(representative, item):
                clusters[index] = merge_items(representative, item)
                break
        else:
            clusters.append(replace(item))

    logger.debug("Deduplicated %s items into %s clusters", len(items), len(clusters))
    return clusters
