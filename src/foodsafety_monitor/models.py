"""Data models for the food-safety media pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Union

SOURCE_TYPE_MEDIA = "media"

CATEGORY_RECALL = "Recall"
CATEGORY_OUTBREAK = "Outbreak"
CATEGORY_ALERT = "Alert"
CATEGORY_POLICY = "Policy"
CATEGORY_RESEARCH = "Research"

CATEGORIES = (
    CATEGORY_RECALL,
    CATEGORY_OUTBREAK,
    CATEGORY_ALERT,
    CATEGORY_POLICY,
    CATEGORY_RESEARCH,
)

SEVERITY_HIGH = "high"
SEVERITY_MEDIUM = "medium"
SEVERITY_LOW = "low"

SEVERITIES = (SEVERITY_HIGH, SEVERITY_MEDIUM, SEVERITY_LOW)

# Higher rank wins when merging duplicates.
SEVERITY_RANK: Dict[str, int] = {
    SEVERITY_HIGH: 3,
    SEVERITY_MEDIUM: 2,
    SEVERITY_LOW: 1,
}


@dataclass
class MediaItem:
    """A normalized food-safety news, recall or outbreak record.

    Items are created by a single collector and may later be merged with
    duplicates reported by other sources. ``dedup_key`` is an internal
    fingerprint used while clustering and is never serialized.
    """

    sources: List[str]
    source_urls: List[str]
    title: str
    summary: str = ""
    date: Optional[str] = None
    category: str = CATEGORY_RESEARCH
    severity: str = SEVERITY_LOW
    pathogen: Optional[str] = None
    product: Optional[str] = None
    states: Optional[List[str]] = None
    recall_number: Optional[str] = None
    classification: Optional[str] = None
    recalling_firm: Optional[str] = None
    status: Optional[str] = None
    case_count: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    date_estimated: bool = False
    dedup_key: Optional[str] = None
    source_type: str = SOURCE_TYPE_MEDIA

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-ready dict without internal fields."""
        data: Dict[str, Any] = {
            "source_type": self.source_type,
            "sources": list(self.sources),
            "source_urls": list(self.source_urls),
            "title": self.title,
            "summary": self.summary,
            "date": self.date,
            "category": self.category,
            "severity": self.severity,
            "pathogen": self.pathogen,
            "product": self.product,
            "states": list(self.states) if self.states else None,
            "tags": list(self.tags),
        }
        optional = {
            "recall_number": self.recall_number,
            "classification": self.classification,
            "recalling_firm": self.recalling_firm,
            "status": self.status,
            "case_count": self.case_count,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.date_estimated:
            data["date_estimated"] = True
        return data


@dataclass
class FetchOptions:
    """Date window requested from a collector.

    ``since`` takes precedence over ``days``. When neither is given the
    collector's own default window applies. ``since`` may be passed as a
    ``YYYY-MM-DD`` string; a malformed string raises ``ValueError``.
    """

    days: Optional[int] = None
    since: Optional[Union[date, str]] = None

    def __post_init__(self) -> None:
        if isinstance(self.since, str):
            try:
                self.since = date.fromisoformat(self.since.strip())
            except ValueError as exc:
                raise ValueError(f"Invalid since date {self.since!r}, expected YYYY-MM-DD") from exc

    def cutoff(self, default_days: int, *, now: Optional[datetime] = None) -> datetime:
        """Return the oldest accepted publication time as an aware UTC datetime."""
        if self.since is not None:
            return datetime(self.since.year, self.since.month, self.since.day, tzinfo=timezone.utc)
        now = now or datetime.now(timezone.utc)
        days = self.days if self.days is not None else default_days
        return now - timedelta(days=days)

    def is_short_window(self, default_days: int) -> bool:
        """True for windows of a day or less without an explicit ``since``."""
        if self.since is not None:
            return False
        days = self.days if self.days is not None else default_days
        return days <= 1


@dataclass
class CollectorError:
    """Structured error captured during collection."""

    collector_name: str
    error_type: str
    message: str
    url: Optional[str] = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class CollectorStats:
    """Counters for a single collector run."""

    collector_name: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    http_requests: int = 0
    items_collected: int = 0
    errors: List[CollectorError] = field(default_factory=list)

    def add_error(self, error: CollectorError) -> None:
        self.errors.append(error)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


@dataclass
class CollectionResult:
    """Result of running one collector."""

    collector_name: str
    items: List[MediaItem]
    stats: CollectorStats
    success: bool = True
    error_message: Optional[str] = None

    @property
    def item_count(self) -> int:
        return len(self.items)


@dataclass
class AggregationResult:
    """Merged output of all collectors plus per-source diagnostics."""

    items: List[MediaItem]
    raw_item_count: int
    stats: Dict[str, CollectorStats] = field(default_factory=dict)
    errors: List[CollectorError] = field(default_factory=list)
    success: bool = True
