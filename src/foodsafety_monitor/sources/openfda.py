"""Helpers for the openFDA food enforcement (recall) API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from ..http_client import HTTPClient
from ..logging_config import get_logger
from ..models import CollectorStats
from ..normalizer import to_compact_date

logger = get_logger("openfda")

ENFORCEMENT_URL = "https://api.fda.gov/food/enforcement.json"


class NoResults(Exception):
    """openFDA answered 404, its way of saying nothing matched."""


def enforcement_params(cutoff: datetime, limit: int, *, today: Optional[datetime] = None) -> Dict[str, Any]:
    today = today or datetime.now(timezone.utc)
    return {
        "search": f"report_date:[{to_compact_date(cutoff)} TO {to_compact_date(today)}]",
        "limit": limit,
        "sort": "report_date:desc",
    }


def recall_url(recall_number: Optional[str]) -> str:
    """Canonical per-recall URL used as evidence link and dedup key."""
    return f'{ENFORCEMENT_URL}?search=recall_number:"{recall_number or ""}"'


async def query_enforcement(
    http_client: HTTPClient,
    cutoff: datetime,
    *,
    limit: int,
    stats: Optional[CollectorStats] = None,
    url: str = ENFORCEMENT_URL,
) -> List[Dict[str, Any]]:
    """Return enforcement records reported since ``cutoff``.

    Raises ``NoResults`` for openFDA's 404 "no matches" answer so callers
    can tell an empty window apart from a failure. Other HTTP errors and
    malformed JSON propagate.
    """
    try:
        response = await http_client.get_async(url, params=enforcement_params(cutoff, limit), stats=stats)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            raise NoResults() from exc
        raise

    payload = response.json()
    if not isinstance(payload, dict):
        raise ValueError("Unexpected openFDA payload")
    results = payload.get("results") or []
    return [record for record in results if isinstance(record, dict)]
