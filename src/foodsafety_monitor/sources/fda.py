"""FDA food recall collector backed by the openFDA enforcement API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..collector import BaseCollector
from ..http_client import HTTPClient
from ..models import CATEGORY_RECALL, CollectorStats, FetchOptions, MediaItem
from ..normalizer import (
    classification_to_severity,
    extract_pathogen,
    extract_product,
    extract_states,
    format_compact_date,
    make_dedup_key,
)
from .openfda import NoResults, query_enforcement, recall_url
from .registry import register_collector


@register_collector("fda")
class FDARecallCollector(BaseCollector):
    """Collect FDA food enforcement reports for the requested window."""

    source_name = "FDA"
    default_days = 7

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        limit: int = 50,
        **kwargs: Any,
    ) -> None:
        super().__init__(http_client, **kwargs)
        self.limit = limit

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        try:
            records = await query_enforcement(self.http_client, self.cutoff(options), limit=self.limit, stats=stats)
        except NoResults:
            self.logger.info("No recalls found for date range")
            return []

        return [self._build_item(record) for record in records]

    def _build_item(self, recall: Dict[str, Any]) -> MediaItem:
        report_date = format_compact_date(recall.get("report_date"))
        initiation_date = format_compact_date(recall.get("recall_initiation_date"))
        reason = recall.get("reason_for_recall") or ""
        distribution = recall.get("distribution_pattern")
        product = extract_product(recall.get("product_description"))
        firm = recall.get("recalling_firm") or "Unknown Firm"
        classification = recall.get("classification")
        recall_number = recall.get("recall_number")

        title = f"{firm} Recalls {product or 'Product'} ({classification or ''})"

        summary_parts = [reason]
        if distribution:
            summary_parts.append(f"Distribution: {distribution}")
        if recall.get("product_quantity"):
            summary_parts.append(f"Quantity: {recall['product_quantity']}")

        return MediaItem(
            sources=[self.source_name],
            source_urls=[recall_url(recall_number)],
            title=title,
            summary=" | ".join(summary_parts),
            date=report_date or initiation_date or datetime.now(timezone.utc).date().isoformat(),
            category=CATEGORY_RECALL,
            severity=classification_to_severity(classification),
            pathogen=extract_pathogen(reason),
            product=product,
            states=extract_states(distribution),
            recall_number=recall_number,
            classification=classification,
            recalling_firm=firm,
            status=recall.get("status"),
            dedup_key=make_dedup_key(recall_number or title),
        )
