"""USDA FSIS meat, poultry and egg recall collector.

Strategy order:

1. Scrape the FSIS recall listing page through a chain of page strategies
   (embedded Drupal settings JSON, then an HTML table of recalls).
2. Fall back to the openFDA enforcement API, keeping only records whose
   product description or recall reason names an FSIS-regulated product.
3. Give up with an empty list and a warning.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from ..collector import BaseCollector
from ..http_client import BROWSER_USER_AGENT, HTTPClient
from ..models import CATEGORY_RECALL, SEVERITY_MEDIUM, CollectorStats, FetchOptions, MediaItem
from ..normalizer import (
    classification_to_severity,
    extract_pathogen,
    extract_product,
    extract_states,
    format_compact_date,
    make_dedup_key,
    matches_product_vocabulary,
    parse_datetime,
    strip_markup,
)
from .openfda import NoResults, query_enforcement, recall_url
from .registry import register_collector
from .strategies import PageStrategy, run_page_strategies

SOURCE_NAME = "USDA FSIS"

_DRUPAL_SETTINGS_RE = re.compile(r"drupalSettings[\"\s]*[:,=]\s*({[\s\S]*?})\s*[;<]")
_US_DATE_RE = re.compile(r"(\d{1,2}/\d{1,2}/\d{4})")
_CLASS_RE = re.compile(r"\bClass\s+(III|II|I)\b", re.IGNORECASE)


def _classification(text: str) -> Optional[str]:
    match = _CLASS_RE.search(text)
    return f"Class {match.group(1).upper()}" if match else None


def _scraped_item(
    title: str,
    url: str,
    published: datetime,
    *,
    summary: Optional[str] = None,
    context: str = "",
) -> MediaItem:
    classification = _classification(context)
    return MediaItem(
        sources=[SOURCE_NAME],
        source_urls=[url],
        title=title,
        summary=summary or title,
        date=published.date().isoformat(),
        category=CATEGORY_RECALL,
        severity=classification_to_severity(classification) if classification else SEVERITY_MEDIUM,
        pathogen=extract_pathogen(f"{title} {summary or ''}"),
        states=extract_states(context),
        classification=classification,
        dedup_key=make_dedup_key(title),
    )


class EmbeddedSettingsStrategy:
    """Read recalls embedded in the page's Drupal settings JSON."""

    name = "embedded_settings"

    def parse(self, html: str, *, page_url: str, cutoff: datetime) -> Optional[List[MediaItem]]:
        settings = self._find_settings(html)
        if not settings:
            return None
        recalls = settings.get("recalls")
        if not isinstance(recalls, list):
            return None

        items: List[MediaItem] = []
        for entry in recalls:
            if not isinstance(entry, dict):
                continue
            title = strip_markup(entry.get("title") or entry.get("name"))
            href = entry.get("url") or entry.get("link") or entry.get("path")
            published = parse_datetime(entry.get("date") or entry.get("recall_date"))
            if not title or not href or published is None:
                continue
            if published.tzinfo is None:
                published = published.replace(tzinfo=timezone.utc)
            if published.date() < cutoff.date():
                continue
            summary = strip_markup(entry.get("summary") or entry.get("reason")) or None
            context = " ".join(
                str(entry.get(key) or "") for key in ("classification", "risk_level", "states", "distribution")
            )
            items.append(
                _scraped_item(title, urljoin(page_url, href), published, summary=summary, context=context)
            )
        return items or None

    def _find_settings(self, html: str) -> Optional[Dict[str, Any]]:
        soup = BeautifulSoup(html, "lxml")
        script = soup.find("script", attrs={"data-drupal-selector": "drupal-settings-json"})
        raw = script.string if script is not None else None
        if not raw:
            match = _DRUPAL_SETTINGS_RE.search(html)
            raw = match.group(1) if match else None
        if not raw:
            return None
        try:
            settings = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return settings if isinstance(settings, dict) else None


class RecallTableStrategy:
    """Read recall rows (link + M/D/YYYY date) from an HTML table."""

    name = "html_table"

    def parse(self, html: str, *, page_url: str, cutoff: datetime) -> Optional[List[MediaItem]]:
        soup = BeautifulSoup(html, "lxml")
        items: List[MediaItem] = []

        for row in soup.find_all("tr"):
            if len(row.find_all("td")) < 3:
                continue
            link = row.find("a", href=True)
            row_text = row.get_text(" ", strip=True)
            date_match = _US_DATE_RE.search(row_text)
            if link is None or date_match is None:
                continue

            try:
                recall_date = datetime.strptime(date_match.group(1), "%m/%d/%Y").replace(tzinfo=timezone.utc)
            except ValueError:
                continue
            if recall_date.date() < cutoff.date():
                continue

            title = strip_markup(link.get_text(" ", strip=True))
            if not title:
                continue
            items.append(_scraped_item(title, urljoin(page_url, link["href"]), recall_date, context=row_text))

        return items or None


@register_collector("fsis")
class FSISRecallCollector(BaseCollector):
    """Collect FSIS recalls, degrading to openFDA when scraping yields nothing."""

    source_name = SOURCE_NAME
    default_days = 7
    page_url = "https://www.fsis.usda.gov/recalls-alerts"
    page_headers = {
        "User-Agent": BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    }

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        *,
        page_url: Optional[str] = None,
        fallback_limit: int = 100,
        strategies: Optional[Sequence[PageStrategy]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(http_client, **kwargs)
        if page_url:
            self.page_url = page_url
        self.fallback_limit = fallback_limit
        self.strategies: Sequence[PageStrategy] = strategies or (
            EmbeddedSettingsStrategy(),
            RecallTableStrategy(),
        )

    async def _collect_items(self, options: FetchOptions, stats: CollectorStats) -> List[MediaItem]:
        cutoff = self.cutoff(options)

        scraped = await self._scrape(cutoff, stats)
        if scraped:
            self.logger.info("Found %s recalls from FSIS scrape", len(scraped))
            return scraped

        self.logger.info("Using openFDA fallback for meat/poultry/egg recalls")
        items = await self._openfda_fallback(cutoff, stats)
        if items:
            self.logger.info("Found %s FSIS-type recalls from openFDA", len(items))
        else:
            self.logger.warning("No FSIS recalls found via scrape or openFDA fallback")
        return items

    async def _scrape(self, cutoff: datetime, stats: CollectorStats) -> Optional[List[MediaItem]]:
        html = await self.try_get_text(self.page_url, stats, headers=self.page_headers)
        if not html:
            return None
        return run_page_strategies(self.strategies, html, page_url=self.page_url, cutoff=cutoff)

    async def _openfda_fallback(self, cutoff: datetime, stats: CollectorStats) -> List[MediaItem]:
        try:
            records = await query_enforcement(self.http_client, cutoff, limit=self.fallback_limit, stats=stats)
        except NoResults:
            self.logger.info("No FDA recalls found for date range")
            return []
        except (httpx.HTTPError, ValueError) as exc:
            self.logger.warning("openFDA fallback failed")
            self.record_error(stats, exc)
            return []

        return [
            self._build_fallback_item(record)
            for record in records
            if matches_product_vocabulary(record.get("product_description"))
            or matches_product_vocabulary(record.get("reason_for_recall"))
        ]

    def _build_fallback_item(self, recall: Dict[str, Any]) -> MediaItem:
        product = extract_product(recall.get("product_description")) or "Unknown Product"
        reason = recall.get("reason_for_recall") or ""
        firm = recall.get("recalling_firm") or "Unknown Firm"
        classification = recall.get("classification")
        recall_number = recall.get("recall_number")
        distribution = recall.get("distribution_pattern")
        title = f"{firm} Recalls {product[:80]} ({classification or 'Unclassified'})"

        return MediaItem(
            sources=[self.source_name, "FDA"],
            source_urls=[recall_url(recall_number)],
            title=title,
            summary=f"{reason} | Distribution: {distribution or 'Unknown'}",
            date=format_compact_date(recall.get("report_date")) or datetime.now(timezone.utc).date().isoformat(),
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
