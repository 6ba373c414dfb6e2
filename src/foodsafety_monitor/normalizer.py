"""Text normalization and signal extraction shared by all collectors."""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache
from typing import List, Optional, Pattern, Union

from dateutil import parser as date_parser

from .models import SEVERITY_HIGH, SEVERITY_LOW, SEVERITY_MEDIUM
from .vocabularies import DEFAULT_VOCABULARY, Vocabulary

PRODUCT_MAX_LENGTH = 100
DEDUP_KEY_LENGTH = 60

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_CASE_COUNT_RE = re.compile(r"(\d+)\s*(case|ill|sick|infected|people|person)", re.IGNORECASE)
_COMPACT_DATE_RE = re.compile(r"^\d{8}$")


@lru_cache(maxsize=8)
def _entity_pattern(vocabulary: Vocabulary) -> Pattern[str]:
    alternatives = "|".join(re.escape(entity) for entity, _ in vocabulary.html_entities)
    return re.compile(alternatives)


@lru_cache(maxsize=8)
def _state_pattern(vocabulary: Vocabulary) -> Pattern[str]:
    return re.compile(r"\b(" + "|".join(vocabulary.state_codes) + r")\b")


def strip_markup(html: Optional[str], *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> str:
    """Remove tags, decode the known entities and collapse whitespace."""
    if not html:
        return ""
    text = _TAG_RE.sub("", html)
    entities = dict(vocabulary.html_entities)
    text = _entity_pattern(vocabulary).sub(lambda match: entities[match.group(0)], text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_pathogen(text: Optional[str], *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> Optional[str]:
    """Return the canonical name of the first vocabulary pathogen found in ``text``.

    Matching is a case-insensitive substring scan in vocabulary order, so
    the vocabulary order sets precedence when several pathogens are named.
    """
    if not text:
        return None
    lower = text.lower()
    for term, display_name in vocabulary.pathogens:
        if term in lower:
            return display_name
    return None


def extract_states(text: Optional[str], *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> Optional[List[str]]:
    """Return unique US state codes in order of appearance, or None."""
    if not text:
        return None
    states: List[str] = []
    for match in _state_pattern(vocabulary).finditer(text):
        code = match.group(1)
        if code not in states:
            states.append(code)
    return states or None


def extract_case_count(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    match = _CASE_COUNT_RE.search(text)
    return int(match.group(1)) if match else None


def classification_to_severity(classification: Optional[str]) -> str:
    """Map a regulatory recall class (Class I/II/III) to a severity level."""
    if not classification:
        return SEVERITY_MEDIUM
    if "I" in classification and "II" not in classification and "III" not in classification:
        return SEVERITY_HIGH
    if "II" in classification and "III" not in classification:
        return SEVERITY_MEDIUM
    if "III" in classification:
        return SEVERITY_LOW
    return SEVERITY_MEDIUM


def truncate_product(product: Optional[str]) -> Optional[str]:
    if not product:
        return None
    if len(product) > PRODUCT_MAX_LENGTH:
        return product[:PRODUCT_MAX_LENGTH] + "..."
    return product


def extract_product(description: Optional[str]) -> Optional[str]:
    """Pull a short product name out of a recall product description.

    Descriptions usually look like ``"Brand Product; size; UPC ..."``, so
    the first ``;``/``,`` separated segment is kept.
    """
    if not description:
        return None
    cleaned = description.split(";")[0].split(",")[0].strip()
    return truncate_product(cleaned)


def matches_product_vocabulary(text: Optional[str], *, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    if not text:
        return False
    lower = text.lower()
    return any(term in lower for term in vocabulary.product_terms)


def make_dedup_key(value: Optional[str]) -> Optional[str]:
    """Build the internal clustering fingerprint for a title or identifier."""
    if not value:
        return None
    key = _NON_ALNUM_RE.sub("", value.lower())[:DEDUP_KEY_LENGTH]
    return key or None


def parse_datetime(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """Parse a date string leniently, returning None when it is unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError, TypeError):
        return None


def parse_date(value: Optional[Union[str, datetime]]) -> Optional[str]:
    """Normalize any date representation to ``YYYY-MM-DD``."""
    dt = parse_datetime(value)
    if dt is None:
        return None
    return dt.date().isoformat()


def format_compact_date(value: Optional[str]) -> Optional[str]:
    """Convert openFDA's ``YYYYMMDD`` dates to ISO format."""
    if not value or not _COMPACT_DATE_RE.match(value):
        return None
    return f"{value[:4]}-{value[4:6]}-{value[6:8]}"


def to_compact_date(value: Union[date, datetime]) -> str:
    return value.strftime("%Y%m%d")
