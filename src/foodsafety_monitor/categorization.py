"""Categorization and severity heuristics for media items.

Provides keyword rules that map titles, descriptions and feed categories to
the digest categories (Recall, Outbreak, Policy, Research, Alert) and to a
severity level. Rules are evaluated in order and the first hit wins, so the
order of ``keyword_rules`` encodes precedence. Collectors may inject custom
rules for source-specific vocabulary.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import (
    CATEGORIES,
    CATEGORY_ALERT,
    CATEGORY_OUTBREAK,
    CATEGORY_POLICY,
    CATEGORY_RECALL,
    CATEGORY_RESEARCH,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
)

# Relevance filter for general-purpose feeds (CDC media API, podcasts).
RELEVANCE_PATTERN = re.compile(
    r"outbreak|recall|foodborne|food.?safety|investigation|illness|contamina",
    re.IGNORECASE,
)


class CategoryClassifier:
    """Classifies media items into categories and severity levels."""

    DEFAULT_CATEGORY = CATEGORY_RESEARCH

    def __init__(self, custom_rules: Optional[Dict[str, Any]] = None) -> None:
        self.custom_rules = custom_rules or {}
        self._init_rules()

    def _init_rules(self) -> None:
        """Initialise keyword and severity rules."""
        self.keyword_rules: List[Tuple[str, List[str]]] = [
            (CATEGORY_RECALL, [r"recall"]),
            (CATEGORY_OUTBREAK, [r"outbreak|illness|sick|hospitalized"]),
            (CATEGORY_POLICY, [r"policy|regulation|law|bill|fda|usda"]),
            (CATEGORY_RESEARCH, [r"study|research|findings|report"]),
            (CATEGORY_ALERT, [r"alert|warning|advisory"]),
        ]

        # "class i" must not match "class ii"/"class iii".
        self.severity_rules: List[Tuple[str, List[str]]] = [
            (SEVERITY_HIGH, [r"death|died|fatal", r"class i\b"]),
            (SEVERITY_MEDIUM, [r"hospitalized|outbreak|recall|contaminat"]),
        ]

        # Outbreak reports treat any hospitalization as high severity.
        self.outbreak_severity_rules: List[Tuple[str, List[str]]] = [
            (SEVERITY_HIGH, [r"death|died|fatal", r"hospital"]),
            (SEVERITY_MEDIUM, [r"outbreak|investigation"]),
        ]

        if self.custom_rules:
            for category, patterns in self.custom_rules.get("keywords", {}).items():
                if category not in CATEGORIES:
                    raise ValueError(f"Unknown category in custom rules: {category}")
                for existing_category, existing_patterns in self.keyword_rules:
                    if existing_category == category:
                        existing_patterns.extend(patterns)
                        break

    def categorize(
        self,
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        *,
        default: Optional[str] = None,
    ) -> str:
        """Categorise an article from its title, description and feed tags."""
        text = " ".join([title or "", description or "", " ".join(tags or [])])
        category = self._first_match(self.keyword_rules, text)
        return category or default or self.DEFAULT_CATEGORY

    def severity(self, title: Optional[str] = None, description: Optional[str] = None) -> str:
        """Severity for news articles: deaths high, outbreaks/recalls medium."""
        text = f"{title or ''} {description or ''}"
        return self._first_match(self.severity_rules, text) or SEVERITY_LOW

    def outbreak_severity(self, text: Optional[str]) -> str:
        if not text:
            return SEVERITY_MEDIUM
        return self._first_match(self.outbreak_severity_rules, text) or SEVERITY_LOW

    @staticmethod
    def is_relevant(text: Optional[str]) -> bool:
        """Whether general-purpose content is about food safety at all."""
        if not text:
            return False
        return RELEVANCE_PATTERN.search(text) is not None

    @staticmethod
    def _first_match(rules: List[Tuple[str, List[str]]], text: str) -> Optional[str]:
        for label, patterns in rules:
            for pattern in patterns:
                if re.search(pattern, text, flags=re.IGNORECASE):
                    return label
        return None
