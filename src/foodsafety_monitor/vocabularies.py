"""Shared lookup tables used by the text normalizer and collectors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

VOCABULARY_VERSION = "2025.1"

# Search term -> display name. Order matters for tie-breaking.
PATHOGENS: Tuple[Tuple[str, str], ...] = (
    ("salmonella", "Salmonella"),
    ("e. coli", "E. coli"),
    ("e.coli", "E. coli"),
    ("escherichia coli", "E. coli"),
    ("listeria", "Listeria"),
    ("campylobacter", "Campylobacter"),
    ("norovirus", "Norovirus"),
    ("clostridium", "Clostridium"),
    ("botulism", "Botulism"),
    ("vibrio", "Vibrio"),
    ("staphylococcus", "Staphylococcus"),
    ("shigella", "Shigella"),
    ("hepatitis a", "Hepatitis A"),
    ("cyclospora", "Cyclospora"),
    ("cronobacter", "Cronobacter"),
    ("bacillus cereus", "Bacillus cereus"),
    ("yersinia", "Yersinia"),
)

STATE_CODES: Tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC",
)

# Products regulated by USDA FSIS (meat, poultry, egg products).
FSIS_PRODUCT_TERMS: Tuple[str, ...] = (
    "meat", "beef", "pork", "chicken", "turkey", "poultry", "egg",
    "sausage", "bacon", "ham", "deli", "hot dog", "ground beef",
    "ground turkey", "ground chicken", "jerky", "lamb", "veal",
    "duck", "goose", "bison", "venison", "rabbit",
)

HTML_ENTITIES: Tuple[Tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
    ("&#39;", "'"),
    ("&#xA0;", " "),
    ("&nbsp;", " "),
)


@dataclass(frozen=True)
class Vocabulary:
    """Versioned bundle of the fixed vocabularies."""

    version: str = VOCABULARY_VERSION
    pathogens: Tuple[Tuple[str, str], ...] = PATHOGENS
    state_codes: Tuple[str, ...] = STATE_CODES
    product_terms: Tuple[str, ...] = FSIS_PRODUCT_TERMS
    html_entities: Tuple[Tuple[str, str], ...] = HTML_ENTITIES


DEFAULT_VOCABULARY = Vocabulary()
