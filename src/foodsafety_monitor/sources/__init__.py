"""Media source collectors.

Importing this package registers every collector under its source key.
"""

from .registry import COLLECTOR_REGISTRY, build_collectors, register_collector
from .news import FoodSafetyNewsCollector
from .magazine import FoodSafetyMagazineCollector
from .fda import FDARecallCollector
from .fsis import FSISRecallCollector
from .cdc import CDCOutbreakCollector

__all__ = [
    "COLLECTOR_REGISTRY",
    "CDCOutbreakCollector",
    "FDARecallCollector",
    "FSISRecallCollector",
    "FoodSafetyMagazineCollector",
    "FoodSafetyNewsCollector",
    "build_collectors",
    "register_collector",
]
