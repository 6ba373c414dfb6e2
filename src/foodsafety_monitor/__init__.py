"""Food-safety media monitor package namespace."""

from importlib import import_module
from typing import Any

__all__ = [
    "MediaItem",
    "FetchOptions",
    "MediaAggregator",
    "fetch_all",
    "CategoryClassifier",
    "MonitorConfig",
    "deduplicate_and_merge",
    "are_duplicates",
    "merge_items",
]


def __getattr__(name: str) -> Any:
    if name in ("MediaItem", "FetchOptions"):
        module = import_module("foodsafety_monitor.models")
        return getattr(module, name)
    elif name in ("MediaAggregator", "fetch_all"):
        module = import_module("foodsafety_monitor.aggregator")
        return getattr(module, name)
    elif name == "CategoryClassifier":
        module = import_module("foodsafety_monitor.categorization")
        return getattr(module, name)
    elif name == "MonitorConfig":
        module = import_module("foodsafety_monitor.config")
        return getattr(module, name)
    elif name in ("deduplicate_and_merge", "are_duplicates", "merge_items"):
        module = import_module("foodsafety_monitor.dedup")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
