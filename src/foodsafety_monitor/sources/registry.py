"""Registry mapping source keys to collector classes."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Type

from ..collector import BaseCollector
from ..config import MonitorConfig
from ..http_client import HTTPClient
from ..logging_config import get_logger

logger = get_logger("sources")

COLLECTOR_REGISTRY: Dict[str, Type[BaseCollector]] = {}


def register_collector(source_key: str) -> Any:
    """Decorator to register a collector class under a source key."""

    def decorator(cls: Type[BaseCollector]) -> Type[BaseCollector]:
        cls.source_key = source_key
        COLLECTOR_REGISTRY[source_key] = cls
        return cls

    return decorator


def build_collectors(
    http_client: HTTPClient,
    *,
    config: Optional[MonitorConfig] = None,
    enabled_sources: Optional[Iterable[str]] = None,
) -> List[BaseCollector]:
    """Build collector instances for the requested source keys.

    ``enabled_sources`` defaults to every source enabled in ``config``
    (all registered sources when no configuration is given). Unknown keys
    are logged and skipped.
    """
    config = config or MonitorConfig.defaults()

    if enabled_sources is None:
        keys = [key for key in COLLECTOR_REGISTRY if config.is_enabled(key)]
    else:
        keys = list(dict.fromkeys(enabled_sources))

    collectors: List[BaseCollector] = []
    for key in keys:
        collector_cls = COLLECTOR_REGISTRY.get(key)
        if collector_cls is None:
            logger.warning("Unknown media source %r ignored", key)
            continue
        collectors.append(collector_cls(http_client, **config.source_options(key)))
    return collectors
