"""HTTP client with timeout and bounded redirect support for collectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .logging_config import get_logger
from .models import CollectorStats

logger = get_logger("http_client")

DEFAULT_USER_AGENT = "FoodSafetyMonitor/1.0 (+https://github.com/foodsafety-monitor)"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class HTTPConfig:
    """Transport settings shared by every collector."""

    timeout_seconds: float = 15.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = field(default_factory=dict)


class HTTPClient:
    """Async HTTP client wrapper.

    Every request is bounded by ``timeout_seconds``. Redirects are followed
    up to ``max_redirects`` hops, after which ``httpx.TooManyRedirects`` is
    raised. Failures are never retried; non-2xx responses raise
    ``httpx.HTTPStatusError`` so callers can special-case status codes.
    """

    def __init__(
        self,
        config: Optional[HTTPConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or HTTPConfig()
        self.transport = transport
        self.headers = {
            "User-Agent": self.config.user_agent,
            **self.config.headers,
        }

    def _timeout(self, timeout: Optional[float]) -> httpx.Timeout:
        return httpx.Timeout(timeout if timeout is not None else self.config.timeout_seconds)

    async def get_async(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        stats: Optional[CollectorStats] = None,
    ) -> httpx.Response:
        merged_headers = {**self.headers, **(headers or {})}

        if stats:
            stats.http_requests += 1

        async with httpx.AsyncClient(
            timeout=self._timeout(timeout),
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            transport=self.transport,
        ) as client:
            try:
                response = await client.get(url, headers=merged_headers, params=params)
                response.raise_for_status()
                return response

            except httpx.HTTPStatusError as exc:
                logger.debug(
                    "Request GET %s failed with status %s",
                    url,
                    exc.response.status_code,
                )
                raise

            except httpx.TooManyRedirects:
                logger.warning(
                    "Request GET %s exceeded %s redirects",
                    url,
                    self.config.max_redirects,
                )
                raise

            except httpx.TimeoutException:
                logger.warning(
                    "Request GET %s timed out after %.1fs",
                    url,
                    timeout if timeout is not None else self.config.timeout_seconds,
                )
                raise

            except httpx.RequestError as exc:
                logger.warning("Request GET %s failed: %s", url, exc)
                raise
