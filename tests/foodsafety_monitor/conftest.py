"""Shared fixtures for food-safety monitor tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from foodsafety_monitor.models import CollectorStats


class FakeHTTPClient:
    """Stand-in for ``HTTPClient`` that serves canned responses by URL substring.

    A route value may be a text body, a JSON-able dict/list, a
    ``(status_code, body)`` tuple, an exception instance to raise, or a
    callable ``(url, params) -> value`` resolved on each request. Unmatched
    URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None) -> None:
        self.routes = routes or {}
        self.requests: List[Tuple[str, Optional[Dict[str, Any]], Optional[Dict[str, str]]]] = []

    async def get_async(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        stats: Optional[CollectorStats] = None,
    ) -> httpx.Response:
        self.requests.append((url, params, headers))
        if stats:
            stats.http_requests += 1

        request = httpx.Request("GET", url)
        for pattern, payload in self.routes.items():
            if pattern not in url:
                continue
            if callable(payload):
                payload = payload(url, params)
            if isinstance(payload, Exception):
                raise payload
            status, body = payload if isinstance(payload, tuple) else (200, payload)
            if isinstance(body, (dict, list)):
                response = httpx.Response(status, json=body, request=request)
            else:
                response = httpx.Response(status, text=body, request=request)
            response.raise_for_status()
            return response

        response = httpx.Response(404, text="Not Found", request=request)
        response.raise_for_status()
        return response

    def requested(self, pattern: str) -> int:
        return sum(1 for url, _, _ in self.requests if pattern in url)


@pytest.fixture
def fake_http() -> Callable[..., FakeHTTPClient]:
    """Factory building a ``FakeHTTPClient`` from a route mapping."""

    def _build(routes: Optional[Dict[str, Any]] = None) -> FakeHTTPClient:
        return FakeHTTPClient(routes)

    return _build


def rss_document(*entries: Dict[str, str]) -> str:
    """Render a minimal RSS 2.0 document from entry dicts."""
    items = []
    for entry in entries:
        categories = "".join(f"<category>{term}</category>" for term in entry.get("categories", "").split("|") if term)
        items.append(
            "<item>"
            f"<title>{entry['title']}</title>"
            f"<link>{entry['link']}</link>"
            f"<description>{entry.get('description', '')}</description>"
            f"<pubDate>{entry['pubDate']}</pubDate>"
            f"{categories}"
            "</item>"
        )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel><title>Feed</title><link>https://example.com/</link>'
        "<description>Test feed</description>"
        + "".join(items)
        + "</channel></rss>"
    )


@pytest.fixture
def make_rss() -> Callable[..., str]:
    return rss_document
