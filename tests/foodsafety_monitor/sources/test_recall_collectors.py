"""Tests for the FDA and USDA FSIS recall collectors."""

import json
from datetime import date, datetime, timezone

import pytest

from foodsafety_monitor.models import FetchOptions
from foodsafety_monitor.sources import FDARecallCollector, FSISRecallCollector
from foodsafety_monitor.sources.openfda import enforcement_params, recall_url

SINCE_MARCH = FetchOptions(since=date(2024, 3, 1))

ACME_RECALL = {
    "recall_number": "F-0421-2024",
    "recalling_firm": "Acme Foods",
    "product_description": "Acme Ground Beef, 1 lb chubs; UPC 012345678905",
    "reason_for_recall": "Product may be contaminated with E. coli O157:H7",
    "distribution_pattern": "Distributed in CA, NV and AZ",
    "product_quantity": "12,000 lbs",
    "classification": "Class I",
    "status": "Ongoing",
    "report_date": "20240313",
    "recall_initiation_date": "20240308",
}

SPINACH_RECALL = {
    "recall_number": "F-0422-2024",
    "recalling_firm": "Green Fields",
    "product_description": "Organic Baby Spinach, 5 oz clamshell",
    "reason_for_recall": "Potential Listeria monocytogenes",
    "distribution_pattern": "Nationwide",
    "classification": "Class II",
    "status": "Ongoing",
    "report_date": "20240312",
}

CHICKEN_RECALL = {
    "recall_number": "F-0423-2024",
    "recalling_firm": "Sunny Farms",
    "product_description": "Ready-to-eat chicken salad, 8 oz",
    "reason_for_recall": "Undeclared egg",
    "distribution_pattern": "WA and OR",
    "status": "Ongoing",
    "report_date": "20240311",
}


def test_enforcement_params_cover_window():
    params = enforcement_params(
        datetime(2024, 3, 1, tzinfo=timezone.utc),
        25,
        today=datetime(2024, 3, 15, tzinfo=timezone.utc),
    )
    assert params == {
        "search": "report_date:[20240301 TO 20240315]",
        "limit": 25,
        "sort": "report_date:desc",
    }


@pytest.mark.asyncio
async def test_fda_collector_builds_recall_items(fake_http):
    client = fake_http({"api.fda.gov": {"results": [ACME_RECALL]}})
    collector = FDARecallCollector(client, limit=10)

    items = await collector.fetch(SINCE_MARCH)

    assert len(items) == 1
    item = items[0]
    assert item.sources == ["FDA"]
    assert item.source_urls == [recall_url("F-0421-2024")]
    assert item.title == "Acme Foods Recalls Acme Ground Beef (Class I)"
    assert item.summary == (
        "Product may be contaminated with E. coli O157:H7 | Distribution: Distributed in CA, NV and AZ"
        " | Quantity: 12,000 lbs"
    )
    assert item.date == "2024-03-13"
    assert item.category == "Recall"
    assert item.severity == "high"
    assert item.pathogen == "E. coli"
    assert item.product == "Acme Ground Beef"
    assert item.states == ["CA", "NV", "AZ"]
    assert item.recall_number == "F-0421-2024"
    assert item.recalling_firm == "Acme Foods"
    assert item.status == "Ongoing"

    _, params, _ = client.requests[0]
    assert params["limit"] == 10
    assert params["search"].startswith("report_date:[20240301 TO ")


@pytest.mark.asyncio
async def test_fda_collector_treats_404_as_no_results(fake_http):
    collector = FDARecallCollector(fake_http({"api.fda.gov": (404, {"error": {"code": "NOT_FOUND"}})}))

    result = await collector.collect(SINCE_MARCH)

    assert result.success is True
    assert result.items == []


@pytest.mark.asyncio
async def test_fda_collector_server_error_yields_empty_list(fake_http):
    collector = FDARecallCollector(fake_http({"api.fda.gov": (500, "boom")}))

    result = await collector.collect(SINCE_MARCH)

    assert result.success is False
    assert result.items == []


FSIS_TABLE_PAGE = """
<html><body>
<table>
  <tr><th>Date</th><th>Recall</th><th>Details</th></tr>
  <tr>
    <td>03/12/2024</td>
    <td><a href="/recalls/acme-sausage">Acme Meats Recalls Pork Sausage Due to Listeria</a></td>
    <td>Class I - CA, NV</td>
  </tr>
  <tr>
    <td>01/02/2024</td>
    <td><a href="/recalls/old">Holiday Ham Recall</a></td>
    <td>Class II</td>
  </tr>
</table>
</body></html>
"""


@pytest.mark.asyncio
async def test_fsis_scrapes_recall_table(fake_http):
    client = fake_http({"fsis.usda.gov": FSIS_TABLE_PAGE})
    collector = FSISRecallCollector(client)

    items = await collector.fetch(SINCE_MARCH)

    assert len(items) == 1
    item = items[0]
    assert item.sources == ["USDA FSIS"]
    assert item.source_urls == ["https://www.fsis.usda.gov/recalls/acme-sausage"]
    assert item.title == "Acme Meats Recalls Pork Sausage Due to Listeria"
    assert item.date == "2024-03-12"
    assert item.category == "Recall"
    assert item.classification == "Class I"
    assert item.severity == "high"
    assert item.pathogen == "Listeria"
    assert item.states == ["CA", "NV"]
    assert client.requested("api.fda.gov") == 0
    _, _, headers = client.requests[0]
    assert headers["User-Agent"].startswith("Mozilla/5.0")


@pytest.mark.asyncio
async def test_fsis_reads_embedded_settings(fake_http):
    settings = {
        "recalls": [
            {
                "title": "Bison Jerky Recall",
                "url": "/recalls/bison-jerky",
                "date": "2024-03-11",
                "reason": "Undeclared soy",
                "classification": "Class II",
                "states": "TX OK",
            },
            {"title": "Stale entry", "url": "/recalls/stale", "date": "2023-12-01"},
        ]
    }
    page = (
        '<html><head><script type="application/json" data-drupal-selector="drupal-settings-json">'
        + json.dumps(settings)
        + "</script></head><body></body></html>"
    )
    collector = FSISRecallCollector(fake_http({"fsis.usda.gov": page}))

    items = await collector.fetch(SINCE_MARCH)

    assert [item.title for item in items] == ["Bison Jerky Recall"]
    item = items[0]
    assert item.summary == "Undeclared soy"
    assert item.classification == "Class II"
    assert item.severity == "medium"
    assert item.states == ["TX", "OK"]


@pytest.mark.asyncio
async def test_fsis_falls_back_to_openfda_product_filter(fake_http):
    client = fake_http(
        {
            "fsis.usda.gov": (403, "Forbidden"),
            "api.fda.gov": {"results": [SPINACH_RECALL, CHICKEN_RECALL]},
        }
    )
    collector = FSISRecallCollector(client, fallback_limit=20)

    result = await collector.collect(SINCE_MARCH)

    assert result.success is True
    assert len(result.items) == 1
    item = result.items[0]
    assert item.sources == ["USDA FSIS", "FDA"]
    assert item.source_urls == [recall_url("F-0423-2024")]
    assert item.title == "Sunny Farms Recalls Ready-to-eat chicken salad (Unclassified)"
    assert item.severity == "medium"
    assert item.states == ["WA", "OR"]
    assert item.date == "2024-03-11"
    assert client.requests[-1][1]["limit"] == 20
    assert len(result.stats.errors) == 1


@pytest.mark.asyncio
async def test_fsis_empty_everywhere(fake_http):
    client = fake_http({"fsis.usda.gov": "<html><body><p>No recalls</p></body></html>"})
    collector = FSISRecallCollector(client)

    result = await collector.collect(SINCE_MARCH)

    assert result.success is True
    assert result.items == []
    assert client.requested("api.fda.gov") == 1
