"""Tests for duplicate detection and merging."""

from foodsafety_monitor.dedup import (
    are_duplicates,
    deduplicate_and_merge,
    merge_items,
    text_similarity,
)
from foodsafety_monitor.models import MediaItem


def make_item(**overrides):
    data = {
        "sources": ["Test Source"],
        "source_urls": ["https://example.com/item"],
        "title": "Untitled",
    }
    data.update(overrides)
    return MediaItem(**data)


def test_text_similarity_is_relative_to_smaller_word_set():
    assert text_similarity("ground turkey", "ground turkey patties") == 1.0
    assert text_similarity("Acme recall", "Unrelated headline entirely") == 0.0
    assert text_similarity("", "anything") == 0.0
    assert text_similarity("a b c", "a b c") == 0.0


def test_shared_url_matches_in_either_order():
    a = make_item(title="First story", source_urls=["http://x"])
    b = make_item(title="Completely different", source_urls=["http://y", "http://x"])
    assert are_duplicates(a, b)
    assert are_duplicates(b, a)


def test_recall_number_match():
    a = make_item(title="Alpha", source_urls=["http://a"], recall_number="F-0001-2024")
    b = make_item(title="Omega", source_urls=["http://b"], recall_number="F-0001-2024")
    assert are_duplicates(a, b)


def test_firm_match_is_case_insensitive():
    a = make_item(title="Alpha", source_urls=["http://a"], recalling_firm="Acme Foods")
    b = make_item(title="Omega", source_urls=["http://b"], recalling_firm="ACME FOODS")
    assert are_duplicates(a, b)


def test_unrelated_items_are_not_duplicates():
    a = make_item(title="Cucumber outbreak grows", source_urls=["http://a"], pathogen="Salmonella")
    b = make_item(title="New labeling rule finalized", source_urls=["http://b"], pathogen="Salmonella")
    assert not are_duplicates(a, b)


def test_same_pathogen_similar_product_merged():
    items = [
        make_item(
            title="Holiday meal warning issued",
            source_urls=["http://a"],
            pathogen="Salmonella",
            product="ground turkey",
        ),
        make_item(
            title="Processor halts production line",
            source_urls=["http://b"],
            pathogen="Salmonella",
            product="ground turkey patties",
        ),
    ]
    merged = deduplicate_and_merge(items)
    assert len(merged) == 1
    assert merged[0].source_urls == ["http://a", "http://b"]


def test_fda_recall_and_news_article_merge():
    fda = make_item(
        sources=["FDA"],
        source_urls=["https://api.example/recall/123"],
        title="Acme Foods Recalls Ground Beef (Class I)",
        date="2024-03-15",
        category="Recall",
        severity="high",
        classification="Class I",
        recalling_firm="Acme Foods",
    )
    news = make_item(
        sources=["Food Safety News"],
        source_urls=["https://www.foodsafetynews.com/2024/03/acme-ground-beef/"],
        title="Acme Foods recalls ground beef over E. coli",
        summary="The ground beef may be contaminated with E. coli O157:H7, according to the recall notice.",
        date="2024-03-15",
        category="Recall",
        severity="medium",
        pathogen="E. coli",
    )

    merged = deduplicate_and_merge([fda, news])

    assert len(merged) == 1
    item = merged[0]
    assert item.sources == ["FDA", "Food Safety News"]
    assert item.severity == "high"
    assert item.pathogen == "E. coli"
    assert item.title == fda.title
    assert item.summary == news.summary


def test_merge_fills_empty_fields_without_overwriting():
    primary = make_item(title="A", product="Beef", states=["CA"])
    secondary = make_item(title="B", product="Pork", states=["TX"], case_count=7, tags=["Recall/Crisis"])
    merged = merge_items(primary, secondary)
    assert merged.product == "Beef"
    assert merged.states == ["CA"]
    assert merged.case_count == 7
    assert merged.tags == ["Recall/Crisis"]
    assert primary.case_count is None


def test_merge_is_idempotent_for_sources_and_urls():
    a = make_item(sources=["FDA"], source_urls=["http://a"])
    b = make_item(sources=["CDC", "FDA"], source_urls=["http://b", "http://a"])
    once = merge_items(a, b)
    twice = merge_items(once, b)
    assert set(twice.sources) == set(once.sources) == {"FDA", "CDC"}
    assert set(twice.source_urls) == set(once.source_urls) == {"http://a", "http://b"}


def test_cluster_grows_through_merged_representative():
    first = make_item(title="Acme Foods expands sausage recall", source_urls=["http://a"])
    second = make_item(
        title="Acme Foods sausage recall expands again",
        source_urls=["http://b"],
        recalling_firm="Acme Foods LLC",
    )
    third = make_item(title="Plant closure announced", source_urls=["http://c"], recalling_firm="acme foods llc")

    merged = deduplicate_and_merge([first, second, third])

    assert len(merged) == 1
    assert merged[0].source_urls == ["http://a", "http://b", "http://c"]


def test_deduplicate_keeps_distinct_items_in_order():
    items = [
        make_item(title="Listeria found in cheese", source_urls=["http://1"]),
        make_item(title="Senate debates labeling bill", source_urls=["http://2"]),
    ]
    merged = deduplicate_and_merge(items)
    assert [item.title for item in merged] == ["Listeria found in cheese", "Senate debates labeling bill"]
