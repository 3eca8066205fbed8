"""Tests for grouping and ordering documents into collections."""

from datetime import date

import pytest

from folio.content.indexer import build_collections, collect_tags, sort_by_date
from folio.content.models import CollectionType, Document
from folio.errors import InvalidDate


def _doc(slug: str, when: date | None, collection=CollectionType.PUBLICATION, **kwargs) -> Document:
    return Document(slug=slug, collection=collection, date=when, source_path=f"{slug}.md", **kwargs)


class TestBuildCollections:
    def test_newest_first(self):
        docs = [_doc("old", date(2017, 5, 4)), _doc("new", date(2020, 5, 4))]
        result = build_collections(docs)
        slugs = [d.slug for d in result.collections[CollectionType.PUBLICATION].documents]
        assert slugs == ["new", "old"]

    def test_equal_dates_keep_input_order(self):
        same = date(2021, 1, 1)
        docs = [
            _doc("first", same),
            _doc("newer", date(2022, 1, 1)),
            _doc("second", same),
            _doc("third", same),
        ]
        result = build_collections(docs)
        slugs = [d.slug for d in result.collections[CollectionType.PUBLICATION].documents]
        assert slugs == ["newer", "first", "second", "third"]

    def test_order_is_non_increasing(self):
        dates = [date(2019, 1, d) for d in (5, 1, 9, 1, 3, 9)]
        docs = [_doc(f"d{i}", d) for i, d in enumerate(dates)]
        ordered = build_collections(docs).collections[CollectionType.PUBLICATION].documents
        assert all(a.date >= b.date for a, b in zip(ordered, ordered[1:]))

    def test_deterministic(self):
        docs = [_doc(f"d{i}", date(2020, 1, 1 + i % 3)) for i in range(9)]
        first = build_collections(docs).documents()
        second = build_collections(docs).documents()
        assert [d.slug for d in first] == [d.slug for d in second]

    def test_groups_by_collection(self):
        docs = [
            _doc("pub", date(2020, 1, 1)),
            _doc("post", date(2020, 1, 2), collection=CollectionType.POST),
        ]
        result = build_collections(docs)
        assert [d.slug for d in result.collections[CollectionType.POST].documents] == ["post"]
        assert [d.slug for d in result.collections[CollectionType.PUBLICATION].documents] == ["pub"]

    def test_every_collection_present_even_if_empty(self):
        result = build_collections([])
        assert set(result.collections) == set(CollectionType)
        assert all(c.documents == [] for c in result.collections.values())

    def test_undated_document_is_skipped_and_reported(self):
        docs = [_doc("dated", date(2020, 1, 1)), _doc("undated", None)]
        result = build_collections(docs)
        assert [d.slug for d in result.documents()] == ["dated"]
        assert len(result.errors) == 1
        assert isinstance(result.errors[0], InvalidDate)
        assert result.errors[0].path == "undated.md"

    def test_undated_document_raises_when_strict(self):
        with pytest.raises(InvalidDate):
            build_collections([_doc("undated", None)], strict=True)


class TestSortByDate:
    def test_accepts_any_iterable(self):
        docs = (_doc(s, date(2020, 1, n)) for s, n in (("a", 1), ("b", 2)))
        assert [d.slug for d in sort_by_date(docs)] == ["b", "a"]


class TestCollectTags:
    def test_groups_documents_by_tag_slug(self):
        a = _doc("a", date(2020, 1, 1), tags=["Bayesian Optimization", "catalysis"])
        b = _doc("b", date(2020, 1, 2), tags=["bayesian optimization"])
        tags = collect_tags([a, b])

        assert list(tags) == ["bayesian-optimization", "catalysis"]
        name, docs = tags["bayesian-optimization"]
        assert name == "Bayesian Optimization"
        assert [d.slug for d in docs] == ["a", "b"]

    def test_repeated_tag_on_one_document_counts_once(self):
        a = _doc("a", date(2020, 1, 1), tags=["x", "X"])
        assert [d.slug for d in collect_tags([a])["x"][1]] == ["a"]

    def test_unsluggable_tags_are_ignored(self):
        a = _doc("a", date(2020, 1, 1), tags=["!!!"])
        assert collect_tags([a]) == {}
