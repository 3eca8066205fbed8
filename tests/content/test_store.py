"""Tests for ContentStore, the slug-keyed document store."""

from datetime import date

import pytest

from folio.content.models import CollectionType, Document
from folio.content.store import ContentStore
from folio.errors import DuplicateSlug


def _make_document(
    slug: str = "publication/paper",
    collection: CollectionType = CollectionType.PUBLICATION,
    source_path: str = "_publications/paper.md",
) -> Document:
    return Document(
        slug=slug, collection=collection, date=date(2020, 1, 1), source_path=source_path
    )


class TestAdd:
    def test_stores_document(self):
        store = ContentStore()
        store.add(_make_document())

        fetched = store.get("publication/paper")
        assert fetched is not None
        assert fetched.source_path == "_publications/paper.md"
        assert len(store) == 1

    def test_duplicate_slug_raises(self):
        store = ContentStore()
        store.add(_make_document(source_path="a.md"))

        with pytest.raises(DuplicateSlug) as info:
            store.add(_make_document(source_path="b.md"))

        assert info.value.slug == "publication/paper"
        assert info.value.path == "b.md"
        assert info.value.other_path == "a.md"
        assert info.value.fatal

    def test_duplicate_does_not_replace_original(self):
        store = ContentStore()
        store.add(_make_document(source_path="a.md"))
        with pytest.raises(DuplicateSlug):
            store.add(_make_document(source_path="b.md"))

        assert store.get("publication/paper").source_path == "a.md"

    def test_constructor_adds_documents(self):
        store = ContentStore([_make_document("x"), _make_document("y")])
        assert store.exists("x")
        assert store.exists("y")


class TestList:
    def test_keeps_insertion_order(self):
        store = ContentStore([_make_document("b"), _make_document("a")])
        assert [d.slug for d in store.list()] == ["b", "a"]
        assert [d.slug for d in store] == ["b", "a"]

    def test_filters_by_collection(self):
        store = ContentStore(
            [
                _make_document("pub"),
                _make_document("post", collection=CollectionType.POST),
            ]
        )
        assert [d.slug for d in store.list(CollectionType.POST)] == ["post"]

    def test_get_missing_returns_none(self):
        assert ContentStore().get("nope") is None
