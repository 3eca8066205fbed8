"""In-memory content store keyed by slug.

Holds every Document parsed during one build.  Documents are added once
and never replaced: a second document claiming an existing slug raises
DuplicateSlug instead of overwriting the first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from folio.content.models import CollectionType, Document
from folio.errors import DuplicateSlug

logger = logging.getLogger(__name__)

# Alias to avoid shadowing by ContentStore.list method
_list = list


class ContentStore:
    """Slug → Document mapping, in insertion order."""

    def __init__(self, documents: _list[Document] | None = None) -> None:
        self._records: dict[str, Document] = {}
        for document in documents or []:
            self.add(document)

    # ── Write operations ─────────────────────────────────────────

    def add(self, document: Document) -> None:
        """Insert a document.

        Raises DuplicateSlug if the slug is already taken.
        """
        existing = self._records.get(document.slug)
        if existing is not None:
            raise DuplicateSlug(
                document.slug,
                path=document.source_path,
                other_path=existing.source_path,
            )
        self._records[document.slug] = document
        logger.debug("Stored %s from %s", document.slug, document.source_path)

    # ── Read operations ──────────────────────────────────────────

    def get(self, slug: str) -> Document | None:
        """Return a document by slug, or None if not found."""
        return self._records.get(slug)

    def list(self, collection: CollectionType | None = None) -> _list[Document]:
        """Return documents in insertion order, optionally filtered by collection."""
        results = _list(self._records.values())
        if collection is not None:
            results = [d for d in results if d.collection == collection]
        return results

    def exists(self, slug: str) -> bool:
        return slug in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Document]:
        return iter(self._records.values())
