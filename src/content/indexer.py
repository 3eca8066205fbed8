"""Group documents into date-ordered collections."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from folio.content.models import Collection, CollectionType, Document
from folio.errors import FolioError, InvalidDate
from folio.shared.slugify import slugify

logger = logging.getLogger(__name__)


@dataclass
class IndexResult:
    """Collections keyed by type, plus the documents that were rejected."""

    collections: dict[CollectionType, Collection]
    errors: list[FolioError] = field(default_factory=list)

    def documents(self) -> list[Document]:
        """Every indexed document, collection by collection."""
        return [d for c in self.collections.values() for d in c.documents]


def sort_by_date(documents: Iterable[Document]) -> list[Document]:
    """Newest first; equal dates keep their input order.

    ``sorted`` is stable, so reversing on the date key alone leaves ties in
    the order they arrived.
    """
    return sorted(documents, key=lambda d: d.date, reverse=True)


def build_collections(documents: Iterable[Document], *, strict: bool = False) -> IndexResult:
    """Build one Collection per CollectionType.

    Documents without a date raise InvalidDate in strict mode and are
    skipped (and reported) otherwise.
    """
    grouped: dict[CollectionType, list[Document]] = {c: [] for c in CollectionType}
    errors: list[FolioError] = []

    for document in documents:
        if document.date is None:
            exc = InvalidDate(f"{document.slug} has no date", path=document.source_path)
            if strict:
                raise exc
            logger.warning("Skipping %s: %s", document.source_path, exc.message)
            errors.append(exc)
            continue
        grouped[document.collection].append(document)

    collections = {
        kind: Collection(collection=kind, documents=sort_by_date(docs))
        for kind, docs in grouped.items()
    }
    for kind, col in collections.items():
        logger.debug("Indexed %d %s document(s)", len(col.documents), kind.value)
    return IndexResult(collections=collections, errors=errors)


def collect_tags(documents: Iterable[Document]) -> dict[str, tuple[str, list[Document]]]:
    """Map tag slug → (display name, documents carrying it).

    The first spelling seen for a tag is used as its display name.  Tags
    are returned sorted by slug; documents keep their input order.
    """
    tags: dict[str, tuple[str, list[Document]]] = {}
    for document in documents:
        seen: set[str] = set()
        for tag in document.tags:
            key = slugify(tag)
            if not key or key in seen:
                continue
            seen.add(key)
            tags.setdefault(key, (tag, []))[1].append(document)
    return dict(sorted(tags.items()))
