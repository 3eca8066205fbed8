"""Content domain: documents, collections and how they are read.

Raw files are split into document blobs, parsed into Documents, stored by
slug in a ContentStore and indexed into date-ordered Collections.
"""

from folio.content.indexer import IndexResult, build_collections, collect_tags
from folio.content.models import (
    RECOGNIZED_FIELDS,
    Collection,
    CollectionType,
    Document,
)
from folio.content.parser import parse_document, parse_file, render_front_matter
from folio.content.store import ContentStore
from folio.content.tokenizer import split_documents

__all__ = [
    "RECOGNIZED_FIELDS",
    "Collection",
    "CollectionType",
    "ContentStore",
    "Document",
    "IndexResult",
    "build_collections",
    "collect_tags",
    "parse_document",
    "parse_file",
    "render_front_matter",
    "split_documents",
]
