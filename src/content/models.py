"""Document and collection models (pydantic v2).

A Document is one publication or blog post: its front-matter fields,
normalized to strings, and its markdown body.  A Collection is the
date-ordered group of documents sharing a collection tag.
"""

from __future__ import annotations

import datetime as dt
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class CollectionType(StrEnum):
    """Kind of document; each gets its own listing page."""

    PUBLICATION = "publication"
    POST = "post"

    @property
    def plural(self) -> str:
        return f"{self.value}s"

    @property
    def label(self) -> str:
        return "Publications" if self is CollectionType.PUBLICATION else "Blog Posts"


# Front-matter keys with dedicated handling.  Anything else is kept in
# Document.metadata as-is but rendered only by templates that ask for it.
RECOGNIZED_FIELDS: tuple[str, ...] = (
    "title",
    "collection",
    "permalink",
    "excerpt",
    "date",
    "venue",
    "paperurl",
    "citation",
    "tags",
)

# Content directories and the collection their documents default to.
COLLECTION_DIRS: dict[str, CollectionType] = {
    "_publications": CollectionType.PUBLICATION,
    "_posts": CollectionType.POST,
}


class Document(BaseModel):
    """A single publication or post, read once per build and never mutated."""

    model_config = {"frozen": True}

    slug: str
    collection: CollectionType
    title: str = ""
    date: dt.date | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    body: str = ""
    source_path: str = ""
    source_index: int = 0

    @field_validator("slug")
    @classmethod
    def _slug_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("slug must not be empty")
        return value

    def get(self, key: str) -> str:
        """Return a front-matter field, or an empty string when absent."""
        return self.metadata.get(key, "")

    @property
    def excerpt(self) -> str:
        return self.get("excerpt")

    @property
    def venue(self) -> str:
        return self.get("venue")

    @property
    def citation(self) -> str:
        return self.get("citation")

    @property
    def external_link(self) -> str:
        return self.get("paperurl") or self.get("external_link")

    @property
    def recognized_fields(self) -> dict[str, str]:
        return {k: self.metadata[k] for k in RECOGNIZED_FIELDS if k in self.metadata}

    @property
    def url(self) -> str:
        return f"/{self.slug}/"


class Collection(BaseModel):
    """Documents sharing a collection tag, newest first."""

    collection: CollectionType
    documents: list[Document] = Field(default_factory=list)

    @property
    def slug(self) -> str:
        return self.collection.plural

    @property
    def title(self) -> str:
        return self.collection.label

    def __len__(self) -> int:
        return len(self.documents)
