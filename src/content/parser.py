"""Front-matter document parser.

A raw document is a ``---`` delimited YAML block followed by a markdown
body::

    ---
    title: "Paper Title Number 1"
    collection: publications
    permalink: /publication/2009-10-01-paper-title-number-1
    date: 2009-10-01
    venue: 'Journal 1'
    ---
    This paper is about the number 1.

parse_document() is a pure function; parse_file() adds the file read and
separator split on top of it.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from folio.content.models import CollectionType, Document
from folio.content.tokenizer import DEFAULT_SEPARATOR, split_documents
from folio.errors import FolioError, InvalidDate, MalformedDocument

logger = logging.getLogger(__name__)

FRONT_MATTER_MARKER = "---"

_FILENAME_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})-")


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that keeps plain scalars as written.

    Only null and merge keys are resolved; numbers, booleans and dates
    stay strings, and parse_date() validates the date.
    """


_KEPT_RESOLVERS = frozenset({"tag:yaml.org,2002:null", "tag:yaml.org,2002:merge"})

_FrontMatterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag in _KEPT_RESOLVERS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _split_front_matter(raw: str, source_path: str) -> tuple[str, str]:
    """Return (front-matter block, body) or raise MalformedDocument."""
    lines = raw.strip("\n").splitlines()
    if not lines or lines[0].strip() != FRONT_MATTER_MARKER:
        raise MalformedDocument("missing opening front-matter marker", path=source_path)

    for end in range(1, len(lines)):
        if lines[end].strip() == FRONT_MATTER_MARKER:
            block = "\n".join(lines[1:end])
            body = "\n".join(lines[end + 1 :]).strip("\n")
            return block, body

    raise MalformedDocument("unterminated front-matter block", path=source_path)


def _to_text(value: Any) -> str:
    """Normalize a YAML value to the string form stored on a Document."""
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(_to_text(v) for v in value)
    if isinstance(value, dict):
        return yaml.safe_dump(value, default_flow_style=True, sort_keys=False).strip()
    return str(value)


def _parse_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return [_to_text(v).strip() for v in value if _to_text(v).strip()]
    return [t.strip() for t in _to_text(value).split(",") if t.strip()]


def _parse_collection(
    value: str, default: CollectionType | None, source_path: str
) -> CollectionType:
    if not value:
        if default is None:
            raise MalformedDocument("no collection given", path=source_path)
        return default
    # Jekyll-style front matter names the collection in the plural.
    name = value.strip().lower()
    for candidate in (name, name.removesuffix("s")):
        try:
            return CollectionType(candidate)
        except ValueError:
            continue
    raise MalformedDocument(f"unknown collection {value!r}", path=source_path)


def parse_date(value: Any, source_path: str = "") -> date | None:
    """Parse a front-matter date, returning None when it is absent.

    Raises InvalidDate for anything present but unparsable.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise InvalidDate(f"unparsable date {value!r}", path=source_path)


def _date_from_filename(source_path: str) -> date | None:
    match = _FILENAME_DATE.match(Path(source_path).name)
    if match is None:
        return None
    return parse_date(match.group(1), source_path)


def _derive_slug(
    permalink: str, collection: CollectionType, source_path: str, index: int
) -> str:
    slug = permalink.strip().strip("/").strip()
    if slug:
        return slug
    stem = Path(source_path).stem
    if not stem:
        raise MalformedDocument("no permalink and no file name to derive one", path=source_path)
    if index:
        stem = f"{stem}-{index}"
    return f"{collection.value}/{stem}"


def parse_document(
    raw: str,
    source_path: str = "",
    *,
    index: int = 0,
    default_collection: CollectionType | None = None,
) -> Document:
    """Parse one raw document into a Document.

    Args:
        raw: Document text, front matter first.
        source_path: Originating file, used for errors, slug and date fallbacks.
        index: Position of this document within its file.
        default_collection: Collection used when the front matter has none.

    Raises:
        MalformedDocument: Front matter missing, unterminated or not a mapping.
        InvalidDate: The date field is present but unparsable.
    """
    block, body = _split_front_matter(raw, source_path)

    try:
        loaded = yaml.load(block, Loader=_FrontMatterLoader)
    except (yaml.YAMLError, ValueError) as exc:
        problem = getattr(exc, "problem", None) or str(exc)
        raise MalformedDocument(f"unparsable front matter: {problem}", path=source_path) from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise MalformedDocument("front matter is not a key/value mapping", path=source_path)

    metadata = {str(key): _to_text(value) for key, value in loaded.items()}
    collection = _parse_collection(metadata.get("collection", ""), default_collection, source_path)

    doc_date = parse_date(loaded.get("date"), source_path)
    if doc_date is None:
        doc_date = _date_from_filename(source_path)

    try:
        return Document(
            slug=_derive_slug(metadata.get("permalink", ""), collection, source_path, index),
            collection=collection,
            title=metadata.get("title", ""),
            date=doc_date,
            metadata=metadata,
            tags=_parse_tags(loaded.get("tags")),
            body=body,
            source_path=source_path,
            source_index=index,
        )
    except ValidationError as exc:
        problems = "; ".join(err["msg"] for err in exc.errors())
        raise MalformedDocument(f"invalid document: {problems}", path=source_path) from exc


def parse_file(
    path: Path,
    *,
    label: str | None = None,
    separator: str = DEFAULT_SEPARATOR,
    default_collection: CollectionType | None = None,
) -> tuple[list[Document], list[FolioError]]:
    """Read *path* and parse every document it contains.

    Per-document failures are returned rather than raised so the caller
    can keep going with the rest of the file.
    """
    source_path = label or str(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [], [MalformedDocument(f"cannot read file: {exc}", path=source_path)]

    documents: list[Document] = []
    errors: list[FolioError] = []
    for index, raw in enumerate(split_documents(text, separator)):
        try:
            documents.append(
                parse_document(
                    raw, source_path, index=index, default_collection=default_collection
                )
            )
        except (MalformedDocument, InvalidDate) as exc:
            logger.warning("Skipping %s: %s", source_path, exc.message)
            errors.append(exc)
    return documents, errors


def render_front_matter(document: Document) -> str:
    """Serialize a document's recognized fields back to a front-matter block."""
    fields = document.recognized_fields
    dumped = ""
    if fields:
        dumped = yaml.safe_dump(
            fields, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
    return f"{FRONT_MATTER_MARKER}\n{dumped}{FRONT_MATTER_MARKER}\n"
