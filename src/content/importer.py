"""Generate publication documents from a tab-separated listing.

Each row becomes ``_publications/<pub_date>-<url_slug>.md`` with the same
front matter a hand-written publication would carry.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path

from folio.content.models import CollectionType, Document
from folio.content.parser import parse_date, render_front_matter
from folio.errors import FolioError, InvalidDate, MalformedDocument
from folio.shared.slugify import slugify

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("pub_date", "title", "venue")
OPTIONAL_COLUMNS = ("excerpt", "citation", "url_slug", "paper_url")


@dataclass
class ImportResult:
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    errors: list[FolioError] = field(default_factory=list)


def publication_from_row(row: dict[str, str], label: str) -> Document:
    """Build a publication Document from one TSV row.

    Raises:
        MalformedDocument: a required column is empty.
        InvalidDate: pub_date is not an ISO date.
    """
    values = {k: (row.get(k) or "").strip() for k in REQUIRED_COLUMNS + OPTIONAL_COLUMNS}
    missing = [k for k in REQUIRED_COLUMNS if not values[k]]
    if missing:
        raise MalformedDocument(f"missing column(s): {', '.join(missing)}", path=label)

    pub_date = parse_date(values["pub_date"], label)
    if pub_date is None:
        raise InvalidDate("empty pub_date", path=label)

    url_slug = slugify(values["url_slug"]) or slugify(values["title"]) or "publication"
    stem = f"{pub_date.isoformat()}-{url_slug}"
    metadata = {
        "title": values["title"],
        "collection": "publications",
        "permalink": f"/publication/{stem}",
        "excerpt": values["excerpt"],
        "date": pub_date.isoformat(),
        "venue": values["venue"],
        "paperurl": values["paper_url"],
        "citation": values["citation"],
    }
    return Document(
        slug=f"publication/{stem}",
        collection=CollectionType.PUBLICATION,
        title=values["title"],
        date=pub_date,
        metadata={k: v for k, v in metadata.items() if v},
        body=values["excerpt"],
        source_path=label,
    )


def import_publications(
    tsv_path: Path, content_root: Path, *, overwrite: bool = False
) -> ImportResult:
    """Write one markdown document per row of *tsv_path*.

    Existing files are left alone unless *overwrite* is set.  Bad rows are
    reported and skipped.
    """
    result = ImportResult()
    target_dir = content_root / "_publications"

    with open(tsv_path, encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle, delimiter="\t")
        for line_no, row in enumerate(reader, start=2):
            label = f"{tsv_path.name}:{line_no}"
            try:
                document = publication_from_row(row, label)
            except (MalformedDocument, InvalidDate) as exc:
                logger.warning("Skipping row %s", exc)
                result.errors.append(exc)
                continue

            out_path = target_dir / f"{document.slug.split('/', 1)[1]}.md"
            if out_path.exists() and not overwrite:
                logger.info("Not overwriting %s", out_path)
                result.skipped.append(out_path)
                continue

            target_dir.mkdir(parents=True, exist_ok=True)
            body = f"{document.body}\n" if document.body else ""
            out_path.write_text(render_front_matter(document) + body, encoding="utf-8")
            result.written.append(out_path)

    return result
