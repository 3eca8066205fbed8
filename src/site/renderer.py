"""Render documents and collections through the fixed template set.

Templates are Jinja2 files shipped inside the package.  Missing optional
fields render as empty strings (ChainableUndefined), so a publication
without a venue still renders; only an unknown template id is an error.
"""

from __future__ import annotations

import logging
from datetime import date
from enum import StrEnum
from typing import Any

import markdown
from jinja2 import ChainableUndefined, Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from folio.config import SiteConfig
from folio.content.models import Collection, CollectionType, Document
from folio.errors import UnknownTemplate
from folio.shared.slugify import slugify

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "tables",
    "attr_list",
    "footnotes",
    "sane_lists",
]


class TemplateId(StrEnum):
    """The templates a site is rendered with."""

    PUBLICATION = "publication"
    POST = "post"
    LISTING = "listing"
    TAG = "tag"
    HOME = "home"
    FEED = "feed"
    SITEMAP = "sitemap"

    @property
    def filename(self) -> str:
        if self in (TemplateId.FEED, TemplateId.SITEMAP):
            return f"{self.value}.xml"
        return f"{self.value}.html"


def markdown_to_html(text: str) -> Markup:
    """Convert a markdown body to HTML; code blocks pass through untouched."""
    if not text:
        return Markup("")
    return Markup(markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS, output_format="html"))


def format_date(value: date | None, fmt: str = "%B %d, %Y") -> str:
    if not isinstance(value, date):
        return ""
    return value.strftime(fmt)


def _create_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("folio.site", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=ChainableUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["markdown"] = markdown_to_html
    env.filters["date_format"] = format_date
    env.filters["slug"] = slugify
    return env


class Renderer:
    """Turns documents and collections into page text.

    Rendering is side-effect free: the caller decides where output goes.
    """

    def __init__(self, config: SiteConfig) -> None:
        self._config = config
        self._env = _create_environment()

    def render(self, template_id: TemplateId | str, **context: Any) -> str:
        """Render a named template with *context*.

        Raises:
            UnknownTemplate: *template_id* is not one of TemplateId.
        """
        try:
            tid = TemplateId(template_id)
        except ValueError:
            raise UnknownTemplate(str(template_id)) from None

        template = self._env.get_template(tid.filename)
        logger.debug("Rendering %s", tid.value)
        return template.render(
            site=self._config.site,
            base_url=self._config.site.base_url.rstrip("/"),
            collection_types=list(CollectionType),
            **context,
        )

    def render_document(self, document: Document) -> str:
        """Detail page; the template is chosen by the document's collection."""
        return self.render(document.collection.value, document=document, page_title=document.title)

    def render_listing(self, collection: Collection) -> str:
        return self.render(
            TemplateId.LISTING,
            collection=collection,
            documents=collection.documents,
            page_title=collection.title,
        )

    def render_tag(self, name: str, documents: list[Document]) -> str:
        return self.render(TemplateId.TAG, tag=name, documents=documents, page_title=name)

    def render_home(self, collections: dict[CollectionType, Collection], limit: int = 5) -> str:
        recent = {kind: col.documents[:limit] for kind, col in collections.items()}
        return self.render(TemplateId.HOME, collections=collections, recent=recent)

    def render_feed(self, collection: Collection) -> str:
        """Atom feed; `updated` is the newest entry date so output is reproducible."""
        updated = collection.documents[0].date if collection.documents else None
        return self.render(
            TemplateId.FEED,
            collection=collection,
            documents=collection.documents,
            updated=updated,
        )

    def render_sitemap(self, urls: list[str]) -> str:
        return self.render(TemplateId.SITEMAP, urls=urls)
