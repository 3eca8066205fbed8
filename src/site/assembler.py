"""Site assembler: turns the content tree into the rendered output tree.

One forward pass: discover files, parse them into a ContentStore, index
the store into collections, render every page, then write.  All output
paths are planned and checked before the first write, so an unsafe slug
or a page collision aborts the build without touching the output root.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, Field

from folio.config import SiteConfig
from folio.content.indexer import IndexResult, build_collections, collect_tags
from folio.content.models import COLLECTION_DIRS, CollectionType
from folio.content.parser import parse_file
from folio.content.store import ContentStore
from folio.errors import (
    BuildError,
    BuildReport,
    DuplicateSlug,
    ErrorRecord,
    FolioError,
    InvalidDate,
    UnsafeOutputPath,
)
from folio.site.renderer import Renderer

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIXES = frozenset({".md", ".markdown"})
IGNORED_FILES = frozenset({"folio.toml"})


@dataclass(frozen=True)
class BuildContext:
    """Everything one build needs, passed explicitly through each stage."""

    config: SiteConfig
    content_root: Path
    output_root: Path

    @classmethod
    def from_config(cls, config: SiteConfig) -> BuildContext:
        return cls(
            config=config,
            content_root=config.content_root,
            output_root=config.output_root,
        )

    @property
    def strict(self) -> bool:
        return self.config.build.strict


class BuildResult(BaseModel):
    """Outcome of a build that ran to completion."""

    pages_written: int = 0
    assets_copied: int = 0
    errors: list[ErrorRecord] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class SiteContent:
    """Parsed and indexed content, before anything is rendered."""

    store: ContentStore
    index: IndexResult
    assets: list[Path]
    report: BuildReport = field(default_factory=BuildReport)


@dataclass
class _SitePlan:
    """Output files keyed by resolved path; each path has exactly one producer."""

    output_root: Path
    pages: dict[Path, str] = field(default_factory=dict)
    assets: dict[Path, Path] = field(default_factory=dict)
    _owners: dict[Path, str] = field(default_factory=dict)

    def _claim(self, relative: str, owner: str) -> Path:
        target = resolve_output_path(self.output_root, relative, source=owner)
        if target in self._owners:
            raise DuplicateSlug(relative, path=owner, other_path=self._owners[target])
        self._owners[target] = owner
        return target

    def add_page(self, relative: str, content: str, owner: str) -> None:
        self.pages[self._claim(relative, owner)] = content

    def add_asset(self, relative: str, source: Path, owner: str) -> None:
        self.assets[self._claim(relative, owner)] = source


def resolve_output_path(output_root: Path, relative: str, *, source: str = "") -> Path:
    """Resolve *relative* under *output_root*, refusing anything that escapes it.

    Raises:
        UnsafeOutputPath: absolute paths, ``..`` segments, NUL bytes, or a
            resolved target (symlinks included) outside the root.
    """
    if "\0" in relative:
        raise UnsafeOutputPath(f"output path {relative!r} contains a NUL byte", path=source)
    pure = PurePosixPath(relative.replace("\\", "/"))
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise UnsafeOutputPath(f"output path {relative!r} escapes the output root", path=source)

    root = output_root.resolve()
    try:
        target = (root / pure).resolve()
    except (OSError, ValueError) as exc:
        raise UnsafeOutputPath(f"output path {relative!r} is unusable: {exc}", path=source) from exc
    if target == root or not target.is_relative_to(root):
        raise UnsafeOutputPath(f"output path {relative!r} escapes the output root", path=source)
    return target


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith((".", "_")) for part in relative.parts)


def discover_content(
    content_root: Path, output_root: Path
) -> tuple[list[tuple[Path, CollectionType]], list[Path]]:
    """Split the content tree into document files and static assets.

    Documents live in the collection directories (``_publications``,
    ``_posts``).  Any other file outside ``_``/``.`` prefixed directories
    is a static asset.  Both lists are sorted by relative path.
    """
    documents: list[tuple[Path, CollectionType]] = []
    assets: list[Path] = []
    if not content_root.is_dir():
        logger.warning("Content directory not found: %s", content_root)
        return documents, assets

    output_resolved = output_root.resolve()
    # Previous output inside the content tree is not content.
    skip_output = not content_root.resolve().is_relative_to(output_resolved)
    files = sorted(
        (p for p in content_root.rglob("*") if p.is_file()),
        key=lambda p: p.relative_to(content_root).as_posix(),
    )
    for path in files:
        if skip_output and path.resolve().is_relative_to(output_resolved):
            continue
        relative = path.relative_to(content_root)
        top = relative.parts[0]
        if top in COLLECTION_DIRS:
            if path.suffix.lower() in DOCUMENT_SUFFIXES:
                documents.append((path, COLLECTION_DIRS[top]))
            continue
        if _is_hidden(relative) or relative.as_posix() in IGNORED_FILES:
            continue
        assets.append(path)

    logger.debug("Discovered %d document file(s), %d asset(s)", len(documents), len(assets))
    return documents, assets


def _abort(exc: FolioError, report: BuildReport) -> BuildError:
    report.record(exc)
    logger.error("Build aborted: %s", exc)
    return BuildError(exc, report)


def load_site(context: BuildContext) -> SiteContent:
    """Parse and index the content tree without rendering anything.

    Per-file MalformedDocument/InvalidDate errors are recorded and skipped
    unless the build is strict.  DuplicateSlug always aborts.

    Raises:
        BuildError: on any aborting error; its report holds everything
            recorded so far.
    """
    report = BuildReport()
    store = ContentStore()
    doc_files, assets = discover_content(context.content_root, context.output_root)

    for path, default_collection in doc_files:
        label = path.relative_to(context.content_root).as_posix()
        documents, errors = parse_file(
            path,
            label=label,
            separator=context.config.build.separator,
            default_collection=default_collection,
        )
        report.extend(errors)
        if errors and context.strict:
            logger.error("Build aborted (strict): %s", errors[0])
            raise BuildError(errors[0], report)

        for document in documents:
            try:
                store.add(document)
            except DuplicateSlug as exc:
                raise _abort(exc, report) from exc

    try:
        index = build_collections(store, strict=context.strict)
    except InvalidDate as exc:
        raise _abort(exc, report) from exc
    report.extend(index.errors)

    return SiteContent(store=store, index=index, assets=assets, report=report)


def plan_site(context: BuildContext, content: SiteContent, renderer: Renderer) -> _SitePlan:
    """Render every page and map it, with every asset, to its output path."""
    plan = _SitePlan(output_root=context.output_root)
    collections = content.index.collections
    urls: list[str] = ["/"]

    plan.add_page("index.html", renderer.render_home(collections), "home page")

    for kind, collection in collections.items():
        plan.add_page(
            f"{collection.slug}/index.html",
            renderer.render_listing(collection),
            f"{kind.value} listing",
        )
        urls.append(f"/{collection.slug}/")

    documents = content.index.documents()
    for document in documents:
        plan.add_page(
            f"{document.slug}/index.html",
            renderer.render_document(document),
            document.source_path or document.slug,
        )
        urls.append(document.url)

    for key, (name, tagged) in collect_tags(documents).items():
        plan.add_page(f"tags/{key}/index.html", renderer.render_tag(name, tagged), f"tag {name}")
        urls.append(f"/tags/{key}/")

    plan.add_page("feed.xml", renderer.render_feed(collections[CollectionType.POST]), "feed")
    plan.add_page("sitemap.xml", renderer.render_sitemap(urls), "sitemap")

    for asset in content.assets:
        relative = asset.relative_to(context.content_root).as_posix()
        plan.add_asset(relative, asset, relative)

    return plan


def _atomic_write(path: Path, content: str) -> None:
    """Write via a temp file in the same directory, then rename into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _clean_output(context: BuildContext) -> None:
    root = context.output_root.resolve()
    if not root.exists():
        return
    if context.content_root.resolve().is_relative_to(root):
        raise UnsafeOutputPath(
            f"refusing to clean {root}: it contains the content directory",
            path=str(context.output_root),
        )
    logger.info("Removing previous output in %s", root)
    shutil.rmtree(root)


def build_site(context: BuildContext, renderer: Renderer | None = None) -> BuildResult:
    """Run a full build: parse, index, render, write, copy assets.

    Raises:
        BuildError: DuplicateSlug or UnsafeOutputPath, or the first per-file
            error when the build is strict.
    """
    content = load_site(context)
    renderer = renderer or Renderer(context.config)

    try:
        plan = plan_site(context, content, renderer)
        if context.config.build.clean:
            _clean_output(context)
    except (DuplicateSlug, UnsafeOutputPath) as exc:
        raise _abort(exc, content.report) from exc

    for path, text in plan.pages.items():
        _atomic_write(path, text)
    for path, source in plan.assets.items():
        path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, path)

    logger.info(
        "Wrote %d page(s) and %d asset(s) to %s",
        len(plan.pages),
        len(plan.assets),
        context.output_root,
    )
    return BuildResult(
        pages_written=len(plan.pages),
        assets_copied=len(plan.assets),
        errors=list(content.report.errors),
    )
