"""Build error taxonomy and per-file error reporting.

Per-file structural errors (MalformedDocument, InvalidDate) are collected
into a BuildReport so one bad file does not stop the build.  DuplicateSlug
and UnsafeOutputPath always abort: both would let one page silently
overwrite another.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FolioError(Exception):
    """Base class for every error raised by the build pipeline."""

    #: Errors of this kind abort the build even in best-effort mode.
    fatal: bool = False

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class MalformedDocument(FolioError):
    """Front-matter block is missing, unterminated or unparsable."""


class InvalidDate(FolioError):
    """A document's date is missing or cannot be parsed."""


class DuplicateSlug(FolioError):
    """Two documents resolve to the same slug."""

    fatal = True

    def __init__(self, slug: str, *, path: str = "", other_path: str = "") -> None:
        super().__init__(
            f"slug {slug!r} already used by {other_path or 'another document'}",
            path=path,
        )
        self.slug = slug
        self.other_path = other_path


class UnknownTemplate(FolioError):
    """The renderer was asked for a template outside the fixed set."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"unknown template {template_id!r}")
        self.template_id = template_id


class UnsafeOutputPath(FolioError):
    """A derived output path would escape the output root."""

    fatal = True


class ErrorRecord(BaseModel):
    """A single recorded failure, tied to the file it came from."""

    path: str = ""
    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: FolioError) -> ErrorRecord:
        return cls(path=exc.path, kind=type(exc).__name__, message=exc.message)


class BuildReport(BaseModel):
    """Accumulates per-file errors across a build."""

    errors: list[ErrorRecord] = Field(default_factory=list)

    def record(self, exc: FolioError) -> None:
        self.errors.append(ErrorRecord.from_exception(exc))

    def extend(self, excs: list[FolioError]) -> None:
        for exc in excs:
            self.record(exc)

    def by_kind(self, kind: str) -> list[ErrorRecord]:
        return [e for e in self.errors if e.kind == kind]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class BuildError(FolioError):
    """A build aborted; carries everything recorded up to that point."""

    def __init__(self, cause: FolioError, report: BuildReport) -> None:
        super().__init__(str(cause), path=cause.path)
        self.cause = cause
        self.report = report
