"""Unified configuration loaded from folio.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "folio.toml"
GLOBAL_CONFIG = Path.home() / ".config" / "folio" / "config.toml"

# Override key -> (section, field) in SiteConfig.
CLI_FIELDS: dict[str, tuple[str, str]] = {
    "content_dir": ("build", "content_dir"),
    "output_dir": ("build", "output_dir"),
    "strict": ("build", "strict"),
    "clean": ("build", "clean"),
    "base_url": ("site", "base_url"),
    "port": ("serve", "port"),
    "host": ("serve", "host"),
}
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "FOLIO_CONTENT_DIR": ("build", "content_dir"),
    "FOLIO_OUTPUT_DIR": ("build", "output_dir"),
    "FOLIO_BASE_URL": ("site", "base_url"),
    "FOLIO_STRICT": ("build", "strict"),
}
_TRUE_WORDS = frozenset({"true", "1", "yes"})


class SiteSectionConfig(BaseModel):
    """[site] section: values exposed to every template."""

    title: str = "Academic Pages"
    author: str = ""
    description: str = ""
    base_url: str = ""
    language: str = "en"


class BuildSectionConfig(BaseModel):
    """[build] section."""

    content_dir: str = "."
    output_dir: str = "_site"
    strict: bool = False
    clean: bool = False
    separator: str = "+++"


class ServeSectionConfig(BaseModel):
    """[serve] section."""

    host: str = "127.0.0.1"
    port: int = 4000


class SiteConfig(BaseModel):
    """Top-level configuration model for a site build."""

    site: SiteSectionConfig = Field(default_factory=SiteSectionConfig)
    build: BuildSectionConfig = Field(default_factory=BuildSectionConfig)
    serve: ServeSectionConfig = Field(default_factory=ServeSectionConfig)

    @property
    def content_root(self) -> Path:
        return Path(self.build.content_dir)

    @property
    def output_root(self) -> Path:
        return Path(self.build.output_dir)


def load_config(path: str | Path | None = None) -> SiteConfig:
    """Build a SiteConfig from a TOML file plus FOLIO_* environment variables.

    With no *path*, ``./folio.toml`` is tried first, then the per-user
    ``~/.config/folio/config.toml``.  A missing or unreadable file leaves
    the defaults in place.
    """
    if path is not None:
        source: Path | None = Path(path)
        if not source.exists():
            logger.warning("Config file not found: %s", source)
            source = None
    else:
        candidates = (Path.cwd() / CONFIG_FILENAME, GLOBAL_CONFIG)
        source = next((c for c in candidates if c.is_file()), None)

    data = _read_toml(source) if source is not None else {}
    if data:
        logger.info("Loaded config from %s", source)
    return _overlay(SiteConfig.model_validate(data), _env_overrides())


def merge_cli_overrides(config: SiteConfig, **cli_kwargs: object) -> SiteConfig:
    """Apply the CLI flags the user actually passed; None means "not given"."""
    updates = {
        CLI_FIELDS[key]: str(value) if isinstance(value, Path) else value
        for key, value in cli_kwargs.items()
        if value is not None and key in CLI_FIELDS
    }
    return _overlay(config, updates)


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _env_overrides() -> dict[tuple[str, str], object]:
    updates: dict[tuple[str, str], object] = {}
    for var, target in ENV_FIELDS.items():
        raw = os.environ.get(var)
        if raw is None:
            continue
        updates[target] = raw.lower() in _TRUE_WORDS if target == ("build", "strict") else raw
    return updates


def _overlay(config: SiteConfig, updates: dict[tuple[str, str], object]) -> SiteConfig:
    if not updates:
        return config
    data = config.model_dump()
    for (section, name), value in updates.items():
        data[section][name] = value
    return SiteConfig.model_validate(data)
