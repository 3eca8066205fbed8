"""folio: static site builder for academic publication and blog pages."""

__version__ = "0.1.0"
