"""Rendering and assembly of the output site."""
