"""Quire - static site builder for Markdown content."""

__version__ = "0.1.0"
