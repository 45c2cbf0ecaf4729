"""Docpages - static documentation pages from Markdown and MDX content."""

__version__ = "0.1.0"
