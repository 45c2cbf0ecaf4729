"""Core type definitions."""

from typing import NewType

# URL path for routing (e.g., "/docs", "/docs/install/overview")
# Distinct from content source paths to catch type mismatches
URLPath = NewType("URLPath", str)

# Ordered URL path segments identifying a page (e.g., ("install", "overview"))
Slug = tuple[str, ...]
