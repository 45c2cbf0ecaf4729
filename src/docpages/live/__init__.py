"""Live reload support for development mode."""

from docpages.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
