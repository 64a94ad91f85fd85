"""Live rebuild support for development mode."""

from docroute.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
