"""HTTP server package for stationvoice."""

from .app import create_app, serve

__all__ = ["create_app", "serve"]
