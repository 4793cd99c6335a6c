"""Website data server: snapshot files, widgets and price alerts."""

from marketsnap.dashboard.server import create_app, main


__all__ = ["create_app", "main"]
