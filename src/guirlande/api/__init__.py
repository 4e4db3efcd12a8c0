"""REST API and WebSocket interfaces"""

from .app import init_app

__all__ = ["init_app"]
