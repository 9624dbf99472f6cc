"""ASGI application factory and dependencies for the Home Management Hub server."""

from homehub.server.app import app, create_app

__all__ = ["app", "create_app"]
