"""Web application package for OSFIT."""

from flask import Flask

from osfit.config import initialize_app


def create_app() -> Flask:
    """Application factory for the web API."""
    initialize_app()

    from .app import build_app  # Import here to avoid circular imports

    return build_app()


__all__ = ["create_app"]
