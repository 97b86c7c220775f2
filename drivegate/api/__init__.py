"""FastAPI application exposing the drivegate SDK over HTTP."""

from .app import create_app

__all__ = ["create_app"]
