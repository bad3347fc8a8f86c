"""Notes API package: user management for the notes service."""

from .api import app

__all__ = ["app"]
