"""Insurance portal backend: accounts, contact messages and prediction proxy."""

from __future__ import annotations

from typing import Any

from .config import Settings, load_settings
from .database import InMemoryDocumentStore, MongoDocumentStore, create_store


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI application."""

    from .service import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "InMemoryDocumentStore",
    "MongoDocumentStore",
    "Settings",
    "create_app",
    "create_store",
    "load_settings",
]
