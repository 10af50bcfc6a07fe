"""Database package — declarative base, engine and session factory construction."""

from content_studio.db.base import Base, create_engine, create_session_factory, create_tables

__all__ = [
    "Base",
    "create_engine",
    "create_session_factory",
    "create_tables",
]
