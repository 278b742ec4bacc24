"""Database layer - engine, base classes and column types."""

from agency_kernel.db.base import Base, TrackedBase, UUIDString
from agency_kernel.db.engine import create_tables, get_engine, get_session

__all__ = [
    "get_engine",
    "get_session",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
]
