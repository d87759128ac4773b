"""Persistence layer."""
from .database import SQLiteSessionStore, PendingOperation

__all__ = ["SQLiteSessionStore", "PendingOperation"]
