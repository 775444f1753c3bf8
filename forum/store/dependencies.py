"""
FastAPI dependencies for routes that read from the store.
"""

from __future__ import annotations

from forum.core import db

from .service import DataStore


async def get_store() -> DataStore:
    return DataStore(db.database())
