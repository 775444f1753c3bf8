from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

import pytest

from forum.store.service import DataStore


class FakeDatabase:
    """
    Scripted stand-in for `forum.core.db.Database`.

    Each primitive is an AsyncMock, so tests set `return_value` or
    `side_effect` and assert on the awaited calls. Transactions yield the
    same object and count commits and rollbacks.
    """

    def __init__(self):
        self.fetch_one = AsyncMock(return_value=None)
        self.fetch_all = AsyncMock(return_value=[])
        self.execute = AsyncMock(return_value=None)
        self.transactions = 0
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        try:
            yield self
        except BaseException:
            self.rollbacks += 1
            raise
        self.commits += 1


@pytest.fixture()
def fake_db():
    return FakeDatabase()


@pytest.fixture()
def store(fake_db):
    return DataStore(fake_db)
