"""
Mock SQLAlchemy plumbing for the PostgreSQL service tests.

``scripted_db`` hands out a fresh async session context manager on every
``get_session()`` call. Every session shares one queue of results, consumed in
``execute`` order, and one log of executed statements.
"""

from contextlib import asynccontextmanager
from unittest.mock import MagicMock

import pytest

from auth_service.core.database_connection import DatabaseManager


def make_result(rows=None, one=None, rowcount=1, scalar=None):
    """Build a mock SQLAlchemy Result."""
    result = MagicMock()
    result.mappings.return_value = result
    result.all.return_value = rows or []
    result.one_or_none.return_value = one
    result.scalar.return_value = scalar
    result.rowcount = rowcount
    return result


class ScriptedDatabase:
    def __init__(self):
        self.results = []
        self.statements = []
        self.manager = MagicMock(spec=DatabaseManager)
        self.manager.get_session.side_effect = self._session

    def queue(self, *results):
        self.results.extend(results)

    def sql(self, index):
        return self.statements[index][0]

    def params(self, index):
        return self.statements[index][1]

    async def _execute(self, statement, params=None):
        self.statements.append((str(statement), params))
        outcome = self.results.pop(0) if self.results else make_result()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @asynccontextmanager
    async def _session(self):
        session = MagicMock()
        session.execute = self._execute
        yield session


@pytest.fixture
def scripted_db():
    return ScriptedDatabase()
