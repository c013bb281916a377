"""
Shared fixtures for persondir tests.

FakeDatabase stands in for PostgresDatabase: it records every fetch and
answers from a callable so tests can shape the rows per bound argument.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from persondir.infrastructure.repositories.person_attrs_postgres_dao import (
    PersonAttributesPostgresDao,
)
from persondir.infrastructure.repositories.row_parsers import SingleRowAttributeParser

RowsFor = Callable[[Tuple[Any, ...]], Sequence[Dict[str, Any]]]


class FakeDatabase:
    def __init__(self, rows_for: Optional[RowsFor] = None, delay: float = 0.0) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self._rows_for = rows_for or (lambda args: [])
        self._delay = delay

    async def fetch(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        self.calls.append((query, args))
        if self._delay:
            await asyncio.sleep(self._delay)
        return list(self._rows_for(args))

    async def with_connection(self, func):
        raise AssertionError("with_connection is not expected in this test")


PEOPLE = {
    "alice": {"username": "alice", "email": "a@x.com", "display_name": "Alice"},
    "bob": {"username": "bob", "email": None, "display_name": None},
}


def rows_by_username(args: Tuple[Any, ...]) -> List[Dict[str, Any]]:
    row = PEOPLE.get(args[0])
    return [dict(row)] if row is not None else []


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase(rows_by_username)


@pytest.fixture
def username_dao(fake_db: FakeDatabase) -> PersonAttributesPostgresDao:
    return PersonAttributesPostgresDao(
        fake_db,
        ["username"],
        "SELECT username, email, display_name FROM person_attributes WHERE username = $1",
        SingleRowAttributeParser({"email": "email", "display_name": "displayName"}),
    )
