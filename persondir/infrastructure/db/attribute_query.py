from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import asyncpg

from persondir.domain.attributes import Seed, first_value
from persondir.errors import QueryCompilationError
from persondir.infrastructure.db.postgres import PostgresDatabase

logger = logging.getLogger(__name__)

ParameterType = Callable[[Any], Any]

# asyncpg positional placeholders: $1, $2, ...
_PLACEHOLDER_RE = re.compile(r"\$(\d+)")
# skipped when looking for placeholders: quoted literals and identifiers,
# comments, dollar-quoted bodies ($$...$$, $tag$...$tag$)
_NON_CODE_RE = re.compile(
    r"'(?:[^']|'')*'"
    r'|"(?:[^"]|"")*"'
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|\$(?P<tag>[A-Za-z_][A-Za-z0-9_]*|)\$.*?\$(?P=tag)\$",
    re.DOTALL,
)


def varchar(value: Any) -> Optional[str]:
    """Default parameter type: everything is bound as text."""
    if value is None:
        return None
    return str(value)


def _placeholder_indexes(sql: str) -> set[int]:
    unquoted = _NON_CODE_RE.sub(" ", sql)
    return {int(match) for match in _PLACEHOLDER_RE.findall(unquoted)}


@dataclass(frozen=True)
class AttributeQuery:
    """
    A parameterized SELECT compiled once and reused for every lookup.

    Immutable: binding produces a new argument tuple per call, so one
    instance can serve any number of concurrent lookups.
    """

    sql: str
    parameter_names: Tuple[str, ...]
    parameter_types: Tuple[ParameterType, ...]

    @classmethod
    def compile(
        cls,
        sql: str,
        parameter_names: Sequence[str],
        parameter_types: Optional[Mapping[str, ParameterType]] = None,
    ) -> "AttributeQuery":
        if not sql or not sql.strip():
            raise QueryCompilationError("SQL cannot be empty")

        names = tuple(parameter_names)
        expected = set(range(1, len(names) + 1))
        found = _placeholder_indexes(sql)
        if found != expected:
            raise QueryCompilationError(
                f"SQL placeholders {sorted(found)} do not match the "
                f"{len(names)} declared parameter(s) {list(names)}"
            )

        overrides = dict(parameter_types or {})
        unknown = set(overrides) - set(names)
        if unknown:
            raise QueryCompilationError(
                f"Types declared for unknown parameter(s): {sorted(unknown)}"
            )

        types = tuple(overrides.get(name, varchar) for name in names)
        return cls(sql=sql, parameter_names=names, parameter_types=types)

    def bind(self, seed: Seed) -> Tuple[Any, ...]:
        """
        Positional arguments in declared parameter order, never in the
        seed's own iteration order. Multivalued seeds bind their first value.
        """
        args = []
        for name, to_db in zip(self.parameter_names, self.parameter_types):
            value = first_value(seed.get(name))
            args.append(None if value is None else to_db(value))
        return tuple(args)

    async def execute(self, db: PostgresDatabase, seed: Seed) -> List[Dict[str, Any]]:
        args = self.bind(seed)
        rows = await db.fetch(self.sql, *args)
        return [dict(row) for row in rows]

    async def verify(self, db: PostgresDatabase) -> None:
        """
        Prepares the statement on the server and checks its parameter count.
        Syntax errors surface here as asyncpg exceptions.
        """

        async def _prepare(conn: asyncpg.Connection) -> int:
            statement = await conn.prepare(self.sql)
            return len(statement.get_parameters())

        server_count = await db.with_connection(_prepare)
        if server_count != len(self.parameter_names):
            raise QueryCompilationError(
                f"Server reports {server_count} parameter(s), "
                f"{len(self.parameter_names)} declared"
            )
        logger.debug("Verified query %s", self)

    def __str__(self) -> str:
        return f"AttributeQuery SQL=[{self.sql.strip()}]"
