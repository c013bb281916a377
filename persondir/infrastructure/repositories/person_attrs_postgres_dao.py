from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from persondir.domain.attributes import DEFAULT_ATTRIBUTE_NAME, MultivaluedAttributes, Seed
from persondir.domain.repositories.person_attribute_dao import DefaultQueryPersonAttributeDao
from persondir.errors import InvalidArgumentError
from persondir.infrastructure.db.attribute_query import AttributeQuery, ParameterType
from persondir.infrastructure.db.postgres import PostgresDatabase
from persondir.infrastructure.repositories.row_parsers import RowParser

logger = logging.getLogger(__name__)


class PersonAttributesPostgresDao(DefaultQueryPersonAttributeDao):
    """
    Looks people up with one parameterized SELECT.

    query_attributes names the seed keys the query needs, in the order of
    the $1..$n placeholders. A seed missing any of them gives None without
    touching the database. Rows are turned into attributes by row_parser.
    """

    def __init__(
        self,
        db: PostgresDatabase,
        query_attributes: Optional[Sequence[str]],
        sql: str,
        row_parser: RowParser,
        *,
        default_attribute_name: str = DEFAULT_ATTRIBUTE_NAME,
        parameter_types: Optional[Mapping[str, ParameterType]] = None,
        possible_attribute_names: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(default_attribute_name)
        logger.debug(
            "Creating PersonAttributesPostgresDao(query_attributes=%s, sql=%s)",
            query_attributes,
            sql,
        )

        if query_attributes is None:
            raise InvalidArgumentError("query_attributes cannot be None")
        if row_parser is None:
            raise InvalidArgumentError("row_parser cannot be None")

        attrs: Tuple[str, ...] = tuple(query_attributes)
        if not attrs:
            attrs = (self.default_attribute_name,)

        self._db = db
        self._query_attributes = attrs
        self._row_parser = row_parser
        self._possible_attribute_names = (
            frozenset(possible_attribute_names) if possible_attribute_names is not None else None
        )
        self._query = AttributeQuery.compile(sql, attrs, parameter_types)

        logger.debug("Constructed %r", self)

    @property
    def query_attributes(self) -> Tuple[str, ...]:
        return self._query_attributes

    @property
    def query(self) -> AttributeQuery:
        return self._query

    async def get_multivalued_user_attributes(
        self, seed: Seed
    ) -> Optional[MultivaluedAttributes]:
        if seed is None:
            raise InvalidArgumentError("The query seed cannot be None.")

        missing = [name for name in self._query_attributes if name not in seed]
        if missing:
            logger.debug("Seed lacks query attribute(s) %s, skipping query", missing)
            return None

        rows = await self._query.execute(self._db, seed)
        logger.debug("Query returned %d row(s)", len(rows))

        return self._row_parser(rows)

    def get_possible_user_attribute_names(self) -> Optional[FrozenSet[str]]:
        if self._possible_attribute_names is not None:
            return self._possible_attribute_names
        return getattr(self._row_parser, "possible_attribute_names", None)

    def __repr__(self) -> str:
        return (
            f"PersonAttributesPostgresDao query={self._query} "
            f"queryAttributes={list(self._query_attributes)}"
        )
