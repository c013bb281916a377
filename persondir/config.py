from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

from dotenv import load_dotenv

from persondir.domain.attributes import DEFAULT_ATTRIBUTE_NAME
from persondir.errors import ConfigError
from persondir.infrastructure.db.postgres import PostgresDatabase
from persondir.infrastructure.repositories.person_attrs_postgres_dao import (
    PersonAttributesPostgresDao,
)
from persondir.infrastructure.repositories.row_parsers import (
    MultiRowAttributeParser,
    RowParser,
    SingleRowAttributeParser,
)

load_dotenv()

APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8001"))

PARSER_SINGLE_ROW = "single_row"
PARSER_MULTI_ROW = "multi_row"

DEFAULT_QUERY_SQL = "SELECT * FROM person_attributes WHERE username = $1"


@dataclass(frozen=True)
class PersonDirectoryConfig:
    sql: str = DEFAULT_QUERY_SQL
    # empty: the DAO requires only the default attribute
    query_attributes: Tuple[str, ...] = ()
    default_attribute_name: str = DEFAULT_ATTRIBUTE_NAME
    column_mapping: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    parser: str = PARSER_SINGLE_ROW
    name_column: str = "attr_name"
    value_columns: Tuple[str, ...] = ("attr_value",)


def _split_list(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def parse_column_mapping(raw: str) -> Dict[str, Tuple[str, ...]]:
    """
    "mail:email,given_name:first_name|given_name" ->
    {"mail": ("email",), "given_name": ("first_name", "given_name")}
    """
    mapping: Dict[str, Tuple[str, ...]] = {}
    for entry in _split_list(raw):
        column, sep, attrs = entry.partition(":")
        names = tuple(name.strip() for name in attrs.split("|") if name.strip())
        if not sep or not column.strip() or not names:
            raise ConfigError(f"Malformed column mapping entry: {entry!r}")
        mapping[column.strip()] = names
    return mapping


def load_dao_config_from_env() -> PersonDirectoryConfig:
    """
    Reads the PERSONDIR_* variables.

    PERSONDIR_QUERY_ATTRIBUTES unset means the query takes one parameter,
    the value of PERSONDIR_DEFAULT_ATTRIBUTE.

    Without PERSONDIR_COLUMN_MAPPING every non-NULL column of the row is
    returned under its own name, so the default "SELECT *" also reports the
    username column. Map only the columns that should become attributes,
    e.g. PERSONDIR_COLUMN_MAPPING="email:email".
    """
    parser = os.getenv("PERSONDIR_PARSER", PARSER_SINGLE_ROW).strip().lower()
    if parser not in (PARSER_SINGLE_ROW, PARSER_MULTI_ROW):
        raise ConfigError(f"Unknown PERSONDIR_PARSER: {parser!r}")

    return PersonDirectoryConfig(
        sql=os.getenv("PERSONDIR_QUERY_SQL", DEFAULT_QUERY_SQL),
        query_attributes=_split_list(os.getenv("PERSONDIR_QUERY_ATTRIBUTES", "")),
        default_attribute_name=os.getenv("PERSONDIR_DEFAULT_ATTRIBUTE", DEFAULT_ATTRIBUTE_NAME),
        column_mapping=parse_column_mapping(os.getenv("PERSONDIR_COLUMN_MAPPING", "")),
        parser=parser,
        name_column=os.getenv("PERSONDIR_NAME_COLUMN", "attr_name"),
        value_columns=_split_list(os.getenv("PERSONDIR_VALUE_COLUMNS", "attr_value")),
    )


def build_row_parser(config: PersonDirectoryConfig) -> RowParser:
    mapping = config.column_mapping or None
    if config.parser == PARSER_MULTI_ROW:
        return MultiRowAttributeParser(config.name_column, config.value_columns, mapping)
    return SingleRowAttributeParser(mapping)


def build_dao(db: PostgresDatabase, config: PersonDirectoryConfig) -> PersonAttributesPostgresDao:
    return PersonAttributesPostgresDao(
        db,
        config.query_attributes,
        config.sql,
        build_row_parser(config),
        default_attribute_name=config.default_attribute_name,
    )
