from .person_attrs_postgres_dao import PersonAttributesPostgresDao
from .row_parsers import RowParser, SingleRowAttributeParser, MultiRowAttributeParser

__all__ = [
    "PersonAttributesPostgresDao",
    "RowParser",
    "SingleRowAttributeParser",
    "MultiRowAttributeParser",
]
