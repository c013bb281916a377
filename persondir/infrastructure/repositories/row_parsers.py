from __future__ import annotations

from typing import (
    Any,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
)

from persondir.domain.attributes import MultivaluedAttributes, as_value_list
from persondir.errors import IncorrectResultSizeError, InvalidArgumentError

Row = Mapping[str, Any]
# column -> attribute name, or several attribute names for one column
ColumnMapping = Mapping[str, Union[str, Iterable[str]]]


class RowParser(Protocol):
    """
    Turns the rows of one lookup into the attribute map.
    Zero rows means "no such person" and must give None.
    """

    def __call__(self, rows: Sequence[Row]) -> Optional[MultivaluedAttributes]:
        ...


def _normalize_mapping(mapping: Optional[ColumnMapping]) -> Dict[str, Tuple[str, ...]]:
    if mapping is None:
        return {}

    normalized: Dict[str, Tuple[str, ...]] = {}
    for column, attrs in mapping.items():
        if not column:
            raise InvalidArgumentError("Column names in the mapping cannot be empty")
        names = (attrs,) if isinstance(attrs, str) else tuple(attrs)
        if not names or not all(names):
            raise InvalidArgumentError(f"Column {column!r} maps to no attribute name")
        normalized[column.lower()] = names
    return normalized


def _append(attributes: MultivaluedAttributes, name: str, value: Any) -> None:
    attributes.setdefault(name, []).extend(as_value_list(value))


class SingleRowAttributeParser:
    """
    One row per person, one column per attribute.

    Column names are matched case-insensitively. Without a mapping every
    column is returned under its own name. NULL columns are left out.
    """

    def __init__(self, column_to_attributes: Optional[ColumnMapping] = None) -> None:
        self._mapping = _normalize_mapping(column_to_attributes)

    @property
    def possible_attribute_names(self) -> Optional[FrozenSet[str]]:
        if not self._mapping:
            return None
        return frozenset(name for names in self._mapping.values() for name in names)

    def __call__(self, rows: Sequence[Row]) -> Optional[MultivaluedAttributes]:
        if not rows:
            return None
        if len(rows) > 1:
            raise IncorrectResultSizeError(expected=1, actual=len(rows))

        attributes: MultivaluedAttributes = {}
        for column, value in rows[0].items():
            if value is None:
                continue

            if not self._mapping:
                _append(attributes, column, value)
                continue

            for name in self._mapping.get(column.lower(), ()):
                _append(attributes, name, value)

        return attributes


class MultiRowAttributeParser:
    """
    Several rows per person, each carrying one attribute name and its value(s).

    The attribute name comes from name_column; values are read from every
    column in value_columns. Column names are matched case-insensitively.
    Values of repeated names accumulate in row order.
    """

    def __init__(
        self,
        name_column: str,
        value_columns: Sequence[str],
        column_to_attributes: Optional[ColumnMapping] = None,
    ) -> None:
        if not name_column:
            raise InvalidArgumentError("name_column cannot be empty")
        if not value_columns:
            raise InvalidArgumentError("value_columns cannot be empty")

        self._name_column = name_column.lower()
        self._value_columns: Tuple[str, ...] = tuple(column.lower() for column in value_columns)
        self._mapping = _normalize_mapping(column_to_attributes)

    @property
    def possible_attribute_names(self) -> Optional[FrozenSet[str]]:
        if not self._mapping:
            return None
        return frozenset(name for names in self._mapping.values() for name in names)

    def __call__(self, rows: Sequence[Row]) -> Optional[MultivaluedAttributes]:
        if not rows:
            return None

        attributes: MultivaluedAttributes = {}
        for row in rows:
            by_column = {column.lower(): value for column, value in row.items()}
            source_name = by_column.get(self._name_column)
            if source_name is None:
                continue

            if self._mapping:
                names: Iterable[str] = self._mapping.get(str(source_name).lower(), ())
            else:
                names = (str(source_name),)

            values: List[Any] = []
            for column in self._value_columns:
                values.extend(as_value_list(by_column.get(column)))

            for name in names:
                _append(attributes, name, values)

        return attributes
