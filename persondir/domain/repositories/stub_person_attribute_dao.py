from __future__ import annotations

from typing import Any, Dict, FrozenSet, Mapping, Optional

from persondir.domain.attributes import (
    DEFAULT_ATTRIBUTE_NAME,
    MultivaluedAttributes,
    Seed,
    as_value_list,
    to_multivalued,
)
from persondir.domain.repositories.person_attribute_dao import DefaultQueryPersonAttributeDao
from persondir.errors import InvalidArgumentError


class StubPersonAttributeDao(DefaultQueryPersonAttributeDao):
    """
    In-memory source: people are keyed by the value of the default attribute.
    Handy for wiring and local runs without a database.
    """

    def __init__(
        self,
        people: Mapping[Any, Mapping[str, Any]],
        default_attribute_name: str = DEFAULT_ATTRIBUTE_NAME,
    ) -> None:
        super().__init__(default_attribute_name)
        self._people: Dict[Any, MultivaluedAttributes] = {
            key: to_multivalued(attrs) for key, attrs in people.items()
        }

    async def get_multivalued_user_attributes(
        self, seed: Seed
    ) -> Optional[MultivaluedAttributes]:
        if seed is None:
            raise InvalidArgumentError("The query seed cannot be None.")

        if self.default_attribute_name not in seed:
            return None

        for key in as_value_list(seed[self.default_attribute_name]):
            attributes = self._people.get(key)
            if attributes is not None:
                return {name: list(values) for name, values in attributes.items()}

        return None

    def get_possible_user_attribute_names(self) -> Optional[FrozenSet[str]]:
        return frozenset(name for attrs in self._people.values() for name in attrs)
