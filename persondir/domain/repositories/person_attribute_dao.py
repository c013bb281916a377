from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, FrozenSet, Optional

from persondir.domain.attributes import (
    DEFAULT_ATTRIBUTE_NAME,
    MultivaluedAttributes,
    Seed,
    SingleValuedAttributes,
    to_multivalued,
    to_single_valued,
)
from persondir.errors import InvalidArgumentError


class PersonAttributeDao(ABC):
    """
    Source of person attributes for a given query seed.

    Every lookup returns according to the same rules:
    - person exists and has attributes -> populated dict
    - person exists and has no attributes -> empty dict
    - person doesn't exist -> None
    - an error occurs -> the exception propagates

    The result is not a union of the seed and the query results. If the seed
    carries "phone" and the result carries the same "phone", the source
    itself holds that value.
    """

    @abstractmethod
    async def get_multivalued_user_attributes(
        self, seed: Seed
    ) -> Optional[MultivaluedAttributes]:
        raise NotImplementedError

    @abstractmethod
    async def get_multivalued_user_attributes_by_uid(
        self, uid: Any
    ) -> Optional[MultivaluedAttributes]:
        raise NotImplementedError

    @abstractmethod
    async def get_user_attributes(self, seed: Seed) -> Optional[SingleValuedAttributes]:
        raise NotImplementedError

    @abstractmethod
    async def get_user_attributes_by_uid(self, uid: Any) -> Optional[SingleValuedAttributes]:
        raise NotImplementedError

    @abstractmethod
    def get_possible_user_attribute_names(self) -> Optional[FrozenSet[str]]:
        """
        All attribute names a lookup could return, or None if unknowable.
        """
        raise NotImplementedError


class DefaultQueryPersonAttributeDao(PersonAttributeDao):
    """
    Builds the uid and single-valued lookups on top of the multivalued seed lookup.
    A uid becomes the seed {default_attribute_name: [uid]}.
    Single-valued results keep the first value of every attribute.
    """

    def __init__(self, default_attribute_name: str = DEFAULT_ATTRIBUTE_NAME) -> None:
        if not default_attribute_name:
            raise InvalidArgumentError("default_attribute_name cannot be empty")
        self._default_attribute_name = default_attribute_name

    @property
    def default_attribute_name(self) -> str:
        return self._default_attribute_name

    async def get_multivalued_user_attributes_by_uid(
        self, uid: Any
    ) -> Optional[MultivaluedAttributes]:
        if uid is None:
            raise InvalidArgumentError("uid cannot be None")

        return await self.get_multivalued_user_attributes({self._default_attribute_name: [uid]})

    async def get_user_attributes(self, seed: Seed) -> Optional[SingleValuedAttributes]:
        if seed is None:
            raise InvalidArgumentError("The query seed cannot be None.")

        attributes = await self.get_multivalued_user_attributes(to_multivalued(seed))
        return to_single_valued(attributes)

    async def get_user_attributes_by_uid(self, uid: Any) -> Optional[SingleValuedAttributes]:
        attributes = await self.get_multivalued_user_attributes_by_uid(uid)
        return to_single_valued(attributes)
