from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

DEFAULT_ATTRIBUTE_NAME = "username"

Seed = Mapping[str, Any]
MultivaluedAttributes = Dict[str, List[Any]]
SingleValuedAttributes = Dict[str, Any]


def as_value_list(value: Any) -> List[Any]:
    """
    Normalizes one attribute value to a list of values.
    None -> [], list/tuple -> copy, anything else -> [value].
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def first_value(value: Any) -> Any:
    values = as_value_list(value)
    return values[0] if values else None


def to_multivalued(seed: Seed) -> MultivaluedAttributes:
    return {name: as_value_list(value) for name, value in seed.items()}


def to_single_valued(
    attributes: Optional[Mapping[str, List[Any]]],
) -> Optional[SingleValuedAttributes]:
    """
    Collapses multivalued attributes by keeping the first value of each.
    An attribute with no values collapses to None; a None result stays None
    so "no such person" survives the conversion.
    """
    if attributes is None:
        return None

    return {name: first_value(values) for name, values in attributes.items()}
