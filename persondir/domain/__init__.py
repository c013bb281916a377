from .attributes import (
    DEFAULT_ATTRIBUTE_NAME,
    Seed,
    MultivaluedAttributes,
    SingleValuedAttributes,
    as_value_list,
    first_value,
    to_multivalued,
    to_single_valued,
)

__all__ = [
    "DEFAULT_ATTRIBUTE_NAME",
    "Seed",
    "MultivaluedAttributes",
    "SingleValuedAttributes",
    "as_value_list",
    "first_value",
    "to_multivalued",
    "to_single_valued",
]
