from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from persondir.presentation.usecases.lookup_person_attributes import (
    lookup_person_attributes_usecase,
    possible_attribute_names_usecase,
)

router = APIRouter(
    prefix="/persons",
    tags=["persons"],
)


class PersonAttributesResponse(BaseModel):
    uid: str = Field(
        ...,
        description="Value of the default query attribute",
        examples=["alice"],
    )
    attributes: Dict[str, Any] = Field(
        ...,
        description="Attribute name -> list of values (or single value when single=true)",
    )


class AttributeNamesResponse(BaseModel):
    names: Optional[List[str]] = Field(
        None,
        description="All attribute names a lookup could return; null when unknown",
    )


@router.get("/attribute-names", response_model=AttributeNamesResponse)
async def get_attribute_names() -> AttributeNamesResponse:
    names = await possible_attribute_names_usecase()
    return AttributeNamesResponse(names=sorted(names) if names is not None else None)


@router.get("/{uid}/attributes", response_model=PersonAttributesResponse)
async def get_person_attributes(uid: str, single: bool = False) -> PersonAttributesResponse:
    """
    Thin HTTP endpoint: the lookup itself lives in the use case.
    404 means "no such person"; an empty attribute map is a valid answer.
    """
    attributes = await lookup_person_attributes_usecase(uid, single_valued=single)
    if attributes is None:
        raise HTTPException(status_code=404, detail=f"Person not found: {uid}")

    return PersonAttributesResponse(uid=uid, attributes=attributes)
