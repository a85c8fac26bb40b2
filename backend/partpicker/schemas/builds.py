"""Shared build schemas."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from partpicker.schemas.listing import ListingResponse


class BuildCreatedResponse(BaseModel):
    build_id: str = Field(alias="buildId")

    model_config = ConfigDict(populate_by_name=True)


class BuildResponse(BaseModel):
    build: Any


class BuildTotalsRequest(BaseModel):
    """Selected parts per category plus each category's cross-site matches."""

    build: Dict[str, Union[ListingResponse, List[ListingResponse], None]] = {}
    cross_site: Dict[str, Dict[str, Optional[ListingResponse]]] = Field(default_factory=dict, alias="crossSite")

    model_config = ConfigDict(populate_by_name=True)


class BuildTotalsResponse(BaseModel):
    base: float
    retailers: Dict[str, float]
