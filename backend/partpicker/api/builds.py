"""Shared build links and build totals."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query

from partpicker.dependencies import get_builds
from partpicker.schemas import BuildCreatedResponse, BuildResponse, BuildTotalsRequest, BuildTotalsResponse
from partpicker.services.build_store import BuildStore
from partpicker.services.build_totals import calculate_totals

router = APIRouter()


@router.post("/builds", response_model=BuildCreatedResponse)
async def save_build(
    payload: Any = Body(...),
    store: BuildStore = Depends(get_builds),
):
    """Store any JSON build payload and return its short id."""
    build_id = store.save(payload)
    return BuildCreatedResponse(build_id=build_id)


@router.get("/builds", response_model=BuildResponse)
async def get_build(
    id: Optional[str] = Query(None, description="Build id returned by POST /builds"),
    store: BuildStore = Depends(get_builds),
):
    """Raises BuildNotFoundError (404) for unknown or expired ids."""
    return BuildResponse(build=store.get(id or ""))


@router.post("/builds/totals", response_model=BuildTotalsResponse)
async def build_totals(request: BuildTotalsRequest):
    """Base total and per-retailer totals of a build."""
    build = {}
    for category, selection in request.build.items():
        if isinstance(selection, list):
            build[category] = [item.to_listing() for item in selection]
        elif selection is not None:
            build[category] = selection.to_listing()

    cross_site = {
        category: {retailer: match.to_listing() if match else None for retailer, match in matches.items()}
        for category, matches in request.cross_site.items()
    }
    return calculate_totals(build, cross_site).to_dict()
