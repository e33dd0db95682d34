"""
API routes for crop calendar lookups (crop -> season -> state -> calendar).
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from monsoon_dashboard.api.dependencies import get_crop_calendar_path
from monsoon_dashboard.engine.crop_calendar import (
    CropNotFoundError,
    get_crop_info,
    list_crops,
    list_seasons,
    list_states,
)
from monsoon_dashboard.engine.data_files import SourceUnavailableError

router = APIRouter(prefix="/api/v1/crop-data", tags=["crop-data"])


@router.get("/crops", response_model=list[str])
def get_crops(path: str = Depends(get_crop_calendar_path)):
    try:
        return list_crops(path)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/seasons", response_model=list[str])
def get_seasons(
    crop: Optional[str] = Query(None),
    path: str = Depends(get_crop_calendar_path),
):
    if not crop:
        raise HTTPException(status_code=400, detail="Crop parameter is required")
    try:
        return list_seasons(crop, path)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/states", response_model=list[str])
def get_states(
    crop: Optional[str] = Query(None),
    season: Optional[str] = Query(None),
    path: str = Depends(get_crop_calendar_path),
):
    if not crop or not season:
        raise HTTPException(
            status_code=400,
            detail="Both crop and season parameters are required",
        )
    try:
        return list_states(crop, season, path)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/crop-info", response_model=dict[str, str])
def get_info(
    crop: Optional[str] = Query(None),
    season: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    path: str = Depends(get_crop_calendar_path),
):
    """Complete calendar row for the selected crop, season and state."""
    if not crop or not season or not state:
        raise HTTPException(
            status_code=400,
            detail="Crop, season, and state parameters are all required",
        )
    try:
        return get_crop_info(crop, season, state, path)
    except CropNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
