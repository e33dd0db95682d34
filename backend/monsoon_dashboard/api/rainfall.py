"""
API routes for the monthly rainfall index series and its chart helpers.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from monsoon_dashboard.api.dependencies import get_rainfall_chain
from monsoon_dashboard.config import SeriesFilter
from monsoon_dashboard.engine.data_files import SourceUnavailableError
from monsoon_dashboard.engine.rainfall_processor import color_for, get_month_name
from monsoon_dashboard.engine.rainfall_sources import RainfallSourceChain
from monsoon_dashboard.models.rainfall import (
    ColorDescriptor,
    MonthNameOutput,
    RainfallResponse,
    SeriesBounds,
)

router = APIRouter(prefix="/api/v1", tags=["rainfall"])


@router.get("/rainfall", response_model=RainfallResponse)
def get_rainfall(
    monsoon: bool = Query(False, description="Only June-September averages"),
    chain: RainfallSourceChain = Depends(get_rainfall_chain),
):
    """
    Monthly average rainfall index grouped by year, with min/max for the
    color scale.
    """
    series_filter = SeriesFilter.MONSOON if monsoon else SeriesFilter.ALL_YEAR
    try:
        series = chain.load_series(series_filter)
        return RainfallResponse(data=series)
    except SourceUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to process rainfall data: {e}")


@router.get("/rainfall/color", response_model=ColorDescriptor)
def get_bar_color(
    value: float = Query(...),
    min_value: float = Query(...),
    max_value: float = Query(...),
):
    """Diverging bar color for a value within the series bounds."""
    if min_value > max_value:
        raise HTTPException(status_code=422, detail="min_value must not exceed max_value.")
    try:
        return color_for(value, SeriesBounds(min=min_value, max=max_value))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("/rainfall/months/{month}", response_model=MonthNameOutput)
def get_month(month: int, short: bool = Query(False)):
    try:
        return MonthNameOutput(month=month, name=get_month_name(month, short=short))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
