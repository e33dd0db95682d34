"""
Pydantic models for the rainfall index series and its chart color scale.
"""

import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class RawReading(BaseModel):
    """One untrusted row as read from the rainfall index source."""
    date: str
    index_value: str = ""
    year: Optional[str] = None   # derived from date when absent
    month: Optional[str] = None  # derived from date when absent


class DailyReading(BaseModel):
    """Normalized reading for a single calendar day."""
    date: datetime.date
    index_value: float  # NaN when the source value was not numeric
    year: int
    month: int = Field(..., ge=1, le=12)


class MonthlyAverage(BaseModel):
    """Mean index value of all valid daily readings in a (year, month) bucket."""
    year: int
    month: int = Field(..., ge=1, le=12)
    index_value: float = Field(..., allow_inf_nan=False)


class SeriesBounds(BaseModel):
    """Extremes of one requested series, used to normalize the color scale."""
    min: float = Field(..., allow_inf_nan=False)
    max: float = Field(..., allow_inf_nan=False)


class ColorDescriptor(BaseModel):
    """Bar color for a single index value on the diverging scale."""
    hue: Literal["negative", "positive"]
    intensity: float = Field(..., ge=0.0, le=1.0)
    rgba: tuple[int, int, int, float]
    css: str


class RainfallSeries(BaseModel):
    """Monthly averages grouped by year, plus the bounds for color scaling."""
    yearly_data: dict[int, list[MonthlyAverage]]
    min_value: float
    max_value: float
    is_monsoon_only: bool
    skipped_rows: int = 0
    source: Optional[str] = None  # name of the provider that produced the series


class RainfallResponse(BaseModel):
    """Envelope returned by the rainfall endpoint."""
    success: bool = True
    data: RainfallSeries


class MonthNameOutput(BaseModel):
    month: int
    name: str
