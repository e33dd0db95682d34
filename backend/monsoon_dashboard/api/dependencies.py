"""
Shared providers injected into route handlers.

Tests swap these out through app.dependency_overrides.
"""

from functools import lru_cache

from monsoon_dashboard.engine.crop_calendar import CROP_CALENDAR_PATH
from monsoon_dashboard.engine.figure_store import FigureStore
from monsoon_dashboard.engine.rainfall_sources import (
    RainfallCsvSource,
    PlotlyFigureSource,
    RainfallSourceChain,
)


@lru_cache(maxsize=1)
def get_figure_store() -> FigureStore:
    return FigureStore()


@lru_cache(maxsize=1)
def get_rainfall_chain() -> RainfallSourceChain:
    """CSV first, then the precomputed color-bar figures."""
    return RainfallSourceChain([
        RainfallCsvSource(),
        PlotlyFigureSource(get_figure_store()),
    ])


def get_crop_calendar_path() -> str:
    return CROP_CALENDAR_PATH
