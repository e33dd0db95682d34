"""
Monsoon Dashboard configuration and constants.
"""

import os
from enum import Enum


class SeriesFilter(str, Enum):
    ALL_YEAR = "all_year"
    MONSOON = "monsoon"  # June through September


# Indian monsoon window (June-September inclusive)
MONSOON_MONTHS: frozenset[int] = frozenset({6, 7, 8, 9})

# Bundled datasets live next to the package unless overridden
_DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "data")
DATA_DIR = os.environ.get("MONSOON_DATA_DIR", _DEFAULT_DATA_DIR)
RESULTS_DIR = os.path.join(DATA_DIR, "results")

RAINFALL_CSV_FILENAME = "complete_data_INDIAN_RAIN_INDEX_Historical_Data.csv"
CROP_CALENDAR_CSV_FILENAME = "sovon_data_final.csv"

# Column headers of the historical rainfall index CSV
RAINFALL_COLUMNS = {
    "date": "Date",
    "index_value": "Index Value",
    "year": "Year",
    "month": "Month",
}

# Short figure keys exposed over the API -> precomputed Plotly figure files
FIGURE_FILES = {
    "fig1": "fig_1_comic_neue_index_by_year_color_bars.json",
    "fig2": "fig_2_comic_neue_index_by_year_color_bars.json",
    "fig3": "fig_3_xgboost_forecast_2024_evaluation_comic_neue.json",
    "fig4": "fig_4_xgboost_monsoon_forecast_2024_evaluation_comic_neue.json",
    "fig55": "fig_55_2025_actual_vs_forecast_comic_neue.json",
    "fig5": "fig_5_2025_daily_forecast_comic_neue.json",
    "fig6": "fig_6_2025_monthly_forecast_comic_neue.json",
}

# Color-bar figures used as the fallback rainfall source
FALLBACK_FIGURE_KEYS = {
    SeriesFilter.ALL_YEAR: "fig1",
    SeriesFilter.MONSOON: "fig2",
}

# Each year in the color-bar figures is drawn with this many traces
TRACES_PER_YEAR = 5

# Parsed figure JSON documents kept in memory
FIGURE_CACHE_CAPACITY = 16

# Diverging color scale (RGBA channels)
COLOR_BASE_CHANNEL = 220
COLOR_CHANNEL_SPAN = 150
COLOR_ALPHA = 0.8

# Frontend origins allowed by CORS
CORS_ORIGINS = [
    "http://localhost:3000",  # Next.js default
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
