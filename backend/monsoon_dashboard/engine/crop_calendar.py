"""
Crop calendar lookups.

Loads the static crop calendar CSV (one row per crop/season/state with its
sowing and harvesting months) and answers the cascading filter queries the
dashboard's crop selector makes: crop -> season -> state -> calendar row.
"""

import os
from functools import lru_cache

from monsoon_dashboard.config import DATA_DIR, CROP_CALENDAR_CSV_FILENAME
from monsoon_dashboard.engine.data_files import read_csv_rows

CROP_CALENDAR_PATH = os.path.join(DATA_DIR, CROP_CALENDAR_CSV_FILENAME)


class CropNotFoundError(LookupError):
    """No calendar row for the requested crop/season/state combination."""


@lru_cache(maxsize=4)
def load_crop_calendar(path: str = CROP_CALENDAR_PATH) -> tuple[dict[str, str], ...]:
    """Load and cache the crop calendar rows."""
    return tuple(read_csv_rows(path))


def _unique_sorted(values) -> list[str]:
    return sorted({v for v in values if v})


def list_crops(path: str = CROP_CALENDAR_PATH) -> list[str]:
    rows = load_crop_calendar(path)
    return _unique_sorted(row.get("CROP") for row in rows)


def list_seasons(crop: str, path: str = CROP_CALENDAR_PATH) -> list[str]:
    rows = load_crop_calendar(path)
    return _unique_sorted(row.get("SEASON") for row in rows if row.get("CROP") == crop)


def list_states(crop: str, season: str, path: str = CROP_CALENDAR_PATH) -> list[str]:
    rows = load_crop_calendar(path)
    return _unique_sorted(
        row.get("STATE")
        for row in rows
        if row.get("CROP") == crop and row.get("SEASON") == season
    )


def get_crop_info(crop: str, season: str, state: str, path: str = CROP_CALENDAR_PATH) -> dict[str, str]:
    """
    Return the calendar row for an exact crop/season/state match.

    Raises:
        CropNotFoundError: if no row matches.
    """
    for row in load_crop_calendar(path):
        if row.get("CROP") == crop and row.get("SEASON") == season and row.get("STATE") == state:
            return dict(row)
    raise CropNotFoundError("No data found for the specified combination")
