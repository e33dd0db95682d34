"""
Rainfall index series processor.

Turns raw daily rainfall index rows (percentage deviation from the historical
average) into a deduplicated daily series and monthly averages, filters the
monsoon window, and maps bar values onto a diverging color scale for the
dashboard charts.

Every function here is pure: inputs are never mutated and no state is kept
between calls.
"""

import logging
import math
from datetime import date, datetime, timezone
from typing import Iterable, Optional

import numpy as np

from monsoon_dashboard.config import (
    MONSOON_MONTHS,
    COLOR_BASE_CHANNEL,
    COLOR_CHANNEL_SPAN,
    COLOR_ALPHA,
)
from monsoon_dashboard.models.rainfall import (
    RawReading,
    DailyReading,
    MonthlyAverage,
    SeriesBounds,
    ColorDescriptor,
    RainfallSeries,
)

logger = logging.getLogger(__name__)

# Accepted non-ISO date layouts, tried in order after ISO 8601
_DATE_FORMATS = ["%m/%d/%Y", "%d-%b-%Y", "%b %d, %Y", "%Y/%m/%d"]

_MONTH_NAMES = [
    ("Jan", "January"),
    ("Feb", "February"),
    ("Mar", "March"),
    ("Apr", "April"),
    ("May", "May"),
    ("Jun", "June"),
    ("Jul", "July"),
    ("Aug", "August"),
    ("Sep", "September"),
    ("Oct", "October"),
    ("Nov", "November"),
    ("Dec", "December"),
]


class ParseError(ValueError):
    """A raw row's date could not be parsed."""


class EmptySeriesError(ValueError):
    """Bounds or averages were requested over an empty series."""


class MonthRangeError(ValueError):
    """A month number outside 1-12."""


def is_valid_value(value: float) -> bool:
    """True for a finite index value (NaN and infinities are not averaged)."""
    return math.isfinite(value)


# --- Normalization ---

def parse_reading(raw: RawReading) -> DailyReading:
    """
    Normalize a single raw row.

    Raises:
        ParseError: if the date cannot be parsed.
    """
    day = _parse_date(raw.date)
    year = _parse_int(raw.year)
    if year is None:
        year = day.year
    month = _parse_int(raw.month)
    if month is None or not 1 <= month <= 12:
        month = day.month

    return DailyReading(
        date=day,
        index_value=_parse_float(raw.index_value),
        year=year,
        month=month,
    )


def normalize(raw_rows: Iterable[RawReading]) -> tuple[list[DailyReading], int]:
    """
    Normalize raw rows into daily readings.

    Rows with an unparseable date are skipped rather than failing the batch.

    Returns:
        (readings, skipped_count); readings keep the input order.
    """
    readings: list[DailyReading] = []
    skipped = 0

    for idx, raw in enumerate(raw_rows):
        try:
            readings.append(parse_reading(raw))
        except ParseError as e:
            logger.warning("Skipping rainfall row %d: %s", idx, e)
            skipped += 1

    return readings, skipped


def _parse_date(value: str) -> date:
    text = (value or "").strip()
    if not text:
        raise ParseError("empty date")

    try:
        # fromisoformat rejects a trailing "Z" before Python 3.11
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is not None:
        # Offset-aware timestamps bucket by their UTC calendar day
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise ParseError(f"unrecognized date {value!r}")


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_float(value: Optional[str]) -> float:
    if value is None:
        return math.nan
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


# --- Series shaping ---

def dedupe(readings: Iterable[DailyReading]) -> list[DailyReading]:
    """
    Keep one reading per calendar day, in ascending date order.

    A valid value replaces an invalid one; among valid values the later one
    in input order wins. A day with only invalid values keeps its first.
    """
    ordered = sorted(readings, key=lambda r: r.date)

    by_day: dict[date, DailyReading] = {}
    for reading in ordered:
        if reading.date not in by_day or is_valid_value(reading.index_value):
            by_day[reading.date] = reading

    return list(by_day.values())


def aggregate_monthly(readings: Iterable[DailyReading]) -> list[MonthlyAverage]:
    """
    Average valid readings per (year, month).

    Invalid values count toward neither sum nor count, and a bucket with no
    valid readings is omitted. Output order follows first appearance of each
    bucket; callers that need display order sort by (year, month).
    """
    buckets: dict[tuple[int, int], list[float]] = {}
    for reading in readings:
        values = buckets.setdefault((reading.year, reading.month), [])
        if is_valid_value(reading.index_value):
            values.append(reading.index_value)

    return [
        MonthlyAverage(year=year, month=month, index_value=float(np.mean(values)))
        for (year, month), values in buckets.items()
        if values
    ]


def filter_monsoon_months(averages: Iterable[MonthlyAverage]) -> list[MonthlyAverage]:
    """Keep June-September entries, preserving their relative order."""
    return [a for a in averages if a.month in MONSOON_MONTHS]


def compute_bounds(averages: Iterable[MonthlyAverage]) -> SeriesBounds:
    """
    Minimum and maximum index value of a series.

    Raises:
        EmptySeriesError: if the series has no finite values.
    """
    values = np.array(
        [a.index_value for a in averages if is_valid_value(a.index_value)],
        dtype=float,
    )
    if values.size == 0:
        raise EmptySeriesError("Cannot compute bounds of an empty series.")
    return SeriesBounds(min=float(values.min()), max=float(values.max()))


def group_by_year(averages: Iterable[MonthlyAverage]) -> dict[int, list[MonthlyAverage]]:
    """Group monthly averages by year; years ascend and months ascend within each year."""
    grouped: dict[int, list[MonthlyAverage]] = {}
    for avg in sorted(averages, key=lambda a: (a.year, a.month)):
        grouped.setdefault(avg.year, []).append(avg)
    return grouped


def build_rainfall_series(
    raw_rows: Iterable[RawReading],
    monsoon_only: bool = False,
) -> RainfallSeries:
    """
    Run the full pipeline: normalize -> dedupe -> monthly averages ->
    optional monsoon filter -> bounds.

    Raises:
        EmptySeriesError: if no monthly average survives.
    """
    readings, skipped = normalize(raw_rows)
    monthly = aggregate_monthly(dedupe(readings))
    if monsoon_only:
        monthly = filter_monsoon_months(monthly)

    bounds = compute_bounds(monthly)

    if skipped:
        logger.warning("Skipped %d rainfall rows with unparseable dates", skipped)

    return RainfallSeries(
        yearly_data=group_by_year(monthly),
        min_value=bounds.min,
        max_value=bounds.max,
        is_monsoon_only=monsoon_only,
        skipped_rows=skipped,
    )


# --- Presentation helpers ---

def color_for(value: float, bounds: SeriesBounds) -> ColorDescriptor:
    """
    Map an index value onto the diverging red/blue scale.

    Negative values shade toward red relative to |bounds.min|, non-negative
    values toward blue relative to bounds.max. A zero extreme on the value's
    side yields the flat base color.
    """
    if not is_valid_value(value):
        raise ValueError(f"Cannot color a non-finite value: {value}")

    if value < 0:
        extreme = abs(bounds.min)
        intensity = abs(value) / extreme if extreme > 0 else 0.0
        hue = "negative"
    else:
        intensity = value / bounds.max if bounds.max > 0 else 0.0
        hue = "positive"

    intensity = min(max(intensity, 0.0), 1.0)
    channel = math.floor(COLOR_BASE_CHANNEL - COLOR_CHANNEL_SPAN * intensity)

    if hue == "negative":
        rgba = (255, channel, channel, COLOR_ALPHA)
    else:
        rgba = (channel, channel, 255, COLOR_ALPHA)

    return ColorDescriptor(
        hue=hue,
        intensity=intensity,
        rgba=rgba,
        css=f"rgba({rgba[0]}, {rgba[1]}, {rgba[2]}, {rgba[3]})",
    )


def get_month_name(month: int, short: bool = False) -> str:
    """English month name for 1-12, abbreviated to three letters if short."""
    if not 1 <= month <= 12:
        raise MonthRangeError(f"Month must be between 1 and 12, got {month}.")
    abbrev, full = _MONTH_NAMES[month - 1]
    return abbrev if short else full
