"""
Rainfall series providers.

The historical index CSV is the primary source. When it is missing or yields
nothing usable, the color-bar figures exported by the forecasting notebooks
carry the same monthly averages and serve as a fallback. Providers are tried
in order by RainfallSourceChain; the processor itself never falls back.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Optional

from monsoon_dashboard.config import (
    DATA_DIR,
    RAINFALL_CSV_FILENAME,
    RAINFALL_COLUMNS,
    FALLBACK_FIGURE_KEYS,
    TRACES_PER_YEAR,
    SeriesFilter,
)
from monsoon_dashboard.engine.data_files import SourceUnavailableError, read_csv_rows
from monsoon_dashboard.engine.figure_store import FigureStore
from monsoon_dashboard.engine.rainfall_processor import (
    EmptySeriesError,
    build_rainfall_series,
    compute_bounds,
    group_by_year,
    is_valid_value,
)
from monsoon_dashboard.models.rainfall import RawReading, MonthlyAverage, RainfallSeries

logger = logging.getLogger(__name__)

_YEAR_ANNOTATION = re.compile(r"Year (\d{4})")


class RainfallSource(ABC):
    """Base class for rainfall series providers."""

    name: str = "source"

    @abstractmethod
    def load_series(self, series_filter: SeriesFilter) -> RainfallSeries:
        """
        Produce the monthly series for the requested filter.

        Raises:
            SourceUnavailableError: the provider cannot produce a series.
        """
        ...


class RainfallCsvSource(RainfallSource):
    """Daily index readings from the historical CSV, aggregated on request."""

    name = "csv"

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.path.join(DATA_DIR, RAINFALL_CSV_FILENAME)

    def read_raw_rows(self) -> list[RawReading]:
        rows = read_csv_rows(self.path)
        date_col = RAINFALL_COLUMNS["date"]
        if rows and date_col not in rows[0]:
            raise SourceUnavailableError(
                f"Rainfall CSV has no '{date_col}' column. Headers: {list(rows[0])[:10]}"
            )

        return [
            RawReading(
                date=row.get(date_col, ""),
                index_value=row.get(RAINFALL_COLUMNS["index_value"], ""),
                year=row.get(RAINFALL_COLUMNS["year"]) or None,
                month=row.get(RAINFALL_COLUMNS["month"]) or None,
            )
            for row in rows
        ]

    def load_series(self, series_filter: SeriesFilter) -> RainfallSeries:
        raw_rows = self.read_raw_rows()
        try:
            series = build_rainfall_series(
                raw_rows,
                monsoon_only=series_filter == SeriesFilter.MONSOON,
            )
        except EmptySeriesError as e:
            raise SourceUnavailableError(f"Rainfall CSV produced no data: {e}") from e
        series.source = self.name
        return series


class PlotlyFigureSource(RainfallSource):
    """
    Monthly averages recovered from a precomputed color-bar figure.

    Layout annotations carry "Year NNNN" titles; trace i belongs to the
    (i // traces_per_year)-th annotated year and holds month/value pairs as
    x/y arrays.
    """

    name = "figure"

    def __init__(
        self,
        store: FigureStore,
        figure_keys: Optional[dict[SeriesFilter, str]] = None,
        traces_per_year: int = TRACES_PER_YEAR,
    ):
        self.store = store
        self.figure_keys = figure_keys or FALLBACK_FIGURE_KEYS
        self.traces_per_year = traces_per_year

    def load_series(self, series_filter: SeriesFilter) -> RainfallSeries:
        figure = self.store.load(self.figure_keys[series_filter])
        try:
            averages = extract_figure_averages(figure, self.traces_per_year)
            bounds = compute_bounds(averages)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise SourceUnavailableError(f"Figure data could not be read: {e}") from e

        return RainfallSeries(
            yearly_data=group_by_year(averages),
            min_value=bounds.min,
            max_value=bounds.max,
            is_monsoon_only=series_filter == SeriesFilter.MONSOON,
            source=self.name,
        )


def extract_figure_averages(figure: dict, traces_per_year: int = TRACES_PER_YEAR) -> list[MonthlyAverage]:
    """
    Pull (year, month, value) entries out of a color-bar Plotly figure.

    Raises:
        ValueError: if the document is not a figure object, or a bar holds a
            month outside 1-12 or a non-numeric value.
    """
    if not isinstance(figure, dict):
        raise ValueError(f"Figure must be a JSON object, got {type(figure).__name__}.")

    layout = figure.get("layout")
    annotations = layout.get("annotations") if isinstance(layout, dict) else None
    years = []
    for anno in annotations if isinstance(annotations, list) else []:
        if not isinstance(anno, dict):
            continue
        match = _YEAR_ANNOTATION.search(str(anno.get("text") or ""))
        if match:
            years.append(int(match.group(1)))

    traces = figure.get("data")
    averages: list[MonthlyAverage] = []
    for i, trace in enumerate(traces if isinstance(traces, list) else []):
        if not isinstance(trace, dict):
            continue
        xs = trace.get("x")
        ys = trace.get("y")
        if not isinstance(xs, list) or not isinstance(ys, list) or not xs or not ys:
            continue

        year_idx = i // traces_per_year
        if year_idx >= len(years):
            continue
        year = years[year_idx]

        for month, value in zip(xs, ys):
            if value is None:
                continue
            value = float(value)
            if not is_valid_value(value):
                continue
            averages.append(MonthlyAverage(year=year, month=int(month), index_value=value))

    return averages


class RainfallSourceChain:
    """Ordered providers; the first one that succeeds wins."""

    def __init__(self, sources: list[RainfallSource]):
        if not sources:
            raise ValueError("At least one rainfall source is required.")
        self.sources = list(sources)

    def load_series(self, series_filter: SeriesFilter) -> RainfallSeries:
        failures = []
        for source in self.sources:
            try:
                return source.load_series(series_filter)
            except SourceUnavailableError as e:
                logger.warning("Rainfall source '%s' unavailable: %s", source.name, e)
                failures.append(f"{source.name}: {e}")

        raise SourceUnavailableError(
            "No rainfall source available (" + "; ".join(failures) + ")"
        )
