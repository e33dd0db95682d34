"""
Tests for the rainfall index series processor.

Covers normalization of untrusted rows, per-day deduplication, monthly
averaging with invalid values excluded, the monsoon filter, series bounds,
the diverging color scale, and month names.
"""

import math
import random
from datetime import date

import pytest
from pydantic import ValidationError

from monsoon_dashboard.engine.rainfall_processor import (
    EmptySeriesError,
    MonthRangeError,
    ParseError,
    aggregate_monthly,
    build_rainfall_series,
    color_for,
    compute_bounds,
    dedupe,
    filter_monsoon_months,
    get_month_name,
    normalize,
    parse_reading,
)
from monsoon_dashboard.models.rainfall import (
    DailyReading,
    MonthlyAverage,
    RawReading,
    SeriesBounds,
)


def raw(date_str: str, value: str = "", year=None, month=None) -> RawReading:
    return RawReading(date=date_str, index_value=value, year=year, month=month)


def daily(day: date, value: float) -> DailyReading:
    return DailyReading(date=day, index_value=value, year=day.year, month=day.month)


def monthly(year: int, month: int, value: float) -> MonthlyAverage:
    return MonthlyAverage(year=year, month=month, index_value=value)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestParseReading:
    def test_year_and_month_derived_from_date(self):
        r = parse_reading(raw("2023-06-15", "12.5"))
        assert r.date == date(2023, 6, 15)
        assert r.year == 2023
        assert r.month == 6
        assert r.index_value == 12.5

    def test_explicit_year_and_month_kept(self):
        r = parse_reading(raw("2023-06-15", "1", year="2022", month="7"))
        assert r.year == 2022
        assert r.month == 7

    def test_non_numeric_year_month_fall_back_to_date(self):
        r = parse_reading(raw("2023-06-15", "1", year="n/a", month="June"))
        assert r.year == 2023
        assert r.month == 6

    def test_out_of_range_month_falls_back_to_date(self):
        r = parse_reading(raw("2023-06-15", "1", month="13"))
        assert r.month == 6

    def test_non_numeric_value_is_nan(self):
        r = parse_reading(raw("2023-06-15", "abc"))
        assert math.isnan(r.index_value)

    def test_empty_value_is_nan(self):
        r = parse_reading(raw("2023-06-15", ""))
        assert math.isnan(r.index_value)

    def test_iso_timestamp_with_z(self):
        r = parse_reading(raw("2023-06-15T00:00:00.000Z", "3"))
        assert r.date == date(2023, 6, 15)

    def test_offset_timestamp_uses_utc_day(self):
        r = parse_reading(raw("2023-06-15T02:00:00+05:30", "3"))
        assert r.date == date(2023, 6, 14)
        assert r.month == 6

    def test_offset_timestamp_crossing_month(self):
        r = parse_reading(raw("2023-07-01T01:00:00+05:30", "3"))
        assert r.date == date(2023, 6, 30)
        assert r.month == 6

    def test_naive_timestamp_keeps_its_day(self):
        r = parse_reading(raw("2023-06-15T23:30:00", "3"))
        assert r.date == date(2023, 6, 15)

    def test_us_date_format(self):
        r = parse_reading(raw("06/15/2023", "3"))
        assert r.date == date(2023, 6, 15)

    def test_bad_date_raises(self):
        with pytest.raises(ParseError):
            parse_reading(raw("not a date", "3"))

    def test_empty_date_raises(self):
        with pytest.raises(ParseError):
            parse_reading(raw("", "3"))


class TestNormalize:
    def test_bad_rows_skipped_and_counted(self):
        readings, skipped = normalize([
            raw("2023-06-01", "10"),
            raw("garbage", "20"),
            raw("", "30"),
            raw("2023-06-02", "x"),
        ])
        assert skipped == 2
        assert [r.date for r in readings] == [date(2023, 6, 1), date(2023, 6, 2)]

    def test_nan_rows_are_retained(self):
        readings, skipped = normalize([raw("2023-06-01", "")])
        assert skipped == 0
        assert len(readings) == 1
        assert math.isnan(readings[0].index_value)

    def test_does_not_reorder(self):
        readings, _ = normalize([raw("2023-06-03", "1"), raw("2023-06-01", "2")])
        assert [r.date.day for r in readings] == [3, 1]


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------

class TestDedupe:
    def test_sorted_ascending(self):
        result = dedupe([
            daily(date(2023, 6, 3), 1.0),
            daily(date(2023, 6, 1), 2.0),
            daily(date(2023, 6, 2), 3.0),
        ])
        assert [r.date.day for r in result] == [1, 2, 3]

    def test_last_valid_reading_wins(self):
        result = dedupe([
            daily(date(2023, 6, 15), 5.0),
            daily(date(2023, 6, 15), 8.0),
        ])
        assert len(result) == 1
        assert result[0].index_value == 8.0

    def test_valid_beats_later_nan(self):
        result = dedupe([
            daily(date(2023, 6, 15), 5.0),
            daily(date(2023, 6, 15), math.nan),
        ])
        assert result[0].index_value == 5.0

    def test_valid_beats_earlier_nan(self):
        result = dedupe([
            daily(date(2023, 6, 15), math.nan),
            daily(date(2023, 6, 15), 7.0),
        ])
        assert result[0].index_value == 7.0

    def test_all_nan_keeps_first(self):
        first = daily(date(2023, 6, 15), math.nan)
        second = daily(date(2023, 6, 15), math.nan)
        result = dedupe([first, second])
        assert len(result) == 1
        assert result[0] is first

    def test_one_entry_per_day(self):
        days = [date(2023, 6, d) for d in (1, 2, 2, 3, 3, 3)]
        result = dedupe([daily(d, float(i)) for i, d in enumerate(days)])
        assert len(result) == 3
        assert len({r.date for r in result}) == 3

    def test_idempotent(self):
        rng = random.Random(7)
        readings = [
            daily(date(2023, rng.randint(1, 12), rng.randint(1, 28)),
                  rng.choice([math.nan, rng.uniform(-50, 50)]))
            for _ in range(200)
        ]
        once = dedupe(readings)
        twice = dedupe(once)
        assert [r.date for r in twice] == [r.date for r in once]
        assert all(a is b for a, b in zip(once, twice))

    def test_empty(self):
        assert dedupe([]) == []


# ---------------------------------------------------------------------------
# Monthly aggregation
# ---------------------------------------------------------------------------

class TestAggregateMonthly:
    def test_simple_mean(self):
        readings = [
            daily(date(2023, 6, 1), 10.0),
            daily(date(2023, 6, 2), 20.0),
            daily(date(2023, 6, 3), 30.0),
        ]
        result = aggregate_monthly(readings)
        assert len(result) == 1
        assert result[0].year == 2023
        assert result[0].month == 6
        assert result[0].index_value == pytest.approx(20.0)

    def test_nan_excluded_from_sum_and_count(self):
        readings = [
            daily(date(2023, 6, 1), 10.0),
            daily(date(2023, 6, 2), math.nan),
            daily(date(2023, 6, 3), 30.0),
        ]
        result = aggregate_monthly(readings)
        assert result[0].index_value == pytest.approx(20.0)

    def test_month_without_valid_readings_omitted(self):
        readings = [
            daily(date(2023, 6, 1), 10.0),
            daily(date(2023, 7, 1), math.nan),
            daily(date(2023, 7, 2), math.nan),
            daily(date(2023, 8, 1), -4.0),
        ]
        result = aggregate_monthly(readings)
        assert sorted(a.month for a in result) == [6, 8]
        assert all(not math.isnan(a.index_value) for a in result)

    def test_years_kept_apart(self):
        readings = [
            daily(date(2022, 6, 1), 10.0),
            daily(date(2023, 6, 1), 30.0),
        ]
        result = {(a.year, a.month): a.index_value for a in aggregate_monthly(readings)}
        assert result == {(2022, 6): 10.0, (2023, 6): 30.0}

    def test_bucket_uses_reading_year_month_fields(self):
        # Source-supplied month overrides the calendar month of the date
        reading = DailyReading(date=date(2023, 6, 30), index_value=4.0, year=2023, month=7)
        result = aggregate_monthly([reading])
        assert result[0].month == 7

    def test_empty(self):
        assert aggregate_monthly([]) == []


# ---------------------------------------------------------------------------
# Monsoon filter
# ---------------------------------------------------------------------------

class TestFilterMonsoonMonths:
    def test_keeps_june_to_september(self):
        averages = [monthly(2023, m, float(m)) for m in range(1, 13)]
        result = filter_monsoon_months(averages)
        assert [a.month for a in result] == [6, 7, 8, 9]

    def test_preserves_relative_order(self):
        months = [9, 1, 7, 12, 6, 8, 3]
        averages = [monthly(2023, m, 0.0) for m in months]
        result = filter_monsoon_months(averages)
        assert [a.month for a in result] == [9, 7, 6, 8]

    def test_values_untouched(self):
        averages = [monthly(2023, 7, 12.34)]
        assert filter_monsoon_months(averages)[0].index_value == 12.34


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------

class TestComputeBounds:
    def test_min_max(self):
        bounds = compute_bounds([monthly(2023, 1, -5.0), monthly(2023, 2, 7.5), monthly(2023, 3, 1.0)])
        assert bounds.min == -5.0
        assert bounds.max == 7.5

    def test_single_entry(self):
        bounds = compute_bounds([monthly(2023, 1, 3.0)])
        assert bounds.min == bounds.max == 3.0

    def test_empty_raises(self):
        with pytest.raises(EmptySeriesError):
            compute_bounds([])

    def test_non_finite_values_ignored(self):
        seq = [
            MonthlyAverage.model_construct(year=2022, month=6, index_value=math.inf),
            monthly(2022, 7, -4.0),
            MonthlyAverage.model_construct(year=2022, month=8, index_value=math.nan),
            monthly(2022, 9, 6.0),
        ]
        bounds = compute_bounds(seq)
        assert bounds.min == -4.0
        assert bounds.max == 6.0

    def test_only_non_finite_raises(self):
        seq = [MonthlyAverage.model_construct(year=2022, month=6, index_value=math.inf)]
        with pytest.raises(EmptySeriesError):
            compute_bounds(seq)

    def test_bounds_contain_every_value(self):
        rng = random.Random(11)
        for _ in range(50):
            seq = [monthly(2023, 1, rng.uniform(-100, 100)) for _ in range(rng.randint(1, 30))]
            bounds = compute_bounds(seq)
            assert all(bounds.min <= a.index_value <= bounds.max for a in seq)
            assert math.isfinite(bounds.min) and math.isfinite(bounds.max)


# ---------------------------------------------------------------------------
# Color scale
# ---------------------------------------------------------------------------

class TestColorFor:
    def test_deterministic(self):
        bounds = SeriesBounds(min=-40.0, max=25.0)
        assert color_for(-13.0, bounds) == color_for(-13.0, bounds)
        assert color_for(9.5, bounds) == color_for(9.5, bounds)

    @pytest.mark.parametrize("bounds", [
        SeriesBounds(min=-40.0, max=25.0),
        SeriesBounds(min=0.0, max=0.0),
        SeriesBounds(min=5.0, max=100.0),
        SeriesBounds(min=-3.0, max=-1.0),
    ])
    def test_zero_is_base_color(self, bounds):
        color = color_for(0.0, bounds)
        assert color.intensity == 0.0
        assert color.rgba == (220, 220, 255, 0.8)
        assert color.css == "rgba(220, 220, 255, 0.8)"

    def test_most_negative_is_full_red(self):
        color = color_for(-40.0, SeriesBounds(min=-40.0, max=25.0))
        assert color.hue == "negative"
        assert color.intensity == 1.0
        assert color.rgba == (255, 70, 70, 0.8)

    def test_half_positive(self):
        color = color_for(10.0, SeriesBounds(min=-40.0, max=20.0))
        assert color.hue == "positive"
        assert color.intensity == pytest.approx(0.5)
        assert color.rgba == (145, 145, 255, 0.8)

    def test_intensity_clamped(self):
        bounds = SeriesBounds(min=-10.0, max=10.0)
        assert color_for(50.0, bounds).intensity == 1.0
        assert color_for(-50.0, bounds).intensity == 1.0

    def test_zero_max_gives_flat_color(self):
        color = color_for(5.0, SeriesBounds(min=-10.0, max=0.0))
        assert color.intensity == 0.0

    def test_zero_min_gives_flat_red(self):
        color = color_for(-5.0, SeriesBounds(min=0.0, max=10.0))
        assert color.hue == "negative"
        assert color.intensity == 0.0
        assert color.rgba == (255, 220, 220, 0.8)

    def test_nan_rejected(self):
        with pytest.raises(ValueError):
            color_for(math.nan, SeriesBounds(min=-1.0, max=1.0))


# ---------------------------------------------------------------------------
# Month names
# ---------------------------------------------------------------------------

class TestGetMonthName:
    def test_full(self):
        assert get_month_name(1) == "January"
        assert get_month_name(12) == "December"

    def test_short(self):
        assert get_month_name(9, short=True) == "Sep"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_out_of_range(self, month):
        with pytest.raises(MonthRangeError):
            get_month_name(month)


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------

class TestBuildRainfallSeries:
    ROWS = [
        raw("2023-07-02", "4"),
        raw("2022-06-01", "10"),
        raw("2022-06-02", "30"),
        raw("2022-01-10", "-50"),
        raw("2023-07-01", "-8"),
        raw("2023-07-01", "2"),   # same day, later row wins
        raw("bogus", "99"),
    ]

    def test_yearly_grouping_sorted(self):
        series = build_rainfall_series(self.ROWS)
        assert list(series.yearly_data) == [2022, 2023]
        assert [a.month for a in series.yearly_data[2022]] == [1, 6]

    def test_averages_and_bounds(self):
        series = build_rainfall_series(self.ROWS)
        jul_2023 = series.yearly_data[2023][0]
        assert jul_2023.index_value == pytest.approx(3.0)
        assert series.min_value == -50.0
        assert series.max_value == 20.0
        assert series.skipped_rows == 1
        assert series.is_monsoon_only is False

    def test_monsoon_only(self):
        series = build_rainfall_series(self.ROWS, monsoon_only=True)
        assert series.is_monsoon_only is True
        assert [a.month for a in series.yearly_data[2022]] == [6]
        assert series.min_value == pytest.approx(3.0)

    def test_empty_raises(self):
        with pytest.raises(EmptySeriesError):
            build_rainfall_series([raw("2023-06-01", "")])

    def test_monsoon_filter_can_empty_series(self):
        with pytest.raises(EmptySeriesError):
            build_rainfall_series([raw("2023-01-01", "5")], monsoon_only=True)


# ---------------------------------------------------------------------------
# Model constraints
# ---------------------------------------------------------------------------

class TestModelConstraints:
    @pytest.mark.parametrize("month", [0, 13])
    def test_monthly_average_month_range(self, month):
        with pytest.raises(ValidationError):
            monthly(2023, month, 1.0)

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_monthly_average_rejects_non_finite(self, value):
        with pytest.raises(ValidationError):
            monthly(2023, 6, value)

    def test_daily_reading_month_range(self):
        with pytest.raises(ValidationError):
            DailyReading(date=date(2023, 6, 1), index_value=1.0, year=2023, month=13)

    def test_daily_reading_allows_nan(self):
        assert math.isnan(daily(date(2023, 6, 1), math.nan).index_value)

    def test_bounds_reject_infinity(self):
        with pytest.raises(ValidationError):
            SeriesBounds(min=-math.inf, max=1.0)
