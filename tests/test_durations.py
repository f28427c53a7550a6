"""Tests for core duration logic."""

from datetime import datetime, timedelta

import pytest

from cadence.core.durations import (
    ZERO_DURATION,
    Duration,
    OutOfRangeError,
    add_duration,
    is_monotonic,
    is_zero,
    negate_duration,
    parse_duration,
    scale_duration,
    serialize_duration,
)

EPOCH = datetime(1970, 1, 1)


class TestParseDuration:
    def test_all_components(self):
        assert parse_duration("P1Y2M3DT4H5M6.007S") == Duration(
            years=1, months=2, days=3, hours=4, minutes=5, seconds=6, milliseconds=7
        )

    def test_negative_components(self):
        assert parse_duration("P-1Y-2M-3DT-4H-5M-6.007S") == Duration(
            years=-1, months=-2, days=-3, hours=-4, minutes=-5, seconds=-6, milliseconds=-7
        )

    def test_months_vs_minutes(self):
        assert parse_duration("P2M") == Duration(months=2)
        assert parse_duration("PT2M") == Duration(minutes=2)

    def test_explicit_plus_sign(self):
        assert parse_duration("P+3D") == Duration(days=3)

    def test_zero_forms(self):
        assert parse_duration("PT0S") == Duration()
        assert parse_duration("P0D") == Duration()
        assert parse_duration("P") == Duration()

    def test_fraction_rounds_to_millisecond(self):
        assert parse_duration("PT0.1248S") == Duration(milliseconds=125)

    def test_half_millisecond_rounds_away_from_zero(self):
        assert parse_duration("PT0.0005S") == Duration(milliseconds=1)
        assert parse_duration("PT-0.0005S") == Duration(milliseconds=-1)
        assert parse_duration("PT0.1245S") == Duration(milliseconds=125)

    def test_rounding_carries_into_seconds(self):
        assert parse_duration("PT1.9996S") == Duration(seconds=2)
        assert parse_duration("PT-1.9996S") == Duration(seconds=-2)

    def test_milliseconds_share_sign_with_seconds(self):
        assert parse_duration("PT-2.5S") == Duration(seconds=-2, milliseconds=-500)

    @pytest.mark.parametrize(
        "text",
        ["", "T0S", "1D", "P1W", "P1.5D", "PT1.S", "P1D2Y", "PT1H ", "xP1D", "P--1D"],
    )
    def test_invalid(self, text):
        assert parse_duration(text) is None


class TestSerializeDuration:
    def test_all_components(self):
        duration = Duration(years=1, months=2, days=3, hours=4, minutes=5, seconds=6, milliseconds=7)
        assert serialize_duration(duration) == "P1Y2M3DT4H5M6.007S"

    def test_zero_uses_sentinel(self):
        assert serialize_duration(Duration()) == ZERO_DURATION == "PT0S"
        assert serialize_duration(Duration(years=0, months=0, days=0)) == "PT0S"

    def test_date_only_omits_time_designator(self):
        assert serialize_duration(Duration(days=7)) == "P7D"

    def test_time_only(self):
        assert serialize_duration(Duration(hours=1, minutes=30)) == "PT1H30M"

    def test_negative_milliseconds_only(self):
        assert serialize_duration(Duration(milliseconds=-7)) == "PT-0.007S"

    def test_negative_seconds_and_milliseconds(self):
        assert serialize_duration(Duration(seconds=-6, milliseconds=-7)) == "PT-6.007S"

    def test_mixed_sign_seconds_are_folded(self):
        assert serialize_duration(Duration(seconds=1, milliseconds=-500)) == "PT0.500S"

    @pytest.mark.parametrize(
        "text",
        ["P1Y2M3DT4H5M6.007S", "P-1Y-2M-3DT-4H-5M-6.007S", "P7D", "PT0.125S", "P1MT12H"],
    )
    def test_parse_serialize_round_trip(self, text):
        duration = parse_duration(text)
        assert serialize_duration(duration) == text
        assert parse_duration(serialize_duration(duration)) == duration


class TestAddDuration:
    def test_all_components_from_epoch(self):
        duration = Duration(years=1, months=2, days=3, hours=4, minutes=5, seconds=6, milliseconds=7)
        assert add_duration(EPOCH, duration) == datetime(1971, 3, 4, 4, 5, 6, 7000)

    def test_month_end_clamps(self):
        assert add_duration(datetime(2021, 1, 31), Duration(months=1)) == datetime(2021, 2, 28)
        assert add_duration(datetime(2024, 1, 31), Duration(months=1)) == datetime(2024, 2, 29)

    def test_leap_day_plus_year_clamps(self):
        assert add_duration(datetime(2024, 2, 29), Duration(years=1)) == datetime(2025, 2, 28)

    def test_days_apply_after_months(self):
        assert add_duration(datetime(2021, 1, 31), Duration(months=1, days=1)) == datetime(2021, 3, 1)

    def test_month_rollover_into_next_year(self):
        assert add_duration(datetime(2021, 11, 15), Duration(months=3)) == datetime(2022, 2, 15)

    def test_sub_day_components_are_flat(self):
        start = datetime(2021, 12, 31, 23, 0)
        assert add_duration(start, Duration(hours=2)) == datetime(2022, 1, 1, 1, 0)
        assert add_duration(start, Duration(minutes=-90)) == datetime(2021, 12, 31, 21, 30)

    def test_add_then_negate_restores(self):
        start = datetime(2023, 5, 10, 8, 0)
        duration = Duration(days=1, hours=2, seconds=30, milliseconds=250)
        assert add_duration(add_duration(start, duration), negate_duration(duration)) == start

    @pytest.mark.parametrize(
        "start,duration",
        [
            (datetime(2021, 1, 1), Duration(years=10000)),
            (datetime(9999, 12, 31), Duration(days=1)),
            (datetime(1, 1, 1), Duration(hours=-1)),
            (datetime(2021, 1, 1), Duration(days=10**12)),
        ],
    )
    def test_out_of_range_raises(self, start, duration):
        with pytest.raises(OutOfRangeError):
            add_duration(start, duration)


class TestNegateDuration:
    def test_component_wise(self):
        assert negate_duration(Duration(years=1, days=-2, milliseconds=3)) == Duration(
            years=-1, days=2, milliseconds=-3
        )

    def test_zero_stays_zero(self):
        assert negate_duration(Duration()) == Duration()


class TestIsZero:
    def test_empty(self):
        assert is_zero(Duration()) is True

    def test_explicit_zero_fields(self):
        assert is_zero(Duration(years=0, months=-0, days=0)) is True

    def test_cancelling_components(self):
        # Zero by effect even though it serializes as P1DT-24H, not PT0S
        assert is_zero(Duration(days=1, hours=-24)) is True

    def test_non_zero(self):
        assert is_zero(Duration(milliseconds=1)) is False
        assert is_zero(Duration(months=1)) is False

    def test_out_of_range_is_not_zero(self):
        assert is_zero(Duration(years=10000)) is False

    @pytest.mark.parametrize("text", ["PT0S", "P0Y0M0D", "P1D", "PT0.001S", "P-1M"])
    def test_matches_zero_sentinel(self, text):
        duration = parse_duration(text)
        assert is_zero(duration) == (serialize_duration(duration) == ZERO_DURATION)


class TestDurationHelpers:
    def test_fixed_length(self):
        assert Duration(days=1, hours=2).fixed_length() == timedelta(days=1, hours=2)
        assert Duration(months=1).fixed_length() is None

    def test_is_monotonic(self):
        assert is_monotonic(Duration(months=1, days=1)) is True
        assert is_monotonic(Duration(months=-1, days=-1)) is True
        assert is_monotonic(Duration()) is True
        assert is_monotonic(Duration(months=1, days=-1)) is False

    def test_scale(self):
        assert scale_duration(Duration(months=1, days=2), -3) == Duration(months=-3, days=-6)
        assert scale_duration(Duration(hours=5), 0) == Duration()

    def test_fixed_length_too_long(self):
        with pytest.raises(OutOfRangeError):
            Duration(days=10**12).fixed_length()
