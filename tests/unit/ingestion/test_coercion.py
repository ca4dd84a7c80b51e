"""
Unit tests for the coercion module.

Tests amount coercion, integer parsing and timestamp parsing.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.ingestion.coercion import (
    first_present,
    is_blank,
    parse_timestamp,
    safe_int,
    strip_or_none,
    to_amount,
)


class TestStringHelpers:
    """Tests for strip_or_none, is_blank and first_present."""

    def test_strip_or_none(self):
        assert strip_or_none("  x ") == "x"
        assert strip_or_none("   ") is None
        assert strip_or_none(None) is None
        assert strip_or_none(5) == "5"

    def test_is_blank(self):
        assert is_blank("")
        assert is_blank(None)
        assert not is_blank("0")

    def test_first_present_skips_blank_candidates(self):
        row = {"order-id": " ", "Order ID": " A-1 "}
        assert first_present(row, ["order-id", "Order ID"]) == "A-1"

    def test_first_present_none_when_absent(self):
        assert first_present({}, ["a", "b"]) is None


class TestToAmount:
    """Tests for to_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1,234.50", Decimal("1234.50")),
            ("₹ 999", Decimal("999")),
            ("$12.5", Decimal("12.5")),
            ("-40.25", Decimal("-40.25")),
            ("(250.00)", Decimal("-250.00")),
            ("€ 1 000", Decimal("1000")),
            (7, Decimal("7")),
            (0.1, Decimal("0.1")),
        ],
    )
    def test_parses_money(self, raw, expected):
        assert to_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "n/a", "abc", "NaN", "Infinity"])
    def test_invalid_is_zero(self, raw):
        """Blank, non-numeric and non-finite values coerce to zero."""
        assert to_amount(raw) == Decimal("0")

    def test_passes_decimal_through(self):
        assert to_amount(Decimal("3.14")) == Decimal("3.14")


class TestSafeInt:
    """Tests for safe_int."""

    def test_parses_integers(self):
        assert safe_int("2") == 2
        assert safe_int(" 1,000 ") == 1000
        assert safe_int("3.0") == 3

    def test_invalid_is_none(self):
        assert safe_int("") is None
        assert safe_int(None) is None
        assert safe_int("two") is None


class TestParseTimestamp:
    """Tests for parse_timestamp."""

    def test_iso_with_zulu(self):
        assert parse_timestamp("2025-08-01T10:00:00Z") == datetime(
            2025, 8, 1, 10, 0, tzinfo=timezone.utc
        )

    def test_iso_with_offset_converted_to_utc(self):
        assert parse_timestamp("2025-08-01T10:00:00+05:30") == datetime(
            2025, 8, 1, 4, 30, tzinfo=timezone.utc
        )

    def test_iso_date_only_is_utc_midnight(self):
        assert parse_timestamp("2025-08-01") == datetime(
            2025, 8, 1, tzinfo=timezone.utc
        )

    def test_us_slash_date(self):
        assert parse_timestamp("08/15/2025") == datetime(
            2025, 8, 15, tzinfo=timezone.utc
        )

    def test_compact_eight_digits_month_first(self):
        assert parse_timestamp("08012025") == datetime(
            2025, 8, 1, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize(
        "raw,year",
        [("080125", 2025), ("080150", 2050), ("080151", 1951), ("080199", 1999)],
    )
    def test_compact_six_digits_year_pivot(self, raw, year):
        """Two-digit years up to 50 are 20xx, later ones 19xx."""
        assert parse_timestamp(raw) == datetime(year, 8, 1, tzinfo=timezone.utc)

    def test_compact_invalid_date_is_none(self):
        assert parse_timestamp("13452025") is None

    def test_free_form_date(self):
        assert parse_timestamp("Aug 1, 2025 10:00:00 AM") == datetime(
            2025, 8, 1, 10, 0, tzinfo=timezone.utc
        )

    def test_datetime_passthrough_made_aware(self):
        assert parse_timestamp(datetime(2025, 8, 1)) == datetime(
            2025, 8, 1, tzinfo=timezone.utc
        )

    def test_aware_datetime_converted(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        assert parse_timestamp(datetime(2025, 8, 1, 5, 30, tzinfo=ist)) == datetime(
            2025, 8, 1, 0, 0, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("raw", [None, "", "  ", "not a date", "13/45/2025"])
    def test_unparseable_is_none(self, raw):
        assert parse_timestamp(raw) is None

    def test_day_first_free_form(self):
        assert parse_timestamp("1 Aug 2025") == datetime(2025, 8, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", ["10:30", "10:30:15 PM", "Aug 1", "August 2025"])
    def test_partial_dates_are_none(self, raw):
        """Values missing a year, month or day are not completed from today."""
        assert parse_timestamp(raw) is None
