"""Tests for DateParser component."""

from datetime import date, datetime

import pytest
from dateutil.relativedelta import FR, MO
from voice_expense.parsers.base import TranscriptContext
from voice_expense.parsers.date_parser import DateParser, most_recent_weekday


class TestDateParser:
    """Test suite for DateParser. Reference date is Tuesday 2025-06-10."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = DateParser()

    def parse(self, text, reference_date):
        return self.parser.parse(TranscriptContext(text=text, reference_date=reference_date))

    @pytest.mark.parametrize("text, expected", [
        ("coffee today", "2025-06-10"),
        ("lunch yesterday", "2025-06-09"),
        ("taxi tomorrow", "2025-06-11"),
        ("dinner last night", "2025-06-09"),
        ("fuel 3 days ago", "2025-06-07"),
        ("rent a week ago", "2025-06-03"),
        ("gym last week", "2025-06-03"),
        ("snacks this morning", "2025-06-10"),
    ])
    def test_relative(self, text, expected, reference_date):
        assert self.parse(text, reference_date).iso_date == expected

    def test_day_before_yesterday_beats_yesterday(self, reference_date):
        """Overlapping matches resolve to the left-most, then the longest."""
        result = self.parse("bus day before yesterday", reference_date)

        assert result.iso_date == "2025-06-08"
        assert result.raw_text == "day before yesterday"

    @pytest.mark.parametrize("text, expected", [
        ("movie last friday", "2025-06-06"),
        ("movie on friday", "2025-06-06"),
        ("lunch monday", "2025-06-09"),
        ("shoes on tuesday", "2025-06-03"),
    ])
    def test_weekday_is_in_the_past(self, text, expected, reference_date):
        assert self.parse(text, reference_date).iso_date == expected

    def test_last_weekday_span(self, reference_date):
        result = self.parse("movie last friday", reference_date)

        assert result.raw_text == "last friday"

    @pytest.mark.parametrize("text, expected", [
        ("15 march", "2025-03-15"),
        ("1st jan 2024", "2024-01-01"),
        ("march 15, 2024", "2024-03-15"),
        ("sept 3rd", "2025-09-03"),
        ("2025-01-15", "2025-01-15"),
        ("03/04/2025", "2025-03-04"),
        ("25/12/2024", "2024-12-25"),
    ])
    def test_absolute(self, text, expected, reference_date):
        assert self.parse(text, reference_date).iso_date == expected

    def test_day_first_option(self, reference_date):
        parser = DateParser(day_first=True)
        result = parser.parse(TranscriptContext(text="03/04/2025", reference_date=reference_date))

        assert result.iso_date == "2025-04-03"

    @pytest.mark.parametrize("text", [
        "31 february 2025",
        "31 february 1999",
        "03/04/1999",
        "fuel 400 days ago",
        "2025-13-01",
    ])
    def test_impossible_dates_rejected(self, text, reference_date):
        assert self.parse(text, reference_date).iso_date is None

    @pytest.mark.parametrize("text, expected", [
        ("dinner 5 may 1999", "2025-05-05"),
        ("march 5, 1999", "2025-03-05"),
        ("12th dec 2150", "2025-12-12"),
    ])
    def test_named_month_ignores_out_of_range_year(self, text, expected, reference_date):
        assert self.parse(text, reference_date).iso_date == expected

    def test_left_most_expression_wins(self, reference_date):
        assert self.parse("yesterday not 15 march", reference_date).iso_date == "2025-06-09"

    def test_datetime_reference(self):
        result = self.parse("yesterday", datetime(2025, 1, 1, 23, 59))

        assert result.iso_date == "2024-12-31"

    def test_no_date(self, reference_date):
        result = self.parse("coffee 50", reference_date)

        assert result.iso_date is None
        assert result.span is None


class TestMostRecentWeekday:
    """Past weekday resolution."""

    def test_same_weekday_goes_back_a_week(self):
        monday = date(2025, 6, 9)

        assert most_recent_weekday(monday, MO) == date(2025, 6, 2)

    def test_previous_day(self):
        saturday = date(2025, 6, 7)

        assert most_recent_weekday(saturday, FR) == date(2025, 6, 6)
