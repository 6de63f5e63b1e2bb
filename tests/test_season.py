"""Tests for season classification."""

import pytest
from datetime import date, datetime, timedelta

from snowfall.errors import SeasonTableError
from snowfall.hemisphere import Hemisphere
from snowfall.season import (
    CalendarType,
    DateRange,
    SEASON_DEFINITIONS,
    SEASON_ORDER,
    SEASON_TABLE,
    Season,
    SeasonOptions,
    SeasonTable,
    get_season,
)


def every_day_of_leap_year():
    day = date(2024, 1, 1)
    while day.year == 2024:
        yield day
        day += timedelta(days=1)


class TestDateRange:

    def test_parse(self):
        r = DateRange.parse("03-21", "06-20")
        assert (r.start_month, r.start_day, r.end_month, r.end_day) == (3, 21, 6, 20)
        assert r.start == 321
        assert r.end == 620
        assert r.wraps is False

    def test_inclusive_bounds(self):
        r = DateRange.parse("03-21", "06-20")
        assert r.contains(3, 21)
        assert r.contains(6, 20)
        assert not r.contains(3, 20)
        assert not r.contains(6, 21)

    def test_wrapping_range(self):
        r = DateRange.parse("12-21", "03-20")
        assert r.wraps is True
        assert r.contains(12, 21)
        assert r.contains(12, 31)
        assert r.contains(1, 1)
        assert r.contains(3, 20)
        assert not r.contains(3, 21)
        assert not r.contains(12, 20)


class TestSeasonTable:

    def test_default_table_partitions_every_date(self):
        """Every date maps to exactly one real season for every scheme/hemisphere."""
        for calendar_type, hemisphere in SEASON_DEFINITIONS:
            for day in every_day_of_leap_year():
                season = SEASON_TABLE.classify(day.month, day.day, calendar_type, hemisphere)
                assert season in SEASON_ORDER, (calendar_type, hemisphere, day)

    def test_all_pairs_defined(self):
        assert set(SEASON_TABLE.keys()) == {
            (calendar_type, hemisphere)
            for calendar_type in CalendarType
            for hemisphere in Hemisphere
        }

    def test_gap_rejected(self):
        definitions = {key: dict(ranges) for key, ranges in SEASON_DEFINITIONS.items()}
        key = (CalendarType.ASTRONOMICAL, Hemisphere.NORTHERN)
        definitions[key][Season.SPRING] = DateRange.parse("03-22", "06-20")

        with pytest.raises(SeasonTableError, match="03-21 matches 0 seasons"):
            SeasonTable(definitions)

    def test_overlap_rejected(self):
        definitions = {key: dict(ranges) for key, ranges in SEASON_DEFINITIONS.items()}
        key = (CalendarType.METEOROLOGICAL, Hemisphere.SOUTHERN)
        definitions[key][Season.AUTUMN] = DateRange.parse("02-28", "05-31")

        with pytest.raises(SeasonTableError, match="matches 2 seasons"):
            SeasonTable(definitions)

    def test_missing_season_rejected(self):
        definitions = {key: dict(ranges) for key, ranges in SEASON_DEFINITIONS.items()}
        del definitions[(CalendarType.ASTRONOMICAL, Hemisphere.SOUTHERN)][Season.WINTER]

        with pytest.raises(SeasonTableError, match="missing ranges for Winter"):
            SeasonTable(definitions)

    def test_table_is_read_only(self):
        ranges = SEASON_TABLE.ranges_for(CalendarType.ASTRONOMICAL, Hemisphere.NORTHERN)
        with pytest.raises(TypeError):
            ranges[Season.WINTER] = DateRange.parse("01-01", "12-31")

    def test_undefined_pair_is_unknown(self):
        assert SEASON_TABLE.classify(1, 1, None, Hemisphere.NORTHERN) is Season.UNKNOWN


class TestGetSeason:
    """Northern Astronomical is the default."""

    @pytest.mark.parametrize("month,day,expected", [
        (12, 25, Season.WINTER),
        (1, 15, Season.WINTER),
        (3, 20, Season.WINTER),
        (3, 21, Season.SPRING),
        (6, 20, Season.SPRING),
        (6, 21, Season.SUMMER),
        (9, 21, Season.AUTUMN),
        (12, 20, Season.AUTUMN),
        (12, 21, Season.WINTER),
    ])
    def test_default_boundaries(self, month, day, expected):
        assert get_season(date(2025, month, day)) is expected

    def test_meteorological_vs_astronomical(self):
        assert get_season(date(2025, 3, 1), {"calendarType": "Meteorological"}) is Season.SPRING
        assert get_season(date(2025, 3, 1), {}) is Season.WINTER

    def test_meteorological_leap_day(self):
        options = {"calendarType": "Meteorological"}
        assert get_season(date(2024, 2, 29), options) is Season.WINTER
        assert get_season(date(2025, 2, 28), options) is Season.WINTER
        assert get_season(date(2024, 2, 29), {**options, "hemisphere": "Southern"}) is Season.SUMMER

    def test_southern_mirroring(self):
        assert get_season(date(2025, 12, 25), {"hemisphere": "Southern"}) is Season.SUMMER
        assert get_season(date(2025, 7, 1), {"hemisphere": "Southern"}) is Season.WINTER

    def test_hemisphere_inferred_from_country(self):
        assert get_season(date(2025, 7, 1), {"countryCode": "au"}) is Season.WINTER

    def test_hemisphere_inferred_from_coordinates(self):
        assert get_season(date(2025, 7, 1), {"latitude": -34.6, "longitude": -58.4}) is Season.WINTER

    def test_year_and_time_ignored(self):
        assert get_season(datetime(1999, 12, 31, 23, 59)) is Season.WINTER
        assert get_season(datetime(2031, 12, 31, 0, 0)) is Season.WINTER

    def test_snake_case_and_options_object(self):
        options = SeasonOptions(calendar_type=CalendarType.METEOROLOGICAL, hemisphere=Hemisphere.SOUTHERN)
        assert get_season(date(2025, 9, 1), options) is Season.SPRING
        assert get_season(date(2025, 9, 1), {"calendar_type": "Meteorological", "hemisphere": "Southern"}) is Season.SPRING

    def test_special_season_type_falls_back_to_calendar(self):
        assert get_season(date(2025, 12, 25), {"seasonType": "Special"}) is Season.WINTER

    def test_language_culture_ignored(self):
        assert get_season(date(2025, 4, 1), {"languageCulture": "pl-PL"}) is Season.SPRING

    def test_unknown_calendar_type(self):
        assert get_season(date(2025, 12, 25), {"calendarType": "Lunar"}) is Season.UNKNOWN

    def test_defaults_to_now(self):
        assert get_season() is get_season(datetime.now())

    def test_season_values_are_strings(self):
        assert get_season(date(2025, 12, 25)) == "Winter"
