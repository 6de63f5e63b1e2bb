"""
Season classification by calendar scheme and hemisphere.

Season boundaries are fixed month-day approximations, not per-year
solstice/equinox computations. Supported options:
- calendar_type: "Astronomical" | "Meteorological" (default "Astronomical")
- season_type: "Calendar" | "Special" ("Special" not implemented, falls back to Calendar)
- hemisphere: "Northern" | "Southern" (inferred if omitted)
- country_code: ISO 3166-1 alpha-2 (used to infer hemisphere)
- latitude, longitude: GPS coordinates (used to infer hemisphere)
- language_culture: accepted and ignored
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from snowfall.errors import SeasonTableError
from snowfall.hemisphere import Hemisphere, resolve_hemisphere
from snowfall.logger import logger


class Season(str, Enum):
    SPRING = "Spring"
    SUMMER = "Summer"
    AUTUMN = "Autumn"
    WINTER = "Winter"
    UNKNOWN = "Unknown"


class CalendarType(str, Enum):
    ASTRONOMICAL = "Astronomical"
    METEOROLOGICAL = "Meteorological"


class SeasonType(str, Enum):
    CALENDAR = "Calendar"
    SPECIAL = "Special"


# Order in which ranges are tested; the first match wins
SEASON_ORDER = (Season.SPRING, Season.SUMMER, Season.AUTUMN, Season.WINTER)

# Public API option names -> SeasonOptions fields
_OPTION_ALIASES = {
    "calendarType": "calendar_type",
    "seasonType": "season_type",
    "countryCode": "country_code",
    "languageCulture": "language_culture",
}


def _coerce(enum_cls, value):
    """Return the enum member for value, or None if it is not a recognised value."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class SeasonOptions:
    """
    Options for season lookup.

    Values are stored as given; unrecognised calendar types or hemispheres
    are not rejected here but degrade during classification.
    """

    calendar_type: Any = CalendarType.ASTRONOMICAL
    season_type: Any = SeasonType.CALENDAR
    hemisphere: Any = None
    country_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    language_culture: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "SeasonOptions":
        """
        Build options from a mapping.

        Accepts camelCase keys (calendarType, countryCode, ...) as well as
        snake_case field names. Unknown keys are ignored; None values keep
        the field default.
        """
        if not data:
            return cls()

        kwargs = {}
        for key, value in data.items():
            field_name = _OPTION_ALIASES.get(key, key)
            if field_name in cls.__dataclass_fields__ and value is not None:
                kwargs[field_name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class DateRange:
    """Inclusive month-day range. Wraps across year end when start > end."""

    start_month: int
    start_day: int
    end_month: int
    end_day: int

    @classmethod
    def parse(cls, start: str, end: str) -> "DateRange":
        """Build a range from "MM-DD" strings."""
        start_month, start_day = (int(part) for part in start.split("-"))
        end_month, end_day = (int(part) for part in end.split("-"))
        return cls(start_month, start_day, end_month, end_day)

    @property
    def start(self) -> int:
        return self.start_month * 100 + self.start_day

    @property
    def end(self) -> int:
        return self.end_month * 100 + self.end_day

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def contains(self, month: int, day: int) -> bool:
        current = month * 100 + day
        if not self.wraps:
            return self.start <= current <= self.end
        # Range crosses year boundary
        return current >= self.start or current <= self.end


SeasonRanges = Mapping[Season, DateRange]


class SeasonTable:
    """
    Read-only lookup of (calendar type, hemisphere) -> four season ranges.

    Validated on construction: for every pair, each of the 366 possible
    month-day dates must fall in exactly one season.
    """

    def __init__(self, definitions: Mapping[tuple[CalendarType, Hemisphere], Mapping[Season, DateRange]]):
        self._definitions = MappingProxyType({
            key: MappingProxyType(dict(ranges)) for key, ranges in definitions.items()
        })
        self.validate()

    def validate(self) -> None:
        """
        Check that every pair partitions the full (leap) year.

        Raises:
            SeasonTableError: If a season is missing, or a date matches
                              zero or several seasons
        """
        for (calendar_type, hemisphere), ranges in self._definitions.items():
            missing = [season for season in SEASON_ORDER if season not in ranges]
            if missing:
                raise SeasonTableError(
                    f"{calendar_type.value}/{hemisphere.value}: missing ranges for "
                    f"{', '.join(season.value for season in missing)}"
                )

            day = date(2000, 1, 1)
            while day.year == 2000:
                matches = [
                    season for season in SEASON_ORDER
                    if ranges[season].contains(day.month, day.day)
                ]
                if len(matches) != 1:
                    raise SeasonTableError(
                        f"{calendar_type.value}/{hemisphere.value}: {day.month:02d}-{day.day:02d} "
                        f"matches {len(matches)} seasons"
                    )
                day += timedelta(days=1)

    def ranges_for(self, calendar_type, hemisphere) -> Optional[SeasonRanges]:
        """Get the four ranges for a pair, or None if the pair is not defined."""
        return self._definitions.get((calendar_type, hemisphere))

    def classify(self, month: int, day: int, calendar_type, hemisphere) -> Season:
        ranges = self.ranges_for(calendar_type, hemisphere)
        if ranges is None:
            return Season.UNKNOWN

        for season in SEASON_ORDER:
            season_range = ranges.get(season)
            if season_range is not None and season_range.contains(month, day):
                return season

        return Season.UNKNOWN

    def keys(self):
        return self._definitions.keys()


def _ranges(spring, summer, autumn, winter) -> dict[Season, DateRange]:
    return {
        Season.SPRING: DateRange.parse(*spring),
        Season.SUMMER: DateRange.parse(*summer),
        Season.AUTUMN: DateRange.parse(*autumn),
        Season.WINTER: DateRange.parse(*winter),
    }


SEASON_DEFINITIONS = {
    (CalendarType.ASTRONOMICAL, Hemisphere.NORTHERN): _ranges(
        ("03-21", "06-20"), ("06-21", "09-20"), ("09-21", "12-20"), ("12-21", "03-20"),
    ),
    (CalendarType.ASTRONOMICAL, Hemisphere.SOUTHERN): _ranges(
        ("09-21", "12-20"), ("12-21", "03-20"), ("03-21", "06-20"), ("06-21", "09-20"),
    ),
    (CalendarType.METEOROLOGICAL, Hemisphere.NORTHERN): _ranges(
        ("03-01", "05-31"), ("06-01", "08-31"), ("09-01", "11-30"), ("12-01", "02-29"),
    ),
    (CalendarType.METEOROLOGICAL, Hemisphere.SOUTHERN): _ranges(
        ("09-01", "11-30"), ("12-01", "02-29"), ("03-01", "05-31"), ("06-01", "08-31"),
    ),
}

SEASON_TABLE = SeasonTable(SEASON_DEFINITIONS)


def get_season(
    when: Optional[Union[date, datetime]] = None,
    options: Optional[Union[SeasonOptions, Mapping[str, Any]]] = None,
    table: SeasonTable = SEASON_TABLE,
) -> Season:
    """
    Get the season for a date.

    Args:
        when: Date to evaluate (default: now). Year and time of day are ignored.
        options: SeasonOptions or a mapping of option names to values
        table: Season table to classify against

    Returns:
        Season. Season.UNKNOWN for an unrecognised calendar type.
    """
    if when is None:
        when = datetime.now()
    if not isinstance(options, SeasonOptions):
        options = SeasonOptions.from_mapping(options)

    if _coerce(SeasonType, options.season_type) is SeasonType.SPECIAL:
        logger.debug("Special season type is not implemented, using Calendar seasons")

    calendar_type = _coerce(CalendarType, options.calendar_type)
    hemisphere = resolve_hemisphere(options)

    season = table.classify(when.month, when.day, calendar_type, hemisphere)
    if season is Season.UNKNOWN:
        logger.warning(
            f"No season range matched: date={when.month:02d}-{when.day:02d}, "
            f"calendar_type={options.calendar_type}, hemisphere={hemisphere.value}"
        )
    return season
