"""
Hemisphere inference from explicit input, GPS coordinates or country code.

Precedence (first match wins):
- Explicit hemisphere ("Northern" / "Southern")
- Latitude/longitude pair (latitude >= 0 is Northern, longitude unused)
- ISO 3166-1 alpha-2 country code in the Southern Hemisphere list
- Northern
"""

from enum import Enum
from numbers import Real
from typing import Any, Optional


class Hemisphere(str, Enum):
    """Half of the Earth relative to the equator."""
    NORTHERN = "Northern"
    SOUTHERN = "Southern"


SOUTHERN_COUNTRY_CODES = frozenset({
    # Africa
    "AO", "BW", "BI", "KM", "LS", "MG", "MW", "MU", "MZ", "NA", "RW", "SC", "ZA", "SZ", "TZ", "ZM", "ZW",
    "CD", "GA", "CG",
    # Asia
    "TL", "ID",
    # Australia
    "AU", "PG",
    # South America
    "AR", "BO", "CL", "PY", "PE", "UY", "BR", "EC",
    # Pacific Ocean
    "AS", "CK", "FJ", "PF", "NR", "NC", "NZ", "NU", "PN", "WS", "SB", "TK", "TO", "TV", "VU", "WF",
    # Atlantic Ocean
    "FK", "SH",
    # Indian Ocean
    "IO", "YT", "RE",
    # Southern Ocean
    "AQ", "BV", "TF", "GS",
})


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    return isinstance(value, Real) and not isinstance(value, bool)


def is_southern_country(country_code: Optional[str]) -> bool:
    """Check (case-insensitively) whether a country code is in the Southern Hemisphere."""
    if not country_code or not isinstance(country_code, str):
        return False
    return country_code.upper() in SOUTHERN_COUNTRY_CODES


def resolve_hemisphere(options) -> Hemisphere:
    """
    Infer hemisphere from season options.

    Args:
        options: SeasonOptions (or any object exposing hemisphere, latitude,
                 longitude and country_code attributes)

    Returns:
        Hemisphere, never raises. Missing or invalid input falls through
        to the Northern default.
    """
    hemisphere = getattr(options, "hemisphere", None)
    if hemisphere in (Hemisphere.NORTHERN.value, Hemisphere.SOUTHERN.value):
        return Hemisphere(hemisphere)

    latitude = getattr(options, "latitude", None)
    longitude = getattr(options, "longitude", None)
    if _is_number(latitude) and _is_number(longitude):
        return Hemisphere.NORTHERN if latitude >= 0 else Hemisphere.SOUTHERN

    if is_southern_country(getattr(options, "country_code", None)):
        return Hemisphere.SOUTHERN

    return Hemisphere.NORTHERN
