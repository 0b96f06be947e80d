"""Agency configuration registry for the STLévis GTFS feed cleaner.

Defines the typed agency profile, the field kinds handled by the text
normalizer, the closed route-code override table, and the fixed route
colors. Everything here is built once at import time and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class FieldKind(Enum):
    """Semantic category of a free-text feed field."""

    ROUTE_LONG_NAME = "route_long_name"
    TRIP_HEADSIGN = "trip_headsign"
    STOP_NAME = "stop_name"


class RouteType(Enum):
    """GTFS route_type values used by the agency."""

    BUS = 3


@dataclass(frozen=True, slots=True)
class AgencyProfile:
    """Immutable description of the agency whose feed is cleaned.

    Attributes:
        name: Display name of the agency.
        color: Default agency color (6 hex digits, no leading '#').
        route_type: GTFS route type shared by every route.
        languages: Supported label languages (ISO 639-1).
        open_data_url: Landing page for the published GTFS feed.
    """

    name: str
    color: str
    route_type: RouteType
    languages: tuple[str, ...]
    open_data_url: str


AGENCY: Final[AgencyProfile] = AgencyProfile(
    name="STLévis",
    color="009CBE",  # from the printed network map
    route_type=RouteType.BUS,
    languages=("fr",),
    open_data_url="https://www.stlevis.ca/stlevis/donnees-ouvertes",
)

# ---------------------------------------------------------------------------
# Route colors
# ---------------------------------------------------------------------------
SCHOOL_BUS_COLOR: Final[str] = "FFD800"
SCHOOL_BUS_RANGE: Final[tuple[int, int]] = (100, 999)

# Literal short codes with a fixed color. Matched case-insensitively.
ROUTE_COLOR_OVERRIDES: Final[dict[str, str]] = {
    "T65": "C7B24C",
}

# ---------------------------------------------------------------------------
# Route id overrides for non-numeric short names.
# Keys are matched exactly (case-sensitive).
# ---------------------------------------------------------------------------
ROUTE_ID_OVERRIDES: Final[dict[str, int]] = {
    "ECQ": 9_050_317,
    "ELQ": 9_051_217,
    "EOQ": 9_051_517,
    "ESQ": 9_051_917,
    "BSR": 9_052_117,
    "FEQ": 9_052_317,
    "HONC": 9_052_517,
    "PAQ": 9_052_717,
    "RIVN": 9_052_917,
    "UQAR": 9_053_117,
    "BLEU": 9_053_317,
    "ORAN": 9_053_517,
    "VERT": 9_053_717,
}

# Stop ids are published as signed 32-bit integers downstream.
MAX_STOP_ID: Final[int] = 2_147_483_647


def get_route_id_override(short_code: str) -> int | None:
    """Return the fixed route id for a known textual code, or None."""
    return ROUTE_ID_OVERRIDES.get(short_code)
