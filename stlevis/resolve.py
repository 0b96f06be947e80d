"""Route and stop identifier resolution.

Maps known route short codes to fixed numeric ids and colors, and reduces
raw GTFS stop ids to integers. Anything the tables do not cover raises a
FatalDataError subclass carrying the offending raw value: a miss means the
feed changed and the tables need extending, so nothing is defaulted.

Callers that prefer values over exceptions wrap a call with ``attempt``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Generic, TypeVar, cast

from stlevis.config import (
    MAX_STOP_ID,
    ROUTE_COLOR_OVERRIDES,
    SCHOOL_BUS_COLOR,
    SCHOOL_BUS_RANGE,
    get_route_id_override,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

RouteIdFallback = Callable[[str], int]

# "12345-merged-67", "12345_MERGED_3": suffix added when stops were merged
_MERGE_MARKER: Final[re.Pattern[str]] = re.compile(r"[-_]merged[-_].*$", re.IGNORECASE)
_STOP_LETTER_SUFFIX: Final[re.Pattern[str]] = re.compile(r"[A-Z]+\Z")
_ASCII_DIGITS: Final[re.Pattern[str]] = re.compile(r"^[0-9]+\Z")
_PREFIXED_NUMBER: Final[re.Pattern[str]] = re.compile(
    r"^(?P<prefix>[A-Z]?)(?P<number>[0-9]+)\Z"
)
_PREFIX_MULTIPLIER: Final[int] = 10_000


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FatalDataError(Exception):
    """Raised when a feed value cannot be resolved without a code change.

    Attributes:
        raw_value: The offending input, verbatim.
    """

    def __init__(self, message: str, raw_value: str) -> None:
        self.raw_value = raw_value
        super().__init__(message)


class UnrecognizedCodeError(FatalDataError):
    """Raised when a route code matches no override or rule.

    Attributes:
        field: Which attribute was being resolved ("route_id", "route_color").
    """

    def __init__(self, field: str, raw_value: str) -> None:
        self.field = field
        super().__init__(f"Unexpected {field} for route code '{raw_value}'!", raw_value)


class MalformedIdentifierError(FatalDataError):
    """Raised when a stop id does not reduce to a valid integer."""

    def __init__(self, raw_value: str, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Error while extracting stop ID from '{raw_value}': {reason}", raw_value
        )


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Success value or fatal failure for a single raw input.

    Attributes:
        raw: Input the resolution was attempted on.
        value: Resolved value (None on failure).
        error: Failure (None on success).
    """

    raw: str
    value: T | None = None
    error: FatalDataError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, re-raising the stored failure if there is one."""
        if self.error is not None:
            raise self.error
        return cast(T, self.value)


def attempt(func: Callable[[str], T], raw: str) -> Outcome[T]:
    """Run a resolver and capture a FatalDataError as a failed Outcome."""
    try:
        return Outcome(raw=raw, value=func(raw))
    except FatalDataError as exc:
        return Outcome(raw=raw, error=exc)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _is_digits(value: str) -> bool:
    return bool(_ASCII_DIGITS.match(value))


def default_route_id(short_code: str) -> int:
    """Derive a route id from a numeric short name.

    "65" -> 65. A single upper-case letter prefix is encoded above the
    number: "T65" -> 20 * 10_000 + 65 = 200065.

    Raises:
        UnrecognizedCodeError: If the code has any other shape.
    """
    match = _PREFIXED_NUMBER.match(short_code)
    if match is None:
        raise UnrecognizedCodeError("route_id", short_code)
    number = int(match["number"])
    prefix = match["prefix"]
    if not prefix:
        return number
    if number >= _PREFIX_MULTIPLIER:
        raise UnrecognizedCodeError("route_id", short_code)
    return (ord(prefix) - ord("A") + 1) * _PREFIX_MULTIPLIER + number


def resolve_route_id(
    short_code: str,
    fallback: RouteIdFallback | None = None,
) -> int:
    """Resolve a route short name to its numeric route id.

    Known textual codes map to fixed ids (exact, case-sensitive match).
    Other codes go to ``fallback``, which defaults to default_route_id.

    Raises:
        UnrecognizedCodeError: If the default fallback cannot parse the code.
    """
    route_id = get_route_id_override(short_code)
    if route_id is not None:
        return route_id
    logger.debug("Route code '%s' not in override table", short_code)
    if fallback is None:
        fallback = default_route_id
    return fallback(short_code)


def resolve_route_color(short_code: str) -> str:
    """Resolve the color of a route missing one in the feed.

    School routes (numeric 100-999) are school-bus yellow. Literal codes
    use their fixed color.

    Returns:
        Six hex digits, no leading '#'.

    Raises:
        UnrecognizedCodeError: If no rule covers the code.
    """
    if _is_digits(short_code):
        low, high = SCHOOL_BUS_RANGE
        if low <= int(short_code) <= high:
            return SCHOOL_BUS_COLOR
    for code, color in ROUTE_COLOR_OVERRIDES.items():
        if short_code.casefold() == code.casefold():
            return color
    raise UnrecognizedCodeError("route_color", short_code)


# ---------------------------------------------------------------------------
# Stops
# ---------------------------------------------------------------------------


def clean_stop_original_id(stop_id: str) -> str:
    """Strip the merge marker from a raw stop id."""
    return _MERGE_MARKER.sub("", stop_id)


def extract_stop_id(raw_stop_id: str) -> int:
    """Reduce a raw stop id to its integer id.

    Strips the merge marker, then any trailing upper-case stop letters,
    then parses the remainder as a base-10 integer.

    Raises:
        MalformedIdentifierError: If the remainder is empty, contains
            anything other than ASCII digits, or exceeds MAX_STOP_ID.
    """
    stop_id = clean_stop_original_id(raw_stop_id)
    stop_id = _STOP_LETTER_SUFFIX.sub("", stop_id)
    if not stop_id:
        raise MalformedIdentifierError(raw_stop_id, "nothing left after cleanup")
    if not _is_digits(stop_id):
        raise MalformedIdentifierError(raw_stop_id, f"'{stop_id}' is not an integer")
    value = int(stop_id)
    if value > MAX_STOP_ID:
        raise MalformedIdentifierError(raw_stop_id, f"{value} exceeds {MAX_STOP_ID}")
    return value
