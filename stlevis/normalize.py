"""Text normalizer for route long names, trip headsigns and stop names.

Each field kind owns an ordered pipeline of steps (rules, rule groups and
cleanup functions). ``normalize`` runs every step of the requested kind
exactly once, left to right, each step consuming the previous step's
output. There is no fixed-point iteration.

Pipelines live in an explicit NormalizerConfig so that callers and tests
can swap them without touching module state.
"""

from __future__ import annotations

import logging
import unicodedata
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from stlevis import labels, rules
from stlevis.config import FieldKind
from stlevis.rules import Cleanup, Step

logger = logging.getLogger(__name__)

DirectionFallback = Callable[[int, bool, str], str]

_SESSION_SUFFIXES: Final[tuple[tuple[str, str], ...]] = (
    (" (AM)", "AM"),
    (" (PM)", "PM"),
)


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Read-only pipelines keyed by field kind.

    Attributes:
        pipelines: Ordered steps for each supported field kind.
    """

    pipelines: Mapping[FieldKind, tuple[Step, ...]]

    def steps_for(self, kind: FieldKind) -> tuple[Step, ...]:
        """Return the pipeline for a field kind.

        Raises:
            KeyError: If the configuration has no pipeline for the kind.
        """
        try:
            return self.pipelines[kind]
        except KeyError:
            valid = ", ".join(k.value for k in self.pipelines)
            raise KeyError(
                f"No pipeline for field kind '{kind.value}'. Configured: {valid}"
            ) from None


def build_default_config() -> NormalizerConfig:
    """Assemble the STLévis pipelines for every field kind."""
    label = Cleanup("label", labels.clean_label)
    label_fr = Cleanup("label_fr", labels.clean_label_fr)

    route_long_name: tuple[Step, ...] = (
        labels.SAINT,
        labels.PARENTHESIS_OPEN,
        labels.PARENTHESIS_CLOSE,
        label,
    )
    trip_headsign: tuple[Step, ...] = (
        labels.VIA,
        labels.SAINT,
        rules.DASH,
        rules.TERMINUS,
        rules.STREET_NAMES,
        rules.STATION,
        rules.ST_JEAN,
        rules.ST_LAMBERT_DE_LAUZON,
        rules.ST_NICOLAS_DISTRICTS,
        rules.STE_HELENE_DE_BREAKEYVILLE,
        rules.PARC_RELAIS_BUS,
        rules.JUVENAT_NOTRE_DAME,
        rules.QUEBEC_CENTRE_VILLE,
        rules.CENTRE,
        rules.UNIVERSITE,
        rules.ENDS_WITH_DIRECT,
        rules.ENDS_WITH_ARRETS_LIMITES,
        labels.STREET_TYPES_FR_CA,
        label_fr,
    )
    stop_name: tuple[Step, ...] = (
        labels.STREET_TYPES_FR_CA,
        label_fr,
    )
    return NormalizerConfig(
        pipelines=MappingProxyType(
            {
                FieldKind.ROUTE_LONG_NAME: route_long_name,
                FieldKind.TRIP_HEADSIGN: trip_headsign,
                FieldKind.STOP_NAME: stop_name,
            }
        )
    )


DEFAULT_CONFIG: Final[NormalizerConfig] = build_default_config()


def normalize(
    kind: FieldKind,
    raw_text: str,
    config: NormalizerConfig = DEFAULT_CONFIG,
) -> str:
    """Canonicalize a free-text field.

    Args:
        kind: Field kind selecting the pipeline.
        raw_text: Raw feed value. Decomposed accents are composed (NFC)
            before any rule runs.
        config: Pipelines to use. Defaults to the STLévis pipelines.

    Returns:
        Cleaned text, or an empty string for empty input.
    """
    if not raw_text:
        return ""
    text = unicodedata.normalize("NFC", raw_text)
    for step in config.steps_for(kind):
        text = step.apply(text)
    return text


def clean_route_long_name(
    route_long_name: str, config: NormalizerConfig = DEFAULT_CONFIG
) -> str:
    return normalize(FieldKind.ROUTE_LONG_NAME, route_long_name, config)


def clean_trip_headsign(
    trip_headsign: str, config: NormalizerConfig = DEFAULT_CONFIG
) -> str:
    return normalize(FieldKind.TRIP_HEADSIGN, trip_headsign, config)


def clean_stop_name(stop_name: str, config: NormalizerConfig = DEFAULT_CONFIG) -> str:
    return normalize(FieldKind.STOP_NAME, stop_name, config)


def default_direction_headsign(
    direction_id: int,
    from_stop_name: bool,
    direction_headsign: str,
    config: NormalizerConfig = DEFAULT_CONFIG,
) -> str:
    """Clean a direction headsign with the pipeline matching its origin.

    Headsigns derived from a stop name go through the stop-name pipeline,
    all others through the trip-headsign pipeline.
    """
    kind = FieldKind.STOP_NAME if from_stop_name else FieldKind.TRIP_HEADSIGN
    return normalize(kind, direction_headsign, config)


def normalize_direction(
    direction_id: int,
    from_stop_name: bool,
    raw_headsign: str,
    fallback: DirectionFallback | None = None,
    config: NormalizerConfig = DEFAULT_CONFIG,
) -> str:
    """Label a direction, short-circuiting AM/PM school-session headsigns.

    The session suffixes are checked before anything else. Other
    headsigns are handed to ``fallback`` unchanged, and its result is
    returned as is.

    Args:
        direction_id: GTFS direction_id (0 or 1).
        from_stop_name: Whether the headsign was derived from a stop name.
        raw_headsign: Raw direction headsign.
        fallback: Cleaner for non-session headsigns. Defaults to
            default_direction_headsign bound to ``config``.
        config: Pipelines used by the default fallback.

    Returns:
        "AM", "PM", or the fallback's cleaned headsign.
    """
    for suffix, session in _SESSION_SUFFIXES:
        if raw_headsign.endswith(suffix):
            return session
    if fallback is None:
        return default_direction_headsign(
            direction_id, from_stop_name, raw_headsign, config
        )
    logger.debug("Direction %d headsign '%s' sent to fallback", direction_id, raw_headsign)
    return fallback(direction_id, from_stop_name, raw_headsign)
