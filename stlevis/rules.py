"""Rule primitives and the STLévis-specific rule tables.

A Rule is a compiled pattern plus a replacement template. Bounded rules
follow a fixed capture convention so that a replacement never corrupts the
surrounding text:

    (?P<before>^|\\W)(?P<target>...)(?P<after>\\W|$)

The template re-emits ``before`` and ``after`` verbatim and substitutes
only ``target``. Suffix-strip rules are unbounded and anchored at the end
of the string instead.

Rule tables are plain tuples built at import time. Order inside a table is
part of its contract: each rule consumes the previous rule's output.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Final, Protocol

_BOUNDARY_GROUPS: Final[tuple[str, ...]] = ("before", "after")


class RuleCategory(Enum):
    """Semantic category a rule belongs to."""

    ABBREVIATION = "abbreviation"
    PLACE_NAME = "place_name"
    PUNCTUATION = "punctuation"
    SUFFIX_STRIP = "suffix_strip"


class Step(Protocol):
    """Anything that can sit in a normalization pipeline."""

    @property
    def name(self) -> str: ...

    def apply(self, text: str) -> str: ...


@dataclass(frozen=True, slots=True)
class Rule:
    """Immutable pattern-and-template rewrite rule.

    Attributes:
        name: Short identifier used in logs and test ids.
        category: Semantic category of the rewrite.
        pattern: Compiled pattern. Bounded rules define ``before``,
            ``target`` and ``after`` named groups.
        replacement: ``re.sub`` template. Bounded rules must reference
            ``\\g<before>`` and ``\\g<after>``.
    """

    name: str
    category: RuleCategory
    pattern: re.Pattern[str]
    replacement: str

    def __post_init__(self) -> None:
        if not self.bounded:
            return
        missing = [
            group
            for group in _BOUNDARY_GROUPS
            if group not in self.pattern.groupindex
            or f"\\g<{group}>" not in self.replacement
        ]
        if missing:
            raise ValueError(
                f"Rule '{self.name}' does not preserve boundary groups: {missing}"
            )

    @property
    def bounded(self) -> bool:
        """Return True if the rule follows the boundary capture convention."""
        return "target" in self.pattern.groupindex

    def apply(self, text: str) -> str:
        """Replace every non-overlapping match in a single left-to-right pass."""
        return self.pattern.sub(self.replacement, text)


@dataclass(frozen=True, slots=True)
class RuleGroup:
    """Ordered rules applied together as one pipeline step."""

    name: str
    rules: tuple[Rule, ...]

    def apply(self, text: str) -> str:
        for rule in self.rules:
            text = rule.apply(text)
        return text


@dataclass(frozen=True, slots=True)
class Cleanup:
    """Named pure function step (whitespace, casing, punctuation tidy-up)."""

    name: str
    func: Callable[[str], str]

    def apply(self, text: str) -> str:
        return self.func(text)


def _literal(replacement: str) -> str:
    """Escape a literal replacement for use inside an ``re.sub`` template."""
    return replacement.replace("\\", "\\\\")


def bounded_rule(
    name: str,
    category: RuleCategory,
    target: str,
    replacement: str = "",
    flags: int = re.IGNORECASE,
) -> Rule:
    """Build a rule that rewrites ``target`` only as a standalone token.

    Args:
        name: Rule identifier.
        category: Semantic category.
        target: Regex source for the token to replace (no named groups).
        replacement: Literal text substituted for the token. Empty strips it.
        flags: Regex flags. Case-insensitive by default.

    Returns:
        Rule whose template keeps both boundary characters.
    """
    pattern = re.compile(rf"(?P<before>^|\W)(?P<target>{target})(?P<after>\W|$)", flags)
    return Rule(
        name=name,
        category=category,
        pattern=pattern,
        replacement=rf"\g<before>{_literal(replacement)}\g<after>",
    )


def suffix_rule(name: str, suffix: str, flags: int = re.IGNORECASE) -> Rule:
    """Build a rule that strips a trailing qualifier (and its leading space)."""
    return Rule(
        name=name,
        category=RuleCategory.SUFFIX_STRIP,
        pattern=re.compile(rf"\s+{suffix}\s*$", flags),
        replacement="",
    )


# ---------------------------------------------------------------------------
# Short forms
# ---------------------------------------------------------------------------
ABRAHAM_MARTIN_SHORT: Final[str] = "A-Martin"
BERNIERES: Final[str] = "Bernières"
BREAKEYVILLE: Final[str] = "Breakeyville"
CENTRE_SHORT: Final[str] = "Ctr"
JUVENAT_NOTRE_DAME_SHORT: Final[str] = "JND"
PARC_RELAIS_BUS_SHORT: Final[str] = "PRB"
QUEBEC: Final[str] = "Québec"
RENE_LEVESQUE_SHORT: Final[str] = "R-Lévesque"
ST_JEAN_SHORT: Final[str] = "St-J"
ST_LAMBERT: Final[str] = "St-Lambert"
ST_NICOLAS: Final[str] = "St-Nicolas"
UNIVERSITE_SHORT: Final[str] = "U."
VILLAGE: Final[str] = "Village"

# ---------------------------------------------------------------------------
# STLévis trip headsign rules, in application order.
# Rules matching a literal hyphen rely on DASH running first.
# ---------------------------------------------------------------------------
DASH: Final[Rule] = bounded_rule("dash", RuleCategory.PUNCTUATION, "[–—]", "-")

TERMINUS: Final[Rule] = bounded_rule("terminus", RuleCategory.SUFFIX_STRIP, "terminus")

RENE_LEVESQUE: Final[Rule] = bounded_rule(
    "rene_levesque",
    RuleCategory.ABBREVIATION,
    "ren[ée]-l[ée]vesque",
    RENE_LEVESQUE_SHORT,
)

ABRAHAM_MARTIN: Final[Rule] = bounded_rule(
    "abraham_martin",
    RuleCategory.ABBREVIATION,
    "abraham-martin",
    ABRAHAM_MARTIN_SHORT,
)

STATION: Final[Rule] = bounded_rule("station", RuleCategory.SUFFIX_STRIP, "station")

ST_JEAN: Final[Rule] = bounded_rule(
    "st_jean", RuleCategory.ABBREVIATION, "st-jean", ST_JEAN_SHORT
)

ST_LAMBERT_DE_LAUZON: Final[Rule] = bounded_rule(
    "st_lambert_de_lauzon",
    RuleCategory.PLACE_NAME,
    "st-lambert-de-lauzon",
    ST_LAMBERT,
)

# "St-Nicolas - Bernières (Direct)" -> "Bernières (St-Nicolas)"
ST_NICOLAS_BERNIERES: Final[Rule] = bounded_rule(
    "st_nicolas_bernieres",
    RuleCategory.PLACE_NAME,
    "st-nicolas - berni[èe]res",
    f"{BERNIERES} ({ST_NICOLAS})",
)

ST_NICOLAS_VILLAGE: Final[Rule] = bounded_rule(
    "st_nicolas_village",
    RuleCategory.PLACE_NAME,
    "st-nicolas - village",
    f"{VILLAGE} ({ST_NICOLAS})",
)

STE_HELENE_DE_BREAKEYVILLE: Final[Rule] = bounded_rule(
    "ste_helene_de_breakeyville",
    RuleCategory.PLACE_NAME,
    "ste-h[ée]l[èe]ne-de-breakeyville",
    BREAKEYVILLE,
)

PARC_RELAIS_BUS: Final[Rule] = bounded_rule(
    "parc_relais_bus",
    RuleCategory.ABBREVIATION,
    "parc-relais-bus",
    PARC_RELAIS_BUS_SHORT,
)

JUVENAT_NOTRE_DAME: Final[Rule] = bounded_rule(
    "juvenat_notre_dame",
    RuleCategory.ABBREVIATION,
    "juv[ée]nat notre-dame",
    JUVENAT_NOTRE_DAME_SHORT,
)

QUEBEC_CENTRE_VILLE: Final[Rule] = bounded_rule(
    "quebec_centre_ville",
    RuleCategory.PLACE_NAME,
    "qu[ée]bec centre-ville - saaq",
    f"{QUEBEC} {CENTRE_SHORT}",
)

CENTRE: Final[Rule] = bounded_rule(
    "centre", RuleCategory.ABBREVIATION, "centre", CENTRE_SHORT
)

UNIVERSITE: Final[Rule] = bounded_rule(
    "universite", RuleCategory.ABBREVIATION, "universit[ée]", UNIVERSITE_SHORT
)

ENDS_WITH_DIRECT: Final[Rule] = suffix_rule("ends_with_direct", r"\(direct\)")

ENDS_WITH_ARRETS_LIMITES: Final[Rule] = suffix_rule(
    "ends_with_arrets_limites", r"\(arr[eê]ts limit[eé]s\)"
)

# Steps 5 and 7-12 of the headsign pipeline. The generic steps around them
# (via, saint, street types, label) are assembled in stlevis.normalize.
STREET_NAMES: Final[RuleGroup] = RuleGroup(
    name="street_names",
    rules=(RENE_LEVESQUE, ABRAHAM_MARTIN),
)

ST_NICOLAS_DISTRICTS: Final[RuleGroup] = RuleGroup(
    name="st_nicolas_districts",
    rules=(ST_NICOLAS_BERNIERES, ST_NICOLAS_VILLAGE),
)
