"""Generic label cleaners shared by every field kind.

Agency-independent rewrite tables (saint names, "via" clauses, parenthesis
spacing, French-Canadian street types) and the final label cleanup
functions. Street-type abbreviations follow Canada Post French
addressing conventions.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Final

from stlevis.rules import Rule, RuleCategory, RuleGroup, bounded_rule

# ---------------------------------------------------------------------------
# Saint names. "Sainte" must run before "Saint".
# ---------------------------------------------------------------------------
SAINT: Final[RuleGroup] = RuleGroup(
    name="saint",
    rules=(
        bounded_rule("sainte", RuleCategory.ABBREVIATION, "sainte", "Ste"),
        bounded_rule("saint", RuleCategory.ABBREVIATION, "saint", "St"),
    ),
)

# "Lévis via Route 132" -> "Lévis"; "Lévis (via Route 132)" -> "Lévis".
# A leading "Via" is part of the name ("Via Rail") and is kept.
VIA: Final[Rule] = Rule(
    name="via",
    category=RuleCategory.SUFFIX_STRIP,
    pattern=re.compile(r"\s+\(?via\s.*$", re.IGNORECASE),
    replacement="",
)

PARENTHESIS_OPEN: Final[Rule] = Rule(
    name="parenthesis_open",
    category=RuleCategory.PUNCTUATION,
    pattern=re.compile(r"\(\s+"),
    replacement="(",
)

PARENTHESIS_CLOSE: Final[Rule] = Rule(
    name="parenthesis_close",
    category=RuleCategory.PUNCTUATION,
    pattern=re.compile(r"\s+\)"),
    replacement=")",
)

# ---------------------------------------------------------------------------
# French-Canadian street types (full word -> Canada Post abbreviation)
# Longer words that contain a shorter one ("autoroute") are listed first.
# ---------------------------------------------------------------------------
_STREET_TYPES_FR_CA: Final[tuple[tuple[str, str, str], ...]] = (
    ("autoroute", "autoroute", "Aut"),
    ("avenue", "avenue", "Av"),
    ("boulevard", "boulevard", "Boul"),
    ("carrefour", "carrefour", "Carref"),
    ("chemin", "chemin", "Ch"),
    ("croissant", "croissant", "Crois"),
    ("impasse", "impasse", "Imp"),
    ("montee", "mont[ée]e", "Mtée"),
    ("place", "place", "Pl"),
    ("promenade", "promenade", "Prom"),
    ("rond_point", "rond-point", "Rdpt"),
    ("route", "route", "Rte"),
    ("sentier", "sentier", "Sent"),
    ("terrasse", "terrasse", "Tsse"),
)

STREET_TYPES_FR_CA: Final[RuleGroup] = RuleGroup(
    name="street_types_fr_ca",
    rules=tuple(
        bounded_rule(f"street_type_{name}", RuleCategory.ABBREVIATION, target, short)
        for name, target, short in _STREET_TYPES_FR_CA
    ),
)

# ---------------------------------------------------------------------------
# Label cleanup
# ---------------------------------------------------------------------------
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")
_SPACE_BEFORE_COMMA: Final[re.Pattern[str]] = re.compile(r"\s+,")
_EMPTY_PARENTHESES: Final[re.Pattern[str]] = re.compile(r"\(\s*\)")
_DANGLING_EDGES: Final[re.Pattern[str]] = re.compile(r"^[\s,\-]+|[\s,\-]+$")

# Words written entirely in upper case are title-cased, except words with
# fewer letters than this and these acronyms.
_ACRONYMS: Final[frozenset[str]] = frozenset({"CLSC", "JND", "PRB", "SAAQ", "UQAR"})
_TITLE_CASE_MIN_LENGTH: Final[int] = 3

_FR_PARTICLES: Final[re.Pattern[str]] = re.compile(
    r"(?<=\s)(?:de|du|des|la|le|les|et|à|au|aux)(?=\s)", re.IGNORECASE
)
_FR_ELISIONS: Final[re.Pattern[str]] = re.compile(r"(?<=\s)[dl]'(?=\w)", re.IGNORECASE)


def _title_case_upper_words(label: str) -> str:
    """Title-case the words of a label written entirely in upper case.

    Decided word by word: earlier rules may already have inserted
    mixed-case abbreviations ("Boul", "Ctr") into an all-caps label.
    """
    words = []
    for word in label.split(" "):
        letters = [c for c in word if c.isalpha()]
        if (
            len(letters) >= _TITLE_CASE_MIN_LENGTH
            and all(c.isupper() for c in letters)
            and word not in _ACRONYMS
        ):
            word = word.title()
        words.append(word)
    return " ".join(words)


def _capitalize_first(label: str) -> str:
    if label and label[0].islower():
        return label[0].upper() + label[1:]
    return label


def clean_label(label: str) -> str:
    """Tidy whitespace and punctuation left behind by earlier rules.

    Collapses whitespace, fixes spacing around parentheses and commas,
    drops empty parentheses and dangling hyphens or commas at the edges,
    and title-cases words written entirely in upper case.
    """
    label = unicodedata.normalize("NFC", label)
    label = _EMPTY_PARENTHESES.sub(" ", label)
    label = PARENTHESIS_OPEN.apply(label)
    label = PARENTHESIS_CLOSE.apply(label)
    label = _SPACE_BEFORE_COMMA.sub(",", label)
    label = _WHITESPACE.sub(" ", label)
    label = _DANGLING_EDGES.sub("", label)
    label = _title_case_upper_words(label)
    return _capitalize_first(label)


def clean_label_fr(label: str) -> str:
    """French variant of clean_label: articles and elisions in lower case."""
    label = clean_label(label)
    label = _FR_PARTICLES.sub(lambda m: m.group(0).lower(), label)
    label = _FR_ELISIONS.sub(lambda m: m.group(0).lower(), label)
    return label
