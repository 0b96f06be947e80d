"""Regression corpus of raw STLévis feed strings and their canonical forms.

Every raw value the rule tables were written against is listed here with
its expected output, so that reordering or editing a rule shows up as a
concrete diff instead of a silent change in published labels.
"""

from __future__ import annotations

from typing import Final

import pytest

from stlevis.config import FieldKind
from stlevis.normalize import normalize

_TRIP_HEADSIGNS: Final[list[tuple[str, str]]] = [
    ("Lévis Terminus Rivière – St-Jean (Direct)", "Lévis Rivière - St-J"),
    ("Terminus Lagueux", "Lagueux"),
    ("Terminus de la Traverse", "De la Traverse"),
    ("Station Desjardins", "Desjardins"),
    ("Saint-Nicolas – Bernières (Direct)", "Bernières (St-Nicolas)"),
    ("St-Nicolas - Bernieres", "Bernières (St-Nicolas)"),
    ("Saint-Nicolas – Village", "Village (St-Nicolas)"),
    ("Sainte-Hélène-de-Breakeyville", "Breakeyville"),
    ("Saint-Lambert-de-Lauzon", "St-Lambert"),
    ("Saint-Jean-Chrysostome", "St-J-Chrysostome"),
    ("Saint-Romuald", "St-Romuald"),
    ("Sainte-Foy", "Ste-Foy"),
    ("Parc-Relais-Bus Saint-Rédempteur", "PRB St-Rédempteur"),
    ("Juvénat Notre-Dame (AM)", "JND (AM)"),
    ("Québec Centre-Ville – SAAQ", "Québec Ctr"),
    ("Centre-Ville de Lévis", "Ctr-Ville de Lévis"),
    ("Université Laval", "U. Laval"),
    ("Université Laval (Arrêts limités)", "U. Laval"),
    ("Lévis Centre (Direct)", "Lévis Ctr"),
    ("Boulevard René-Lévesque", "Boul R-Lévesque"),
    ("Avenue Abraham-Martin", "Av A-Martin"),
    ("Lévis via Route 132", "Lévis"),
    ("Galeries Chagnon via Boulevard Guillaume-Couture", "Galeries Chagnon"),
    ("Via Rail", "Via Rail"),
    ("Chemin Du Sault", "Ch du Sault"),
    ("LÉVIS TERMINUS LAGUEUX", "Lévis Lagueux"),
    ("LÉVIS CENTRE (DIRECT)", "Lévis Ctr"),
    ("CENTRE DE SANTÉ", "Ctr de Santé"),
]

_ROUTE_LONG_NAMES: Final[list[tuple[str, str]]] = [
    ("Saint-Romuald ( Express )", "St-Romuald (Express)"),
    ("Sainte-Hélène - Saint-Lambert", "Ste-Hélène - St-Lambert"),
    ("Taxibus Saint-Lambert", "Taxibus St-Lambert"),
    ("Terminus Lagueux - Centre", "Terminus Lagueux - Centre"),
    ("Cégep de Lévis-Lauzon", "Cégep de Lévis-Lauzon"),
]

_STOP_NAMES: Final[list[tuple[str, str]]] = [
    (
        "Boulevard Guillaume-Couture / Rue Saint-Omer",
        "Boul Guillaume-Couture / Rue Saint-Omer",
    ),
    ("Avenue Bégin", "Av Bégin"),
    ("Route Monseigneur-Bourget / Chemin Des Îles", "Rte Monseigneur-Bourget / Ch des Îles"),
    ("Montée Du Sault", "Mtée du Sault"),
    ("Place Lévis", "Pl Lévis"),
    (
        "BOULEVARD GUILLAUME-COUTURE / RUE SAINT-OMER",
        "Boul Guillaume-Couture / Rue Saint-Omer",
    ),
    ("CHEMIN DES ÎLES", "Ch des Îles"),
    ("Terminus Lagueux", "Terminus Lagueux"),
]


@pytest.mark.parametrize(("raw", "expected"), _TRIP_HEADSIGNS)
def test_trip_headsign_corpus(raw: str, expected: str) -> None:
    assert normalize(FieldKind.TRIP_HEADSIGN, raw) == expected


@pytest.mark.parametrize(("raw", "expected"), _ROUTE_LONG_NAMES)
def test_route_long_name_corpus(raw: str, expected: str) -> None:
    assert normalize(FieldKind.ROUTE_LONG_NAME, raw) == expected


@pytest.mark.parametrize(("raw", "expected"), _STOP_NAMES)
def test_stop_name_corpus(raw: str, expected: str) -> None:
    assert normalize(FieldKind.STOP_NAME, raw) == expected


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (FieldKind.TRIP_HEADSIGN, _TRIP_HEADSIGNS),
        (FieldKind.ROUTE_LONG_NAME, _ROUTE_LONG_NAMES),
        (FieldKind.STOP_NAME, _STOP_NAMES),
    ],
    ids=["trip_headsign", "route_long_name", "stop_name"],
)
def test_corpus_outputs_are_fixed_points(
    kind: FieldKind, expected: list[tuple[str, str]]
) -> None:
    for _, clean in expected:
        assert normalize(kind, clean) == clean
