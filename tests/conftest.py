"""Shared pytest fixtures for feed cleaning tests.

Builds small GTFS feeds programmatically (directory and ZIP layouts) so no
binary fixtures are committed.
"""

from __future__ import annotations

import csv
import io
import zipfile
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

# ---------------------------------------------------------------------------
# GTFS tables
# ---------------------------------------------------------------------------

ROUTES_HEADERS: list[str] = [
    "route_id",
    "route_short_name",
    "route_long_name",
    "route_type",
    "route_color",
]

ROUTES_ROWS: list[list[str]] = [
    ["R1", "11", "Saint-Romuald ( Express )", "3", "009CBE"],
    ["R2", "ECQ", "Écoles Québec", "3", "FFD800"],
    ["R3", "142", "École secondaire de l'Aubier", "3", ""],
    ["R4", "T65", "Taxibus Saint-Lambert", "3", ""],
]

UNKNOWN_ROUTE_ROW: list[str] = ["R9", "XYZ", "Inconnue", "3", ""]

TRIPS_HEADERS: list[str] = [
    "route_id",
    "service_id",
    "trip_id",
    "trip_headsign",
    "direction_id",
]

TRIPS_ROWS: list[list[str]] = [
    ["R1", "S1", "T1", "Lévis Terminus Rivière – St-Jean (Direct)", "0"],
    ["R1", "S1", "T2", "Lévis Terminus Rivière – St-Jean (Direct)", "0"],
    ["R1", "S1", "T3", "Université Laval", "1"],
    ["R3", "S1", "T4", "Juvénat Notre-Dame (AM)", "0"],
]

UNKNOWN_ROUTE_TRIP_ROW: list[str] = ["R9", "S1", "T9", "Nulle part", "0"]

STOPS_HEADERS: list[str] = ["stop_id", "stop_code", "stop_name", "stop_lat", "stop_lon"]

STOPS_ROWS: list[list[str]] = [
    [
        "12345-MERGED-67A",
        "12345",
        "Boulevard Guillaume-Couture / Rue Saint-Omer",
        "46.80",
        "-71.18",
    ],
    ["2001A", "2001", "Avenue Bégin", "46.81", "-71.17"],
    ["3002", "3002", "Chemin Du Sault", "46.76", "-71.26"],
]


def _csv_text(headers: list[str], rows: list[list[str]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue()


def _write_feed(
    feed_dir: Path,
    routes: list[list[str]],
    trips: list[list[str]],
    stops: list[list[str]],
) -> Path:
    feed_dir.mkdir(parents=True, exist_ok=True)
    (feed_dir / "routes.txt").write_text(
        _csv_text(ROUTES_HEADERS, routes), encoding="utf-8"
    )
    (feed_dir / "trips.txt").write_text(_csv_text(TRIPS_HEADERS, trips), encoding="utf-8")
    (feed_dir / "stops.txt").write_text(_csv_text(STOPS_HEADERS, stops), encoding="utf-8")
    return feed_dir


@pytest.fixture()
def gtfs_dir(tmp_path: Path) -> Path:
    """Create a valid GTFS feed directory."""
    return _write_feed(tmp_path / "feed", ROUTES_ROWS, TRIPS_ROWS, STOPS_ROWS)


@pytest.fixture()
def gtfs_dir_unknown_route(tmp_path: Path) -> Path:
    """Create a GTFS feed with a route code no rule covers."""
    return _write_feed(
        tmp_path / "feed_unknown",
        [*ROUTES_ROWS, UNKNOWN_ROUTE_ROW],
        [*TRIPS_ROWS, UNKNOWN_ROUTE_TRIP_ROW],
        STOPS_ROWS,
    )


@pytest.fixture()
def gtfs_dir_bad_stop(tmp_path: Path) -> Path:
    """Create a GTFS feed with a stop id that is not numeric."""
    bad_stop = ["ABC", "", "Arrêt fantôme", "46.80", "-71.18"]
    return _write_feed(
        tmp_path / "feed_bad_stop", ROUTES_ROWS, TRIPS_ROWS, [*STOPS_ROWS, bad_stop]
    )


# ---------------------------------------------------------------------------
# ZIP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def gtfs_zip(tmp_path: Path) -> Path:
    """Create a GTFS ZIP with tables nested in a subdirectory."""
    zip_path = tmp_path / "stlevis.zip"
    with zipfile.ZipFile(zip_path, "w") as zf:
        zf.writestr("gtfs/routes.txt", _csv_text(ROUTES_HEADERS, ROUTES_ROWS))
        zf.writestr("gtfs/trips.txt", _csv_text(TRIPS_HEADERS, TRIPS_ROWS))
        zf.writestr("gtfs/stops.txt", _csv_text(STOPS_HEADERS, STOPS_ROWS))
        zf.writestr("__MACOSX/gtfs/routes.txt", "not a table")
    return zip_path


# ---------------------------------------------------------------------------
# Encoding fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def windows_1252_stops(tmp_path: Path) -> Path:
    """Create a stops.txt encoded in Windows-1252 with French accents."""
    feed_dir = tmp_path / "feed_cp1252"
    feed_dir.mkdir()
    rows = [
        ["1001", "1001", "Lévis Terminus Lagueux", "46.80", "-71.18"],
        ["1002", "1002", "Rue Saint-Étienne / Côte du Passage", "46.81", "-71.17"],
        ["1003", "1003", "Québec Centre-Ville, près de l'Église", "46.81", "-71.21"],
        ["1004", "1004", "Chemin du Fleuve à Saint-Romuald", "46.75", "-71.23"],
    ]
    content = _csv_text(STOPS_HEADERS, rows)
    (feed_dir / "stops.txt").write_bytes(content.encode("windows-1252"))
    return feed_dir


@pytest.fixture()
def utf8_bom_stops(tmp_path: Path) -> Path:
    """Create a UTF-8 stops.txt with a BOM prefix."""
    feed_dir = tmp_path / "feed_bom"
    feed_dir.mkdir()
    content = _csv_text(STOPS_HEADERS, STOPS_ROWS)
    (feed_dir / "stops.txt").write_bytes(b"\xef\xbb\xbf" + content.encode("utf-8"))
    return feed_dir
