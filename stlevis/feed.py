"""Clean the STLévis GTFS route, trip and stop tables.

Reads routes.txt, trips.txt and stops.txt from a GTFS feed (directory or
ZIP archive), runs every record through the normalizer and resolvers, and
writes cleaned tables plus a directions.txt summary to an output
directory.

The core raises FatalDataError on unresolvable values. This module owns
the severity policy: by default the first failure aborts the run; with
--keep-going the failing record is logged and skipped.

Usage:
    python -m stlevis.feed --feed data/raw/stlevis.zip --output-dir data/clean
"""

from __future__ import annotations

import argparse
import csv
import io
import logging
import sys
import zipfile
from collections import Counter, defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Final

from charset_normalizer import from_bytes

from stlevis.config import AGENCY
from stlevis.normalize import (
    DEFAULT_CONFIG,
    NormalizerConfig,
    clean_route_long_name,
    clean_stop_name,
    clean_trip_headsign,
    normalize_direction,
)
from stlevis.resolve import (
    FatalDataError,
    attempt,
    clean_stop_original_id,
    extract_stop_id,
    resolve_route_color,
    resolve_route_id,
)

logger = logging.getLogger(__name__)

_ENCODING_CONFIDENCE_THRESHOLD: Final[float] = 0.7
_UTF8_BOM: Final[bytes] = b"\xef\xbb\xbf"

ROUTES: Final[str] = "routes.txt"
TRIPS: Final[str] = "trips.txt"
STOPS: Final[str] = "stops.txt"
DIRECTIONS: Final[str] = "directions.txt"

_DIRECTION_COLUMNS: Final[list[str]] = ["route_id", "direction_id", "direction_headsign"]
_STOP_ORIGINAL_ID: Final[str] = "stop_original_id"

Row = dict[str, str]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class FeedError(Exception):
    """Raised when a feed table is missing or cannot be decoded."""


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Table:
    """A decoded GTFS table.

    Attributes:
        name: File name inside the feed (e.g. "stops.txt").
        columns: Header columns in source order.
        rows: Data rows keyed by column name.
    """

    name: str
    columns: list[str]
    rows: list[Row]


@dataclass(frozen=True, slots=True)
class TableResult:
    """Outcome of cleaning a single table.

    Attributes:
        name: Output file name.
        output_path: Where the cleaned table was written.
        row_count: Rows written.
        failures: Raw values of records skipped under --keep-going.
    """

    name: str
    output_path: Path
    row_count: int
    failures: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_table_bytes(feed: Path, name: str) -> bytes:
    """Return the raw bytes of a table from a feed directory or ZIP archive.

    ZIP members may sit in a subdirectory; macOS metadata entries are ignored.

    Raises:
        FeedError: If the table is not present in the feed.
    """
    if feed.is_dir():
        path = feed / name
        if not path.exists():
            raise FeedError(f"Table '{name}' not found in '{feed}'")
        return path.read_bytes()

    try:
        zf = zipfile.ZipFile(feed, "r")
    except zipfile.BadZipFile as exc:
        raise FeedError(f"'{feed}' is neither a directory nor a ZIP archive") from exc
    with zf:
        for info in zf.infolist():
            if info.is_dir() or "__MACOSX" in info.filename:
                continue
            if PurePosixPath(info.filename).name == name:
                return zf.read(info.filename)
    raise FeedError(f"Table '{name}' not found in archive '{feed}'")


def decode_table(data: bytes, name: str) -> str:
    """Detect the encoding of a table and decode it, dropping a UTF-8 BOM.

    Raises:
        FeedError: If the table is empty or detection confidence is too low.
    """
    data = data.removeprefix(_UTF8_BOM)
    if not data:
        raise FeedError(f"Table '{name}' is empty")

    best = from_bytes(data).best()
    if best is None:
        raise FeedError(f"Cannot detect encoding for '{name}': no candidates returned")

    # charset-normalizer reports chaos (0=perfect). Invert to confidence.
    confidence = 1.0 - best.chaos
    if confidence < _ENCODING_CONFIDENCE_THRESHOLD:
        raise FeedError(
            f"Low confidence ({confidence:.2f}) detecting encoding for '{name}'"
        )
    logger.debug("%s: %s (%.2f)", name, best.encoding, confidence)
    return data.decode(best.encoding)


def read_table(feed: Path, name: str) -> Table:
    """Read and parse one GTFS table."""
    text = decode_table(read_table_bytes(feed, name), name)
    reader = csv.DictReader(io.StringIO(text, newline=""))
    if reader.fieldnames is None:
        raise FeedError(f"Table '{name}' has no header row")
    columns = [c.strip() for c in reader.fieldnames]
    rows = [
        {col.strip(): (value or "").strip() for col, value in row.items() if col}
        for row in reader
    ]
    logger.info("Read %s: %d rows", name, len(rows))
    return Table(name=name, columns=columns, rows=rows)


def write_table(path: Path, columns: list[str], rows: list[Row]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


# ---------------------------------------------------------------------------
# Record cleaners
# ---------------------------------------------------------------------------


def clean_route(row: Row, config: NormalizerConfig = DEFAULT_CONFIG) -> Row:
    """Resolve route id, fill missing color and route type, clean the long name."""
    short_name = row.get("route_short_name", "")
    cleaned = dict(row)
    cleaned["route_id"] = str(resolve_route_id(short_name))
    cleaned["route_long_name"] = clean_route_long_name(
        row.get("route_long_name", ""), config
    )
    if not row.get("route_color"):
        cleaned["route_color"] = resolve_route_color(short_name)
    if not row.get("route_type"):
        cleaned["route_type"] = str(AGENCY.route_type.value)
    return cleaned


def clean_trip(row: Row, config: NormalizerConfig = DEFAULT_CONFIG) -> Row:
    cleaned = dict(row)
    cleaned["trip_headsign"] = clean_trip_headsign(row.get("trip_headsign", ""), config)
    return cleaned


def clean_stop(row: Row, config: NormalizerConfig = DEFAULT_CONFIG) -> Row:
    """Reduce the stop id to an integer and clean the stop name."""
    raw_stop_id = row.get("stop_id", "")
    cleaned = dict(row)
    cleaned["stop_id"] = str(extract_stop_id(raw_stop_id))
    cleaned[_STOP_ORIGINAL_ID] = clean_stop_original_id(raw_stop_id)
    cleaned["stop_name"] = clean_stop_name(row.get("stop_name", ""), config)
    return cleaned


def _clean_rows(
    table: Table,
    key: str,
    cleaner: Callable[[Row], Row],
    keep_going: bool,
) -> tuple[list[tuple[Row, Row]], list[str]]:
    """Apply a record cleaner to every row of a table.

    Returns:
        (source row, cleaned row) pairs, and the key values of skipped rows.

    Raises:
        FatalDataError: On the first failure unless keep_going is set.
    """
    cleaned: list[tuple[Row, Row]] = []
    failures: list[str] = []
    for row in table.rows:
        outcome = attempt(lambda _raw, row=row: cleaner(row), row.get(key, ""))
        if outcome.ok:
            cleaned.append((row, outcome.unwrap()))
            continue
        if not keep_going:
            outcome.unwrap()
        logger.error(
            "%s: skipping %s '%s': %s", table.name, key, outcome.raw, outcome.error
        )
        failures.append(outcome.raw)
    return cleaned, failures


def find_directions(trips: list[Row]) -> list[Row]:
    """Label each (route_id, direction_id) pair from its most common headsign.

    Expects trips already re-keyed to resolved route ids, with raw
    headsigns.
    """
    counts: dict[tuple[str, str], Counter[str]] = defaultdict(Counter)
    for trip in trips:
        headsign = trip.get("trip_headsign", "")
        if headsign:
            counts[(trip["route_id"], trip.get("direction_id", "0"))][headsign] += 1

    directions: list[Row] = []
    for (route_id, direction_id), headsigns in sorted(counts.items()):
        raw_headsign = headsigns.most_common(1)[0][0]
        directions.append(
            {
                "route_id": route_id,
                "direction_id": direction_id,
                "direction_headsign": normalize_direction(
                    int(direction_id or 0), False, raw_headsign
                ),
            }
        )
    return directions


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


def clean_feed(
    feed: Path,
    output_dir: Path,
    keep_going: bool = False,
    config: NormalizerConfig = DEFAULT_CONFIG,
) -> list[TableResult]:
    """Clean routes, trips and stops of a feed and write them to output_dir.

    Trips are re-keyed to resolved route ids; trips of skipped routes are
    dropped.

    Every table is cleaned before anything is written, so an aborted run
    leaves output_dir untouched.

    Args:
        feed: GTFS directory or ZIP archive.
        output_dir: Destination directory for cleaned tables.
        keep_going: Skip failing records instead of aborting.
        config: Normalizer pipelines.

    Returns:
        One TableResult per written table.

    Raises:
        FeedError: If a table is missing or undecodable.
        FatalDataError: On the first unresolvable record unless keep_going.
    """
    routes = read_table(feed, ROUTES)
    route_pairs, route_failures = _clean_rows(
        routes, "route_short_name", lambda r: clean_route(r, config), keep_going
    )
    route_ids = {raw["route_id"]: cleaned["route_id"] for raw, cleaned in route_pairs}

    trips = read_table(feed, TRIPS)
    rekeyed: list[Row] = []
    for trip in trips.rows:
        route_id = route_ids.get(trip.get("route_id", ""))
        if route_id is None:
            logger.warning(
                "%s: dropping trip '%s' of unknown route '%s'",
                TRIPS,
                trip.get("trip_id", ""),
                trip.get("route_id", ""),
            )
            continue
        rekeyed.append({**trip, "route_id": route_id})
    trip_table = Table(name=TRIPS, columns=trips.columns, rows=rekeyed)
    trip_pairs, trip_failures = _clean_rows(
        trip_table, "trip_id", lambda r: clean_trip(r, config), keep_going
    )

    direction_rows = find_directions(rekeyed)

    stops = read_table(feed, STOPS)
    stop_pairs, stop_failures = _clean_rows(
        stops, "stop_id", lambda r: clean_stop(r, config), keep_going
    )
    stop_columns = list(stops.columns)
    if _STOP_ORIGINAL_ID not in stop_columns:
        stop_columns.append(_STOP_ORIGINAL_ID)

    return [
        _write(
            output_dir,
            ROUTES,
            routes.columns,
            [cleaned for _, cleaned in route_pairs],
            route_failures,
        ),
        _write(
            output_dir,
            TRIPS,
            trips.columns,
            [cleaned for _, cleaned in trip_pairs],
            trip_failures,
        ),
        _write(output_dir, DIRECTIONS, _DIRECTION_COLUMNS, direction_rows, []),
        _write(
            output_dir,
            STOPS,
            stop_columns,
            [cleaned for _, cleaned in stop_pairs],
            stop_failures,
        ),
    ]


def _write(
    output_dir: Path,
    name: str,
    columns: list[str],
    rows: list[Row],
    failures: list[str],
) -> TableResult:
    path = output_dir / name
    write_table(path, columns, rows)
    logger.info("Wrote %d rows to %s (%d skipped)", len(rows), path, len(failures))
    return TableResult(name=name, output_path=path, row_count=len(rows), failures=failures)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser for the feed cleaner."""
    parser = argparse.ArgumentParser(
        description="Clean STLévis GTFS route, trip and stop tables.",
    )
    parser.add_argument(
        "--feed",
        type=Path,
        required=True,
        help="GTFS feed directory or ZIP archive.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("data/clean"),
        help="Directory for cleaned tables.",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Log and skip unresolvable records instead of aborting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the feed cleaner."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    args = _build_arg_parser().parse_args(argv)

    if not args.feed.exists():
        logger.error("Feed not found: %s", args.feed)
        sys.exit(1)

    try:
        results = clean_feed(args.feed, args.output_dir, keep_going=args.keep_going)
    except FeedError as exc:
        logger.error("FEED ERROR: %s", exc)
        sys.exit(1)
    except FatalDataError as exc:
        logger.error("FATAL: %s", exc)
        logger.error("  raw value: '%s'", exc.raw_value)
        sys.exit(1)

    failed = sum(len(r.failures) for r in results)
    print(
        f"\n{AGENCY.name} Feed Summary:\n"
        + "".join(f"  {r.name}: {r.row_count:,} rows\n" for r in results)
        + f"  Records skipped: {failed}"
    )

    if failed > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
