"""CSV input for location traces and accelerometer windows."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Final, Iterator, Mapping, Sequence, TypeVar

from trip_analyze.models import DEFAULT_TZ, AccelerationSample, GeoPoint
from trip_analyze.timeutils import parse_timestamp_ms

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Optional trace columns copied into point metadata: csv column -> metadata key.
# When both spellings are present the first one listed wins.
METADATA_COLUMNS: Final[dict[str, str]] = {
    "accuracy": "accuracy",
    "horizontalAccuracy": "accuracy",
    "speed": "speed",
    "heading": "heading",
    "course": "heading",
    "altitude": "altitude",
    "source": "source",
}

TIME_COLUMNS: Final[tuple[str, ...]] = ("timestamp", "geoTime")


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Row accounting for one CSV file."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _cell_float(row: Mapping[str, str], column: str) -> float:
    # None for short rows -> TypeError, skipped like any malformed cell
    return float(row[column])


def _time_column(fieldnames: Sequence[str]) -> str:
    for name in TIME_COLUMNS:
        if name in fieldnames:
            return name
    raise KeyError(f"CSV缺少时间字段 {'/'.join(TIME_COLUMNS)}. 实际字段：{list(fieldnames)}")


def _metadata(row: Mapping[str, str]) -> dict[str, Any]:
    meta: dict[str, Any] = {}
    for column, key in METADATA_COLUMNS.items():
        raw = (row.get(column) or "").strip()
        if not raw or key in meta:
            continue
        try:
            meta[key] = float(raw)
        except ValueError:
            meta[key] = raw
    return meta


def _geo_row_parser(fieldnames: Sequence[str], tz_name: str) -> Callable[[Mapping[str, str]], GeoPoint]:
    time_col = _time_column(fieldnames)

    def parse(row: Mapping[str, str]) -> GeoPoint:
        return GeoPoint(
            latitude=_cell_float(row, "latitude"),
            longitude=_cell_float(row, "longitude"),
            timestamp_ms=parse_timestamp_ms(row[time_col] or "", tz_name),
            metadata=_metadata(row),
        )

    return parse


def _accel_row(row: Mapping[str, str]) -> AccelerationSample:
    x, y, z = (_cell_float(row, c) for c in ("x", "y", "z"))
    ts = _cell_float(row, "timestamp")
    mag = (row.get("magnitude") or "").strip()
    if not mag:
        return AccelerationSample.from_xyz(x, y, z, ts)
    return AccelerationSample(x=x, y=y, z=z, magnitude=float(mag), timestamp_ms=ts)


def _iter_rows(
    reader: csv.DictReader,
    parse: Callable[[Mapping[str, str]], T],
    skipped: list[int] | None = None,
) -> Iterator[T]:
    """Parse rows, skipping malformed ones; a missing column is a hard error."""

    for row in reader:
        try:
            yield parse(row)
        except KeyError as exc:
            raise KeyError(f"CSV缺少必要字段：{exc}. 实际字段：{reader.fieldnames}") from exc
        except (ValueError, TypeError):
            # 损坏/空行直接跳过
            if skipped is not None:
                skipped[0] += 1


def _load(
    csv_path: str | Path,
    make_parser: Callable[[Sequence[str]], Callable[[Mapping[str, str]], T]],
) -> tuple[list[T], CsvSummary]:
    skipped = [0]
    with Path(csv_path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames: Sequence[str] = reader.fieldnames or ()
        items = list(_iter_rows(reader, make_parser(fieldnames), skipped)) if fieldnames else []

    summary = CsvSummary(
        rows_total=len(items) + skipped[0],
        rows_parsed=len(items),
        rows_skipped=skipped[0],
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("%s: CSV中有 %s 行解析失败已跳过", csv_path, summary.rows_skipped)
    return items, summary


def iter_geo_points(csv_path: str | Path, tz_name: str = DEFAULT_TZ) -> Iterator[GeoPoint]:
    """Stream GeoPoints from a trace CSV, in file order.

    Args:
        csv_path: Path to the CSV.
        tz_name: Zone for timestamps written as datetime text without offset.

    Yields:
        Rows parsed successfully; malformed rows are skipped.

    Raises:
        KeyError: If a required column is missing.

    Notes:
        Required columns: timestamp (or geoTime), latitude, longitude.
        Timestamps are epoch milliseconds or ISO datetimes. Optional
        accuracy/speed/heading/altitude/source columns become metadata.
    """

    with Path(csv_path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return
        yield from _iter_rows(reader, _geo_row_parser(reader.fieldnames, tz_name))


def load_geo_points(csv_path: str | Path, tz_name: str = DEFAULT_TZ) -> tuple[list[GeoPoint], CsvSummary]:
    """Load a whole trace into memory (file order) together with its row accounting."""

    return _load(csv_path, lambda fieldnames: _geo_row_parser(fieldnames, tz_name))


def load_acceleration_samples(csv_path: str | Path) -> tuple[list[AccelerationSample], CsvSummary]:
    """Load an accelerometer CSV (timestamp, x, y, z[, magnitude]), sorted by time.

    Timestamps are milliseconds. A missing or empty magnitude is derived
    from x/y/z.
    """

    samples, summary = _load(csv_path, lambda _fieldnames: _accel_row)
    samples.sort(key=lambda s: s.timestamp_ms)
    return samples, summary
