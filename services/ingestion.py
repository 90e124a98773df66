"""CSV ingestion of time-series channel readings."""

from __future__ import annotations

import csv
import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Optional, TextIO

from models.records import CHANNELS, SensorReading

logger = logging.getLogger(__name__)

_TIME_COLUMN = "timestamp_sec"
_TIME_ALIASES = ("hora(s)", "hora", "timestamp_sec", "timestamp", "time")


def _channel_aliases(channel: str) -> tuple[str, ...]:
    number = channel.split("_")[1]
    return (
        f"canal_{number}(mw)",
        f"canal_{number}",
        channel.lower(),
        f"ch{number}",
    )


_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    _TIME_COLUMN: _TIME_ALIASES,
    **{channel: _channel_aliases(channel) for channel in CHANNELS},
}


@dataclass(frozen=True, slots=True)
class RowError:
    row_number: int
    reason: str


@dataclass
class IngestionOutcome:
    readings: list[SensorReading] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


def _normalize_header(name: str) -> str:
    return "".join(name.split()).lower()


def _resolve_columns(fieldnames: list[str]) -> dict[str, str]:
    normalized = {_normalize_header(name): name for name in fieldnames if name}
    resolved: dict[str, str] = {}
    for canonical, aliases in _COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in normalized:
                resolved[canonical] = normalized[alias]
                break
    missing = [name for name in _COLUMN_ALIASES if name not in resolved]
    if missing:
        raise ValueError(f"CSV missing required columns: {', '.join(missing)}")
    return resolved


def _parse_timestamp(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        as_float = float(value)
        if not as_float.is_integer():
            raise ValueError("Timestamp must be a whole number of seconds.")
        parsed = int(as_float)
    if parsed < 0:
        raise ValueError("Timestamp must not be negative.")
    return parsed


def _iter_rows(reader: csv.DictReader) -> Iterator[dict[str, str]]:
    try:
        yield from reader
    except csv.Error as exc:
        raise ValueError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc


def _parse_channel(value: str) -> float:
    parsed = float(value)
    if not math.isfinite(parsed):
        raise ValueError("Channel value must be finite.")
    return parsed


def parse_readings(stream: TextIO, dataset_id: Optional[str] = None) -> IngestionOutcome:
    """Parse a CSV stream into readings, collecting per-row errors.

    Row numbers count the header as row 1. Rows whose timestamp is earlier
    than the previous accepted row are rejected so the resulting series stays
    non-decreasing.
    """
    reader = csv.DictReader(stream)
    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        raise ValueError(f"Malformed CSV header: {exc}") from exc
    if not fieldnames:
        raise ValueError("CSV file is missing a header row.")
    columns = _resolve_columns(list(fieldnames))

    outcome = IngestionOutcome()
    last_timestamp: Optional[int] = None

    def skip(row_number: int, reason: str, invalid_value: Optional[str] = None) -> None:
        outcome.errors.append(RowError(row_number=row_number, reason=reason))
        logger.warning(
            "Skipping row: %s",
            reason,
            extra={
                "dataset_id": dataset_id,
                "row_number": row_number,
                "reason": reason,
                "invalid_value": invalid_value,
            },
        )

    for row_number, row in enumerate(_iter_rows(reader), start=2):
        timestamp_raw = (row.get(columns[_TIME_COLUMN]) or "").strip()
        if not timestamp_raw:
            skip(row_number, "missing timestamp")
            continue
        try:
            timestamp = _parse_timestamp(timestamp_raw)
        except ValueError:
            skip(row_number, "invalid timestamp", timestamp_raw)
            continue
        if last_timestamp is not None and timestamp < last_timestamp:
            skip(row_number, "timestamp out of order", timestamp_raw)
            continue

        values: dict[str, float] = {}
        for channel in CHANNELS:
            raw = (row.get(columns[channel]) or "").strip()
            if not raw:
                skip(row_number, "missing value")
                break
            try:
                values[channel] = _parse_channel(raw)
            except ValueError:
                skip(row_number, "invalid numeric value", raw)
                break
        else:
            outcome.readings.append(
                SensorReading(id=f"row-{row_number}", timestamp_sec=timestamp, **values)
            )
            last_timestamp = timestamp

    return outcome
