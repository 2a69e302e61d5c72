"""Flatten embedded measurement-or-fact records into a standalone table.

OBIS returns each occurrence with its measurements nested under ``mof``.
The flat table has one row per measurement, denormalized with a chosen set
of parent occurrence fields so it can be grouped by island, year, etc.

Measurements are joined to their parent occurrence by event identifier.
A measurement without its own event inherits the one of the occurrence it
is nested in.  When the event matches that occurrence, it is the parent;
otherwise the parent is the single occurrence in the set carrying that
event.  A measurement with no event, or whose event belongs to no
occurrence or to several, is unmatched: it is dropped and counted in
``FlattenResult.unmatched`` (or raises ``FlattenError`` in strict mode).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

DEFAULT_PARENT_FIELDS = [
    "eventID",
    "scientificName",
    "year",
    "individualCount",
    "decimalLongitude",
    "decimalLatitude",
    "island",
    "islandGroup",
    "stateProvince",
]

MEASUREMENT_FIELDS = [
    "measurementType",
    "measurementTypeID",
    "measurementValue",
    "measurementUnit",
]

# Parent fields holding numbers; unparseable values become NaN.
NUMERIC_FIELDS = ("year", "individualCount", "decimalLongitude", "decimalLatitude")

# Keys under which a measurement may name its own event.
_EVENT_KEYS = ("eventID", "event_id")


class FlattenError(ValueError):
    """Raised in strict mode when measurements cannot be joined to a parent."""


@dataclass
class FlattenResult:
    """Flat measurement table plus join bookkeeping."""

    table: pd.DataFrame
    total: int
    unmatched: int

    @property
    def matched(self) -> int:
        return self.total - self.unmatched


# =============================================================================
# Helpers
# =============================================================================


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parent_value(record: dict[str, Any], field: str) -> Any:
    value = record.get(field)
    # OBIS sometimes only fills the derived integer year.
    if field == "year" and _blank(value):
        value = record.get("date_year")
    return value


def _event_of(item: dict[str, Any]) -> str | None:
    for key in _EVENT_KEYS:
        value = item.get(key)
        if not _blank(value):
            return str(value)
    return None


def _index_by_event(records: list[dict[str, Any]]) -> dict[str, list[dict[str, Any]]]:
    index: dict[str, list[dict[str, Any]]] = {}
    for record in records:
        event = _event_of(record)
        if event is not None:
            index.setdefault(event, []).append(record)
    return index


def _coerce_numeric(frame: pd.DataFrame) -> pd.DataFrame:
    for column in NUMERIC_FIELDS:
        if column in frame.columns:
            frame[column] = pd.to_numeric(frame[column], errors="coerce")
    return frame


def numeric_values(series: pd.Series) -> pd.Series:
    """Parse a column as numbers; anything unparseable becomes NaN."""
    return pd.to_numeric(series, errors="coerce")


# =============================================================================
# Public API
# =============================================================================


def occurrences_frame(
    records: list[dict[str, Any]],
    fields: list[str] | None = None,
) -> pd.DataFrame:
    """One row per occurrence record with the requested fields.

    Missing fields become NA, numeric fields are coerced.

    Args:
        records: Raw OBIS occurrence dicts.
        fields: Columns to keep. Defaults to ``DEFAULT_PARENT_FIELDS``.
    """
    columns = list(fields or DEFAULT_PARENT_FIELDS)
    rows = [{field: _parent_value(rec, field) for field in columns} for rec in records]
    return _coerce_numeric(pd.DataFrame(rows, columns=columns))


def flatten_measurements(
    records: list[dict[str, Any]],
    parent_fields: list[str] | None = None,
    *,
    strict: bool = False,
) -> FlattenResult:
    """Extract nested ``mof`` measurements into a flat, denormalized table.

    Each measurement inherits its nesting record's event identifier unless
    it names one itself; a named event is looked up across all ``records``.
    Rows keep the source order of the measurements.

    Args:
        records: Raw OBIS occurrence dicts, each optionally carrying ``mof``.
        parent_fields: Parent fields copied onto every measurement row.
            Defaults to ``DEFAULT_PARENT_FIELDS``.
        strict: Raise ``FlattenError`` instead of dropping unmatched
            measurements.

    Returns:
        FlattenResult with the table and matched/unmatched counts.
    """
    fields = list(parent_fields or DEFAULT_PARENT_FIELDS)
    by_event = _index_by_event(records)

    rows: list[dict[str, Any]] = []
    total = 0
    unmatched = 0
    for record in records:
        parent_event = _event_of(record)
        for measurement in record.get("mof") or []:
            total += 1
            event = _event_of(measurement) or parent_event
            if event is None:
                unmatched += 1
                continue
            if event == parent_event:
                parent = record
            else:
                candidates = by_event.get(event, [])
                if len(candidates) != 1:
                    unmatched += 1
                    continue
                parent = candidates[0]
            row = {field: _parent_value(parent, field) for field in fields}
            row.update({field: measurement.get(field) for field in MEASUREMENT_FIELDS})
            rows.append(row)

    if strict and unmatched:
        msg = f"{unmatched} of {total} measurements have no matching parent occurrence"
        raise FlattenError(msg)

    table = pd.DataFrame(rows, columns=[*fields, *MEASUREMENT_FIELDS])
    return FlattenResult(table=_coerce_numeric(table), total=total, unmatched=unmatched)
