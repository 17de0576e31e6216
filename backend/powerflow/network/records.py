"""Bus and line record parsing.

Bus record fields, in order:
    id  type  P  Q  V  angle_deg        type is Slack, PV or PQ
Line record fields, in order:
    from  to  R  X  [B]                 from/to are 1-based bus positions

Rows may be sequences of strings or numbers. Text tables are split on
whitespace and/or commas; blank lines and '#' comments are skipped.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Sequence
from typing import Any

from powerflow.network.errors import BusIndexOutOfRangeError, MalformedInputError
from powerflow.network.network_model import BusData, BusType, LineData, NetworkModel

BUS_FIELDS = ("id", "type", "P", "Q", "V", "angle")
LINE_FIELDS = ("from", "to", "R", "X", "B")

_SPLIT_RE = re.compile(r"[,\s]+")


def parse_table(text: str) -> list[list[str]]:
    """Split a text block into rows of fields."""
    rows = []
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        rows.append([f for f in _SPLIT_RE.split(line) if f])
    return rows


def _to_float(value: Any, what: str, row: int) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise MalformedInputError(
            f"{what} row {row}: expected a number, got {value!r}"
        ) from None
    if not math.isfinite(result):
        raise MalformedInputError(f"{what} row {row}: {value!r} is not finite")
    return result


def _to_positive_int(value: Any, what: str, row: int) -> int:
    number = _to_float(value, what, row)
    if not number.is_integer() or number < 1:
        raise MalformedInputError(
            f"{what} row {row}: expected a positive integer, got {value!r}"
        )
    return int(number)


def _to_bus_type(value: Any, row: int) -> BusType:
    try:
        return BusType(str(value).strip().lower())
    except ValueError:
        raise MalformedInputError(
            f"Bus row {row}: unknown bus type {value!r} (expected Slack, PV or PQ)"
        ) from None


def parse_bus_record(fields: Sequence[Any], index: int) -> BusData:
    """Parse one bus row; index is its 0-based position."""
    row = index + 1
    if len(fields) != len(BUS_FIELDS):
        raise MalformedInputError(
            f"Bus row {row}: expected {len(BUS_FIELDS)} fields "
            f"({' '.join(BUS_FIELDS)}), got {len(fields)}"
        )
    return BusData(
        index=index,
        bus_id=_to_positive_int(fields[0], "Bus", row),
        bus_type=_to_bus_type(fields[1], row),
        p_pu=_to_float(fields[2], "Bus", row),
        q_pu=_to_float(fields[3], "Bus", row),
        v_setpoint_pu=_to_float(fields[4], "Bus", row),
        theta_deg=_to_float(fields[5], "Bus", row),
    )


def parse_line_record(fields: Sequence[Any], index: int, n_bus: int) -> LineData:
    """Parse one line row; endpoints are converted to 0-based positions."""
    row = index + 1
    if len(fields) < 4:
        raise MalformedInputError(
            f"Line row {row}: expected at least 4 fields "
            f"({' '.join(LINE_FIELDS)}), got {len(fields)}"
        )
    if len(fields) > len(LINE_FIELDS):
        raise MalformedInputError(
            f"Line row {row}: expected at most {len(LINE_FIELDS)} fields "
            f"({' '.join(LINE_FIELDS)}), got {len(fields)}"
        )
    from_bus = _to_positive_int(fields[0], "Line", row) - 1
    to_bus = _to_positive_int(fields[1], "Line", row) - 1
    for k in (from_bus, to_bus):
        if k >= n_bus:
            raise BusIndexOutOfRangeError(index, k, n_bus)

    b_pu = _to_float(fields[4], "Line", row) if len(fields) > 4 else 0.0
    return LineData(
        index=index,
        from_bus=from_bus,
        to_bus=to_bus,
        r_pu=_to_float(fields[2], "Line", row),
        x_pu=_to_float(fields[3], "Line", row),
        b_pu=b_pu,
    )


def build_network_from_records(
    bus_rows: Iterable[Sequence[Any]],
    line_rows: Iterable[Sequence[Any]],
) -> NetworkModel:
    """Build and validate a NetworkModel from bus and line rows."""
    buses = [parse_bus_record(fields, i) for i, fields in enumerate(bus_rows)]
    lines = [
        parse_line_record(fields, i, len(buses))
        for i, fields in enumerate(line_rows)
    ]
    network = NetworkModel(buses=buses, lines=lines)
    network.validate()
    return network


def build_network_from_text(bus_text: str, line_text: str) -> NetworkModel:
    """Build and validate a NetworkModel from two text tables."""
    return build_network_from_records(parse_table(bus_text), parse_table(line_text))
