"""Timeline (time series) aggregator.

Receives rows such as::

    values: [
        {"timestamp": "2017-01-01T00:00:00Z", "channel": "web", "count": 5},
        {"timestamp": "2017-01-01T00:00:00Z", "channel": "sms", "count": 7},
        {"timestamp": "2017-01-02T00:00:00Z", "channel": "web", "count": 3},
    ]

with ``args = {"timeField": "timestamp", "lineField": "channel",
"valueField": "count"}`` and outputs a dense time x line matrix for the chart
plus per-line totals::

    {
        "timeline-graphData": [
            {"time": "Sun, 01 Jan 2017 00:00:00 GMT", "web": 5, "sms": 7},
            {"time": "Mon, 02 Jan 2017 00:00:00 GMT", "web": 3, "sms": 0},
        ],
        "timeline-usage": [{"name": "web", "value": 8}, {"name": "sms", "value": 7}],
        "timeline-timeFormat": "date",
        "timeline-lines": ["web", "sms"],
    }
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from numbers import Real
from typing import Any, Optional

import pandas as pd

from dashformats.formats.conventions import (
    INVALID_DATE,
    LABEL_24_HOURS,
    TIMELINE_GRAPH_DATA,
    TIMELINE_LINES,
    TIMELINE_TIME_FORMAT,
    TIMELINE_USAGE,
    TIMESPAN_DEP,
    get_present,
)
from dashformats.formats.format_spec import format_args
from dashformats.formats.rows import get_rows, to_number
from dashformats.utils.logging import get_logger

logger = get_logger(__name__)

TIME_FIELD = "time"
TIME_LINE_LABEL = "time_"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class TimelineArgs:
    """Which row fields hold the timestamp, the line label and the value."""
    time_field: str
    line_field: str
    value_field: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["TimelineArgs"]:
        """Parse timeline args; None if any of the three fields is missing."""
        time_field = get_present(data, "timeField")
        line_field = get_present(data, "lineField")
        value_field = get_present(data, "valueField")
        if time_field is None or line_field is None or value_field is None:
            return None
        return cls(
            time_field=str(time_field),
            line_field=str(line_field),
            value_field=str(value_field),
        )


def _is_epoch_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _utc_datetime(ts: pd.Timestamp) -> datetime:
    if ts.nanosecond:
        ts = ts.floor("us")
    return ts.to_pydatetime().astimezone(timezone.utc)


def _parse_wide(value: Any) -> Optional[datetime]:
    """Parse a value pandas could not represent in its nanosecond range.

    Covers epoch milliseconds and ISO-8601 strings out to year 9999.
    """
    try:
        if _is_epoch_number(value):
            return EPOCH + timedelta(milliseconds=float(value))
        if isinstance(value, datetime):
            dt = value
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            dt = datetime.fromisoformat(text)
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamps(values: Sequence[Any]) -> list[Optional[datetime]]:
    """Parse a column of row timestamps into UTC datetimes (None if invalid).

    Numbers are epoch milliseconds. Strings and datetimes without a zone are
    taken as UTC. The column is converted with two pandas passes (numbers,
    then strings/datetimes); values pandas cannot hold in its nanosecond
    range are parsed one by one with _parse_wide.
    """
    raw = pd.Series(list(values), dtype=object)
    parsed: list[Optional[datetime]] = [None] * len(raw)
    if raw.empty:
        return parsed

    numeric = raw.map(_is_epoch_number).astype(bool)
    textual = raw.map(lambda v: isinstance(v, (str, datetime))).astype(bool)

    converted = []
    if numeric.any():
        converted.append(
            pd.to_datetime(raw[numeric].astype(float), unit="ms", utc=True, errors="coerce")
        )
    if textual.any():
        converted.append(
            pd.to_datetime(raw[textual], utc=True, errors="coerce", format="mixed")
        )

    for column in converted:
        for idx, ts in column.items():
            if pd.isna(ts):
                parsed[idx] = _parse_wide(raw[idx])
            else:
                parsed[idx] = _utc_datetime(ts)

    invalid = sum(1 for dt in parsed if dt is None)
    if invalid:
        logger.debug(f"{invalid} of {len(parsed)} timestamp(s) could not be parsed")
    return parsed


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a single row timestamp; see parse_timestamps."""
    return parse_timestamps([value])[0]


def time_key(dt: Optional[datetime]) -> Optional[int]:
    """Epoch milliseconds for indexing; None groups all invalid dates."""
    if dt is None:
        return None
    return (dt - EPOCH) // timedelta(milliseconds=1)


def format_utc(dt: Optional[datetime]) -> str:
    """RFC 1123 display string, e.g. "Thu, 01 Jan 1970 00:00:00 GMT"."""
    if dt is None:
        return INVALID_DATE
    # format_datetime(usegmt=True) insists on datetime.timezone.utc exactly
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def line_label(value: Any) -> str:
    """Series labels become string keys in the chart entries."""
    return value if isinstance(value, str) else str(value)


def time_format(dependencies: Optional[Mapping[str, Any]]) -> str:
    """Axis tick format: hour ticks for the 24 hour view, date ticks otherwise."""
    timespan = (dependencies or {}).get(TIMESPAN_DEP)
    return "hour" if timespan == LABEL_24_HOURS else "date"


def timeline(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]],
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Group rows into a dense time x line matrix plus per-line totals.

    Args:
        format: Format spec whose args name timeField, lineField and valueField.
            A bare kind name returns {}.
        state: Current result state with the rows to aggregate.
        dependencies: Resolved sibling values; "timespan" picks the time format.
        plugin: Owning plugin (unused).
        prev_state: Previous output (unused).

    Returns:
        Dict with the four timeline-* keys, or {} when args or state are missing.
    """
    raw_args = format_args(format)
    if raw_args is None:
        return {}
    args = TimelineArgs.from_dict(raw_args)
    if args is None:
        logger.debug(f"timeline args incomplete: {raw_args!r}")
        return {}
    if state is None:
        return {}

    points: dict[Optional[int], dict[str, Any]] = {}
    usage: dict[str, dict[str, Any]] = {}

    rows = get_rows(state)
    times = parse_timestamps([row.get(args.time_field) for row in rows])

    for row, ts in zip(rows, times):
        key = time_key(ts)
        label = line_label(row.get(args.line_field))
        if label == TIME_FIELD:
            # entries already use "time" for the display timestamp
            label = TIME_LINE_LABEL
        value = to_number(row.get(args.value_field))
        if value is None:
            value = 0

        if key not in points:
            points[key] = {TIME_FIELD: format_utc(ts)}
        if label not in usage:
            usage[label] = {"name": label, "value": 0}

        points[key][label] = value
        usage[label]["value"] += value

    lines = list(usage.keys())
    graph_data = list(points.values())
    for point in graph_data:
        for line in lines:
            point.setdefault(line, 0)

    return {
        TIMELINE_GRAPH_DATA: graph_data,
        TIMELINE_USAGE: list(usage.values()),
        TIMELINE_TIME_FORMAT: time_format(dependencies),
        TIMELINE_LINES: lines,
    }
