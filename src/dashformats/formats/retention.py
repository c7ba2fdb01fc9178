"""Retention cohort calculator.

Receives a result in the form of::

    values: [
        {
            "totalUnique": int,
            "totalUniqueUsersIn24hr": int,
            "totalUniqueUsersIn7d": int,
            "totalUniqueUsersIn30d": int,
            "returning24hr": int,
            "returning7d": int,
            "returning30d": int,
        }
    ]

and returns the counters plus the pair selected by
``dependencies["selectedTimespan"]`` and one bucket per cohort window::

    {
        ...counters,
        "total": int,
        "returning": int,
        "values": [
            {"timespan": "24 hours", "retention": "12%", "returning": int, "unique": int},
            {"timespan": "7 days", ...},
            {"timespan": "30 days", ...},
        ],
    }
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional

from dashformats.formats.conventions import P30D, P7D, PT24H, SELECTED_TIMESPAN_DEP
from dashformats.formats.rows import get_rows, to_number
from dashformats.utils.logging import get_logger

logger = get_logger(__name__)

COUNTER_FIELDS: tuple[str, ...] = (
    "totalUnique",
    "totalUniqueUsersIn24hr",
    "totalUniqueUsersIn7d",
    "totalUniqueUsersIn30d",
    "returning24hr",
    "returning7d",
    "returning30d",
)

# selectedTimespan code -> (unique counter, returning counter)
TIMESPAN_COUNTERS: dict[str, tuple[str, str]] = {
    PT24H: ("totalUniqueUsersIn24hr", "returning24hr"),
    P7D: ("totalUniqueUsersIn7d", "returning7d"),
    P30D: ("totalUniqueUsersIn30d", "returning30d"),
}

# Bucket label -> (unique counter, returning counter), in output order.
RETENTION_BUCKETS: tuple[tuple[str, str, str], ...] = (
    ("24 hours", "totalUniqueUsersIn24hr", "returning24hr"),
    ("7 days", "totalUniqueUsersIn7d", "returning7d"),
    ("30 days", "totalUniqueUsersIn30d", "returning30d"),
)


def retention_percent(returning: Any, unique: Any) -> str:
    """Format returning/unique as a rounded percentage string.

    Division by zero, NaN, infinity and non-numeric input all yield "0%".
    Halves round up, so 12.5 becomes "13%".
    """
    r = to_number(returning)
    u = to_number(unique)
    if r is None or u is None or u == 0:
        return "0%"
    ratio = 100 * r / u
    if not math.isfinite(ratio):
        return "0%"
    return f"{math.floor(ratio + 0.5)}%"


def retention(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]],
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Aggregate a retention summary row into per-window retention ratios.

    Args:
        format: Format spec (unused; retention takes no args).
        state: Current result state; only the first row is read.
        dependencies: Resolved sibling values; reads "selectedTimespan".
        plugin: Owning plugin (unused).
        prev_state: Previous output (unused).

    Returns:
        Counters, the selected total/returning pair and three buckets. Extra
        fields of the input row are passed through unchanged.
    """
    result: dict[str, Any] = {name: 0 for name in COUNTER_FIELDS}
    result.update({"total": 0, "returning": 0, "values": []})

    rows = get_rows(state)
    if rows:
        result.update(rows[0])
        if len(rows) > 1:
            logger.debug(f"retention expects one row, ignoring {len(rows) - 1} extra row(s)")

    selected = (dependencies or {}).get(SELECTED_TIMESPAN_DEP)
    counters = TIMESPAN_COUNTERS.get(selected) if isinstance(selected, str) else None
    if counters is not None:
        unique_field, returning_field = counters
        result["total"] = result[unique_field]
        result["returning"] = result[returning_field]
    else:
        logger.debug(f"retention: no counters for selectedTimespan={selected!r}")

    result["values"] = [
        {
            "timespan": label,
            "retention": retention_percent(result[returning_field], result[unique_field]),
            "returning": result[returning_field],
            "unique": result[unique_field],
        }
        for label, unique_field, returning_field in RETENTION_BUCKETS
    ]

    return result
