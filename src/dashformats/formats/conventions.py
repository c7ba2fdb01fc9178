"""Shared conventions for format functions.

Single source of truth for output key names, timespan codes and default
tokens, so the mappers, the retention calculator and the timeline aggregator
agree with the rendering layer on the exact wire keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

# Keys read from the host-supplied state and dependencies.
VALUES_KEY = "values"
SELECTED_VALUE_KEY = "selectedValue"
SELECTED_TIMESPAN_DEP = "selectedTimespan"
TIMESPAN_DEP = "timespan"

# Timespan codes (ISO-8601 durations) shared by timespan() and retention().
PT24H = "PT24H"
P7D = "P7D"
P30D = "P30D"
P90D = "P90D"

# Human timespan labels chosen in the timespan selector widget.
LABEL_24_HOURS = "24 hours"
LABEL_1_WEEK = "1 week"
LABEL_1_MONTH = "1 month"

# Filter / scorecard defaults.
DEFAULT_UNKNOWN = "unknown"
DEFAULT_COUNT_FIELD = "count"
DEFAULT_SCORECARD_PREFIX = "scorecard"

# Scorecard suffixes: "<prefix>_value" etc.
VALUE_SUFFIX = "_value"
COLOR_SUFFIX = "_color"
ICON_SUFFIX = "_icon"

# Filter suffixes: "<prefix>-filters" etc.
FILTERS_SUFFIX = "-filters"
SELECTED_SUFFIX = "-selected"

# Timeline output keys (fixed, not prefixed).
TIMELINE_GRAPH_DATA = "timeline-graphData"
TIMELINE_USAGE = "timeline-usage"
TIMELINE_TIME_FORMAT = "timeline-timeFormat"
TIMELINE_LINES = "timeline-lines"

INVALID_DATE = "Invalid Date"


def prefixed_key(prefix: str, suffix: str) -> str:
    """Build an output key such as "channels-selected" or "errors_value"."""
    return f"{prefix}{suffix}"


def is_present(mapping: Optional[Mapping[str, Any]], key: str) -> bool:
    """True if key exists in mapping with a non-None value.

    Zero, False and the empty string count as present.
    """
    return mapping is not None and mapping.get(key) is not None


def get_present(mapping: Optional[Mapping[str, Any]], key: str, default: Any = None) -> Any:
    """mapping[key] if present (see is_present), otherwise default."""
    if is_present(mapping, key):
        return mapping[key]  # type: ignore[index]
    return default


def resolve_prefix(args: Mapping[str, Any], plugin: Any, fallback: Optional[str] = None) -> Optional[str]:
    """Output key prefix: args["prefix"], then plugin.id, then fallback."""
    prefix = get_present(args, "prefix")
    if prefix is not None:
        return str(prefix)
    plugin_id = getattr(plugin, "id", None) if plugin is not None else None
    if plugin_id is not None:
        return str(plugin_id)
    return fallback
