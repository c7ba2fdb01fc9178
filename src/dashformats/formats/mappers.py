"""Field mappers: timespan, flags, scorecard and filter.

Each mapper is a single-pass projection from the result state (and for
flags the plugin's declared params) into a small view-model dict. They
share the signature of the other format functions so the registry can
dispatch them uniformly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from dashformats.formats.conventions import (
    COLOR_SUFFIX,
    DEFAULT_COUNT_FIELD,
    DEFAULT_SCORECARD_PREFIX,
    DEFAULT_UNKNOWN,
    FILTERS_SUFFIX,
    ICON_SUFFIX,
    LABEL_1_MONTH,
    LABEL_1_WEEK,
    LABEL_24_HOURS,
    P30D,
    P7D,
    P90D,
    PT24H,
    SELECTED_SUFFIX,
    SELECTED_VALUE_KEY,
    VALUE_SUFFIX,
    get_present,
    prefixed_key,
    resolve_prefix,
)
from dashformats.formats.format_spec import DEFAULT_THRESHOLD, Threshold, format_args
from dashformats.formats.rows import get_rows, has_values, to_number
from dashformats.utils.logging import get_logger

logger = get_logger(__name__)

# selector label -> (queryTimespan, granularity)
TIMESPAN_TABLE: dict[str, tuple[str, str]] = {
    LABEL_24_HOURS: (PT24H, "5m"),
    LABEL_1_WEEK: (P7D, "1d"),
    LABEL_1_MONTH: (P30D, "1d"),
}
DEFAULT_TIMESPAN: tuple[str, str] = (P90D, "1d")


def timespan(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]] = None,
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> Optional[dict[str, str]]:
    """Map the timespan selector's label to a query timespan and granularity."""
    if state is None:
        return None
    query_timespan, granularity = TIMESPAN_TABLE.get(state.get(SELECTED_VALUE_KEY), DEFAULT_TIMESPAN)
    return {"queryTimespan": query_timespan, "granularity": granularity}


def flags(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]] = None,
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> Optional[dict[str, bool]]:
    """One boolean per declared plugin param, True for the selected one.

    Returns None when state is missing or the plugin declares no list of
    param values.
    """
    if state is None or plugin is None:
        return None
    params = plugin.get_params()
    if not isinstance(params, Mapping) or not isinstance(params.get("values"), (list, tuple)):
        logger.debug(f"flags: plugin {getattr(plugin, 'id', None)!r} has no param values")
        return None

    selected = state.get(SELECTED_VALUE_KEY)
    return {key: selected == key for key in params["values"]}


@dataclass
class ScorecardArgs:
    """Scorecard configuration.

    Attributes:
        thresholds: Bands sorted ascending by value, never empty.
        count_field: Field of the first row holding the count.
    """
    thresholds: list[Threshold] = field(default_factory=lambda: [DEFAULT_THRESHOLD])
    count_field: str = DEFAULT_COUNT_FIELD

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScorecardArgs":
        raw = get_present(data, "thresholds", [])
        thresholds: list[Threshold] = []
        if isinstance(raw, (list, tuple)):
            for item in raw:
                if isinstance(item, (Mapping, Threshold)):
                    thresholds.append(Threshold.from_dict(item))
                else:
                    logger.debug(f"scorecard: ignoring threshold {item!r}")
        if not thresholds:
            thresholds = [DEFAULT_THRESHOLD]
        thresholds = sorted(thresholds, key=_threshold_sort_key)

        return cls(
            thresholds=thresholds,
            count_field=str(get_present(data, "countField", DEFAULT_COUNT_FIELD)),
        )


def _threshold_sort_key(threshold: Threshold) -> float:
    value = to_number(threshold.value)
    return float("inf") if value is None else value


def select_threshold(count: Any, thresholds: list[Threshold]) -> Threshold:
    """Walk ascending thresholds until one is not exceeded by count.

    The last threshold is returned when count exceeds them all, the first
    one when count is not a number.
    """
    value = to_number(count)
    idx = 0
    if value is None:
        return thresholds[idx]
    while idx < len(thresholds) - 1:
        limit = to_number(thresholds[idx].value)
        if limit is not None and value <= limit:
            break
        idx += 1
    return thresholds[idx]


def scorecard(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]] = None,
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Pick a color and icon for the first row's count from the thresholds.

    Emits "<prefix>_value", "<prefix>_color" and "<prefix>_icon". With no rows
    the first threshold's value is shown.
    """
    raw_args = format_args(format) or {}
    args = ScorecardArgs.from_dict(raw_args)
    prefix = resolve_prefix(raw_args, plugin, DEFAULT_SCORECARD_PREFIX)

    rows = get_rows(state)
    if not rows:
        first = args.thresholds[0]
        return _score_value(prefix, first.value, first)

    count = rows[0].get(args.count_field)
    return _score_value(prefix, count, select_threshold(count, args.thresholds))


def _score_value(prefix: str, value: Any, threshold: Threshold) -> dict[str, Any]:
    return {
        prefixed_key(prefix, VALUE_SUFFIX): value,
        prefixed_key(prefix, COLOR_SUFFIX): threshold.color,
        prefixed_key(prefix, ICON_SUFFIX): threshold.icon,
    }


@dataclass
class FilterArgs:
    """Filter configuration: output prefix, row field and the unknown token."""
    prefix: str
    field: Optional[str] = None
    unknown: str = DEFAULT_UNKNOWN

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["FilterArgs"]:
        """Parse filter args; None when no prefix is configured."""
        prefix = get_present(data, "prefix")
        if prefix is None:
            return None
        field_name = get_present(data, "field")
        return cls(
            prefix=str(prefix),
            field=None if field_name is None else str(field_name),
            unknown=get_present(data, "unknown", DEFAULT_UNKNOWN),
        )


def filter(
    format: Any,
    state: Optional[Mapping[str, Any]],
    dependencies: Optional[Mapping[str, Any]] = None,
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Project a field of every row into filter choices.

    Outputs::

        {
            "<prefix>-filters": ["value 1", "value 2", ...],
            "<prefix>-selected": [...],
        }

    "<prefix>-selected" is copied from prev_state so that a refresh of the
    choices (e.g. after the timespan changes) does not reset what the user
    selected in the filter component.
    """
    raw_args = format_args(format)
    args = FilterArgs.from_dict(raw_args) if raw_args is not None else None
    if args is None or not has_values(state):
        return {}

    filters = []
    for row in get_rows(state):
        value = row.get(args.field) if args.field is not None else None
        filters.append(args.unknown if value is None else value)

    selected_key = prefixed_key(args.prefix, SELECTED_SUFFIX)
    selected: Any = []
    if prev_state is not None and selected_key in prev_state:
        selected = prev_state[selected_key]
        if isinstance(selected, (list, tuple)):
            selected = list(selected)

    return {
        prefixed_key(args.prefix, FILTERS_SUFFIX): filters,
        selected_key: selected,
    }
