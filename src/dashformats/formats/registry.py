"""Format registry and dispatcher.

Maps every FormatKind to the function that produces its view model and
exposes transform(), the single entry point hosts call per widget render.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Optional, Union

from dashformats.formats.format_spec import FormatKind, FormatSpec
from dashformats.formats.mappers import filter, flags, scorecard, timespan
from dashformats.formats.retention import retention
from dashformats.formats.timeline import timeline
from dashformats.utils.logging import get_logger

logger = get_logger(__name__)

FormatFunction = Callable[..., Any]

FORMATTERS: dict[FormatKind, FormatFunction] = {
    FormatKind.TIMESPAN: timespan,
    FormatKind.FLAGS: flags,
    FormatKind.RETENTION: retention,
    FormatKind.TIMELINE: timeline,
    FormatKind.SCORECARD: scorecard,
    FormatKind.FILTER: filter,
}


def list_kinds() -> list[str]:
    """Names of all format kinds, in declaration order."""
    return [kind.value for kind in FormatKind]


def get_formatter(kind: Union[FormatKind, str, None]) -> Optional[FormatFunction]:
    """Format function for kind; None for the "none" kind.

    Raises:
        ValueError: If kind is not a known format kind name.
    """
    return FORMATTERS.get(FormatKind.parse(kind))


def _kind_of(format: Any) -> Union[FormatKind, str, None]:
    if isinstance(format, FormatSpec):
        return format.kind
    if isinstance(format, Mapping):
        return format.get("type", format.get("kind"))
    if isinstance(format, str):
        return format
    return None


def transform(
    kind: Union[FormatKind, str, None],
    format: Union[FormatSpec, Mapping[str, Any], str, None],
    state: Any,
    dependencies: Optional[Mapping[str, Any]] = None,
    plugin: Any = None,
    prev_state: Optional[Mapping[str, Any]] = None,
) -> Any:
    """Run the format function for kind and return its view model.

    Args:
        kind: Format kind; None means "take the kind from format".
        format: Format spec handed to the function (kind name, mapping or FormatSpec).
        state: Current result state from the data source.
        dependencies: Resolved values of sibling widgets.
        plugin: Owning plugin (id for key prefixes, declared params).
        prev_state: Previously produced output, for selection stability.

    Returns:
        The view model, or state itself (same object) for the "none" kind and
        for unknown kind names.
    """
    if kind is None:
        kind = _kind_of(format)

    try:
        formatter = get_formatter(kind)
    except ValueError as e:
        logger.warning(f"{e}; passing state through")
        return state

    if formatter is None:
        return state

    return formatter(format, state, dependencies or {}, plugin, prev_state or {})
