"""Format functions that reshape data-source results into widget view models."""

from dashformats.formats.format_spec import (
    DEFAULT_THRESHOLD,
    FormatKind,
    FormatSpec,
    PluginHandle,
    StaticPlugin,
    Threshold,
)
from dashformats.formats.mappers import filter, flags, scorecard, timespan
from dashformats.formats.registry import FORMATTERS, get_formatter, list_kinds, transform
from dashformats.formats.retention import retention
from dashformats.formats.timeline import timeline

__all__ = [
    "DEFAULT_THRESHOLD",
    "FORMATTERS",
    "FormatKind",
    "FormatSpec",
    "PluginHandle",
    "StaticPlugin",
    "Threshold",
    "filter",
    "flags",
    "get_formatter",
    "list_kinds",
    "retention",
    "scorecard",
    "timeline",
    "timespan",
    "transform",
]
