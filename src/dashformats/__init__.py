"""
dashformats: reshape dashboard data-source results into widget view models.

This package provides:
- transform(): dispatch a format spec to its format function
- retention / timeline: the cohort calculator and the time series aggregator
- timespan / flags / scorecard / filter: simple field mappers
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from dashformats.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the host application's
configuration.
"""

import logging

from dashformats.utils.logging import configure_logging, get_logger

from dashformats.formats import (
    FormatKind,
    FormatSpec,
    PluginHandle,
    StaticPlugin,
    Threshold,
    list_kinds,
    transform,
)

# NullHandler so records do not reach the root logger's last-resort handler
# when no application has configured logging.
_logger = logging.getLogger("dashformats")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "FormatKind",
    "FormatSpec",
    "PluginHandle",
    "StaticPlugin",
    "Threshold",
    "configure_logging",
    "get_logger",
    "list_kinds",
    "transform",
]

__version__ = "0.1.0"
