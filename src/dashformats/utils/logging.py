"""
Logging helpers for the dashformats library.

Format functions run inside a host dashboard, so the library never installs
real handlers on its own:

1. **Library modules only call get_logger(__name__)**.
2. **Hosts, demos and scripts may call configure_logging()** to see output.
3. When the host already configured logging, dashformats records flow into the
   host's handlers through normal propagation.

Example Usage
-------------
In library code (retention.py, timeline.py, etc.):
    ```python
    from dashformats.utils.logging import get_logger
    logger = get_logger(__name__)
    logger.debug("timeline args incomplete")
    ```

In a standalone demo:
    ```python
    from dashformats.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "dashformats"
LOG_LEVEL_ENV = "DASHFORMATS_LOG_LEVEL"

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(level: Optional[Union[str, int]] = None) -> int:
    """Turn a level name, number or None into a logging level.

    None reads DASHFORMATS_LOG_LEVEL, falling back to INFO. Unknown names
    also fall back to INFO.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        value = getattr(logging, level.strip().upper(), None)
        return value if isinstance(value, int) else logging.INFO
    return int(level)


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure the dashformats logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to the
        DASHFORMATS_LOG_LEVEL env var, or "INFO" if unset.
    fmt:
        Log message format. Defaults to DEFAULT_FMT.
    datefmt:
        Date format. Defaults to DEFAULT_DATEFMT.
    force:
        If True, drop existing handlers before adding the new one. If False,
        an existing stderr handler is reused and only the level changes.
    """
    resolved = resolve_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)

    formatter = logging.Formatter(fmt=fmt or DEFAULT_FMT, datefmt=datefmt or DEFAULT_DATEFMT)

    if force:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)
    else:
        for h in logger.handlers:
            if isinstance(h, logging.StreamHandler) and h.stream is sys.stderr:
                h.setLevel(resolved)
                return

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(resolved)
    console.setFormatter(formatter)
    logger.addHandler(console)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    If name is None, returns the 'dashformats' package logger.
    """
    if name is None:
        name = LOGGER_NAME
    return logging.getLogger(name)
