"""Row access for result states.

Data-source plugins hand back ``state["values"]`` as a list of row dicts, but
hosts that post-process results often hold a pandas or polars DataFrame
instead. get_rows() turns any of those into a list of plain dicts so the
format functions only deal with one shape.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from numbers import Real
from typing import Any, Optional, TYPE_CHECKING, Union

import pandas as pd

from dashformats.formats.conventions import VALUES_KEY
from dashformats.utils.logging import get_logger

logger = get_logger(__name__)

# Optional polars
try:  # pragma: no cover
    import polars as _pl  # type: ignore[import]
    HAS_POLARS = True
except Exception:  # pragma: no cover
    _pl = None  # type: ignore[assignment]
    HAS_POLARS = False

if TYPE_CHECKING:
    import polars as pl
else:
    pl = _pl  # type: ignore[assignment]

RowDict = dict[str, Any]
RowsLike = list[RowDict]
ValuesLike = Union[list[Mapping[str, Any]], tuple, "pd.DataFrame", "pl.DataFrame"]  # type: ignore[name-defined]


def values_to_rows(values: Optional[ValuesLike]) -> RowsLike:
    """Convert a values container into a list of row dicts.

    None becomes an empty list. Items of a list/tuple that are not mappings
    are skipped with a warning. Any other container type (a dict, a string, a
    number) is logged and treated as no rows.
    """
    if values is None:
        return []

    if isinstance(values, (list, tuple)):
        rows: RowsLike = []
        for i, row in enumerate(values):
            if isinstance(row, Mapping):
                rows.append(dict(row))
            else:
                logger.warning(f"Skipping row {i}: expected a mapping, got {type(row).__name__}")
        return rows

    if isinstance(values, pd.DataFrame):
        return values.to_dict(orient="records")

    if HAS_POLARS and pl is not None and isinstance(values, pl.DataFrame):
        return values.to_dicts()

    logger.warning(
        f"Unsupported values type {type(values).__name__}: "
        "expected list[dict], pandas.DataFrame, or polars.DataFrame"
    )
    return []


def get_rows(state: Optional[Mapping[str, Any]]) -> RowsLike:
    """Rows of a result state; [] when state or its values are missing."""
    if state is None:
        return []
    return values_to_rows(state.get(VALUES_KEY))


def has_values(state: Optional[Mapping[str, Any]]) -> bool:
    """True if state carries a non-None values container (possibly empty)."""
    return state is not None and state.get(VALUES_KEY) is not None


def to_number(value: Any) -> Optional[float]:
    """Numeric view of a cell, or None if it is missing or not a number.

    Ints and floats (including numpy scalars) pass through unchanged, numeric
    strings are parsed. Booleans and NaN count as not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Real):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value  # type: ignore[return-value]
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return None
        return None if math.isnan(parsed) else parsed
    return None
