from __future__ import annotations

from collections import Counter
from typing import Any, Hashable, Iterable, List, Tuple

import pandas

from catcode.errors import DuplicateLevelError


def get_levels(data: Any) -> List[Hashable]:
    """
    Extract the ordered distinct levels of a categorical column.

    If `data` is a `pandas.Categorical` (or a `pandas.Series` with a
    categorical dtype), its declared categories are returned in their declared
    order (including categories that are not observed in the data). Otherwise
    the distinct non-null values of `data` are returned in sorted order, which
    is how `pandas` infers categories.

    Args:
        data: The categorical data from which to extract levels.
    """
    if isinstance(data, pandas.Categorical):
        return list(data.categories)
    if isinstance(data, pandas.Series) and isinstance(
        data.dtype, pandas.CategoricalDtype
    ):
        return list(data.cat.categories)
    return list(pandas.Series(data).astype("category").cat.categories)


def infer_level_type(levels: Iterable[Hashable]) -> str:
    """
    Infer the element type of a sequence of levels (e.g. "string", "integer",
    "floating", "boolean" or "mixed"). Empty sequences are typed as "empty".
    """
    return pandas.api.types.infer_dtype(list(levels), skipna=False)


def find_duplicates(levels: Iterable[Hashable]) -> List[Hashable]:
    return [level for level, count in Counter(levels).items() if count > 1]


def normalize_levels(levels: Iterable[Hashable], source: str = "data") -> Tuple:
    """
    Convert `levels` to a tuple, checking that no level is repeated.

    Args:
        levels: The ordered levels to normalize.
        source: A description of where the levels came from, used in error
            messages.
    """
    levels = tuple(levels)
    duplicates = find_duplicates(levels)
    if duplicates:
        raise DuplicateLevelError(
            f"Levels must be distinct, but {source} levels {list(levels)} repeat: "
            f"{duplicates}."
        )
    return levels
