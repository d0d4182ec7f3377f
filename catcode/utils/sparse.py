from typing import Hashable, Iterable, List, Optional, Tuple

import numpy
import pandas
import scipy.sparse as spsparse


def categorical_encode_series_to_sparse_csc_matrix(
    series: Iterable, levels: Optional[Iterable[Hashable]] = None
) -> Tuple[List, spsparse.csc_matrix]:
    """
    Categorically encode (via indicator encoding) a `series` as a sparse
    matrix.

    Args:
        series: The iterable which should be sparse encoded.
        levels: The levels for which to generate indicator columns (if not
            specified, a column is generated for every level in `series`).
            Values of `series` that are not among `levels` are treated as
            null, and are encoded as rows of zeros.

    Returns:
        A tuple of form `(levels, sparse_matrix)`, where `levels` contains the
        levels that were used to generate indicator columns, and
        `sparse_matrix` is the sparse (column-major) matrix representation of
        the indicator encoding.
    """
    levels = list(levels) if levels is not None else None
    series = pandas.Categorical(series, levels)
    levels = list(series.categories) if levels is None else levels

    if not levels:
        return levels, spsparse.csc_matrix((series.shape[0], 0))

    codes = series.codes
    non_null_code_indices = codes != -1
    indices = numpy.arange(series.shape[0])[non_null_code_indices]
    codes = codes[non_null_code_indices]
    sparse_matrix = spsparse.csc_matrix(
        (
            numpy.ones(codes.shape[0], dtype=float),  # data
            (indices, codes),  # row  # column
        ),
        shape=(series.shape[0], len(levels)),
    )
    return levels, sparse_matrix
