from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Hashable, List, Optional, Sequence, Tuple, Union

import numpy
import pandas
import scipy.sparse as spsparse

from catcode.contrasts import Contrasts, FullDummyContrasts, as_contrasts
from catcode.errors import (
    DataMismatchWarning,
    EmptyLevelSetError,
    LevelSubsetError,
    MatrixSizeError,
    SingleLevelError,
)
from catcode.utils.levels import get_levels, normalize_levels
from catcode.utils.sparse import categorical_encode_series_to_sparse_csc_matrix


@dataclass(frozen=True, eq=False)
class ContrastsMatrix:
    """
    The result of combining a `Contrasts` instance with the levels of a
    categorical variable: a validated contrasts matrix that maps the full-rank
    indicator encoding of the levels onto model matrix columns.

    If `X*` is the indicator matrix of a categorical variable (with
    `X*[i, j] == 1` if the i-th value is the j-th level, and zero otherwise),
    the model matrix columns generated for the variable are `X* @ matrix`.

    Instances are immutable, and should be generated using `build` (or
    `ContrastsMatrix.from_data`) rather than constructed directly.

    Attributes:
        matrix: The (read-only) contrasts matrix, with one row per level and
            one column per generated model matrix column.
        term_names: The names of the generated columns, aligned with the
            columns of `matrix`.
        levels: The levels being coded, in the order of the rows of `matrix`.
        contrasts: The `Contrasts` instance from which this matrix was built.
    """

    matrix: numpy.ndarray
    term_names: Tuple[Hashable, ...]
    levels: Tuple[Hashable, ...]
    contrasts: Contrasts

    def __post_init__(self) -> None:
        matrix = numpy.array(self.matrix, dtype=float)
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "term_names", tuple(self.term_names))
        object.__setattr__(self, "levels", normalize_levels(self.levels))

        check_level_count(self.levels)
        expected = (len(self.levels), len(self.term_names))
        if matrix.shape != expected:
            raise MatrixSizeError(
                f"Contrasts matrix is not aligned with its levels and term names. "
                f"Expected {expected}, got {matrix.shape}."
            )

    @classmethod
    def from_data(cls, contrasts: Any, data: Any) -> ContrastsMatrix:
        """
        Build a `ContrastsMatrix` for the levels present in `data`.

        Args:
            contrasts: The `Contrasts` instance (or raw contrasts matrix) to
                use.
            data: The categorical data from which to extract levels (see
                `catcode.utils.levels.get_levels`).
        """
        return build(contrasts, get_levels(data))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ContrastsMatrix):
            return NotImplemented
        return (
            numpy.array_equal(self.matrix, other.matrix)
            and self.term_names == other.term_names
            and self.levels == other.levels
            and self.contrasts == other.contrasts
        )

    @property
    def is_full_rank(self) -> bool:
        """
        Whether every level gets its own column (and so the encoding spans the
        intercept).
        """
        return self.matrix.shape[0] == self.matrix.shape[1]

    def revalidate(self, levels: Sequence[Hashable]) -> ContrastsMatrix:
        """
        Check that `levels` (from new data) can be coded by this instance. See
        `catcode.contrasts_matrix.revalidate` for more details.
        """
        return revalidate(self, levels)

    def to_full_rank(self) -> ContrastsMatrix:
        """
        Promote this instance to the full-rank (full dummy) coding of the same
        levels.
        """
        return to_full_rank(self)

    def get_column_names(self, name: Hashable) -> List[str]:
        """
        Format the term names into model matrix column names for a variable,
        using the `FACTOR_FORMAT` of the originating contrasts (e.g.
        "x[T.b]" for dummy coding).

        Args:
            name: The name of the categorical variable.
        """
        return [
            self.contrasts.FACTOR_FORMAT.format(name=name, field=field)
            for field in self.term_names
        ]

    def get_coding_matrix(
        self, sparse: bool = False
    ) -> Union[pandas.DataFrame, spsparse.spmatrix]:
        """
        The contrasts matrix, labelled by levels (rows) and term names
        (columns).

        Args:
            sparse: Whether to output an (unlabelled) sparse matrix instead.
        """
        if sparse:
            return spsparse.csc_matrix(self.matrix)
        return pandas.DataFrame(
            self.matrix.copy(),
            index=pandas.Index(self.levels, tupleize_cols=False),
            columns=pandas.Index(self.term_names, tupleize_cols=False),
        )

    def get_coefficient_matrix(self) -> pandas.DataFrame:
        """
        Generate the coefficient matrix; i.e. the matrix with rows representing
        the contrasts effectively computed during a regression, with columns
        indicating the weights given to each level. For reduced-rank codings
        an intercept column is included in the inversion, and the first row
        describes the intercept. This is primarily used for introspection.
        """
        coding_matrix = self.matrix
        row_names: List[Hashable] = list(self.term_names)
        if not self.is_full_rank:
            coding_matrix = numpy.hstack(
                [numpy.ones((len(self.levels), 1)), coding_matrix]
            )
            row_names.insert(0, "intercept")
        return pandas.DataFrame(
            numpy.linalg.inv(coding_matrix),
            index=pandas.Index(row_names, tupleize_cols=False),
            columns=pandas.Index(self.levels, tupleize_cols=False),
        )

    def encode(
        self,
        data: Any,
        output: str = "pandas",
        name: Optional[Hashable] = None,
    ) -> Union[pandas.DataFrame, numpy.ndarray, spsparse.spmatrix]:
        """
        Encode a categorical dataset using this contrasts matrix; i.e. compute
        the model matrix columns `X* @ matrix` for `data`.

        Args:
            data: The categorical data array/series to be encoded. It must not
                have levels that are not among `levels`.
            output: The type of data to output. Must be one of "pandas",
                "numpy", or "sparse".
            name: If provided (and `output` is "pandas"), the name of the
                variable used to format the column names (see
                `get_column_names`). Otherwise the term names are used.
        """
        if output not in ("pandas", "numpy", "sparse"):
            raise ValueError(f"Unknown output type `{repr(output)}`.")

        self.revalidate(get_levels(data))
        categorical = pandas.Categorical(data, categories=list(self.levels))
        if (categorical.codes == -1).any():
            warnings.warn(
                "Data has null values, which are being encoded as rows of zeros.",
                DataMismatchWarning,
            )

        if output == "sparse":
            _, dummies = categorical_encode_series_to_sparse_csc_matrix(
                categorical, levels=self.levels
            )
            return spsparse.csc_matrix(dummies @ spsparse.csc_matrix(self.matrix))

        dummies = pandas.get_dummies(categorical, dtype=float).values
        encoded = dummies @ self.matrix
        if output == "numpy":
            return encoded
        return pandas.DataFrame(
            encoded,
            columns=(
                self.get_column_names(name)
                if name is not None
                else pandas.Index(self.term_names, tupleize_cols=False)
            ),
            index=data.index if isinstance(data, pandas.Series) else None,
        )


def check_level_count(levels: Sequence[Hashable]) -> None:
    if len(levels) == 0:
        raise EmptyLevelSetError(
            "Empty set of levels found (need at least two to compute contrasts)."
        )
    if len(levels) == 1:
        raise SingleLevelError(
            f"Only one level found: {repr(levels[0])} (need at least two to "
            "compute contrasts)."
        )


def build(contrasts: Any, levels: Sequence[Hashable]) -> ContrastsMatrix:
    """
    Compute the contrasts matrix for a categorical variable.

    If levels are specified on `contrasts`, those are used (after checking
    that they match the data levels exactly), and likewise for the base level
    (which defaults to the first level).

    Args:
        contrasts: The `Contrasts` instance (or raw contrasts matrix) to use.
        levels: The ordered distinct levels observed in the data.

    Returns:
        The validated `ContrastsMatrix`.
    """
    contrasts = as_contrasts(contrasts)
    levels = contrasts.resolve_levels(levels)
    check_level_count(levels)
    base_index = contrasts.find_base_index(levels)
    return ContrastsMatrix(
        matrix=contrasts.get_coding_matrix(base_index, len(levels)),
        term_names=contrasts.get_term_names(levels, base_index),
        levels=levels,
        contrasts=contrasts,
    )


def revalidate(
    contrasts_matrix: ContrastsMatrix, levels: Sequence[Hashable]
) -> ContrastsMatrix:
    """
    Check that all of the levels present in new data are present in an
    existing `ContrastsMatrix`, returning it unchanged if so.

    Unlike `build`, which requires the levels to match exactly, this allows
    new data (e.g. data being scored by a fitted model) to contain only a
    subset of the original levels. The contrasts are never recomputed, so the
    encoding of new data is consistent with the original encoding.

    Args:
        contrasts_matrix: The existing `ContrastsMatrix`.
        levels: The levels present in the new data.
    """
    levels = list(levels)
    known_levels = set(contrasts_matrix.levels)
    unknown_levels = [level for level in levels if level not in known_levels]
    if unknown_levels:
        raise LevelSubsetError(
            "There are levels in data that are not in the contrasts matrix: "
            f"{unknown_levels}."
            f"\n  Data levels: {list(levels)}."
            f"\n  Contrast levels: {list(contrasts_matrix.levels)}."
        )
    return contrasts_matrix


def to_full_rank(contrasts_matrix: ContrastsMatrix) -> ContrastsMatrix:
    """
    Promote a `ContrastsMatrix` to the full dummy coding of its levels,
    independent of the original coding and base level.
    """
    return build(FullDummyContrasts(), contrasts_matrix.levels)
