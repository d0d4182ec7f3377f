from __future__ import annotations

import inspect
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, Hashable, Optional, Sequence, Tuple, Union

import numpy
from interface_meta import InterfaceMeta

from catcode.errors import (
    BaseLevelNotFoundError,
    LevelSetMismatchError,
    LevelTypeMismatchError,
    MatrixSizeError,
    UninstantiatedConfigError,
)
from catcode.utils.levels import infer_level_type, normalize_levels
from catcode.utils.sentinels import UNSET, UnsetType


class Contrasts(metaclass=InterfaceMeta):
    """
    The base class for all contrast codings.

    A `Contrasts` instance describes how the levels of a categorical variable
    should be coded into model matrix columns. Instances optionally carry the
    `levels` to generate columns for, and the `base` (reference) level. If not
    specified, these are taken from the data when the contrasts are built into
    a `ContrastsMatrix`. Instances are immutable.

    Subclasses must implement `_get_coding_matrix`, and may override
    `get_term_names` if columns should not be named after the non-base
    levels.
    """

    INTERFACE_RAISE_ON_VIOLATION = True

    FACTOR_FORMAT = "{name}[{field}]"

    base: Union[Hashable, UnsetType] = UNSET
    levels: Union[Sequence[Hashable], UnsetType] = UNSET

    def __post_init__(self) -> None:
        if self.levels is not UNSET:
            object.__setattr__(
                self, "levels", normalize_levels(self.levels, source="configured")
            )

    def resolve_levels(self, levels: Sequence[Hashable]) -> Tuple[Hashable, ...]:
        """
        Resolve the levels to be coded given the levels present in the data.

        If levels were configured on this instance, they are used (in their
        configured order), but only if they are of the same type as, and
        exactly the same set as, the data levels. Extra configured levels
        would generate empty model matrix columns, and missing configured
        levels would leave data rows without an encoding.

        Args:
            levels: The ordered distinct levels present in the data.
        """
        levels = normalize_levels(levels)
        if self.levels is UNSET:
            return levels
        contrast_levels = self.levels

        if levels and contrast_levels:
            level_type = infer_level_type(levels)
            contrast_level_type = infer_level_type(contrast_levels)
            if level_type != contrast_level_type:
                raise LevelTypeMismatchError(
                    f"Mismatching level types: got `{level_type}` levels in the "
                    f"data, expected `{contrast_level_type}` based on the levels "
                    f"of `{type(self).__name__}`."
                )

        level_set, contrast_level_set = set(levels), set(contrast_levels)
        mismatched_levels = [
            *(level for level in contrast_levels if level not in level_set),
            *(level for level in levels if level not in contrast_level_set),
        ]
        if mismatched_levels:
            raise LevelSetMismatchError(
                f"Contrasts levels not found in data or vice-versa: {mismatched_levels}."
                f"\n  Data levels: {list(levels)}."
                f"\n  Contrast levels: {list(contrast_levels)}."
            )
        return contrast_levels

    def find_base_index(self, levels: Sequence[Hashable]) -> Optional[int]:
        """
        The (zero-based) index of the base level in `levels`. Defaults to the
        first level when no base has been nominated.
        """
        if self.base is UNSET:
            return 0
        try:
            return list(levels).index(self.base)
        except ValueError as e:
            raise BaseLevelNotFoundError(
                f"Base level `{repr(self.base)}` for `{type(self).__name__}` is not "
                f"among the levels {list(levels)}."
            ) from e

    def get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        """
        Generate the coding matrix; i.e. the matrix with rows corresponding to
        the levels, and columns representing the encoding to use for the
        corresponding model matrix column. The returned array is read-only.

        Args:
            base_index: The index of the base level.
            n: The number of levels being coded.
        """
        matrix = numpy.array(self._get_coding_matrix(base_index, n), dtype=float)
        matrix.setflags(write=False)
        return matrix

    @abstractmethod
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        """
        Subclasses must override this method to implement the generation of the
        coding matrix.

        Args:
            base_index: The index of the base level.
            n: The number of levels being coded.
        """

    def get_term_names(
        self, levels: Sequence[Hashable], base_index: Optional[int]
    ) -> Tuple[Hashable, ...]:
        """
        Generate the names for the columns of the coding matrix. By default,
        these are the levels with the base level removed.

        Args:
            levels: The resolved levels being coded.
            base_index: The index of the base level.
        """
        return tuple(level for i, level in enumerate(levels) if i != base_index)


def _drop_column(matrix: numpy.ndarray, index: Optional[int]) -> numpy.ndarray:
    return matrix[:, [i for i in range(matrix.shape[1]) if i != index]]


def check_contrasts_size(matrix: numpy.ndarray, n: int) -> None:
    expected = (n, n - 1)
    if matrix.shape != expected:
        raise MatrixSizeError(
            f"Contrasts matrix has the wrong size for {n} levels. Expected "
            f"{expected}, got {matrix.shape}."
        )


@dataclass(frozen=True)
class DummyContrasts(Contrasts):
    """
    Dummy (aka. treatment) coding.

    Each non-base level is coded as a 0-1 indicator column. In a regression
    model with an intercept, the intercept is the mean of the dependent
    variable for the base level, and each coefficient is the difference
    between the mean for a level and the mean for the base level. If not
    specified, the base level is taken to be the first level.
    """

    FACTOR_FORMAT = "{name}[T.{field}]"

    base: Hashable = UNSET
    levels: Union[Sequence[Hashable], UnsetType] = UNSET

    @Contrasts.override
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        return _drop_column(numpy.eye(n), base_index)


@dataclass(frozen=True)
class EffectsContrasts(Contrasts):
    """
    Effects (aka. sum or deviation) coding.

    Like dummy coding, but the base level is coded as -1 in every column. When
    all levels are equally frequent the generated columns have mean zero, and
    the intercept of a regression model is the grand mean. Note that R and
    SPSS default to using the last level as the base; here the first level is
    used unless otherwise specified.
    """

    FACTOR_FORMAT = "{name}[S.{field}]"

    base: Hashable = UNSET
    levels: Union[Sequence[Hashable], UnsetType] = UNSET

    @Contrasts.override
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        contr = _drop_column(numpy.eye(n), base_index)
        contr[base_index, :] = -1
        return contr


@dataclass(frozen=True)
class HelmertContrasts(Contrasts):
    """
    Helmert coding.

    Each non-base level is coded as the difference from the average of the
    levels before it: the column for the (i+1)-th level has -1 for each of the
    i levels below, i for the level itself, and 0 above. The base level is
    always coded as -1 in every column. When all levels are equally frequent,
    the generated columns are mean-centered and orthogonal.
    """

    FACTOR_FORMAT = "{name}[H.{field}]"

    base: Hashable = UNSET
    levels: Union[Sequence[Hashable], UnsetType] = UNSET

    @Contrasts.override
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        contr = numpy.zeros((n, n - 1))
        for i in range(n - 1):
            contr[: i + 1, i] = -1
            contr[i + 1, i] = i + 1

        # Move the all -1 row (currently first) to the base level's position.
        order = [*range(1, base_index + 1), 0, *range(base_index + 1, n)]
        return contr[order, :]


@dataclass(frozen=True)
class FullDummyContrasts(Contrasts):
    """
    Full dummy coding.

    Generates one indicator column for every level, __including__ the base
    level, so there is no base level. This is used when a categorical term is
    not redundant with lower-order terms (e.g. in a model without an
    intercept), in which case all levels can be coded without making the model
    matrix rank-deficient.
    """

    @Contrasts.override
    def find_base_index(self, levels: Sequence[Hashable]) -> Optional[int]:
        return None

    @Contrasts.override
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        return numpy.eye(n)

    @Contrasts.override
    def get_term_names(
        self, levels: Sequence[Hashable], base_index: Optional[int]
    ) -> Tuple[Hashable, ...]:
        return tuple(levels)


@dataclass(frozen=True, init=False, eq=False)
class CustomContrasts(Contrasts):
    """
    Handle the custom contrast case when users pass in hand-coded contrast
    matrices. For `k` levels, the matrix must be `k` by `k-1`, mapping the
    levels onto model matrix columns. If `levels` are provided, the size of the
    matrix is checked immediately; otherwise it is checked once the levels are
    known.
    """

    matrix: numpy.ndarray
    base: Hashable = UNSET
    levels: Union[Sequence[Hashable], UnsetType] = UNSET

    def __init__(
        self,
        matrix: Any,
        base: Hashable = UNSET,
        levels: Union[Sequence[Hashable], UnsetType] = UNSET,
    ):
        matrix = numpy.array(matrix, dtype=float)
        matrix.setflags(write=False)
        object.__setattr__(self, "matrix", matrix)
        object.__setattr__(self, "base", base)
        object.__setattr__(self, "levels", levels)
        self.__post_init__()

        if self.levels is not UNSET:
            check_contrasts_size(self.matrix, len(self.levels))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CustomContrasts):
            return NotImplemented
        return (
            numpy.array_equal(self.matrix, other.matrix)
            and self.base == other.base
            and self.levels == other.levels
        )

    @Contrasts.override
    def _get_coding_matrix(self, base_index: Optional[int], n: int) -> numpy.ndarray:
        check_contrasts_size(self.matrix, n)
        return self.matrix


def as_contrasts(contrasts: Any) -> Contrasts:
    """
    Coerce `contrasts` to a `Contrasts` instance. Raw matrices are wrapped in
    `CustomContrasts`; `Contrasts` classes are rejected, since their settings
    would otherwise be silently defaulted.
    """
    if inspect.isclass(contrasts) and issubclass(contrasts, Contrasts):
        raise UninstantiatedConfigError(
            f"Contrasts types must be instantiated (use `{contrasts.__name__}()` "
            f"instead of `{contrasts.__name__}`)."
        )
    if isinstance(contrasts, Contrasts):
        return contrasts
    if isinstance(contrasts, (numpy.ndarray, list, tuple)):
        return CustomContrasts(contrasts)
    raise TypeError(
        f"Cannot interpret an object of type `{type(contrasts).__name__}` as "
        "contrasts."
    )


class ContrastsRegistry(type):
    """
    A namespace of the available contrast codings, exposed as `contr`.
    """

    dummy = DummyContrasts
    treatment = DummyContrasts
    effects = EffectsContrasts
    sum = EffectsContrasts
    helmert = HelmertContrasts
    full_dummy = FullDummyContrasts
    custom = CustomContrasts
