import dataclasses

import numpy
import pytest

from catcode.contrasts import ContrastsRegistry as contr
from catcode.contrasts import (
    CustomContrasts,
    DummyContrasts,
    EffectsContrasts,
    FullDummyContrasts,
    HelmertContrasts,
    as_contrasts,
)
from catcode.errors import (
    BaseLevelNotFoundError,
    DuplicateLevelError,
    LevelSetMismatchError,
    LevelTypeMismatchError,
    MatrixSizeError,
    UninstantiatedConfigError,
)
from catcode.utils.sentinels import UNSET


class TestContrasts:
    def test_defaults(self):
        contrasts = DummyContrasts()
        assert contrasts.base is UNSET
        assert contrasts.levels is UNSET
        assert FullDummyContrasts().base is UNSET
        assert FullDummyContrasts().levels is UNSET

    def test_levels_are_normalized(self):
        assert DummyContrasts(levels=["a", "b"]).levels == ("a", "b")
        assert DummyContrasts(levels=["a", "b"]) == DummyContrasts(levels=("a", "b"))

        with pytest.raises(DuplicateLevelError, match=r"repeat: \['a'\]"):
            DummyContrasts(levels=["a", "b", "a"])

    def test_immutable(self):
        contrasts = EffectsContrasts(base="b")
        with pytest.raises(dataclasses.FrozenInstanceError):
            contrasts.base = "a"
        with pytest.raises(dataclasses.FrozenInstanceError):
            CustomContrasts([[1], [-1]]).levels = ("a", "b")

    def test_equality(self):
        assert HelmertContrasts(base=2) == HelmertContrasts(base=2)
        assert HelmertContrasts(base=2) != HelmertContrasts(base=1)
        assert DummyContrasts() != EffectsContrasts()

    def test_resolve_levels(self):
        assert DummyContrasts().resolve_levels(["a", "b"]) == ("a", "b")
        assert DummyContrasts(levels=["c", "a", "b"]).resolve_levels(
            ["a", "b", "c"]
        ) == ("c", "a", "b")

        with pytest.raises(
            LevelSetMismatchError,
            match=r"not found in data or vice-versa: \['c'\]",
        ):
            DummyContrasts(levels=["a", "b", "c"]).resolve_levels(["a", "b"])

        with pytest.raises(LevelSetMismatchError, match=r"vice-versa: \['d'\]"):
            DummyContrasts(levels=["a", "b"]).resolve_levels(["a", "b", "d"])

        with pytest.raises(LevelTypeMismatchError, match=r"got `string` levels"):
            DummyContrasts(levels=[1, 2]).resolve_levels(["1", "2"])

        # `1 == 1.0`, so only the type check can catch this
        with pytest.raises(LevelTypeMismatchError):
            DummyContrasts(levels=[1, 2]).resolve_levels([1.0, 2.0])

    def test_find_base_index(self):
        assert DummyContrasts().find_base_index(["a", "b", "c"]) == 0
        assert DummyContrasts(base="c").find_base_index(["a", "b", "c"]) == 2
        # Falsy base levels are still honoured
        assert DummyContrasts(base=0).find_base_index([1, 0]) == 1
        assert FullDummyContrasts().find_base_index(["a", "b"]) is None

        with pytest.raises(
            BaseLevelNotFoundError, match=r"Base level `'z'` for `DummyContrasts`"
        ):
            DummyContrasts(base="z").find_base_index(["a", "b", "c"])

    def test_term_names(self):
        assert DummyContrasts().get_term_names(["a", "b", "c"], 0) == ("b", "c")
        assert EffectsContrasts().get_term_names(["a", "b", "c"], 1) == ("a", "c")
        assert FullDummyContrasts().get_term_names(["a", "b", "c"], None) == (
            "a",
            "b",
            "c",
        )

    def test_coding_matrix_is_read_only(self):
        matrix = DummyContrasts().get_coding_matrix(0, 3)
        assert matrix.dtype == numpy.float64
        with pytest.raises(ValueError):
            matrix[0, 0] = 2


class TestDummyContrasts:
    def test_coding_matrix(self):
        numpy.testing.assert_array_equal(
            DummyContrasts().get_coding_matrix(0, 3),
            numpy.array(
                [
                    [0, 0],
                    [1, 0],
                    [0, 1],
                ]
            ),
        )
        numpy.testing.assert_array_equal(
            DummyContrasts().get_coding_matrix(1, 3),
            numpy.array(
                [
                    [1, 0],
                    [0, 0],
                    [0, 1],
                ]
            ),
        )


class TestEffectsContrasts:
    def test_coding_matrix(self):
        numpy.testing.assert_array_equal(
            EffectsContrasts().get_coding_matrix(0, 3),
            numpy.array(
                [
                    [-1, -1],
                    [1, 0],
                    [0, 1],
                ]
            ),
        )
        numpy.testing.assert_array_equal(
            EffectsContrasts().get_coding_matrix(1, 3),
            numpy.array(
                [
                    [1, 0],
                    [-1, -1],
                    [0, 1],
                ]
            ),
        )


class TestHelmertContrasts:
    def test_coding_matrix(self):
        numpy.testing.assert_array_equal(
            HelmertContrasts().get_coding_matrix(0, 4),
            numpy.array(
                [
                    [-1, -1, -1],
                    [1, -1, -1],
                    [0, 2, -1],
                    [0, 0, 3],
                ]
            ),
        )
        numpy.testing.assert_array_equal(
            HelmertContrasts().get_coding_matrix(0, 2), numpy.array([[-1], [1]])
        )

    def test_base_row_is_moved(self):
        matrix = HelmertContrasts().get_coding_matrix(2, 4)
        numpy.testing.assert_array_equal(
            matrix,
            numpy.array(
                [
                    [1, -1, -1],
                    [0, 2, -1],
                    [-1, -1, -1],
                    [0, 0, 3],
                ]
            ),
        )
        numpy.testing.assert_array_equal(matrix.sum(axis=0), numpy.zeros(3))

        last = HelmertContrasts().get_coding_matrix(3, 4)
        numpy.testing.assert_array_equal(last[3], -numpy.ones(3))
        numpy.testing.assert_array_equal(last[:3], [[1, -1, -1], [0, 2, -1], [0, 0, 3]])


class TestFullDummyContrasts:
    def test_coding_matrix(self):
        numpy.testing.assert_array_equal(
            FullDummyContrasts().get_coding_matrix(None, 3), numpy.eye(3)
        )


class TestCustomContrasts:
    def test_constructor(self):
        contrasts = CustomContrasts([[1, 0], [0, 1], [-1, -1]])
        assert contrasts.matrix.dtype == numpy.float64
        assert not contrasts.matrix.flags.writeable
        assert contrasts.levels is UNSET

        CustomContrasts([[1, 0], [0, 1], [-1, -1]], levels=["a", "b", "c"])
        with pytest.raises(
            MatrixSizeError, match=r"Expected \(2, 1\), got \(3, 2\)"
        ):
            CustomContrasts([[1, 0], [0, 1], [-1, -1]], levels=["a", "b"])

    def test_coding_matrix(self):
        matrix = [[1, 0], [0, 1], [-1, -1]]
        contrasts = CustomContrasts(matrix, base="b")
        numpy.testing.assert_array_equal(contrasts.get_coding_matrix(1, 3), matrix)

        with pytest.raises(MatrixSizeError, match=r"wrong size for 4 levels"):
            contrasts.get_coding_matrix(0, 4)

    def test_equality(self):
        assert CustomContrasts([[1], [-1]]) == CustomContrasts(numpy.array([[1], [-1]]))
        assert CustomContrasts([[1], [-1]]) != CustomContrasts([[1], [1]])
        assert CustomContrasts([[1], [-1]]) != CustomContrasts([[1], [-1]], base="b")


def test_as_contrasts():
    contrasts = HelmertContrasts()
    assert as_contrasts(contrasts) is contrasts
    assert isinstance(as_contrasts(numpy.array([[1], [-1]])), CustomContrasts)
    assert isinstance(as_contrasts([[1], [-1]]), CustomContrasts)

    with pytest.raises(
        UninstantiatedConfigError, match=r"use `HelmertContrasts\(\)` instead"
    ):
        as_contrasts(HelmertContrasts)

    with pytest.raises(TypeError, match=r"object of type `dict`"):
        as_contrasts({"a": [1, -1]})


def test_registry():
    assert contr.treatment is DummyContrasts
    assert contr.dummy is DummyContrasts
    assert contr.sum is EffectsContrasts
    assert contr.effects is EffectsContrasts
    assert contr.helmert is HelmertContrasts
    assert contr.full_dummy is FullDummyContrasts
    assert contr.custom is CustomContrasts
