"""
Unit tests for coordinate ranges and mixed-radix index helpers
"""

import pytest

from sparsedim import InvalidDimensionsError, MDRange, mdrange, ravel_index, unravel_index


class TestMDRange:
    """Test lexicographic coordinate iteration"""

    def test_row_major_order(self):
        """Last axis varies fastest"""
        assert list(MDRange((2, 3))) == [
            (0, 0), (0, 1), (0, 2),
            (1, 0), (1, 1), (1, 2),
        ]

    def test_explicit_start(self):
        """Start bound is inclusive, end bound exclusive"""
        assert list(mdrange((3, 3), (1, 2))) == [(1, 2), (2, 2)]

    def test_len_and_shape(self):
        r = MDRange((4, 5, 6), (1, 0, 2))
        assert r.shape == (3, 5, 4)
        assert len(r) == 60
        assert len(list(r)) == 60

    def test_nested_traversal(self):
        """Two traversals of the same range do not share a cursor"""
        r = MDRange((2, 2))
        pairs = [(x, y) for x in r for y in r]
        assert len(pairs) == 16
        assert pairs[0] == ((0, 0), (0, 0))
        assert pairs[-1] == ((1, 1), (1, 1))

    def test_repeated_iteration(self):
        r = MDRange((2, 3, 2))
        assert list(r) == list(r)

    def test_contains(self):
        r = MDRange((3, 3), (1, 1))
        assert (1, 2) in r
        assert (0, 2) not in r
        assert (1, 1, 1) not in r

    def test_empty_axis_rejected(self):
        with pytest.raises(InvalidDimensionsError):
            MDRange((3, 0))
        with pytest.raises(InvalidDimensionsError):
            MDRange((3, 3), (1, 3))

    def test_mismatched_bounds_rejected(self):
        with pytest.raises(InvalidDimensionsError):
            MDRange((3, 3), (0,))

    def test_zero_axes(self):
        """A range over no axes holds exactly the empty coordinate"""
        assert list(MDRange(())) == [()]


class TestMixedRadix:
    """Test folding leading coordinates into slice indices"""

    def test_ravel(self):
        assert ravel_index((1, 2, 3), (2, 3, 4)) == 23
        assert ravel_index((), ()) == 0

    def test_unravel(self):
        assert unravel_index(23, (2, 3, 4)) == (1, 2, 3)
        assert unravel_index(0, ()) == ()

    def test_ravel_follows_iteration_order(self):
        """Linear indices count up in row-major order"""
        dims = (3, 1, 4, 2)
        for i, coord in enumerate(MDRange(dims)):
            assert ravel_index(coord, dims) == i
            assert unravel_index(i, dims) == coord
