"""
Unit tests for the two-dimensional SparseMatrix wrapper
"""

import numpy as np
import pytest

from sparsedim import InvalidCoordinatesError, LoadStatus, MultiDim, SparseMatrix


def generate_int_matrix(rows, cols, seed):
    """Roughly 80% of the entries stay at the default 0, the rest hold 1..20"""
    rng = np.random.default_rng(seed)
    matrix = SparseMatrix(rows, cols)
    for i in range(rows):
        for j in range(cols):
            val = int(rng.integers(0, 101))
            if val > 20:
                val = 0
            matrix.set(val, i, j)
    return matrix


class TestAccess:
    """Test (row, col) access"""

    def test_shape(self):
        m = SparseMatrix(3, 4)
        assert m.shape == (3, 4)
        assert m.rows == 3
        assert m.cols == 4

    def test_row_col_access(self):
        m = SparseMatrix(3, 4, default=1)
        m.set(8, 2, 3)
        assert m.get(2, 3) == 8
        assert m.get((2, 3)) == 8
        assert m.get(0, 0) == 1

    def test_out_of_bounds(self):
        m = SparseMatrix(3, 4)
        with pytest.raises(InvalidCoordinatesError):
            m.get(3, 0)


class TestOperations:
    """The identities of the general array hold for matrices"""

    @pytest.fixture
    def pair(self):
        return generate_int_matrix(50, 51, seed=21), generate_int_matrix(50, 51, seed=22)

    def test_identities(self, pair):
        m1, m2 = pair
        assert m1 != m2
        assert (m1 + m2) == (m2 + m1)
        assert (m1 * 2) == (m1 + m1)
        assert (m1 + (m2 * -1)) == (m1 - m2)
        assert ((m1 - m2) * -1) == (m2 - m1)
        assert ((m1 * 5) / 5) == m1
        assert m2.transform(lambda v: v * 7) == m2 * 7
        assert m2.transform(lambda v: v % 2) == m2 % 2

    def test_results_stay_matrices(self, pair):
        m1, m2 = pair
        result = m1 + m2
        assert isinstance(result, SparseMatrix)
        assert result.get(0, 0) == m1.get(0, 0) + m2.get(0, 0)
        assert isinstance(m1 * 0, SparseMatrix)

    def test_matches_multidim(self, pair):
        m1, _ = pair
        as_multi = MultiDim.from_dense(m1.to_dense())
        assert as_multi == m1
        assert as_multi * 3 == m1 * 3


class TestPersistence:
    """Test dump/load of matrices"""

    def test_roundtrip(self, tmp_path):
        m1 = generate_int_matrix(50, 51, seed=23)
        m2 = generate_int_matrix(51, 50, seed=24)
        assert m1 != m2

        m1.dump(tmp_path / "test1.bin")
        m11, status = SparseMatrix.load(tmp_path / "test1.bin")
        assert status == LoadStatus.OK
        assert isinstance(m11, SparseMatrix)
        assert m11 == m1

        m2.dump(tmp_path / "test2.bin")
        m12, status = SparseMatrix.load(tmp_path / "test2.bin")
        assert m12 == m2
        assert m12.rows == 51

    def test_missing_file(self, tmp_path):
        m, status = SparseMatrix.load(tmp_path / "nope.bin")
        assert status == LoadStatus.OPEN_FAILED
        assert m.shape == (1, 1)
