"""Sparse N-dimensional arrays stored as per-slice CSR pages."""

__version__ = "0.1.0"

from .config import config
from .errors import (
    InvalidCoordinatesError,
    InvalidDimensionsError,
    InvalidStateError,
    SparseDimError,
)
from .io import LoadStatus, dump, load
from .mdrange import MDRange, mdrange, ravel_index, unravel_index
from .multi_dim import (
    MultiDim,
    create_random_sparse,
    sparse_add,
    sparse_div_scalar,
    sparse_mod_scalar,
    sparse_mul_scalar,
    sparse_subtract,
    sparse_transform,
)
from .sparse_dim import SparseDim, render, sparse_equal
from .sparse_matrix import SparseMatrix
