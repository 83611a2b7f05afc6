"""
N-dimensional sparse array storage.

Every coordinate is split into a slice index (all leading dimensions folded
into one integer), a row (``dims[-2]``) and a column (``dims[-1]``). Each
slice is one CSR page, so an N-d array is an arena of 2D CSR triples.
Only values different from the array's default are stored.
"""

import logging
import operator
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

from . import backend_csr
from .config import config, parse_dtype
from .errors import InvalidCoordinatesError, InvalidDimensionsError
from .mdrange import MDRange, prod, ravel_index, unravel_index

_logger = logging.getLogger(__name__)

__all__ = ["SparseDim", "render", "sparse_equal"]


class SparseDim:
    """
    Sparse N-dimensional array in extended CSR layout.

    Attributes:
        shape: tuple of N >= 2 positive dimension sizes
        dtype: numpy dtype of the elements
        default: value held by every coordinate that is not stored
        nnz: number of stored entries
    """

    def __init__(
        self,
        shape: Sequence[int],
        default=0,
        dtype=None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Create an empty array where every coordinate holds ``default``.

        Args:
            shape: dimension sizes, at least two of them, each >= 1
            default: implicit value of unstored coordinates
            dtype: integer or float numpy dtype, ``array.dtype`` from the
                config when omitted
            logger: logger receiving debug records for this instance

        Raises:
            InvalidDimensionsError: on fewer than two dimensions or a
                dimension smaller than 1
            TypeError: on an unsupported dtype or a default that does not fit it
        """
        shape = tuple(int(d) for d in shape)
        if len(shape) < 2:
            raise InvalidDimensionsError(shape, "at least 2 dimensions are required")
        for axis, d in enumerate(shape):
            if d < 1:
                raise InvalidDimensionsError(shape, f"axis {axis} has size {d}")

        self._shape = shape
        self._dtype = parse_dtype(dtype)
        self._logger = logger if logger is not None else _logger
        self._default = self._cast(default)
        self._store = backend_csr.CSRSlices(prod(shape[:-2]), shape[-2], self._dtype)

    @classmethod
    def _make(cls, shape, default, dtype, logger=None) -> "SparseDim":
        """Build an instance of ``cls`` without going through its own ``__init__``."""
        array = cls.__new__(cls)
        SparseDim.__init__(array, shape, default, dtype, logger)
        return array

    # -------------------- accessors --------------------

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def ndim(self) -> int:
        return len(self._shape)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def default(self):
        return self._default

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def size(self) -> int:
        return prod(self._shape)

    @property
    def slice_count(self) -> int:
        """Number of 2D slices, the product of all but the last two dimensions."""
        return self._store.nslices

    @property
    def nnz(self) -> int:
        return self._store.nnz

    @property
    def density(self) -> float:
        return self.nnz / self.size

    def slice_nnz(self, k: int) -> int:
        """Number of stored entries in slice ``k``."""
        if not 0 <= k < self._store.nslices:
            raise InvalidCoordinatesError((k,), (self._store.nslices,))
        return int(self._store.indptr[k, -1])

    def check_state(self):
        backend_csr.check_state(self._store)

    # -------------------- element access --------------------

    def _cast(self, value):
        cast = self._dtype.type(value)
        if self._dtype.kind in "iu" and cast != value:
            raise TypeError(f"{value!r} cannot be stored as {self._dtype} without loss")
        return cast

    def _resolve(self, coord) -> Tuple[int, int, int]:
        coord = tuple(coord)
        if len(coord) != len(self._shape):
            raise InvalidCoordinatesError(
                f"Coordinate {coord!r} has {len(coord)} components, "
                f"shape {self._shape!r} has {len(self._shape)}"
            )
        try:
            coord = tuple(operator.index(c) for c in coord)
        except TypeError:
            raise InvalidCoordinatesError(f"Coordinate {coord!r} has non-integer components") from None
        for c, d in zip(coord, self._shape):
            if not 0 <= c < d:
                raise InvalidCoordinatesError(coord, self._shape)
        k = ravel_index(coord[:-2], self._shape[:-2])
        return k, coord[-2], coord[-1]

    def get(self, coord: Sequence[int]):
        """
        Return the value at ``coord``, or the default if nothing is stored there.

        The value is returned by copy.
        """
        k, row, col = self._resolve(coord)
        pos, found = backend_csr.find(self._store, k, row, col)
        if found:
            return self._store.data[k][pos]
        return self._default

    def set(self, value, coord: Sequence[int]):
        """
        Store ``value`` at ``coord``.

        Storing the default removes the entry, so the stored values never
        equal the default. Inserting or removing shifts the rest of the slice.
        """
        k, row, col = self._resolve(coord)
        value = self._cast(value)
        pos, found = backend_csr.find(self._store, k, row, col)

        if not found:
            if value == self._default:
                return
            self._logger.debug("insert %r at slice %d (%d, %d)", value, k, row, col)
            backend_csr.insert(self._store, k, row, pos, col, value)
        elif value == self._default:
            self._logger.debug("remove slice %d (%d, %d)", k, row, col)
            backend_csr.remove(self._store, k, row, pos)
        else:
            self._store.data[k][pos] = value

    def __getitem__(self, coord):
        return self.get(coord)

    def __setitem__(self, coord, value):
        self.set(value, coord)

    def items(self) -> Iterator[Tuple[Tuple[int, ...], object]]:
        """Yield ``(coord, value)`` for every stored entry in row-major order."""
        store = self._store
        lead = self._shape[:-2]
        for k in range(store.nslices):
            prefix = unravel_index(k, lead)
            cols = store.indices[k]
            vals = store.data[k]
            for row in range(store.rows):
                start, end = backend_csr.row_bounds(store, k, row)
                for pos in range(start, end):
                    yield prefix + (row, int(cols[pos])), vals[pos]

    # -------------------- copies & conversion --------------------

    def copy(self) -> "SparseDim":
        out = self._make(self._shape, self._default, self._dtype, self._logger)
        out._store = self._store.copy()
        return out

    def __copy__(self):
        return self.copy()

    def __deepcopy__(self, memo):
        return self.copy()

    def to_dense(self) -> np.ndarray:
        dense = backend_csr.to_dense(self._store, self._shape[-1], self._default)
        return dense.reshape(self._shape)

    @classmethod
    def from_dense(cls, arr, default=0, dtype=None, logger=None) -> "SparseDim":
        """
        Create a sparse array from a dense numpy array.

        Args:
            arr: array-like with at least 2 dimensions
            default: value that is left out of storage
            dtype: element dtype, ``arr``'s own dtype when omitted

        Returns:
            Sparse array of ``cls`` holding the same values
        """
        arr = np.asarray(arr)
        if dtype is None:
            dtype = arr.dtype
        out = cls._make(arr.shape, default, dtype, logger)
        pages = arr.reshape((out.slice_count,) + arr.shape[-2:])
        backend_csr.from_dense(pages, out._default, out._store)
        return out

    # -------------------- persistence --------------------

    def dump(self, path):
        """Write this array to ``path`` in the binary layout of :mod:`sparsedim.io`."""
        from .io import dump

        dump(self, path)

    @classmethod
    def load(cls, path, ndim=None, dtype=None):
        """
        Read an array of ``cls`` written by :meth:`dump`.

        Returns:
            ``(array, status)``; see :func:`sparsedim.io.load`
        """
        from .io import load

        return load(path, ndim, dtype, cls=cls)

    # -------------------- comparison & display --------------------

    def __eq__(self, other):
        if not isinstance(other, SparseDim):
            return NotImplemented
        return sparse_equal(self, other)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(shape={self._shape}, dtype={self._dtype}, "
            f"default={self._default}, nnz={self.nnz})"
        )

    def __str__(self) -> str:
        return render(self)


def sparse_equal(a: SparseDim, b: SparseDim) -> bool:
    """
    Elementwise equality of two sparse arrays.

    With equal defaults the CSR layout of equal arrays is identical, so the
    storage is compared directly. Otherwise every coordinate is resolved and
    compared.
    """
    if a.shape != b.shape:
        return False
    if a.default == b.default:
        a.check_state()
        b.check_state()
        return backend_csr.equal(a._store, b._store)

    a.logger.debug("defaults differ (%r, %r), comparing all coordinates", a.default, b.default)
    for coord in MDRange(a.shape):
        if a.get(coord) != b.get(coord):
            return False
    return True


def render(array: SparseDim) -> str:
    """Text rendering of every 2D slice, each headed by its leading coordinate."""
    sep = config.get("render.separator")
    rows, cols = array.shape[-2:]
    lines = []
    for prefix in MDRange(array.shape[:-2]):
        if prefix:
            lines.append("[" + ", ".join(str(i) for i in prefix) + ", :, :]")
        for r in range(rows):
            lines.append(sep.join(str(array.get(prefix + (r, c))) for c in range(cols)))
    return "\n".join(lines)
