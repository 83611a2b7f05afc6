"""
Binary persistence of sparse arrays.

Layout, all little-endian::

    default          itemsize bytes of the element dtype
    ndim             int32
    shape            ndim x int32
    row pointers     vec-of-vec<int32>, one inner vector per slice
    column indices   vec-of-vec<int32>
    values           vec-of-vec<element dtype>

A vec-of-vec is an int32 outer count followed, for each inner vector, by an
int32 element count and that many raw elements.

Loading never raises for I/O trouble: the caller gets a :class:`LoadStatus`
next to a degenerate all-ones-shaped array and has to check it.
"""

import enum
import logging
import os
from typing import Optional, Tuple, Union

import numpy as np

from . import backend_csr
from .config import parse_dtype
from .errors import InvalidDimensionsError, InvalidStateError

_logger = logging.getLogger(__name__)

__all__ = ["LoadStatus", "dump", "load"]

_INT = np.dtype("<i4")

PathLike = Union[str, os.PathLike]


class LoadStatus(enum.IntEnum):
    OK = 0
    OPEN_FAILED = 1
    BAD_STREAM = 2


class _BadStream(Exception):
    pass


def _disk_dtype(dtype: np.dtype) -> np.dtype:
    return np.dtype(dtype).newbyteorder("<")


# -------------------- writing --------------------

def _write_array(f, arr, dtype):
    f.write(np.ascontiguousarray(arr, dtype=dtype).tobytes())


def _write_vecs(f, vecs, dtype):
    _write_array(f, [len(vecs)], _INT)
    for vec in vecs:
        _write_array(f, [len(vec)], _INT)
        _write_array(f, vec, dtype)


def dump(array, path: PathLike):
    """
    Write ``array`` to ``path``, replacing any existing file.

    Args:
        array: a :class:`~sparsedim.SparseDim` (or subclass)
        path: destination file
    """
    array.check_state()
    store = array._store
    disk = _disk_dtype(array.dtype)
    with open(path, "wb") as f:
        _write_array(f, [array.default], disk)
        _write_array(f, [array.ndim], _INT)
        _write_array(f, array.shape, _INT)
        _write_vecs(f, store.indptr, _INT)
        _write_vecs(f, store.indices, _INT)
        _write_vecs(f, store.data, disk)
    array.logger.debug("dumped %r to %s", array, path)


# -------------------- reading --------------------

def _read_array(f, dtype, count):
    nbytes = dtype.itemsize * count
    buf = f.read(nbytes)
    if len(buf) != nbytes:
        raise _BadStream(f"expected {nbytes} bytes, got {len(buf)}")
    return np.frombuffer(buf, dtype=dtype)


def _read_int(f):
    return int(_read_array(f, _INT, 1)[0])


def _read_vecs(f, dtype, outer):
    count = _read_int(f)
    if count != outer:
        raise InvalidStateError(f"section holds {count} slices, shape needs {outer}")
    vecs = []
    for _ in range(count):
        n = _read_int(f)
        if n < 0:
            raise _BadStream(f"negative vector length {n}")
        vecs.append(_read_array(f, dtype, n))
    return vecs


def _read(f, ndim, dtype, cls):
    disk = _disk_dtype(dtype)
    default = _read_array(f, disk, 1)[0]
    count = _read_int(f)
    if ndim is not None and count != ndim:
        raise InvalidDimensionsError(
            f"File holds a {count}-dimensional array, {ndim} dimensions were requested"
        )
    if count < 0:
        raise _BadStream(f"negative dimension count {count}")
    shape = tuple(int(d) for d in _read_array(f, _INT, count))

    out = cls._make(shape, default, dtype)
    store = out._store
    rows, cols = shape[-2:]

    indptr = _read_vecs(f, _INT, store.nslices)
    indices = _read_vecs(f, _INT, store.nslices)
    data = _read_vecs(f, disk, store.nslices)

    for k in range(store.nslices):
        ptr = indptr[k]
        if ptr.size != rows + 1 or ptr[0] != 0 or np.any(np.diff(ptr) < 0):
            raise InvalidStateError(f"slice {k} has malformed row pointers")
        if ptr[-1] != indices[k].size or indices[k].size != data[k].size:
            raise InvalidStateError(f"slice {k} row pointers disagree with its entry count")
        if indices[k].size and (indices[k].min() < 0 or indices[k].max() >= cols):
            raise InvalidStateError(f"slice {k} has column indices outside [0, {cols})")
        for r in range(rows):
            if np.any(np.diff(indices[k][ptr[r]:ptr[r + 1]]) <= 0):
                raise InvalidStateError(f"slice {k} row {r} has unsorted or repeated columns")
        values = data[k].astype(out.dtype)
        if np.any(values == out.default):
            raise InvalidStateError(f"slice {k} stores the default value {out.default!r}")
        store.indptr[k] = ptr
        store.indices[k] = indices[k].astype(backend_csr._index_type)
        store.data[k] = values
    out.check_state()
    return out


def load(
    path: PathLike,
    ndim: Optional[int] = None,
    dtype=None,
    cls=None,
) -> Tuple[object, LoadStatus]:
    """
    Read an array written by :func:`dump`.

    Args:
        path: source file
        ndim: expected number of dimensions; the file's own count when None
        dtype: element dtype the file was written with
        cls: array class to build, :class:`~sparsedim.SparseDim` when None

    Returns:
        ``(array, status)``. When ``status`` is not ``LoadStatus.OK`` the
        array is an all-ones-shaped placeholder and must not be used.

    Raises:
        InvalidDimensionsError: if the file's dimension count differs from ``ndim``
        InvalidStateError: if the sections disagree with the stored shape
    """
    if cls is None:
        from .sparse_dim import SparseDim as cls
    dtype = parse_dtype(dtype)

    try:
        f = open(path, "rb")
    except OSError as e:
        _logger.warning("cannot open %s: %s", path, e)
        return _degenerate(cls, ndim, dtype), LoadStatus.OPEN_FAILED

    with f:
        try:
            out = _read(f, ndim, dtype, cls)
        except (_BadStream, OSError) as e:
            _logger.warning("bad stream while reading %s: %s", path, e)
            return _degenerate(cls, ndim, dtype), LoadStatus.BAD_STREAM
    out.logger.debug("loaded %r from %s", out, path)
    return out, LoadStatus.OK


def _degenerate(cls, ndim, dtype):
    return cls._make((1,) * max(ndim if ndim is not None else 2, 2), 0, dtype)
