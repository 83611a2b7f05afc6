"""
Elementwise arithmetic over sparse N-dimensional arrays.

Operators take a sparsity-aware path when they can: adding an array whose
default is zero only touches that array's stored entries, and multiplying by
zero drops every slice at once. Everything else walks the stored entries or,
when the defaults force it, every coordinate.
"""

import operator
from typing import Callable, Optional, Sequence

import numpy as np

from . import backend_csr
from .config import config, parse_dtype
from .errors import InvalidDimensionsError
from .mdrange import MDRange, prod
from .sparse_dim import SparseDim

__all__ = [
    "MultiDim",
    "create_random_sparse",
    "sparse_add",
    "sparse_div_scalar",
    "sparse_mod_scalar",
    "sparse_mul_scalar",
    "sparse_subtract",
    "sparse_transform",
]


class MultiDim(SparseDim):
    """
    Sparse N-dimensional array with arithmetic operators.

    ``a + b`` and ``a - b`` combine arrays of the same shape and dtype;
    ``a * s``, ``a / s`` and ``a % s`` apply a scalar to every element.
    """

    def __add__(self, other):
        if not isinstance(other, SparseDim):
            return NotImplemented
        return sparse_add(self, other)

    def __sub__(self, other):
        if not isinstance(other, SparseDim):
            return NotImplemented
        return sparse_subtract(self, other)

    def __mul__(self, other):
        if not np.isscalar(other):
            return NotImplemented
        return sparse_mul_scalar(self, other)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if not np.isscalar(other):
            return NotImplemented
        return sparse_div_scalar(self, other)

    def __mod__(self, other):
        if not np.isscalar(other):
            return NotImplemented
        return sparse_mod_scalar(self, other)

    def transform(self, fn: Callable, memoize: Optional[bool] = None) -> "MultiDim":
        return sparse_transform(self, fn, memoize)


# -------------------- helpers --------------------

def _result_cls(a):
    return type(a) if isinstance(a, MultiDim) else MultiDim


def _copy_as(a: SparseDim, default) -> MultiDim:
    """Copy ``a``'s storage into a new operator-capable array with ``default``."""
    out = _result_cls(a)._make(a.shape, default, a.dtype, a.logger)
    out._store = a._store.copy()
    return out


def _check_operands(a: SparseDim, b: SparseDim):
    if a.shape != b.shape:
        raise InvalidDimensionsError(
            b.shape, f"operand shape does not match {a.shape}"
        )
    if a.dtype != b.dtype:
        raise TypeError(f"dtype mismatch: {a.dtype} vs {b.dtype}")


def _all_finite(a: SparseDim) -> bool:
    if a.dtype.kind != "f":
        return True
    return bool(np.isfinite(a.default)) and all(np.isfinite(v).all() for v in a._store.data)


def _trunc_divide(x, s, dtype):
    """Division rounding toward zero for integers, true division for floats."""
    if dtype.kind == "f":
        return np.true_divide(x, s, dtype=dtype)
    if dtype.kind == "u":
        return np.asarray(x // s, dtype=dtype)
    q = np.abs(x) // np.abs(s)
    return np.where((x < 0) != (s < 0), -q, q).astype(dtype)


# -------------------- array (+) array --------------------

def _combine(a: SparseDim, b: SparseDim, op) -> MultiDim:
    _check_operands(a, b)
    default = a.dtype.type(op(a.default, b.default))

    if b.default == 0:
        # b only differs from the additive identity where it stores something
        a.logger.debug("%s: sparse-patch path over %d entries", op.__name__, b.nnz)
        out = _copy_as(a, default)
        for coord, val in b.items():
            out.set(op(out.get(coord), val), coord)
        return out

    a.logger.debug("%s: general path over %d coordinates", op.__name__, a.size)
    out = _result_cls(a)._make(a.shape, default, a.dtype, a.logger)
    for coord in MDRange(a.shape):
        val = op(a.get(coord), b.get(coord))
        if val != out.default:
            out.set(val, coord)
    return out


def sparse_add(a: SparseDim, b: SparseDim) -> MultiDim:
    """
    Elementwise sum of two arrays with the same shape and dtype.

    The result's default is ``a.default + b.default``.

    Raises:
        InvalidDimensionsError: if the shapes differ
    """
    return _combine(a, b, operator.add)


def sparse_subtract(a: SparseDim, b: SparseDim) -> MultiDim:
    """Elementwise difference ``a - b``; see :func:`sparse_add`."""
    return _combine(a, b, operator.sub)


# -------------------- array (*) scalar --------------------

def sparse_mul_scalar(a: SparseDim, scalar) -> MultiDim:
    """
    Multiply every element of ``a`` by ``scalar``.

    Multiplying by zero clears every slice without visiting its entries,
    unless a float array holds an infinity or NaN, which zero does not absorb.
    """
    s = a._cast(scalar)
    default = a.dtype.type(a.default * s)
    out = _copy_as(a, default)
    if s == 0 and _all_finite(a):
        a.logger.debug("multiply by zero: clearing %d slices", out.slice_count)
        backend_csr.clear(out._store)
    else:
        backend_csr.map_values(out._store, lambda vals: vals * s, out.default)
    return out


def sparse_div_scalar(a: SparseDim, scalar) -> MultiDim:
    """
    Divide every element of ``a`` by ``scalar``.

    Integer division truncates toward zero. Every stored entry is visited.

    Raises:
        ZeroDivisionError: if ``scalar`` is zero
    """
    s = a._cast(scalar)
    if s == 0:
        raise ZeroDivisionError("sparse array division by zero")
    default = a.dtype.type(_trunc_divide(a.default, s, a.dtype))
    out = _copy_as(a, default)
    backend_csr.map_values(out._store, lambda vals: _trunc_divide(vals, s, a.dtype), out.default)
    return out


def sparse_mod_scalar(a: SparseDim, scalar) -> MultiDim:
    """
    Remainder of every element of ``a`` by ``scalar``, carrying the sign of
    the element. Every stored entry is visited.

    Raises:
        ZeroDivisionError: if ``scalar`` is zero
    """
    s = a._cast(scalar)
    if s == 0:
        raise ZeroDivisionError("sparse array modulo by zero")
    default = a.dtype.type(np.fmod(a.default, s))
    out = _copy_as(a, default)
    backend_csr.map_values(out._store, lambda vals: np.fmod(vals, s), out.default)
    return out


# -------------------- unary transform --------------------

def sparse_transform(a: SparseDim, fn: Callable, memoize: Optional[bool] = None) -> MultiDim:
    """
    Apply ``fn`` to the default and to every stored value of ``a``.

    Args:
        a: input array
        fn: maps one element value to a new value of the same type
        memoize: compute ``fn`` once per distinct input value. Only valid
            for pure functions. Defaults to ``transform.memoize`` from the
            config.

    Returns:
        New array; entries mapped onto the new default are dropped.
    """
    if memoize is None:
        memoize = config.get("transform.memoize")

    calls = hits = 0
    cache = {}

    def apply(v):
        nonlocal calls, hits
        if memoize and v in cache:
            hits += 1
            return cache[v]
        calls += 1
        result = a._cast(fn(v))
        if memoize:
            cache[v] = result
        return result

    default = apply(a.default.item())
    out = _copy_as(a, default)
    backend_csr.map_values(
        out._store,
        lambda vals: np.array([apply(v) for v in vals.tolist()], dtype=a.dtype),
        out.default,
    )
    a.logger.debug(
        "transform: %d calls, %d memo hits for %d stored values", calls, hits, a.nnz
    )
    return out


# -------------------- construction helpers --------------------

def create_random_sparse(
    shape: Sequence[int],
    density: float = 0.2,
    seed: Optional[int] = None,
    low: int = 1,
    high: int = 21,
    dtype=None,
) -> MultiDim:
    """
    Create a random array with default 0.

    Args:
        shape: array shape
        density: fraction of coordinates holding a value in ``[low, high)``
        seed: random seed for reproducibility
        low, high: value range; ``low`` should be positive so every chosen
            coordinate is actually stored

    Returns:
        Random MultiDim
    """
    if seed is not None:
        np.random.seed(seed)
    dtype = parse_dtype(dtype)

    n_elements = prod(shape)
    nnz = int(n_elements * density)

    flat_indices = np.random.choice(n_elements, size=nnz, replace=False)
    dense = np.zeros(n_elements, dtype=dtype)
    dense[flat_indices] = np.random.randint(low, high, size=nnz)

    return MultiDim.from_dense(dense.reshape(tuple(shape)), 0, dtype)
