import numpy as np

from .errors import InvalidStateError

_index_type = np.int64


class CSRSlices:
    """
    Arena of CSR triples, one per 2D slice.

    The row pointers of every slice live in one contiguous ``(nslices,
    rows + 1)`` array; column indices and values are per-slice arrays because
    their lengths change independently on insert/remove.
    """

    def __init__(self, nslices, rows, dtype):
        self.nslices = nslices
        self.rows = rows
        self.dtype = np.dtype(dtype)
        self.indptr = np.zeros((nslices, rows + 1), dtype=_index_type)
        self.indices = [np.array([], dtype=_index_type) for _ in range(nslices)]
        self.data = [np.array([], dtype=self.dtype) for _ in range(nslices)]

    @property
    def nnz(self):
        return int(self.indptr[:, -1].sum())

    def __repr__(self):
        return f"CSRSlices(nslices={self.nslices}, rows={self.rows}, nnz={self.nnz})"

    def copy(self):
        out = CSRSlices.__new__(CSRSlices)
        out.nslices = self.nslices
        out.rows = self.rows
        out.dtype = self.dtype
        out.indptr = self.indptr.copy()
        out.indices = [idx.copy() for idx in self.indices]
        out.data = [vals.copy() for vals in self.data]
        return out


# -------------------- invariants --------------------

def check_state(store: CSRSlices):
    """Raise InvalidStateError if the arena no longer matches its slice count."""
    if len(store.indices) != store.nslices or len(store.data) != store.nslices:
        raise InvalidStateError(
            f"{store.nslices} slices expected, found {len(store.indices)} index "
            f"and {len(store.data)} value arrays"
        )
    if store.indptr.shape != (store.nslices, store.rows + 1):
        raise InvalidStateError(
            f"row pointer arena has shape {store.indptr.shape}, "
            f"expected {(store.nslices, store.rows + 1)}"
        )
    for k in range(store.nslices):
        n = store.indptr[k, -1]
        if store.indices[k].size != n or store.data[k].size != n:
            raise InvalidStateError(
                f"slice {k} records {n} entries but holds "
                f"{store.indices[k].size} columns and {store.data[k].size} values"
            )


# -------------------- lookup --------------------

def row_bounds(store: CSRSlices, k, row):
    return int(store.indptr[k, row]), int(store.indptr[k, row + 1])


def find(store: CSRSlices, k, row, col):
    """
    Binary search the column range of ``row`` in slice ``k``.

    Returns ``(pos, found)`` where ``pos`` is the position in the slice's
    column/value arrays holding ``col``, or the position it would be
    inserted at to keep the row sorted.
    """
    start, end = row_bounds(store, k, row)
    cols = store.indices[k]
    pos = start + int(np.searchsorted(cols[start:end], col))
    found = pos < end and cols[pos] == col
    return pos, found


# -------------------- mutation --------------------

def insert(store: CSRSlices, k, row, pos, col, val):
    """Insert ``(col, val)`` at ``pos`` and shift the row pointers after ``row``."""
    store.indices[k] = np.insert(store.indices[k], pos, col)
    store.data[k] = np.insert(store.data[k], pos, val)
    store.indptr[k, row + 1:] += 1


def remove(store: CSRSlices, k, row, pos):
    """Erase the entry at ``pos`` and shift the row pointers after ``row``."""
    store.indices[k] = np.delete(store.indices[k], pos)
    store.data[k] = np.delete(store.data[k], pos)
    store.indptr[k, row + 1:] -= 1


def clear(store: CSRSlices):
    """Drop every stored entry without visiting them."""
    store.indptr[:] = 0
    store.indices = [np.array([], dtype=_index_type) for _ in range(store.nslices)]
    store.data = [np.array([], dtype=store.dtype) for _ in range(store.nslices)]


def map_values(store: CSRSlices, fn, default):
    """
    Replace every stored value ``v`` by ``fn(v)``.

    ``fn`` receives and returns a whole value array per slice. Entries whose
    new value equals ``default`` are removed so no stored value equals it.
    """
    for k in range(store.nslices):
        vals = store.data[k]
        if vals.size == 0:
            continue
        new_vals = np.asarray(fn(vals), dtype=store.dtype)
        keep = new_vals != default
        if keep.all():
            store.data[k] = new_vals
            continue

        counts = np.diff(store.indptr[k])
        row_of = np.repeat(np.arange(store.rows), counts)
        kept_counts = np.bincount(row_of[keep], minlength=store.rows)
        store.indptr[k, 0] = 0
        store.indptr[k, 1:] = np.cumsum(kept_counts)
        store.indices[k] = store.indices[k][keep]
        store.data[k] = new_vals[keep]


# -------------------- comparison --------------------

def equal(a: CSRSlices, b: CSRSlices):
    """
    Compare two arenas array by array: row pointers, then columns, then values.

    Only meaningful when both hold the same shape and the same default, since
    that makes the CSR layout canonical.
    """
    if a.nslices != b.nslices or a.rows != b.rows:
        return False
    if not np.array_equal(a.indptr, b.indptr):
        return False
    for k in range(a.nslices):
        if not np.array_equal(a.indices[k], b.indices[k]):
            return False
    for k in range(a.nslices):
        if not np.array_equal(a.data[k], b.data[k]):
            return False
    return True


# -------------------- dense conversion --------------------

def to_dense(store: CSRSlices, cols, default):
    """Return a dense ``(nslices, rows, cols)`` numpy array."""
    dense = np.full((store.nslices, store.rows, cols), default, dtype=store.dtype)
    for k in range(store.nslices):
        for r in range(store.rows):
            start, end = row_bounds(store, k, r)
            if end > start:
                dense[k, r, store.indices[k][start:end]] = store.data[k][start:end]
    return dense


def from_dense(arr: np.ndarray, default, out: CSRSlices):
    """Fill ``out`` from a dense ``(nslices, rows, cols)`` array."""
    for k in range(out.nslices):
        page = arr[k]
        mask = page != default
        out.indptr[k, 0] = 0
        out.indptr[k, 1:] = np.cumsum(mask.sum(axis=1))
        # nonzero walks the row-major order, so columns come out sorted per row
        _, nz_cols = np.nonzero(mask)
        out.indices[k] = nz_cols.astype(_index_type)
        out.data[k] = page[mask].astype(out.dtype)
