from .multi_dim import MultiDim


class SparseMatrix(MultiDim):
    """
    Two-dimensional sparse array addressed by ``(row, col)``.

    ``get`` and ``set`` also accept a full coordinate tuple, so every
    :class:`MultiDim` operation works on it unchanged.
    """

    def __init__(self, rows: int, cols: int, default=0, dtype=None, logger=None):
        super().__init__((rows, cols), default, dtype, logger)

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]

    def get(self, row, col=None):
        if col is None:
            return super().get(row)
        return super().get((row, col))

    def set(self, value, row, col=None):
        if col is None:
            return super().set(value, row)
        return super().set(value, (row, col))

    @classmethod
    def load(cls, path, dtype=None):
        return super().load(path, 2, dtype)
