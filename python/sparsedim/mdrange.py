"""
N-dimensional coordinate ranges and mixed-radix index helpers.

An ``MDRange`` describes the half-open box ``[start, end)``. It holds no
traversal state: every ``iter()`` call hands out a new generator, so the same
range can be walked by nested loops.
"""

import itertools
import operator
from functools import reduce
from typing import Iterable, Iterator, Optional, Sequence, Tuple

from .errors import InvalidDimensionsError

__all__ = ["MDRange", "mdrange", "prod", "ravel_index", "unravel_index"]

Coord = Tuple[int, ...]


def prod(x: Iterable[int]) -> int:
    return reduce(operator.mul, x, 1)


def ravel_index(coord: Sequence[int], dims: Sequence[int]) -> int:
    """
    Fold ``coord`` into a single linear index over ``dims``.

    The outermost dimension is the most significant digit. ``coord`` and
    ``dims`` must have the same length; an empty prefix maps to 0.
    """
    rpos = 0
    for idx, dim in zip(coord, dims):
        rpos = rpos * dim + idx
    return rpos


def unravel_index(rpos: int, dims: Sequence[int]) -> Coord:
    """Inverse of :func:`ravel_index`."""
    unravelled = []
    for dim in reversed(dims):
        rpos, idx = divmod(rpos, dim)
        unravelled.append(idx)
    return tuple(reversed(unravelled))


class MDRange:
    """
    Row-major range of coordinates over ``[start, end)``.

    Args:
        end: exclusive upper bound per axis
        start: inclusive lower bound per axis, all zeros when omitted

    Raises:
        InvalidDimensionsError: if ``end <= start`` on any axis, or the two
            bounds have different lengths
    """

    def __init__(self, end: Sequence[int], start: Optional[Sequence[int]] = None):
        end = tuple(int(e) for e in end)
        if start is None:
            start = (0,) * len(end)
        start = tuple(int(s) for s in start)

        if len(start) != len(end):
            raise InvalidDimensionsError(
                end, f"start {start!r} has {len(start)} axes, end has {len(end)}"
            )
        for axis, (s, e) in enumerate(zip(start, end)):
            if e <= s:
                raise InvalidDimensionsError(
                    end, f"axis {axis} is empty (start={s}, end={e})"
                )

        self.start = start
        self.end = end

    @property
    def ndim(self) -> int:
        return len(self.end)

    @property
    def shape(self) -> Coord:
        return tuple(e - s for s, e in zip(self.start, self.end))

    def __len__(self) -> int:
        return prod(self.shape)

    def __iter__(self) -> Iterator[Coord]:
        # product varies the last axis fastest
        return itertools.product(*(range(s, e) for s, e in zip(self.start, self.end)))

    def __contains__(self, coord) -> bool:
        if len(coord) != self.ndim:
            return False
        return all(s <= c < e for s, c, e in zip(self.start, coord, self.end))

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, MDRange)
            and self.start == other.start
            and self.end == other.end
        )

    def __hash__(self) -> int:
        return hash(self.start) ^ hash(self.end)

    def __repr__(self) -> str:
        return "mdrange(" + ",".join("%s:%s" % (s, e) for s, e in zip(self.start, self.end)) + ")"


def mdrange(end: Sequence[int], start: Optional[Sequence[int]] = None) -> MDRange:
    return MDRange(end, start)
