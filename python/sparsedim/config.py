from __future__ import annotations

from typing import Any

import numpy as np
from donfig import Config

config = Config(
    "sparsedim",
    defaults=[
        {
            "array": {"dtype": "int64"},
            "transform": {"memoize": False},
            "render": {"separator": " "},
        }
    ],
)

# fixed-width integers and IEEE754 floats only
_SUPPORTED_KINDS = "iuf"


def parse_dtype(data: Any) -> np.dtype:
    if data is None:
        data = config.get("array.dtype")
    try:
        dtype = np.dtype(data)
    except TypeError as e:
        raise TypeError(f"Expected a numeric dtype, got {data!r} instead.") from e
    if dtype.kind not in _SUPPORTED_KINDS:
        msg = f"Expected an integer or float dtype, got {dtype} instead."
        raise TypeError(msg)
    return dtype
