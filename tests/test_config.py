import numpy as np
import pytest

from sparsedim import config
from sparsedim.config import parse_dtype


def test_defaults():
    assert config.get("array.dtype") == "int64"
    assert config.get("transform.memoize") is False
    assert config.get("render.separator") == " "


def test_parse_dtype_default():
    assert parse_dtype(None) == np.int64
    with config.set({"array.dtype": "float32"}):
        assert parse_dtype(None) == np.float32


@pytest.mark.parametrize("dtype", ["int8", "uint16", "int32", "float32", "float64", np.int64])
def test_parse_dtype_supported(dtype):
    assert parse_dtype(dtype) == np.dtype(dtype)


@pytest.mark.parametrize("dtype", ["bool", "complex64", "datetime64[s]", "U3"])
def test_parse_dtype_unsupported(dtype):
    with pytest.raises(TypeError):
        parse_dtype(dtype)
