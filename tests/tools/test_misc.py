"""Tests for miscellaneous helper functions."""

import numpy as np
import pytest

from rdcases.tools import misc
from rdcases.tools.ffmpeg import formats
from rdcases.tools.numba import jit, numba_environment


def test_copy_to_directory(tmp_path):
    """Test copying files into new directories."""
    source = tmp_path / "case.py"
    source.write_text("a = 1")
    path = misc.copy_to_directory(source, tmp_path / "a" / "b")
    assert path == tmp_path / "a" / "b" / "case.py"
    assert path.read_text() == "a = 1"

    source.write_text("a = 2")
    misc.copy_to_directory(str(source), str(tmp_path / "a" / "b"))
    assert path.read_text() == "a = 2"


def test_module_available():
    """Test the module_available function."""
    assert misc.module_available("numpy")
    assert not misc.module_available("nonexistent_module_name")
    assert not misc.module_available("nonexistent_module_name.submodule")


def test_decorator_arguments():
    """Test the decorator_arguments function."""

    @misc.decorator_arguments
    def scale(func, factor=2):
        return lambda x: factor * func(x)

    @scale
    def f(x):
        return x + 1

    @scale(factor=3)
    def g(x):
        return x + 1

    assert f(1) == 4
    assert g(1) == 6
    with pytest.raises(TypeError):
        scale(2)


def test_jit():
    """Test compiling functions with numba."""

    @jit
    def add(a, b):
        return a + b

    assert add(1, 2) == 3
    assert jit(add) is add

    @jit(parallel=False)
    def total(arr):
        s = 0.0
        for x in arr:
            s += x
        return s

    assert total(np.arange(4.0)) == 6
    assert "fastmath" in numba_environment()


def test_ffmpeg_formats():
    """Test converting data to frames."""
    fmt = formats["rgb24"]
    frame = fmt.data_to_frame(np.array([[-1, 0, 0.5, 1, 2]]))
    assert frame.dtype == np.uint8
    np.testing.assert_equal(frame, [[0, 0, 128, 255, 255]])
