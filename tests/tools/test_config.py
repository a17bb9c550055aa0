"""Tests for the configuration of the package."""

import pytest

from rdcases import config
from rdcases.tools.config import Config, Parameter, environment


def test_environment():
    """Test the environment function."""
    env = environment()
    assert isinstance(env, dict)
    assert "numba" in env["mandatory packages"]
    assert env["config"]["multigrid.tolerance"] > 0


def test_config_defaults():
    """Test the default configuration."""
    c = Config()
    assert c["multigrid.tolerance"] > 0
    assert c["multigrid.max_iterations"] >= c["multigrid.min_iterations"] >= 1
    assert c["cases.directory"] == "simulationCases"
    assert "output.image_size" in c.to_dict()
    assert isinstance(repr(c), str)

    assert config["output.framerate"] == 25


def test_config_modes():
    """Test configuration system running in different modes."""
    c = Config({"key": 3}, mode="insert")
    assert c["key"] > 0
    c["key"] = 0
    assert c["key"] == 0
    c["new_value"] = "value"
    assert c["new_value"] == "value"
    c.update({"new_value2": "value2"})
    assert c["new_value2"] == "value2"
    del c["new_value"]
    with pytest.raises(KeyError):
        c["new_value"]
    with pytest.raises(KeyError):
        c["undefined"]

    c = Config({"key": 3}, mode="update")
    assert c["key"] > 0
    c["key"] = 0

    with pytest.raises(KeyError):
        c["new_value"] = "value"
    with pytest.raises(KeyError):
        c.update({"new_value": "value"})
    with pytest.raises(RuntimeError):
        del c["multigrid.tolerance"]
    with pytest.raises(KeyError):
        c["undefined"]

    c = Config({"key": 3}, mode="locked")
    assert c["key"] > 0
    with pytest.raises(RuntimeError):
        c["key"] = 0
    with pytest.raises(RuntimeError):
        c.update({"key": 0})
    with pytest.raises(RuntimeError):
        c["new_value"] = "value"
    with pytest.raises(RuntimeError):
        del c["key"]
    with pytest.raises(KeyError):
        c["undefined"]

    c = Config({"key": 3}, mode="undefined")
    assert c["key"] > 0
    with pytest.raises(ValueError):
        c["key"] = 0
    with pytest.raises(ValueError):
        c.update({"key": 0})
    with pytest.raises(RuntimeError):
        del c["key"]


def test_config_contexts():
    """Test context manager temporarily changing configuration."""
    c = Config({"key": 3})

    assert c["key"] == 3
    with c({"key": 0}):
        assert c["key"] == 0
        with c(key=1):
            assert c["key"] == 1
        assert c["key"] == 0

    assert c["key"] == 3


def test_parameter_conversion():
    """Test the conversion of parameter values."""
    p = Parameter("a", 2, int, "description")
    assert p.convert() == 2
    assert p.convert("5") == 5
    assert "description" in repr(p)
    with pytest.raises(ValueError):
        p.convert("five")
