"""Tests for scalar fields and field collections."""

import numpy as np
import pytest

from rdcases import CartesianGrid, DimensionError, FieldCollection, ScalarField


def test_scalar_field_basic(rng):
    """Test basic properties of scalar fields."""
    grid = CartesianGrid([(0, 2), (0, 4)], [4, 8])
    f = ScalarField(grid, 1.5, label="f")
    assert f.data.shape == (4, 8)
    assert f.integral == pytest.approx(12)
    assert f.average == pytest.approx(1.5)
    assert f.std == pytest.approx(0, abs=1e-6)
    assert f.label == "f"

    g = ScalarField.random_uniform(grid, -1, 3, rng=rng)
    assert -1 <= g.min < g.max <= 3
    assert g.average == pytest.approx(g.data.mean())
    assert g.std == pytest.approx(g.data.std())

    with pytest.raises(DimensionError):
        ScalarField(grid, np.zeros((8, 4)))


def test_scalar_field_arithmetic(rng):
    """Test arithmetic operations of scalar fields."""
    grid = CartesianGrid.from_resolution(4)
    f = ScalarField.random_uniform(grid, rng=rng)
    g = ScalarField.random_uniform(grid, 1, 2, rng=rng)

    np.testing.assert_allclose((f + g).data, f.data + g.data)
    np.testing.assert_allclose((2 - f).data, 2 - f.data)
    np.testing.assert_allclose((f * 3).data, 3 * f.data)
    np.testing.assert_allclose((f / g).data, f.data / g.data)
    np.testing.assert_allclose((-f).data, -f.data)
    np.testing.assert_allclose((f**2).data, f.data**2)

    h = f.copy(label="h")
    assert h == f
    assert h.label == "h"
    h += g
    np.testing.assert_allclose(h.data, f.data + g.data)
    h -= g
    h *= 2
    np.testing.assert_allclose(h.data, 2 * f.data)

    with pytest.raises(ValueError):
        f + ScalarField(CartesianGrid.from_resolution(8))


def test_laplace_operator(rng):
    """Test the discrete Laplacian with zero-flux boundaries."""
    grid = CartesianGrid.from_resolution(16, size=4)
    np.testing.assert_allclose(ScalarField(grid, 3).laplace().data, 0)

    # the Laplacian of an eigenmode
    x = grid.cell_coords[..., 0]
    f = ScalarField(grid, np.cos(np.pi * x / 4))
    h = grid.discretization[0]
    eigenvalue = (2 - 2 * np.cos(np.pi * h / 4)) / h**2
    np.testing.assert_allclose(f.laplace().data, -eigenvalue * f.data, atol=1e-12)

    # zero-flux boundaries conserve the integral
    g = ScalarField.random_uniform(grid, rng=rng)
    assert g.laplace().integral == pytest.approx(0, abs=1e-10)


def test_interpolate_to_image():
    """Test sampling fields on pixel rasters."""
    grid = CartesianGrid.from_resolution(4, size=4)
    f = ScalarField(grid, grid.cell_coords[..., 0])  # f(x, y) = x

    img = f.interpolate_to_image(8, linear=False)
    assert img.shape == (8, 8)
    np.testing.assert_allclose(img[:, 0], np.repeat([0.5, 1.5, 2.5, 3.5], 2))

    img = f.interpolate_to_image(8, linear=True)
    np.testing.assert_allclose(img[:, 3], np.clip(np.arange(8) / 2 + 0.25, 0.5, 3.5))

    with pytest.raises(DimensionError):
        ScalarField(CartesianGrid([(0, 1)], 4)).interpolate_to_image(4)


def test_field_collection():
    """Test field collections."""
    grid = CartesianGrid.from_resolution(4)
    a = ScalarField(grid, 1, label="a")
    b = ScalarField(grid, 2, label="b")
    fc = FieldCollection([a, b])

    assert len(fc) == 2
    assert fc.labels == ["a", "b"]
    assert fc.data.shape == (2, 4, 4)
    assert fc["b"] is fc[1]
    assert [f.label for f in fc] == ["a", "b"]

    # the fields are views into the collection
    fc["a"] = 5
    np.testing.assert_allclose(a.data, 5)
    fc.data[1] = 3
    np.testing.assert_allclose(b.data, 3)

    fc2 = fc.copy()
    fc2[0] = 0
    np.testing.assert_allclose(fc[0].data, 5)
    assert fc2.labels == fc.labels

    with pytest.raises(KeyError):
        fc["c"]
    with pytest.raises(TypeError):
        fc[1.5]
    with pytest.raises(ValueError):
        FieldCollection([])
    with pytest.raises(ValueError):
        FieldCollection([a, ScalarField(CartesianGrid.from_resolution(8))])

    # identical fields are copied
    fc3 = FieldCollection([a, a])
    fc3[0] = 1
    np.testing.assert_allclose(fc3[1].data, 5)
