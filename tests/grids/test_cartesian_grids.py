"""Tests for the Cartesian grids."""

import numpy as np
import pytest

from rdcases import CartesianGrid, DimensionError


def test_degenerated_grid():
    """Test degenerated grids."""
    with pytest.raises(ValueError):
        CartesianGrid([], 1)
    with pytest.raises(ValueError):
        CartesianGrid([(1, 0)], 4)
    with pytest.raises(ValueError):
        CartesianGrid([(0, 1)], 0)
    with pytest.raises(DimensionError):
        CartesianGrid([(0, 1), (0, 1)], [2, 3, 4])


def test_generic_cartesian_grid():
    """Test generic properties of Cartesian grids."""
    grid = CartesianGrid([(0, 2), (1, 5)], [4, 8])
    assert grid.dim == 2
    assert grid.shape == (4, 8)
    assert grid.num_cells == 32
    np.testing.assert_allclose(grid.discretization, [0.5, 0.5])
    np.testing.assert_allclose(grid.origin, [0, 1])
    np.testing.assert_allclose(grid.size, [2, 4])
    assert grid.volume == pytest.approx(8)
    assert grid.cell_volume == pytest.approx(0.25)
    np.testing.assert_allclose(grid.axes_coords[0], [0.25, 0.75, 1.25, 1.75])
    assert grid.cell_coords.shape == (4, 8, 2)
    np.testing.assert_allclose(grid.cell_coords[0, 0], [0.25, 1.25])


def test_grid_from_resolution():
    """Test creating square grids."""
    grid = CartesianGrid.from_resolution(128, size=64)
    assert grid.shape == (128, 128)
    assert grid.axes_bounds == ((0, 64), (0, 64))
    np.testing.assert_allclose(grid.discretization, [0.5, 0.5])

    grid = CartesianGrid.from_resolution(4, size=2, origin=[-1, 0])
    assert grid.axes_bounds == ((-1, 1), (0, 2))


def test_grid_equality():
    """Test comparing grids."""
    g1 = CartesianGrid.from_resolution(8)
    g2 = CartesianGrid([(0, 1), (0, 1)], 8)
    g3 = CartesianGrid.from_resolution(4)
    assert g1 == g2
    assert hash(g1) == hash(g2)
    assert g1 != g3
    g1.assert_grid_compatible(g2)
    with pytest.raises(ValueError):
        g1.assert_grid_compatible(g3)
    assert eval(repr(g1), {"CartesianGrid": CartesianGrid}) == g1


def test_grid_coarsening():
    """Test the grid hierarchy used by the multigrid solver."""
    grid = CartesianGrid.from_resolution(16, size=4)
    coarse = grid.coarsen()
    assert coarse.shape == (8, 8)
    assert coarse.axes_bounds == grid.axes_bounds
    np.testing.assert_allclose(coarse.discretization, 2 * grid.discretization)

    shapes = [g.shape[0] for g in grid.levels()]
    assert shapes == [16, 8, 4, 2]
    shapes = [g.shape[0] for g in grid.levels(coarsest_size=4)]
    assert shapes == [16, 8, 4]

    odd = CartesianGrid.from_resolution(6)
    assert [g.shape[0] for g in odd.levels()] == [6, 3]
    assert not odd.coarsen().can_coarsen
    with pytest.raises(DimensionError):
        odd.coarsen().coarsen()
