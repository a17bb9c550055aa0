"""Tests for the multigrid solver of implicit diffusion steps."""

import logging

import numpy as np
import pytest

from rdcases import CartesianGrid, DimensionError, ScalarField
from rdcases.solvers import ConvergenceError, HelmholtzMultigrid, MGStats, diffusion


def test_multigrid_hierarchy():
    """Test the levels of the multigrid solver."""
    solver = HelmholtzMultigrid(CartesianGrid.from_resolution(32))
    assert [level.grid.shape[0] for level in solver.levels] == [32, 16, 8, 4, 2]
    assert solver.minlevel == 1

    solver = HelmholtzMultigrid(CartesianGrid.from_resolution(32), coarsest_size=8)
    assert solver.minlevel == 3

    with pytest.raises(DimensionError):
        HelmholtzMultigrid(CartesianGrid([(0, 1)], 8))


def test_diffusion_uniform_field():
    """Test that uniform fields are not changed by diffusion."""
    field = ScalarField(CartesianGrid.from_resolution(16, size=4), 2.0)
    stats = diffusion(field, 0.5, diffusivity=3)
    np.testing.assert_allclose(field.data, 2.0)
    assert isinstance(stats, MGStats)
    assert stats.i == 1
    assert stats.resb == pytest.approx(0, abs=1e-12)


def test_diffusion_reaction_terms():
    """Test the implicit treatment of linear reaction terms."""
    field = ScalarField(CartesianGrid.from_resolution(8), 1.0)
    diffusion(field, 0.5, source=2, beta=-1, tolerance=1e-12)
    np.testing.assert_allclose(field.data, 4 / 3)

    source = ScalarField(field.grid, 1.0)
    diffusion(field, 0.5, source=source, tolerance=1e-12)
    np.testing.assert_allclose(field.data, 4 / 3 + 0.5)


def test_diffusion_cosine_mode():
    """Test the decay of an eigenmode of the discrete Laplacian."""
    grid = CartesianGrid.from_resolution(32, size=32)
    x = grid.cell_coords[..., 0]
    field = ScalarField(grid, np.cos(np.pi * x / 32))
    expect = field.data / (1 + 2 - 2 * np.cos(np.pi / 32))

    stats = diffusion(field, 1, diffusivity=1, tolerance=1e-10)
    np.testing.assert_allclose(field.data, expect, atol=1e-8)
    assert stats.resa <= 1e-10
    assert stats.resb > stats.resa


def test_diffusion_conservation(rng):
    """Test that diffusion conserves the integral of the field."""
    grid = CartesianGrid.from_resolution(32, size=8)
    field = ScalarField.random_uniform(grid, rng=rng)
    integral, std = field.integral, field.std

    stats = diffusion(field, 1, diffusivity=1, tolerance=1e-8)
    assert field.integral == pytest.approx(integral, rel=1e-6)
    assert field.std < std
    assert 1 <= stats.i < 100
    assert stats.sum == pytest.approx(integral / grid.cell_volume)
    assert stats.to_dict()["minlevel"] == 1


def test_diffusion_not_converged(rng, caplog):
    """Test the behavior when the tolerance is not reached."""
    grid = CartesianGrid.from_resolution(32, size=8)
    field = ScalarField.random_uniform(grid, rng=rng)

    with pytest.raises(ConvergenceError):
        diffusion(field.copy(), 1, tolerance=1e-14, max_iterations=1, strict=True)

    with caplog.at_level(logging.WARNING):
        stats = diffusion(field, 1, tolerance=1e-14, max_iterations=1)
    assert stats.i == 1
    assert "did not converge" in caplog.text


def test_diffusion_wrong_time_step():
    """Test that non-positive time steps are rejected."""
    field = ScalarField(CartesianGrid.from_resolution(8))
    for dt in [0, -1]:
        with pytest.raises(ValueError):
            diffusion(field, dt)
