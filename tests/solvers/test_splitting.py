"""Tests for the implicit splitting solver."""

import numpy as np
import pytest

import rdcases as rd
from rdcases.solvers import ImplicitSplittingSolver, SolverBase, diffusion


def test_solver_registry():
    """Test creating solvers by name."""
    eq = rd.BrusselatorPDE()
    solver = SolverBase.from_name("splitting", eq, dt_max=0.5, tolerance=1e-6)
    assert isinstance(solver, ImplicitSplittingSolver)
    assert solver.dt_max == 0.5
    assert solver.info["pde_class"] == "BrusselatorPDE"
    assert solver.next_dt(0, 1.2) == pytest.approx(0.4)
    with pytest.raises(ValueError):
        SolverBase.from_name("undefined", eq)


def test_splitting_step(rng):
    """Test that fields are advanced one after another."""
    eq = rd.BrusselatorPDE.from_control_parameter(0.1)
    grid = rd.CartesianGrid.from_resolution(16, size=8)
    state = eq.get_initial_state(grid, noise=0.1, rng=rng)

    # advance the fields manually
    expect = state.copy()
    for index, field in enumerate(expect):
        source, beta = eq.reaction_terms(expect, index)
        diffusion(field, 0.5, eq.diffusivity[index], source, beta, tolerance=1e-10)

    solver = ImplicitSplittingSolver(eq, tolerance=1e-10)
    solver.step(state, 0, 0.5)
    np.testing.assert_allclose(state.data, expect.data)
    assert solver.info["dt"] == 0.5
    assert solver.info["steps"] == 1
    assert [s.i >= 1 for s in solver.info["mgstats"]] == [True, True]


def test_splitting_wrong_state():
    """Test that states need to match the equation."""
    eq = rd.BrusselatorPDE()
    grid = rd.CartesianGrid.from_resolution(4)
    state = rd.FieldCollection([rd.ScalarField(grid, 1)])
    with pytest.raises(ValueError):
        ImplicitSplittingSolver(eq).step(state, 0, 1)


def test_splitting_strict(rng):
    """Test that failed multigrid solves can raise errors."""
    eq = rd.BrusselatorPDE()
    grid = rd.CartesianGrid.from_resolution(16)
    state = eq.get_initial_state(grid, noise=1, rng=rng)
    solver = ImplicitSplittingSolver(eq, tolerance=1e-14, max_iterations=1, strict=True)
    with pytest.raises(rd.ConvergenceError):
        solver.step(state, 0, 1)
