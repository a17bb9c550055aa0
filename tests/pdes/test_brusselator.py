"""Tests for the Brusselator."""

import numpy as np
import pytest

import rdcases as rd
from rdcases.pdes import BrusselatorPDE


def test_brusselator_parameters():
    """Test the parameters of the Brusselator."""
    assert BrusselatorPDE.critical_kb(4.5, 8) == pytest.approx((1 + 4.5 / 8**0.5) ** 2)

    for mu in [0.04, 0.1, 0.98]:
        eq = BrusselatorPDE.from_control_parameter(mu, k=1, ka=4.5, D=8)
        assert eq.diffusivity == [1, 8]
        assert eq.kb == pytest.approx(BrusselatorPDE.critical_kb(4.5, 8) * (1 + mu))
        assert eq.mu == pytest.approx(mu)
        assert "BrusselatorPDE" in repr(eq)

    with pytest.raises(ValueError):
        BrusselatorPDE(diffusivity=[1, 2, 3])


def test_brusselator_initial_state(rng):
    """Test the perturbed initial state."""
    eq = BrusselatorPDE(ka=4.5, kb=9)
    grid = rd.CartesianGrid.from_resolution(16)
    state = eq.get_initial_state(grid, noise=0.01, rng=rng)
    assert state.labels == ["C1", "C2"]
    np.testing.assert_allclose(state["C1"].data, 4.5)
    assert np.all(np.abs(state["C2"].data - 2) <= 0.01 + 1e-12)
    assert state["C2"].std > 0

    state = eq.get_initial_state(grid, noise=0)
    assert state == eq.stationary_state(grid)


def test_brusselator_reaction_terms():
    """Test the reaction terms against the full reaction rates."""
    eq = BrusselatorPDE(k=2, ka=3, kb=5)
    grid = rd.CartesianGrid.from_resolution(4)
    c1, c2 = 1.5, 0.5
    state = rd.FieldCollection([rd.ScalarField(grid, c1), rd.ScalarField(grid, c2)])

    source, beta = eq.reaction_terms(state, 0)
    np.testing.assert_allclose(source + beta * c1, 2 * (3 - 6 * c1 + c1**2 * c2))
    source, beta = eq.reaction_terms(state, 1)
    np.testing.assert_allclose(source + beta * c2, 2 * (5 * c1 - c1**2 * c2))
    with pytest.raises(IndexError):
        eq.reaction_terms(state, 2)


def test_brusselator_stationary_state():
    """Test that the homogeneous stationary state does not evolve."""
    eq = BrusselatorPDE.from_control_parameter(0.1)
    grid = rd.CartesianGrid.from_resolution(16, size=8)
    state = eq.stationary_state(grid)

    rate = eq.evolution_rate(state)
    np.testing.assert_allclose(rate.data, 0, atol=1e-12)

    result, info = eq.solve(state, t_range=5, dt=1, tracker=None, ret_info=True)
    np.testing.assert_allclose(result.data, state.data)
    assert info["controller"]["successful"]
    assert info["solver"]["class"] == "ImplicitSplittingSolver"
    assert len(info["solver"]["mgstats"]) == 2


def test_brusselator_solver_selection(rng):
    """Test choosing the solver of the Brusselator."""
    eq = BrusselatorPDE.from_control_parameter(0.1)
    grid = rd.CartesianGrid.from_resolution(8)
    state = eq.get_initial_state(grid, rng=rng)

    res1 = eq.solve(state, t_range=1, dt=0.5, tracker=None)
    solver = rd.ImplicitSplittingSolver
    res2 = eq.solve(state, t_range=1, dt=0.5, tracker=None, solver=solver)
    np.testing.assert_allclose(res1.data, res2.data)

    with pytest.raises(ValueError):
        eq.solve(state, t_range=1, solver="undefined")
    with pytest.raises(TypeError):
        eq.solve(state, t_range=1, solver=1)


@pytest.mark.slow
def test_brusselator_turing_instability(rng):
    """Test that perturbations grow beyond the Turing bifurcation."""
    eq = BrusselatorPDE.from_control_parameter(0.5)
    grid = rd.CartesianGrid.from_resolution(32, size=32)
    state = eq.get_initial_state(grid, noise=0.01, rng=rng)

    result = eq.solve(state, t_range=300, dt=1, tracker=None, tolerance=1e-4)
    assert result["C1"].std > 10 * state["C1"].std + 0.01
    assert result["C1"].average == pytest.approx(eq.ka, rel=0.1)
