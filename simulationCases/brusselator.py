r"""
Brusselator: Turing patterns
============================

The `Brusselator <https://en.wikipedia.org/wiki/Brusselator>`_ is a theoretical model
of an autocatalytic reaction. Two chemical compounds with concentrations :math:`C_1`
and :math:`C_2` interact according to

.. math::

    \partial_t C_1 &= \nabla^2 C_1 + k \left[k_a - (k_b + 1) C_1 + C_1^2 C_2\right] \\
    \partial_t C_2 &= D \nabla^2 C_2 + k \left[k_b C_1 - C_1^2 C_2\right]

using the parameters of Pena and Perez-Garcia (2001). The homogeneous stationary state
:math:`C_1 = k_a`, :math:`C_2 = k_b/k_a` is unstable for
:math:`k_b > k_b^\mathrm{crit} = (1 + k_a \sqrt{1/D})^2`. We run three simulations with
:math:`k_b = k_b^\mathrm{crit} (1 + \mu)`:

- :math:`\mu = 0.04`: weak instability
- :math:`\mu = 0.1`: stripe patterns
- :math:`\mu = 0.98`: hexagonal patterns

Each simulation starts close to the stationary state and writes frames of :math:`C_1`
to the movie `f.mp4`, a progress line to standard error, and the final pattern to
`mu-<mu>.png`.
"""

import logging

import rdcases as rd

RESOLUTION = 128  # cells along each axis
SIZE = 64  # length of the square domain
TOLERANCE = 1e-4  # tolerance of the multigrid solves
T_END = 3000
DT_MAX = 1.0  # bounds the time step for the reactive terms
RENDER = {"n": 200, "spread": 2, "linear": True}

k, ka, D = 1.0, 4.5, 8.0


def run(mu: float, grid: rd.CartesianGrid, movie: rd.Movie) -> None:
    """Simulate the Brusselator at distance `mu` from the bifurcation."""
    eq = rd.BrusselatorPDE.from_control_parameter(mu, k=k, ka=ka, D=D)
    state = eq.get_initial_state(grid, noise=0.01)

    every_10 = rd.IterationInterrupts(10, start=1)
    trackers = [
        rd.MovieTracker(movie, every_10, field="C1", **RENDER),
        rd.PrintTracker(every_10.copy()),
        rd.ImageTracker(
            f"mu-{mu:g}.png", rd.FixedInterrupts([T_END]), field="C1", **RENDER
        ),
    ]
    eq.solve(state, t_range=T_END, dt=DT_MAX, tracker=trackers, tolerance=TOLERANCE)


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    grid = rd.CartesianGrid.from_resolution(RESOLUTION, size=SIZE)
    with rd.Movie("f.mp4") as movie:
        for mu in [0.04, 0.1, 0.98]:
            run(mu, grid, movie)


if __name__ == "__main__":
    main()
