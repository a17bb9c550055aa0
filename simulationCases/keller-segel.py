r"""
Keller-Segel chemotaxis (placeholder)
=====================================

The Keller-Segel model describes chemotaxis, the directed movement of cells in
response to a chemical gradient. It couples the cell density :math:`\rho` and the
chemoattractant concentration :math:`c`:

.. math::

    \partial_t \rho &= \nabla^2 \rho - \chi \nabla \cdot (\rho \nabla c) \\
    \partial_t c &= D \nabla^2 c + \alpha \rho - \beta c

with chemotactic sensitivity :math:`\chi`, diffusivity :math:`D`, production rate
:math:`\alpha`, and degradation rate :math:`\beta`.

Note:
    This case is currently configured exactly like the Brusselator case. The fields
    `C1` and `C2` stand for :math:`\rho` and :math:`c`, and the parameters are
    placeholders taken from Pena and Perez-Garcia (2001).
"""

import logging

import rdcases as rd

RESOLUTION = 128  # cells along each axis
SIZE = 64  # length of the square domain
TOLERANCE = 1e-4  # tolerance of the multigrid solves
T_END = 3000
DT_MAX = 1.0
RENDER = {"n": 200, "spread": 2, "linear": True}

# placeholder parameters
k, ka, D = 1.0, 4.5, 8.0


def run(mu: float, grid: rd.CartesianGrid, movie: rd.Movie) -> None:
    """Simulate the placeholder system for the control parameter `mu`"""
    # TODO: replace the reactions by the chemotactic flux -chi div(rho grad c) and
    # the linear production and degradation of the chemoattractant
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
