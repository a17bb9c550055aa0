r"""Geometric multigrid solver for implicit diffusion steps.

The central function :func:`diffusion` advances a scalar field by one backward Euler
step of the reaction-diffusion equation

.. math::
    \partial_t f = D \nabla^2 f + r + \beta f

where the source :math:`r` and the linear coefficient :math:`\beta` may vary in space.
The implicit step leads to the Helmholtz problem

.. math::
    (1 - \Delta t \, \beta) f^{n+1} - \Delta t D \nabla^2 f^{n+1}
        = f^n + \Delta t \, r

which is solved with V-cycles on the hierarchy of successively coarsened grids. All
grids use zero-flux boundary conditions, which are implemented with ghost cells.

.. autosummary::
   :nosignatures:

   MGStats
   HelmholtzMultigrid
   diffusion
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any

import numpy as np

from .. import config
from ..fields.scalar import ScalarField
from ..grids.cartesian import CartesianGrid, DimensionError
from ..tools.numba import jit
from .base import ConvergenceError

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for the multigrid solver."""


@dataclass
class MGStats:
    """Statistics of a single multigrid solve."""

    i: int = 0
    """int: number of V-cycles"""
    resb: float = 0.0
    """float: maximal residual before the first V-cycle"""
    resa: float = 0.0
    """float: maximal residual after the last V-cycle"""
    sum: float = 0.0
    """float: sum of the right hand side"""
    nrelax: int = 0
    """int: number of relaxation sweeps per level and half cycle"""
    minlevel: int = 0
    """int: level of the coarsest grid (base-2 logarithm of its resolution)"""

    def to_dict(self) -> dict[str, Any]:
        """Return the statistics as a dictionary."""
        return asdict(self)


@jit
def _set_ghost_cells(u: np.ndarray) -> None:
    """Set ghost cells to implement zero-flux boundary conditions."""
    nx, ny = u.shape[0] - 2, u.shape[1] - 2
    for j in range(1, ny + 1):
        u[0, j] = u[1, j]
        u[nx + 1, j] = u[nx, j]
    for i in range(nx + 2):
        u[i, 0] = u[i, 1]
        u[i, ny + 1] = u[i, ny]


@jit
def _relax(
    u: np.ndarray, b: np.ndarray, a: np.ndarray, kx: float, ky: float, sweeps: int
) -> None:
    """Red-black Gauss-Seidel sweeps for `a u - kx δ_xx u - ky δ_yy u = b`"""
    nx, ny = u.shape[0] - 2, u.shape[1] - 2
    for _ in range(sweeps):
        for color in range(2):
            for i in range(1, nx + 1):
                for j in range(1, ny + 1):
                    if (i + j) % 2 != color:
                        continue
                    off = kx * (u[i - 1, j] + u[i + 1, j]) + ky * (
                        u[i, j - 1] + u[i, j + 1]
                    )
                    diag = a[i - 1, j - 1] + 2 * kx + 2 * ky
                    u[i, j] = (b[i - 1, j - 1] + off) / diag
            _set_ghost_cells(u)


@jit
def _residual(
    u: np.ndarray,
    b: np.ndarray,
    a: np.ndarray,
    kx: float,
    ky: float,
    res: np.ndarray,
) -> float:
    """Calculate the residual `b - A u` and return its maximal magnitude."""
    nx, ny = u.shape[0] - 2, u.shape[1] - 2
    res_max = 0.0
    for i in range(1, nx + 1):
        for j in range(1, ny + 1):
            lap_x = u[i - 1, j] - 2 * u[i, j] + u[i + 1, j]
            lap_y = u[i, j - 1] - 2 * u[i, j] + u[i, j + 1]
            diag = a[i - 1, j - 1] * u[i, j]
            value = b[i - 1, j - 1] - diag + kx * lap_x + ky * lap_y
            res[i - 1, j - 1] = value
            if abs(value) > res_max:
                res_max = abs(value)
    return res_max


@jit
def _restrict(fine: np.ndarray, coarse: np.ndarray) -> None:
    """Average blocks of 2x2 cells of `fine` into the cells of `coarse`"""
    for i in range(coarse.shape[0]):
        for j in range(coarse.shape[1]):
            coarse[i, j] = 0.25 * (
                fine[2 * i, 2 * j]
                + fine[2 * i + 1, 2 * j]
                + fine[2 * i, 2 * j + 1]
                + fine[2 * i + 1, 2 * j + 1]
            )


@jit
def _prolongate_add(coarse: np.ndarray, fine: np.ndarray) -> None:
    """Add the bilinear interpolation of `coarse` to `fine` (both with ghost cells)"""
    nx, ny = fine.shape[0] - 2, fine.shape[1] - 2
    for i in range(1, nx + 1):
        ic = (i - 1) // 2 + 1
        si = -1 if (i - 1) % 2 == 0 else 1
        for j in range(1, ny + 1):
            jc = (j - 1) // 2 + 1
            sj = -1 if (j - 1) % 2 == 0 else 1
            fine[i, j] += (
                9 * coarse[ic, jc]
                + 3 * (coarse[ic + si, jc] + coarse[ic, jc + sj])
                + coarse[ic + si, jc + sj]
            ) / 16
    _set_ghost_cells(fine)


class _Level:
    """Work arrays of a single level of the multigrid hierarchy."""

    def __init__(self, grid: CartesianGrid):
        self.grid = grid
        nx, ny = grid.shape
        self.u = np.zeros((nx + 2, ny + 2))  # solution (with ghost cells)
        self.b = np.zeros((nx, ny))  # right hand side
        self.a = np.zeros((nx, ny))  # diagonal coefficient
        self.res = np.zeros((nx, ny))  # residual
        self.kx = 0.0
        self.ky = 0.0


class HelmholtzMultigrid:
    r"""Multigrid solver for the Helmholtz problem on a Cartesian grid.

    The solved equation reads :math:`a u - \nabla \cdot (c \nabla u) = b` with a
    spatially varying coefficient :math:`a` and constant diffusivities :math:`c` along
    each axis.
    """

    coarse_sweeps: int = 20
    """int: number of relaxation sweeps on the coarsest level"""

    def __init__(self, grid: CartesianGrid, coarsest_size: int | None = None):
        """
        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                The finest grid on which the problem is solved
            coarsest_size (int, optional):
                Minimal number of cells per axis of the coarsest grid. The value is
                read from the configuration if it is omitted.
        """
        if grid.dim != 2:
            raise DimensionError("Multigrid solver is only implemented for 2d grids")
        if coarsest_size is None:
            coarsest_size = config["multigrid.coarsest_size"]
        self.grid = grid
        self.levels = [_Level(g) for g in grid.levels(coarsest_size)]
        _logger.debug(
            "Initialized multigrid hierarchy with shapes %s",
            [level.grid.shape for level in self.levels],
        )

    @property
    def minlevel(self) -> int:
        """int: level of the coarsest grid"""
        return int(np.log2(min(self.levels[-1].grid.shape)))

    def _set_coefficients(self, a: np.ndarray, diffusivity: Sequence[float]) -> None:
        """Set the operator coefficients on all levels."""
        self.levels[0].a[...] = a
        for fine, coarse in zip(self.levels[:-1], self.levels[1:]):
            _restrict(fine.a, coarse.a)
        for level in self.levels:
            hx, hy = level.grid.discretization
            level.kx = diffusivity[0] / hx**2
            level.ky = diffusivity[1] / hy**2

    def _vcycle(self, index: int, relaxations: int) -> None:
        """Perform a V-cycle starting at level `index`"""
        level = self.levels[index]
        if index == len(self.levels) - 1:
            # coarsest level => solve approximately by many relaxations
            _relax(level.u, level.b, level.a, level.kx, level.ky, self.coarse_sweeps)
            return

        _relax(level.u, level.b, level.a, level.kx, level.ky, relaxations)
        _residual(level.u, level.b, level.a, level.kx, level.ky, level.res)

        # solve the residual equation on the coarser grid
        coarse = self.levels[index + 1]
        _restrict(level.res, coarse.b)
        coarse.u[...] = 0
        self._vcycle(index + 1, relaxations)

        # correct the solution and smooth the result
        _prolongate_add(coarse.u, level.u)
        _relax(level.u, level.b, level.a, level.kx, level.ky, relaxations)

    def solve(
        self,
        u: np.ndarray,
        rhs: np.ndarray,
        a: np.ndarray,
        diffusivity: float | Sequence[float],
        *,
        tolerance: float | None = None,
        min_iterations: int | None = None,
        max_iterations: int | None = None,
        relaxations: int | None = None,
        strict: bool = False,
    ) -> MGStats:
        """Solve the Helmholtz problem.

        Args:
            u (:class:`~numpy.ndarray`):
                Initial guess, which is overwritten by the solution
            rhs (:class:`~numpy.ndarray`):
                The right hand side `b`
            a (:class:`~numpy.ndarray`):
                The diagonal coefficient `a`
            diffusivity (float or tuple):
                The diffusivity `c`, possibly different along the two axes
            tolerance (float):
                Maximal absolute residual of the solution
            min_iterations (int):
                Minimal number of V-cycles
            max_iterations (int):
                Maximal number of V-cycles
            relaxations (int):
                Number of smoothing sweeps before and after coarse-grid corrections
            strict (bool):
                Whether to raise :class:`ConvergenceError` when the tolerance was not
                reached. Otherwise, a warning is logged.

        Returns:
            :class:`MGStats`: statistics of the solve
        """
        if tolerance is None:
            tolerance = config["multigrid.tolerance"]
        if min_iterations is None:
            min_iterations = config["multigrid.min_iterations"]
        if max_iterations is None:
            max_iterations = config["multigrid.max_iterations"]
        if relaxations is None:
            relaxations = config["multigrid.relaxations"]
        diffusivity_arr = np.broadcast_to(np.asarray(diffusivity, dtype=float), (2,))

        finest = self.levels[0]
        self._set_coefficients(a, diffusivity_arr)
        finest.b[...] = rhs
        finest.u[1:-1, 1:-1] = u
        _set_ghost_cells(finest.u)

        stats = MGStats(
            sum=float(rhs.sum()), nrelax=int(relaxations), minlevel=self.minlevel
        )
        args = (finest.u, finest.b, finest.a, finest.kx, finest.ky, finest.res)
        stats.resb = stats.resa = _residual(*args)
        while stats.i < max_iterations and (
            stats.i < min_iterations or stats.resa > tolerance
        ):
            self._vcycle(0, relaxations)
            stats.resa = _residual(*args)
            stats.i += 1

        u[...] = finest.u[1:-1, 1:-1]
        if stats.resa > tolerance:
            msg = (
                f"Multigrid solve did not converge after {stats.i} iterations "
                f"(residual {stats.resa:g} > {tolerance:g})"
            )
            if strict:
                raise ConvergenceError(msg)
            _logger.warning(msg)
        return stats


@functools.lru_cache(maxsize=16)
def _get_solver(grid: CartesianGrid, coarsest_size: int) -> HelmholtzMultigrid:
    """Return a (cached) multigrid solver for the given grid."""
    return HelmholtzMultigrid(grid, coarsest_size=coarsest_size)


def _as_array(value, grid: CartesianGrid) -> np.ndarray:
    """Convert a field, an array, or a number to an array on the grid."""
    if value is None:
        return np.zeros(grid.shape)
    if isinstance(value, ScalarField):
        grid.assert_grid_compatible(value.grid)
        return value.data
    return np.broadcast_to(np.asarray(value, dtype=float), grid.shape)


def diffusion(
    field: ScalarField,
    dt: float,
    diffusivity: float | Sequence[float] = 1,
    source: ScalarField | np.ndarray | float | None = None,
    beta: ScalarField | np.ndarray | float | None = None,
    **kwargs,
) -> MGStats:
    r"""Advance `field` by an implicit diffusion step.

    The field is updated in place using a backward Euler step of
    :math:`\partial_t f = D \nabla^2 f + r + \beta f`.

    Args:
        field (:class:`~rdcases.fields.ScalarField`):
            The field that is advanced in time
        dt (float):
            The time step
        diffusivity (float or tuple):
            The diffusivity `D`, possibly different along the two axes
        source (:class:`~rdcases.fields.ScalarField` or array or float, optional):
            The source term `r`
        beta (:class:`~rdcases.fields.ScalarField` or array or float, optional):
            The linear coefficient :math:`\beta`
        **kwargs:
            Additional arguments for :meth:`HelmholtzMultigrid.solve`, e.g., the
            `tolerance` of the solve

    Returns:
        :class:`MGStats`: statistics of the multigrid solve
    """
    if dt <= 0:
        raise ValueError(f"Time step must be positive, not {dt}")
    grid = field.grid
    r = _as_array(source, grid)
    a = 1 - dt * _as_array(beta, grid)
    rhs = field.data + dt * r
    c = dt * np.broadcast_to(np.asarray(diffusivity, dtype=float), (2,))

    solver = _get_solver(grid, config["multigrid.coarsest_size"])
    return solver.solve(field.data, rhs, a, tuple(c), **kwargs)
