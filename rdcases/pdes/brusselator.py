r"""The Brusselator reaction-diffusion system.

The dimensionless equations read

.. math::
    \partial_t C_1 &= D_1 \nabla^2 C_1
        + k \left[k_a - (k_b + 1) C_1 + C_1^2 C_2\right] \\
    \partial_t C_2 &= D_2 \nabla^2 C_2 + k \left[k_b C_1 - C_1^2 C_2\right]

The homogeneous stationary state :math:`C_1 = k_a`, :math:`C_2 = k_b/k_a` becomes
unstable with respect to Turing patterns when :math:`k_b` exceeds

.. math::
    k_b^\mathrm{crit} = \left(1 + k_a \sqrt{D_1/D_2}\right)^2

and the distance to this bifurcation is measured by
:math:`\mu = k_b / k_b^\mathrm{crit} - 1`.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ..fields import FieldCollection, ScalarField
from ..grids import CartesianGrid
from .base import ReactionDiffusionPDE


class BrusselatorPDE(ReactionDiffusionPDE):
    """Brusselator with diffusive mobility."""

    variables = ("C1", "C2")

    def __init__(
        self,
        k: float = 1,
        ka: float = 4.5,
        kb: float = 9,
        diffusivity: Sequence[float] = (1, 8),
    ):
        """
        Args:
            k (float):
                The overall reaction rate
            ka (float):
                The production rate of the first species
            kb (float):
                The conversion rate of the first into the second species
            diffusivity (list of float):
                The diffusivities of the two species
        """
        super().__init__(diffusivity)
        self.k = float(k)
        self.ka = float(ka)
        self.kb = float(kb)

    @classmethod
    def from_control_parameter(
        cls, mu: float, k: float = 1, ka: float = 4.5, D: float = 8
    ) -> BrusselatorPDE:
        """Create the system at a given distance from the Turing bifurcation.

        Args:
            mu (float):
                The relative distance `kb / kb_crit - 1` from the bifurcation
            k (float):
                The overall reaction rate
            ka (float):
                The production rate of the first species
            D (float):
                The diffusivity of the second species relative to the first one

        Returns:
            :class:`BrusselatorPDE`: The configured system
        """
        kb = cls.critical_kb(ka, D) * (1 + mu)
        return cls(k=k, ka=ka, kb=kb, diffusivity=(1, D))

    @staticmethod
    def critical_kb(ka: float, D: float) -> float:
        """Return the critical value of `kb` at the Turing bifurcation.

        Args:
            ka (float):
                The production rate of the first species
            D (float):
                The ratio of the diffusivities of the second and the first species
        """
        nu = np.sqrt(1 / D)
        return float((1 + ka * nu) ** 2)

    @property
    def mu(self) -> float:
        """float: the relative distance from the Turing bifurcation"""
        D = self.diffusivity[1] / self.diffusivity[0]
        return self.kb / self.critical_kb(self.ka, D) - 1

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(k={self.k:g}, ka={self.ka:g}, kb={self.kb:g}, "
            f"diffusivity={self.diffusivity})"
        )

    def stationary_state(self, grid: CartesianGrid) -> FieldCollection:
        """Return the homogeneous stationary state.

        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                The grid on which the state is defined
        """
        c1 = ScalarField(grid, self.ka, label="C1")
        c2 = ScalarField(grid, self.kb / self.ka, label="C2")
        return FieldCollection([c1, c2])

    def get_initial_state(
        self,
        grid: CartesianGrid,
        noise: float = 0.01,
        *,
        rng: np.random.Generator | None = None,
    ) -> FieldCollection:
        """Prepare the stationary state with a small perturbation of `C2`

        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                The grid on which the state is defined
            noise (float):
                Amplitude of the uniformly distributed perturbation
            rng (:class:`~numpy.random.Generator`):
                Random number generator (default: :func:`~numpy.random.default_rng()`)
        """
        state = self.stationary_state(grid)
        if noise:
            perturbation = ScalarField.random_uniform(grid, -1, 1, rng=rng)
            state[1] += noise * perturbation.data
        return state

    def reaction_terms(
        self, state: FieldCollection, index: int, t: float = 0
    ) -> tuple[np.ndarray | float, np.ndarray]:
        c1, c2 = state.data
        if index == 0:
            return self.k * self.ka, self.k * (c1 * c2 - self.kb - 1)
        elif index == 1:
            return self.k * self.kb * c1, -self.k * c1**2
        raise IndexError(f"Brusselator has no field with index {index}")
