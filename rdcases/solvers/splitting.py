"""Defines an implicit operator splitting solver for reaction-diffusion systems.

The fields of the state are advanced one after another. Each field is updated by an
implicit (backward) Euler step, in which the reaction terms are linearized around the
current state. Fields that have already been advanced enter the reaction terms of the
later fields with their updated values.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import SolverBase
from .multigrid import MGStats, diffusion

if TYPE_CHECKING:
    from ..fields.collection import FieldCollection
    from ..pdes.base import ReactionDiffusionPDE


class ImplicitSplittingSolver(SolverBase):
    """Implicit Euler solver that treats the fields of a state sequentially."""

    name = "splitting"

    def __init__(
        self,
        pde: ReactionDiffusionPDE,
        *,
        dt_max: float | None = None,
        tolerance: float | None = None,
        max_iterations: int | None = None,
        strict: bool = False,
    ):
        """
        Args:
            pde (:class:`~rdcases.pdes.base.ReactionDiffusionPDE`):
                The partial differential equation that should be solved
            dt_max (float):
                The maximal time step
            tolerance (float):
                The maximal residual of the multigrid solves. The value is read from
                the configuration if it is omitted.
            max_iterations (int):
                The maximal number of V-cycles of each multigrid solve
            strict (bool):
                Whether a multigrid solve that did not converge raises
                :class:`~rdcases.solvers.base.ConvergenceError`
        """
        super().__init__(pde, dt_max=dt_max)
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.strict = strict
        self.info["scheme"] = "implicit-splitting"
        self.info["dt"] = 0.0
        self.info["mgstats"] = []

    def step(self, state: FieldCollection, t: float, dt: float) -> None:
        """Advance all fields by a single implicit step.

        Args:
            state (:class:`~rdcases.fields.FieldCollection`):
                The current state, which is modified
            t (float):
                The current time
            dt (float):
                The time step
        """
        if len(state) != len(self.pde.diffusivity):
            raise ValueError(
                f"State has {len(state)} fields, but the PDE describes "
                f"{len(self.pde.diffusivity)}"
            )

        stats: list[MGStats] = []
        for index, field in enumerate(state):
            source, beta = self.pde.reaction_terms(state, index, t)
            stats.append(
                diffusion(
                    field,
                    dt,
                    self.pde.diffusivity[index],
                    source=source,
                    beta=beta,
                    tolerance=self.tolerance,
                    max_iterations=self.max_iterations,
                    strict=self.strict,
                )
            )

        self.info["dt"] = dt
        self.info["mgstats"] = stats
        self.info["steps"] += 1
        if self._logger.isEnabledFor(logging.DEBUG):
            self._logger.debug(
                "Step at t=%g with dt=%g needed %s V-cycles",
                t,
                dt,
                [s.i for s in stats],
            )
