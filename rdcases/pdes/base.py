"""Base class for defining reaction-diffusion equations."""

from __future__ import annotations

import copy
import logging
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Union

import numpy as np

from ..fields.collection import FieldCollection

if TYPE_CHECKING:
    from ..solvers.base import SolverBase
    from ..solvers.controller import TRangeType
    from ..trackers.base import TrackerCollectionDataType


_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for PDEs."""

ReactionTerm = Union[np.ndarray, float, None]


class ReactionDiffusionPDE(metaclass=ABCMeta):
    r"""Base class for systems of reaction-diffusion equations.

    Each field :math:`c_i` of the state obeys

    .. math::
        \partial_t c_i = D_i \nabla^2 c_i + r_i + \beta_i c_i

    where the source :math:`r_i` and the linear coefficient :math:`\beta_i` may depend
    on all fields. Subclasses define these reaction terms in
    :meth:`reaction_terms`, which allows the implicit solver to treat the linear part of
    the reactions together with diffusion.
    """

    diagnostics: dict[str, Any]
    """dict: Diagnostic information (available after the PDE has been solved)"""

    variables: tuple[str, ...] = ()
    """tuple: labels of the fields of the state"""

    _logger: logging.Logger

    def __init__(self, diffusivity: Sequence[float]):
        """
        Args:
            diffusivity (list of float):
                The diffusivity of each field
        """
        self.diffusivity = [float(d) for d in diffusivity]
        if self.variables and len(self.variables) != len(self.diffusivity):
            raise ValueError(
                f"Expected {len(self.variables)} diffusivities, got "
                f"{len(self.diffusivity)}"
            )
        self.diagnostics = {}

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)
        # create logger for this specific PDE class
        cls._logger = _base_logger.getChild(cls.__qualname__)

    @abstractmethod
    def reaction_terms(
        self, state: FieldCollection, index: int, t: float = 0
    ) -> tuple[ReactionTerm, ReactionTerm]:
        """Return the reaction terms of a single field.

        Args:
            state (:class:`~rdcases.fields.FieldCollection`):
                The current state. When fields are updated sequentially, fields with a
                lower index already contain their updated values.
            index (int):
                The index of the field whose reaction terms are requested
            t (float):
                The current time

        Returns:
            tuple: the source :math:`r_i` and the linear coefficient :math:`\\beta_i`
        """

    def evolution_rate(self, state: FieldCollection, t: float = 0) -> FieldCollection:
        """Evaluate the right hand side of the PDE.

        Args:
            state (:class:`~rdcases.fields.FieldCollection`):
                The fields at the current time point
            t (float):
                The current time point

        Returns:
            :class:`~rdcases.fields.FieldCollection`:
                Fields describing the evolution rate of the PDE
        """
        result = state.copy()
        for index, field in enumerate(state):
            source, beta = self.reaction_terms(state, index, t)
            rate = self.diffusivity[index] * field.laplace().data
            if source is not None:
                rate = rate + source
            if beta is not None:
                rate = rate + beta * field.data
            result[index] = rate
        return result

    def solve(
        self,
        state: FieldCollection,
        t_range: TRangeType,
        dt: float | None = None,
        tracker: TrackerCollectionDataType = "auto",
        *,
        solver: str | type[SolverBase] = "splitting",
        ret_info: bool = False,
        **kwargs,
    ) -> FieldCollection | tuple[FieldCollection, dict[str, Any]]:
        """Solves the partial differential equation.

        The method constructs a suitable solver (:class:`~rdcases.solvers.SolverBase`)
        and controller (:class:`~rdcases.solvers.Controller`) to advance the state over
        the temporal range specified by `t_range`.

        Args:
            state (:class:`~rdcases.fields.FieldCollection`):
                The initial state (which also defines the spatial grid)
            t_range (float or tuple):
                Sets the time range for which the PDE is solved. If only a single value
                is given, it is interpreted as `t_end` and the time range is
                `(0, t_end)`.
            dt (float):
                The maximal time step. Time steps are reduced so the simulation hits
                the times of events exactly.
            tracker:
                Defines trackers that process the state of the simulation at specified
                times or iterations
            solver (str or class):
                Specifies the method for solving the differential equation, either as a
                name or as a subclass of :class:`~rdcases.solvers.SolverBase`
            ret_info (bool):
                Flag determining whether diagnostic information about the solver process
                should be returned
            **kwargs:
                Additional keyword arguments are forwarded to the solver class

        Returns:
            :class:`~rdcases.fields.FieldCollection`:
            The state at the final time point. If `ret_info == True`, a tuple with the
            final state and a dictionary with additional information is returned.
        """
        from ..solvers import Controller
        from ..solvers.base import SolverBase

        if isinstance(solver, str):
            solver_obj = SolverBase.from_name(solver, pde=self, dt_max=dt, **kwargs)
        elif isinstance(solver, type) and issubclass(solver, SolverBase):
            solver_obj = solver(self, dt_max=dt, **kwargs)
        else:
            raise TypeError(f"Solver {solver} is not supported")

        controller = Controller(solver_obj, t_range=t_range, tracker=tracker)
        try:
            final_state = controller.run(state)
        finally:
            # copy diagnostic information to the PDE instance
            self.diagnostics.update(controller.diagnostics)

        if ret_info:
            return final_state, copy.deepcopy(self.diagnostics)
        return final_state
