"""Package that contains base classes for solvers.

Beside the abstract base class defining the interfaces, we also provide the function
:func:`dtnext`, which adjusts time steps so simulations hit the times of events exactly.
"""

from __future__ import annotations

import logging
import math
import warnings
from abc import ABCMeta, abstractmethod
from inspect import isabstract
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..fields.collection import FieldCollection
    from ..pdes.base import ReactionDiffusionPDE


_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for solvers."""

TEPS = 1e-9
"""float: relative tolerance used when comparing time steps"""


class ConvergenceError(RuntimeError):
    """Indicates that an implicit step did not converge."""


def dtnext(t: float, dt: float, t_next_event: float = math.inf) -> float:
    """Determine the next time step, so the simulation hits the next event exactly.

    The returned time step never exceeds `dt`. If an event lies ahead, the time step is
    chosen such that an integer number of equal steps reaches the event time.

    Args:
        t (float):
            The current time
        dt (float):
            The maximal time step
        t_next_event (float):
            The time of the next event. Infinity indicates that no event lies ahead.

    Returns:
        float: The time step that should be used
    """
    if dt <= 0:
        raise ValueError(f"Time step must be positive, not {dt}")
    if math.isfinite(t_next_event) and t_next_event > t:
        n = int((t_next_event - t) / dt)
        if n == 0:
            dt = t_next_event - t
        else:
            dt1 = (t_next_event - t) / n
            if dt1 > dt * (1 + TEPS):
                dt = (t_next_event - t) / (n + 1)
            elif dt1 < dt:
                dt = dt1
    return dt


class SolverBase(metaclass=ABCMeta):
    """Base class for PDE solvers."""

    dt_default: float = 1.0
    """float: default maximal time step used if no time step was specified"""

    _subclasses: dict[str, type[SolverBase]] = {}
    """dict: dictionary of all inheriting classes"""

    _logger: logging.Logger

    def __init__(self, pde: ReactionDiffusionPDE, *, dt_max: float | None = None):
        """
        Args:
            pde (:class:`~rdcases.pdes.base.ReactionDiffusionPDE`):
                The partial differential equation that should be solved
            dt_max (float):
                The maximal time step. Time steps are reduced when necessary to hit the
                times of events exactly.
        """
        self.pde = pde
        self.dt_max = self.dt_default if dt_max is None else float(dt_max)
        self.info: dict[str, Any] = {"class": self.__class__.__name__, "steps": 0}
        if self.pde:
            self.info["pde_class"] = self.pde.__class__.__name__

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)

        # create logger for this specific solver class
        cls._logger = _base_logger.getChild(cls.__qualname__)

        # register all subclasses to reconstruct them later
        if not isabstract(cls):
            if cls.__name__ in cls._subclasses:
                warnings.warn(f"Redefining class {cls.__name__}", stacklevel=2)
            cls._subclasses[cls.__name__] = cls
        if hasattr(cls, "name") and cls.name:
            if cls.name in cls._subclasses:
                _base_logger.warning("Solver `%s` is already registered", cls.name)
            cls._subclasses[cls.name] = cls

    @classmethod
    def from_name(cls, name: str, pde: ReactionDiffusionPDE, **kwargs) -> SolverBase:
        r"""Create solver class based on its name.

        Args:
            name (str):
                The name of the solver to construct
            pde (:class:`~rdcases.pdes.base.ReactionDiffusionPDE`):
                The partial differential equation that should be solved
            \**kwargs:
                Additional arguments for the constructor of the solver

        Returns:
            An instance of a subclass of :class:`SolverBase`
        """
        try:
            solver_class = cls._subclasses[name]
        except KeyError:
            solvers = (
                f"'{solver}'"
                for solver in sorted(cls._subclasses)
                if not solver.endswith("Solver")
            )
            raise ValueError(
                f"Unknown solver method '{name}'. Registered solvers are "
                + ", ".join(solvers)
            ) from None

        return solver_class(pde, **kwargs)

    def next_dt(self, t: float, t_next_event: float = math.inf) -> float:
        """Return the time step of the next iteration.

        Args:
            t (float):
                The current time
            t_next_event (float):
                The time of the next event, which should be hit exactly

        Returns:
            float: The time step
        """
        return dtnext(t, self.dt_max, t_next_event)

    @abstractmethod
    def step(self, state: FieldCollection, t: float, dt: float) -> None:
        """Advance the state by a single time step in place.

        Args:
            state (:class:`~rdcases.fields.FieldCollection`):
                The current state, which is modified
            t (float):
                The current time
            dt (float):
                The time step
        """
