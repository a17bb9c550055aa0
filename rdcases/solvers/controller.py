"""Defines a class controlling the simulations of PDEs."""

from __future__ import annotations

import datetime
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Union

from .. import __version__
from ..trackers.base import (
    FinishedSimulation,
    TrackerCollection,
    TrackerCollectionDataType,
)
from .base import SolverBase

if TYPE_CHECKING:
    from ..fields.collection import FieldCollection

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for controller."""

TRangeType = Union[float, tuple[float, float]]


class Controller:
    """Class controlling a simulation.

    The controller advances the simulation iteration by iteration. Before every
    iteration, it handles the trackers whose interrupts are due, either because the
    iteration count or because the simulation time matches. Time steps are adjusted so
    the simulation hits the times of time-based interrupts and the end time exactly.
    The controller also handles errors in the simulations and the trackers, as well as
    user-induced interrupts, e.g., by hitting Ctrl-C to cause a
    :class:`KeyboardInterrupt`. In case of problems, the controller writes additional
    information into :attr:`~Controller.diagnostics`.
    """

    diagnostics: dict[str, Any]
    """dict: diagnostic information (available after simulation finished)"""

    _get_current_time: Callable = time.process_time
    """callable: function to determine the current time for profiling purposes"""

    def __init__(
        self,
        solver: SolverBase,
        t_range: TRangeType,
        tracker: TrackerCollectionDataType = "auto",
    ):
        """
        Args:
            solver (:class:`~rdcases.solvers.base.SolverBase`):
                Solver instance that is used to advance the simulation in time
            t_range (float or tuple):
                Sets the time range for which the simulation is run. If only a single
                value `t_end` is given, the time range is assumed to be `[0, t_end]`.
            tracker:
                Defines trackers that process the state of the simulation at specified
                times or iterations. A tracker is either an instance of
                :class:`~rdcases.trackers.base.TrackerBase` or a string identifying a
                tracker. Multiple trackers can be specified as a list. The default
                value `auto` displays a progress bar.
        """
        self.solver = solver
        self.t_range = t_range  # type: ignore
        self.trackers = TrackerCollection.from_data(tracker)

        # initialize some diagnostic information
        self.info: dict[str, Any] = {}
        self.diagnostics = {
            "controller": self.info,
            "package_version": __version__,
        }

    @property
    def t_range(self) -> tuple[float, float]:
        """tuple: start and end time of the simulation"""
        return self._t_range

    @t_range.setter
    def t_range(self, value: TRangeType):
        """Set start and end time of the simulation.

        Args:
            value (float or tuple):
                Set the time range of the simulation. If a single number is given, it
                specifies the final time and the start time is set to zero. If a tuple
                of two numbers is given they are used as start and end time.
        """
        try:
            self._t_range: tuple[float, float] = (0, float(value))  # type: ignore
        except TypeError as err:  # assume a tuple was given
            if len(value) == 2:  # type: ignore
                self._t_range = tuple(value)  # type: ignore
            else:
                raise ValueError(
                    "t_range must be set to a single number or a tuple of two numbers"
                ) from err
        if self._t_range[1] < self._t_range[0]:
            raise ValueError("The end time must not lie before the start time")

    def _handle_stop_iteration(self, err: Exception, t: float) -> tuple[int, str]:
        """Helper function for handling interrupts raised by trackers."""
        if isinstance(err, FinishedSimulation):
            # tracker determined that the simulation finished
            self.info["successful"] = True
            msg = f"Simulation finished at t={t}"
            msg_level = logging.INFO
            if err.value:
                self.info["stop_reason"] = err.value
                msg += f" ({err.value})"
            else:
                self.info["stop_reason"] = "Tracker raised FinishedSimulation"

        else:
            # tracker determined that there was a problem
            self.info["successful"] = False
            msg = f"Simulation aborted at t={t}"
            msg_level = logging.WARNING
            if getattr(err, "value", None):
                self.info["stop_reason"] = err.value  # type: ignore
                msg += f" ({err.value})"  # type: ignore
            else:
                self.info["stop_reason"] = "Tracker raised StopIteration"

        return msg_level, msg

    def _run(self, state: FieldCollection) -> None:
        """Run the main loop of the simulation.

        Args:
            state:
                The initial state, which will be updated during the simulation.
        """
        t_start, t_end = self.t_range
        get_time = self._get_current_time

        # initialize solver information
        self.info["t_start"] = t_start
        self.info["t_end"] = t_end
        self.info["iteration"] = 0
        self.diagnostics["solver"] = self.solver.info
        profiler = {"solver": 0.0, "tracker": 0.0}
        self.info["profiler"] = profiler

        self.trackers.initialize(state, info=self.diagnostics)
        solver_start = datetime.datetime.now()
        self.info["solver_start"] = str(solver_start)
        atol = 1e-9 * self.solver.dt_max

        # evolve the system from t_start to t_end
        t, iteration = t_start, 0
        prof_start_tracker = get_time()
        _logger.debug("Start simulation at t=%g", t)
        try:
            while True:
                self.info["iteration"] = iteration
                t_next_action = self.trackers.handle(state, t, iteration, atol=atol)
                if t >= t_end - atol:
                    break

                prof_start_solve = get_time()
                profiler["tracker"] += prof_start_solve - prof_start_tracker

                # advance the system by one adaptive step
                t_next_event = min(t_next_action, t_end)
                if t_next_event <= t + atol:
                    t_next_event = t_end
                dt = self.solver.next_dt(t, t_next_event)
                self.solver.step(state, t, dt)
                t += dt
                if abs(t - t_next_event) < atol:
                    t = t_next_event  # avoid accumulating rounding errors
                iteration += 1

                prof_start_tracker = get_time()
                profiler["solver"] += prof_start_tracker - prof_start_solve

        except StopIteration as err:
            # iteration has been interrupted by a tracker
            msg_level, msg = self._handle_stop_iteration(err, t)
            self.diagnostics["last_tracker_time"] = t
            self.diagnostics["last_state"] = state

        except KeyboardInterrupt:
            # iteration has been interrupted by the user
            self.info["successful"] = False
            self.info["stop_reason"] = "User interrupted simulation"
            msg = f"Simulation interrupted at t={t}"
            msg_level = logging.INFO
            self.diagnostics["last_tracker_time"] = t
            self.diagnostics["last_state"] = state

        except Exception:
            # any other exception
            self.diagnostics["last_tracker_time"] = t
            self.diagnostics["last_state"] = state
            raise

        else:
            # reached final time
            self.info["successful"] = True
            self.info["stop_reason"] = "Reached final time"
            msg = f"Simulation finished at t={t_end}."
            msg_level = logging.INFO

        # calculate final statistics
        profiler["tracker"] += get_time() - prof_start_tracker
        duration = datetime.datetime.now() - solver_start
        self.info["solver_duration"] = str(duration)
        self.info["t_final"] = t
        self.info["iterations"] = iteration
        self.trackers.finalize(info=self.diagnostics)

        # show information after a potential progress bar has been deleted
        _logger.log(msg_level, msg)

    def run(self, initial_state: FieldCollection) -> FieldCollection:
        """Run the simulation.

        Diagnostic information about the solver are available in the
        :attr:`~Controller.diagnostics` property of the instance after this function has
        been called.

        Args:
            initial_state (:class:`~rdcases.fields.FieldCollection`):
                The initial state of the simulation. This state will be copied and thus
                not modified by the simulation. Instead, the final state will be
                returned and trackers can be used to record intermediate states.

        Returns:
            The state at the final time point.
        """
        state = initial_state.copy()
        self._run(state)
        return state
