"""Base classes for trackers."""

from __future__ import annotations

import logging
import math
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from typing import Any, Optional, Union

from ..fields.base import FieldBase
from ..tools.misc import module_available
from .interrupts import InterruptData, parse_interrupt

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for trackers."""

InfoDict = Optional[dict[str, Any]]
TrackerDataType = Union["TrackerBase", str]


class FinishedSimulation(StopIteration):
    """Exception for signaling that simulation finished successfully."""


class TrackerBase(metaclass=ABCMeta):
    """Base class for implementing trackers."""

    _logger: logging.Logger
    _subclasses: dict[str, type[TrackerBase]] = {}  # all inheriting classes

    def __init__(self, interrupts: InterruptData = 1):
        """
        Args:
            interrupts:
                Determines when the tracker is called. Numbers imply a constant spacing
                in simulation time, lists give fixed times, and an instance of
                :class:`~rdcases.trackers.interrupts.IterationInterrupts` selects
                iterations.
        """
        self.interrupt = parse_interrupt(interrupts)
        self._info: dict[str, Any] = {}

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)

        # create logger for this specific tracker class
        cls._logger = _base_logger.getChild(cls.__qualname__)

        # register all subclasses to reconstruct them later
        if hasattr(cls, "name"):
            assert cls.name != "auto"
            cls._subclasses[cls.name] = cls

    @classmethod
    def from_data(cls, data: TrackerDataType, **kwargs) -> TrackerBase:
        """Create tracker class from given data.

        Args:
            data (str or TrackerBase): Data describing the tracker

        Returns:
            :class:`TrackerBase`: An instance representing the tracker
        """
        if isinstance(data, TrackerBase):
            return data
        elif isinstance(data, str):
            try:
                tracker_cls = cls._subclasses[data]
            except KeyError as err:
                trackers = sorted(cls._subclasses.keys())
                raise ValueError(f"Tracker `{data}` is not in {trackers}") from err
            return tracker_cls(**kwargs)
        else:
            raise ValueError(f"Unsupported tracker format: `{data}`.")

    @property
    def iteration(self) -> int:
        """int: the current iteration of the simulation"""
        return int(self._info.get("controller", {}).get("iteration", 0))

    def initialize(self, field: FieldBase, info: InfoDict = None) -> float:
        """Initialize the tracker with information about the simulation.

        Args:
            field (:class:`~rdcases.fields.base.FieldBase`):
                An example of the data that will be analyzed by the tracker
            info (dict):
                Extra information from the simulation. The dictionary is kept, so
                trackers can access information that is updated during the simulation.

        Returns:
            float: The first time (or iteration) the tracker needs to handle data
        """
        self._info = {} if info is None else info
        if self.interrupt.unit == "iteration":
            return self.interrupt.initialize(self.iteration)
        t_start = self._info.get("controller", {}).get("t_start", 0)
        return self.interrupt.initialize(t_start)

    @abstractmethod
    def handle(self, field: FieldBase, t: float) -> None:
        """Handle data supplied to this tracker.

        Args:
            field (:class:`~rdcases.fields.base.FieldBase`):
                The current state of the simulation
            t (float):
                The associated time
        """

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the tracker, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """


TrackerCollectionDataType = Union[Sequence[TrackerDataType], TrackerDataType, None]


class TrackerCollection:
    """List of trackers providing methods to handle them efficiently.

    Attributes:
        trackers (list):
            List of the trackers in the collection
    """

    tracker_action_times: list[float]
    """list: times (or iterations) at which the trackers need to be handled next"""
    time_next_action: float
    """float: the time of the next time-based interrupt of the simulation"""

    def __init__(self, trackers: list[TrackerBase] | None = None):
        """
        Args:
            trackers: List of trackers that are to be handled.
        """
        if trackers is None:
            self.trackers: list[TrackerBase] = []
        elif not hasattr(trackers, "__iter__"):
            raise ValueError(f"`trackers` must be a list of trackers, not {trackers}")
        else:
            self.trackers = list(trackers)

        # do not check trackers before everything was initialized
        self.tracker_action_times = []
        self.time_next_action = math.inf

    def __len__(self) -> int:
        """Returns the number of trackers in the collection."""
        return len(self.trackers)

    @classmethod
    def from_data(cls, data: TrackerCollectionDataType, **kwargs) -> TrackerCollection:
        """Create tracker collection from given data.

        Args:
            data: Data describing the tracker collection

        Returns:
            :class:`TrackerCollection`:
            An instance representing the tracker collection
        """
        if data == "auto":
            data = "progress" if module_available("tqdm") else None

        if data is None:
            trackers: list[TrackerBase] = []
        elif isinstance(data, TrackerCollection):
            trackers = data.trackers
        elif isinstance(data, TrackerBase):
            trackers = [data]
        elif isinstance(data, str):
            trackers = [TrackerBase.from_data(data, **kwargs)]
        elif isinstance(data, (list, tuple)):
            # initialize trackers from a sequence
            trackers, interrupt_ids = [], set()
            for tracker in data:
                if tracker is not None:
                    tracker_obj = TrackerBase.from_data(tracker)
                    if id(tracker_obj.interrupt) in interrupt_ids:
                        # different trackers must never share an interrupt instance
                        tracker_obj.interrupt = tracker_obj.interrupt.copy()
                    interrupt_ids.add(id(tracker_obj.interrupt))
                    trackers.append(tracker_obj)
        else:
            raise TypeError(f"Cannot initialize trackers from class `{data.__class__}`")

        return cls(trackers)

    def _update_next_action(self) -> float:
        """Determine the next time at which a time-based tracker needs handling."""
        times = [
            t_next
            for tracker, t_next in zip(self.trackers, self.tracker_action_times)
            if tracker.interrupt.unit == "time"
        ]
        self.time_next_action = min(times, default=math.inf)
        return self.time_next_action

    def initialize(self, field: FieldBase, info: InfoDict = None) -> float:
        """Initialize the tracker with information about the simulation.

        Args:
            field (:class:`~rdcases.fields.base.FieldBase`):
                An example of the data that will be analyzed by the tracker
            info (dict):
                Extra information from the simulation

        Returns:
            float: The first time a time-based tracker needs to handle data
        """
        self.tracker_action_times = [
            tracker.initialize(field, info) for tracker in self.trackers
        ]
        return self._update_next_action()

    def handle(
        self, state: FieldBase, t: float, iteration: int = 0, atol: float = 1.0e-8
    ) -> float:
        """Handle all trackers.

        Args:
            state (:class:`~rdcases.fields.base.FieldBase`):
                The current state of the simulation
            t (float):
                The associated time
            iteration (int):
                The current iteration
            atol (float):
                An absolute tolerance that is used to determine whether a time-based
                tracker should be called now

        Returns:
            float: The next time the simulation needs to be interrupted to handle a
            time-based tracker.
        """
        # check each tracker to see whether we need to handle it
        stop_iteration_err = None
        for i, t_next in enumerate(self.tracker_action_times):
            interrupt = self.trackers[i].interrupt
            if interrupt.unit == "iteration":
                value, tol = iteration, 0.5
            else:
                value, tol = t, atol
            if value > t_next - tol:
                try:
                    self.trackers[i].handle(state, t)
                except StopIteration as err:
                    # handle all other trackers before stopping the iteration
                    stop_iteration_err = err

                # calculate next event (may skip some if too close)
                self.tracker_action_times[i] = interrupt.next(value)

        if stop_iteration_err is not None:
            raise stop_iteration_err

        return self._update_next_action()

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the tracker, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """
        for tracker in self.trackers:
            tracker.finalize(info=info)


def get_named_trackers() -> dict[str, type[TrackerBase]]:
    """Returns all named trackers.

    Returns:
        dict: a mapping of names to the actual tracker classes.
    """
    return TrackerBase._subclasses.copy()
