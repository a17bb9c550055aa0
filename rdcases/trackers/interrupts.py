"""Module defining classes for interrupts that determine when trackers are handled.

Interrupts are either based on the simulation time or on the iteration count:

.. autosummary::
   :nosignatures:

   ConstantInterrupts
   FixedInterrupts
   IterationInterrupts
   parse_interrupt
"""

from __future__ import annotations

import copy
import math
import re
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from typing import Literal, TypeVar, Union

import numpy as np

TInterrupt = TypeVar("TInterrupt", bound="InterruptsBase")


class InterruptsBase(metaclass=ABCMeta):
    """Base class for implementing interrupts."""

    unit: Literal["time", "iteration"] = "time"
    """str: whether the interrupts refer to simulation times or iteration counts"""

    dt: float
    """float: current difference between interrupts"""

    def copy(self: TInterrupt) -> TInterrupt:
        return copy.copy(self)

    @abstractmethod
    def initialize(self, t: float) -> float:
        """Initialize the interrupt class.

        Args:
            t (float): The starting time (or iteration) of the simulation

        Returns:
            float: The first time (or iteration) the simulation needs to be interrupted
        """

    @abstractmethod
    def next(self, t: float) -> float:
        """Computes the next interrupt.

        Args:
            t (float):
                The current time (or iteration) of the simulation. The returned value
                lies later than this one, so interrupts might be skipped.

        Returns:
            float: The next time (or iteration)
        """


class FixedInterrupts(InterruptsBase):
    """Interrupts at fixed, predetermined times."""

    def __init__(self, interrupts: np.ndarray | Sequence[float]):
        self.interrupts = np.atleast_1d(np.asarray(interrupts, dtype=float))
        if self.interrupts.ndim != 1:
            raise ValueError("`interrupts` must be a 1d sequence")

    def __repr__(self):
        return f"{self.__class__.__name__}(interrupts={self.interrupts})"

    def copy(self):
        return self.__class__(interrupts=self.interrupts.copy())

    def initialize(self, t: float) -> float:
        self._index = -1
        return self.next(t)

    def next(self, t: float) -> float:
        try:
            # the first interrupt has no predecessor, so the current time is used
            if self._index < 0:
                t_last = t
            else:
                t_last = self.interrupts[self._index]

            # fetch the next entry that is after the current time `t`
            self._index += 1
            t_next = float(self.interrupts[self._index])
            while t_next < t:  # ensure time point lies in the future
                self._index += 1
                t_next = float(self.interrupts[self._index])

            self.dt = t_next - t_last
            return t_next

        except IndexError:
            # iterator has been exhausted -> never break again
            return math.inf


class ConstantInterrupts(InterruptsBase):
    """Interrupts equidistantly spaced in time."""

    def __init__(self, dt: float = 1, t_start: float | None = None):
        """
        Args:
            dt (float):
                The duration between subsequent interrupts. This is measured in
                simulation time units.
            t_start (float, optional):
                The time after which the tracker becomes active. If omitted, the tracker
                starts right away.
        """
        if dt <= 0:
            raise ValueError("Interrupts need a positive spacing")
        self.dt = float(dt)
        self.t_start = None if t_start is None else float(t_start)
        self._t_next: float | None = None  # next time it should be called

    def __repr__(self):
        return f"{self.__class__.__name__}(dt={self.dt:g}, t_start={self.t_start})"

    def initialize(self, t: float) -> float:
        if self.t_start is None:
            self._t_next = t
        else:
            self._t_next = max(t, self.t_start)
        return self._t_next

    def next(self, t: float) -> float:
        # move next interrupt time by the appropriate interrupt
        self._t_next += self.dt  # type: ignore

        # make sure that the new interrupt time is in the future
        if self._t_next <= t:
            n = math.ceil((t - self._t_next) / self.dt)
            self._t_next += self.dt * n
            # adjust in special cases where float-point math fails us
            if self._t_next < t:
                self._t_next += self.dt

        return self._t_next


class IterationInterrupts(InterruptsBase):
    """Interrupts at iterations `start`, `start + every`, `start + 2 * every`, ..."""

    unit = "iteration"

    def __init__(self, every: int = 1, start: int = 0, stop: int | None = None):
        """
        Args:
            every (int):
                The number of iterations between subsequent interrupts
            start (int):
                The first iteration at which the tracker is handled
            stop (int, optional):
                The last iteration at which the tracker may be handled
        """
        if every < 1 or every != int(every):
            raise ValueError("`every` must be a positive integer")
        self.dt = int(every)
        self.start = int(start)
        self.stop = None if stop is None else int(stop)
        self._i_next: float = math.inf

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(every={self.dt}, start={self.start}, "
            f"stop={self.stop})"
        )

    def _checked(self, i: float) -> float:
        """Return `i` unless it lies beyond the last iteration."""
        if self.stop is not None and i > self.stop:
            return math.inf
        return i

    def initialize(self, t: float) -> float:
        if t <= self.start:
            self._i_next = self.start
        else:
            # first iteration of the sequence that is not in the past
            n = math.ceil((t - self.start) / self.dt)
            self._i_next = self.start + n * self.dt
        return self._checked(self._i_next)

    def next(self, t: float) -> float:
        self._i_next += self.dt
        if self._i_next <= t:
            n = math.floor((t - self._i_next) / self.dt) + 1
            self._i_next += n * self.dt
        return self._checked(self._i_next)


InterruptData = Union[InterruptsBase, int, float, str, Sequence[float], np.ndarray]


def parse_interrupt(data: InterruptData) -> InterruptsBase:
    """Create interrupt class from various data formats.

    Args:
        data (str or number or :class:`InterruptsBase`):
            Data determining the interrupt class. If this is a :class:`InterruptsBase`,
            it is simply returned, numbers imply :class:`ConstantInterrupts`, and lists
            are interpreted as :class:`FixedInterrupts`. Instances of
            :class:`IterationInterrupts` can be constructed with the special string
            :code:`"iterations(EVERY, START)"`, where `START` is optional.

    Returns:
        :class:`InterruptsBase`: An instance that represents the interrupt
    """
    if isinstance(data, InterruptsBase):
        # is already the correct class
        return data

    elif isinstance(data, (int, float)):
        # is a number, so we assume a constant interrupt of that duration
        return ConstantInterrupts(data)

    elif isinstance(data, str):
        regex = r"iterations\(\s*([0-9]+)\s*(?:,\s*([0-9]+)\s*)?\)"
        matches = re.fullmatch(regex, data.strip(), re.IGNORECASE)
        if matches:
            every = int(matches.group(1))
            start = int(matches.group(2)) if matches.group(2) else 0
            return IterationInterrupts(every, start=start)
        raise ValueError(f"Could not interpret `{data}` as interrupt")

    elif hasattr(data, "__iter__"):
        # a sequence is supposed to give fixed time points for interrupts
        return FixedInterrupts(data)

    else:
        # anything else we cannot handle
        raise TypeError(f"Cannot parse interrupt data `{data}`")
