"""Module defining classes for tracking results from simulations.

The trackers defined in this module are:

.. autosummary::
   :nosignatures:

   CallbackTracker
   ProgressTracker
   PrintTracker
   ImageTracker
   MovieTracker
"""

from __future__ import annotations

import inspect
import math
import sys
from pathlib import Path
from typing import IO, Any, Callable

import tqdm
import tqdm.auto

from ..fields.base import FieldBase
from ..fields.collection import FieldCollection
from ..fields.scalar import ScalarField
from ..visualization.images import field_to_rgb, write_image
from ..visualization.movies import Movie
from .base import InfoDict, TrackerBase
from .interrupts import InterruptData, IterationInterrupts


def _select_field(state: FieldBase, field: int | str) -> ScalarField:
    """Return a single scalar field from the state."""
    if isinstance(state, FieldCollection):
        return state[field]
    elif isinstance(state, ScalarField):
        return state
    raise TypeError(f"Cannot select a scalar field from {state.__class__.__name__}")


class CallbackTracker(TrackerBase):
    """Tracker calling a function periodically.

    Example:
        The callback tracker can be used to check for conditions during the simulation:

        .. code-block:: python

            def check_simulation(state, time):
                if state[0].average < 0:
                    raise StopIteration

            tracker = CallbackTracker(check_simulation, interrupts=10)
    """

    def __init__(self, func: Callable, interrupts: InterruptData = 1):
        """
        Args:
            func:
                The function to call periodically. The function signature should be
                `(state)` or `(state, time)`, where `state` contains the current state
                as an instance of :class:`~rdcases.fields.base.FieldBase` and `time` is
                a float value indicating the current time. Note that only a view of the
                state is supplied, so the function can adjust the state in-place and it
                can interrupt the simulation by raising :class:`StopIteration`.
            interrupts:
                Determines when the tracker is called
        """
        super().__init__(interrupts=interrupts)
        self._callback = func
        self._num_args = len(inspect.signature(func).parameters)
        if not 0 < self._num_args < 3:
            raise ValueError(
                "`func` must be a function accepting one or two arguments, not "
                f"{self._num_args}"
            )

    def handle(self, field: FieldBase, t: float) -> None:
        if self._num_args == 1:
            self._callback(field)
        else:
            self._callback(field, t)


class ProgressTracker(TrackerBase):
    """Tracker showing the progress of the simulation."""

    name = "progress"

    def __init__(
        self,
        interrupts: InterruptData | None = None,
        *,
        fancy: bool = True,
        ndigits: int = 5,
        leave: bool = True,
    ):
        """
        Args:
            interrupts:
                Determines when the tracker is called. The default value `None` updates
                the progress bar every ten iterations.
            fancy (bool):
                Flag determining whether a fancy progress bar should be used in jupyter
                notebooks (if :mod:`ipywidgets` is installed)
            ndigits (int):
                The number of digits after the decimal point that are shown maximally.
            leave (bool):
                Whether to leave the progress bar after the simulation has finished
        """
        if interrupts is None:
            interrupts = IterationInterrupts(10)
        super().__init__(interrupts=interrupts)
        self.fancy = fancy
        self.ndigits = ndigits
        self.leave = leave

    @property
    def progress_bar_class(self) -> type:
        """type: tqdm class rendering the bar, a widget in notebooks if possible"""
        return tqdm.auto.tqdm if self.fancy else tqdm.tqdm

    def initialize(self, field: FieldBase, info: InfoDict = None) -> float:
        result = super().initialize(field, info)

        controller_info = {} if info is None else info.get("controller", {})
        self.progress_bar = self.progress_bar_class(
            total=controller_info.get("t_end"),
            initial=controller_info.get("t_start", 0),
            leave=self.leave,
        )
        self.progress_bar.set_description("Initializing")
        return result

    def handle(self, field: FieldBase, t: float) -> None:
        if self.progress_bar.total:
            t_new = min(t, self.progress_bar.total)
        else:
            t_new = t
        self.progress_bar.n = round(t_new, self.ndigits)
        self.progress_bar.set_description("")

    def finalize(self, info: InfoDict = None) -> None:
        super().finalize(info)
        self.progress_bar.set_description("")

        # limit progress bar to 100%
        controller_info = {} if info is None else info.get("controller", {})
        t_final = controller_info.get("t_final", -math.inf)
        t_end = controller_info.get("t_end", -math.inf)
        if t_final >= t_end and self.progress_bar.total:
            self.progress_bar.n = self.progress_bar.total
            self.progress_bar.refresh()
        self.progress_bar.close()


class PrintTracker(TrackerBase):
    """Tracker printing a line with solver statistics to a stream.

    Each line contains the iteration, the time, the last time step, and the number of
    multigrid cycles needed for each field in the last step, separated by spaces.
    """

    name = "print"

    def __init__(self, interrupts: InterruptData = 1, stream: IO[str] | None = None):
        """
        Args:
            interrupts:
                Determines when the tracker is called
            stream:
                The stream used for printing (default: standard error)
        """
        super().__init__(interrupts=interrupts)
        self.stream = stream

    def format_line(self, t: float) -> str:
        """Return the line describing the current state of the simulation."""
        solver_info: dict[str, Any] = self._info.get("solver", {})
        items = [str(self.iteration), f"{t:g}", f"{solver_info.get('dt', 0):g}"]
        items.extend(str(stats.i) for stats in solver_info.get("mgstats", []))
        return " ".join(items)

    def handle(self, field: FieldBase, t: float) -> None:
        stream = sys.stderr if self.stream is None else self.stream
        stream.write(self.format_line(t) + "\n")
        stream.flush()


class ImageTracker(TrackerBase):
    """Tracker writing an image of a field to a file."""

    def __init__(
        self,
        filename: str | Path,
        interrupts: InterruptData = 1,
        *,
        field: int | str = 0,
        **kwargs,
    ):
        r"""
        Args:
            filename (str):
                Path of the image. The placeholders `{t}` and `{i}` are replaced by the
                current time and iteration, respectively.
            interrupts:
                Determines when the tracker is called
            field (int or str):
                Index or label of the field that is rendered
            \**kwargs:
                Arguments forwarded to :func:`~rdcases.visualization.images.field_to_rgb`
        """
        super().__init__(interrupts=interrupts)
        self.filename = str(filename)
        self.field = field
        self.kwargs = kwargs
        self.written: list[Path] = []

    def handle(self, field: FieldBase, t: float) -> None:
        path = self.filename.format(t=t, i=self.iteration)
        scalar_field = _select_field(field, self.field)
        self.written.append(write_image(scalar_field, path, **self.kwargs))


class MovieTracker(TrackerBase):
    """Tracker appending rendered frames of a field to a movie."""

    def __init__(
        self,
        movie: Movie | str | Path,
        interrupts: InterruptData = 1,
        *,
        field: int | str = 0,
        **kwargs,
    ):
        r"""
        Args:
            movie (:class:`~rdcases.visualization.movies.Movie` or str):
                The movie to which frames are added. If a path is given, a movie is
                created and closed when the simulation finishes. Otherwise, the caller
                is responsible for closing the movie, which allows adding frames from
                several simulations.
            interrupts:
                Determines when the tracker is called
            field (int or str):
                Index or label of the field that is rendered
            \**kwargs:
                Arguments forwarded to :func:`~rdcases.visualization.images.field_to_rgb`
        """
        super().__init__(interrupts=interrupts)
        if isinstance(movie, Movie):
            self.movie = movie
            self._owns_movie = False
        else:
            self.movie = Movie(movie)
            self._owns_movie = True
        self.field = field
        self.kwargs = kwargs

    def handle(self, field: FieldBase, t: float) -> None:
        scalar_field = _select_field(field, self.field)
        self.movie.add_frame(field_to_rgb(scalar_field, **self.kwargs))

    def finalize(self, info: InfoDict = None) -> None:
        super().finalize(info)
        if self._owns_movie:
            self.movie.close()


__all__ = [
    "CallbackTracker",
    "ProgressTracker",
    "PrintTracker",
    "ImageTracker",
    "MovieTracker",
]
