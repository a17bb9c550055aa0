"""Functions for creating movies of simulation results.

.. autosummary::
   :nosignatures:

   Movie
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np

from .. import config
from ..tools import ffmpeg as FFmpeg
from ..tools.misc import module_available


class Movie:
    """Class for creating movies from RGB frames using FFmpeg.

    Frames are piped to an `ffmpeg` process, which is started when the first frame
    arrives. All frames need to have the same size.

    Note:
        This class requires the :mod:`ffmpeg-python` package and the `ffmpeg` program
        needs to be installed in a system path.
    """

    _logger = logging.getLogger(__name__ + ".Movie")

    def __init__(
        self,
        filename: str | Path,
        framerate: float | None = None,
        *,
        video_format: str = "yuv420p",
        bitrate: int = -1,
        loglevel: str = "warning",
    ):
        """
        Args:
            filename (str):
                The filename where the movie is stored. The suffix of this path also
                determines the container format.
            framerate (float):
                The number of frames per second. The value is read from the
                configuration if it is omitted.
            video_format (str):
                Identifier for a video format from :data:`~rdcases.tools.ffmpeg.formats`
            bitrate (int):
                The bitrate of the movie (in kilobits per second). The default value of
                -1 let's FFmpeg choose an appropriate bitrate.
            loglevel (str):
                FFmpeg log level determining the amount of data sent to stdout.
        """
        if not module_available("ffmpeg"):
            raise ModuleNotFoundError("`Movie` needs `ffmpeg-python` package")
        self.filename = Path(filename)
        if framerate is None:
            framerate = config["output.framerate"]
        self.framerate = framerate
        self.bitrate = bitrate
        self.loglevel = loglevel
        self._format = FFmpeg.formats[video_format]
        self._ffmpeg: Any = None
        self._frame_shape: tuple[int, ...] | None = None
        self.num_frames = 0

    def __del__(self):
        self.close()

    def __enter__(self) -> Movie:
        return self

    def __exit__(self, exc_type, exc_value, exc_traceback):
        self.close()

    def _start(self, frame: np.ndarray) -> None:
        """Start the ffmpeg process for frames like `frame`"""
        ffmpeg = FFmpeg.import_ffmpeg()  # lazy loading so it's not a hard dependence

        height, width = frame.shape[:2]
        self._frame_shape = frame.shape
        self._logger.debug("Start ffmpeg process for `%s`", self.filename)
        f_input = ffmpeg.input(
            "pipe:",
            format="rawvideo",
            s=f"{width}x{height}",
            pixel_format=self._format.pix_fmt_data,
            framerate=self.framerate,
            loglevel=self.loglevel,
        )
        output_args = {
            "vcodec": self._format.codec,
            "pix_fmt": self._format.pix_fmt_file,
        }
        if self.bitrate > 0:
            output_args["video_bitrate"] = str(self.bitrate)
        f_output = f_input.output(filename=str(self.filename), **output_args)
        self._ffmpeg = f_output.overwrite_output().run_async(pipe_stdin=True)

    def add_frame(self, frame: np.ndarray) -> None:
        """Append a frame to the movie.

        Args:
            frame (:class:`~numpy.ndarray`):
                RGB image data of shape `(height, width, 3)`
        """
        frame = np.asarray(frame)
        if frame.ndim == 2:
            frame = frame[..., np.newaxis]
        if frame.shape[-1] != self._format.channels:
            raise ValueError(
                f"Frame has {frame.shape[-1]} channels, but the video format expects "
                f"{self._format.channels}"
            )
        if self._ffmpeg is None:
            self._start(frame)
        elif frame.shape != self._frame_shape:
            raise ValueError(f"Frame shape {frame.shape} != {self._frame_shape}")

        data = np.ascontiguousarray(frame, dtype=self._format.dtype)
        self._ffmpeg.stdin.write(data.tobytes())
        self.num_frames += 1

    def close(self) -> None:
        """Finish writing the movie."""
        if getattr(self, "_ffmpeg", None) is not None:
            self._logger.info(
                "Close movie file `%s` with %d frames", self.filename, self.num_frames
            )
            self._ffmpeg.stdin.close()
            self._ffmpeg.wait()
            self._ffmpeg = None
