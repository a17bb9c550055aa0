"""Functions for interacting with FFmpeg.

.. autosummary::
   :nosignatures:

   FFmpegFormat
   formats
   import_ffmpeg
"""

from __future__ import annotations

import types
import warnings
from dataclasses import dataclass

import numpy as np
from numpy.typing import DTypeLike


@dataclass
class FFmpegFormat:
    """Defines a FFmpeg format used for storing images in a video.

    Note:
        All pixel formats supported by FFmpeg can be obtained by running
        :code:`ffmpeg -pix_fmts`. However, not all pixel formats are supported by all
        codecs. Supported pixel formats are listed in the output of
        :code:`ffmpeg -h encoder=<ENCODER>`.
    """

    pix_fmt_file: str
    """str: name of the pixel format used in the codec"""
    pix_fmt_data: str
    """str: name of the pixel format used in the frame data"""
    channels: int
    """int: number of color channels in this pixel format"""
    dtype: DTypeLike
    """Numpy dtype corresponding to the data of a single channel."""
    codec: str = "libx264"
    """str: name of the codec that supports this pixel format"""

    @property
    def max_value(self) -> int:
        """Maximal value stored in a color channel."""
        return int(np.iinfo(self.dtype).max)

    def data_to_frame(self, normalized_data: np.ndarray) -> np.ndarray:
        """Converts normalized data to data being stored in a color channel."""
        data = np.clip(normalized_data, 0, 1) * self.max_value
        return np.ascontiguousarray(np.round(data), dtype=self.dtype)  # type: ignore


formats = {
    # widely playable formats (H.264 with chroma subsampling)
    "yuv420p": FFmpegFormat(
        pix_fmt_file="yuv420p", pix_fmt_data="rgb24", channels=3, dtype=np.uint8
    ),
    "gray": FFmpegFormat(
        pix_fmt_file="gray", pix_fmt_data="gray", channels=1, dtype=np.uint8
    ),
    # lossless formats
    "rgb24": FFmpegFormat(
        pix_fmt_file="rgb24",
        pix_fmt_data="rgb24",
        channels=3,
        dtype=np.uint8,
        codec="libx264rgb",
    ),
}
"""Dict of pre-defined :class:`FFmpegFormat` formats."""


def import_ffmpeg() -> types.ModuleType:
    """Import `ffmpeg` package, warning when incorrect package is installed."""
    from importlib.metadata import packages_distributions

    # check whether `ffmpeg` refers to the correct package
    packages = packages_distributions().get("ffmpeg", [])
    if len(packages) == 1:
        name = packages[0]
        if name != "ffmpeg-python":
            warnings.warn(
                f"Expected `ffmpeg-python` package, but found `{name}`", ImportWarning
            )
    elif len(packages) > 1:
        warnings.warn(
            f"Expected `ffmpeg-python` package, but found {packages}", ImportWarning
        )

    import ffmpeg

    return ffmpeg  # type: ignore
