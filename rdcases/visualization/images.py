"""Functions for rendering scalar fields as color images.

.. autosummary::
   :nosignatures:

   get_color_range
   field_to_rgb
   write_image
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from matplotlib import cm, colormaps
from matplotlib.colors import Normalize

from .. import config
from ..fields.scalar import ScalarField
from ..tools.ffmpeg import formats

_logger = logging.getLogger(__name__)


def get_color_range(
    field: ScalarField,
    spread: float | None = None,
    vmin: float | None = None,
    vmax: float | None = None,
) -> tuple[float, float]:
    """Determine the range of values covered by the color map.

    Args:
        field (:class:`~rdcases.fields.ScalarField`):
            The field that is rendered
        spread (float, optional):
            If given, the range covers the average plus or minus `spread` standard
            deviations. Otherwise, the range covers all values of the field.
        vmin (float, optional):
            Explicit lower bound of the range
        vmax (float, optional):
            Explicit upper bound of the range

    Returns:
        tuple: the lower and upper bound
    """
    if vmin is not None and vmax is not None:
        return vmin, vmax
    if spread is None:
        lower, upper = field.min, field.max
    else:
        average, deviation = field.average, spread * field.std
        lower, upper = average - deviation, average + deviation
    return (lower if vmin is None else vmin, upper if vmax is None else vmax)


def field_to_rgb(
    field: ScalarField,
    n: int | None = None,
    *,
    spread: float | None = None,
    linear: bool = False,
    cmap: str = "jet",
    vmin: float | None = None,
    vmax: float | None = None,
) -> np.ndarray:
    """Render a 2d scalar field as an RGB image.

    The first row of the image corresponds to the upper boundary of the domain, so the
    image shows the field with the y-axis pointing upward.

    Args:
        field (:class:`~rdcases.fields.ScalarField`):
            The field that is rendered
        n (int, optional):
            Number of pixels along each axis. The value is read from the configuration
            if it is omitted.
        spread (float, optional):
            The color range covers the average plus or minus `spread` standard
            deviations. If omitted, the full range of values is used.
        linear (bool):
            Use bilinear interpolation instead of the value of the enclosing cell
        cmap (str):
            Name of the matplotlib color map
        vmin (float, optional):
            Explicit lower bound of the color range
        vmax (float, optional):
            Explicit upper bound of the color range

    Returns:
        :class:`~numpy.ndarray`: The image with shape `(n, n, 3)` and dtype uint8
    """
    if n is None:
        n = config["output.image_size"]
    data = field.interpolate_to_image(n, linear=linear)
    lower, upper = get_color_range(field, spread=spread, vmin=vmin, vmax=vmax)

    norm = Normalize(vmin=lower, vmax=upper, clip=True)
    mappable = cm.ScalarMappable(norm=norm, cmap=colormaps[cmap])
    rgba = mappable.to_rgba(data.T[::-1])  # rows run from top to bottom
    return formats["rgb24"].data_to_frame(rgba[..., :3])


def write_image(field: ScalarField, filename: str | Path, **kwargs) -> Path:
    r"""Write a rendered field to an image file.

    The format is determined from the file extension, e.g., PNG.

    Args:
        field (:class:`~rdcases.fields.ScalarField`):
            The field that is rendered
        filename (str or :class:`~pathlib.Path`):
            Path of the image file
        \**kwargs:
            Arguments forwarded to :func:`field_to_rgb`

    Returns:
        :class:`~pathlib.Path`: The path of the written file
    """
    from matplotlib.image import imsave

    path = Path(filename)
    imsave(path, field_to_rgb(field, **kwargs))
    _logger.info("Wrote image `%s`", path)
    return path
