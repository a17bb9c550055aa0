"""Functions and classes for visualizing simulations.

.. autosummary::
   :nosignatures:

   images
   movies
"""

from .images import field_to_rgb, get_color_range, write_image  # noqa: F401
from .movies import Movie  # noqa: F401
