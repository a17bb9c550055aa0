"""
Grids define the domains on which fields and PDEs are discretized.

.. autosummary::
   :nosignatures:

   ~cartesian.CartesianGrid
"""

from .cartesian import CartesianGrid, DimensionError
