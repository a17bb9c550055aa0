"""
Defines fields, which contain the actual data stored on a discrete grid.

.. autosummary::
   :nosignatures:

   ~scalar.ScalarField
   ~collection.FieldCollection
"""

from .collection import FieldCollection
from .scalar import ScalarField
