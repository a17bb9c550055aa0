"""Package that defines reaction-diffusion equations.

.. autosummary::
   :nosignatures:

   ~base.ReactionDiffusionPDE
   ~brusselator.BrusselatorPDE
"""

from .base import ReactionDiffusionPDE  # noqa: F401
from .brusselator import BrusselatorPDE  # noqa: F401
