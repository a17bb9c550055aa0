"""Solvers define how a PDE is solved, i.e., how the initial state is advanced in time.

.. autosummary::
   :nosignatures:

   ~controller.Controller
   ~splitting.ImplicitSplittingSolver
   ~multigrid.diffusion
   ~multigrid.HelmholtzMultigrid
   ~base.dtnext
"""

from .base import ConvergenceError, SolverBase, dtnext  # noqa: F401
from .controller import Controller  # noqa: F401
from .multigrid import HelmholtzMultigrid, MGStats, diffusion  # noqa: F401
from .splitting import ImplicitSplittingSolver  # noqa: F401
