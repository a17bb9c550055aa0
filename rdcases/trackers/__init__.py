"""Classes for tracking simulation results in controlled interrupts.

Trackers are classes that periodically receive the state of the simulation to analyze,
store, or output it. The trackers defined in this module are:

.. autosummary::
   :nosignatures:

   ~trackers.CallbackTracker
   ~trackers.ProgressTracker
   ~trackers.PrintTracker
   ~trackers.ImageTracker
   ~trackers.MovieTracker

Some trackers can also be referenced by name for convenience when using them in
simulations. The list of supported names is returned by
:func:`~rdcases.trackers.base.get_named_trackers`.

Multiple trackers can be collected in a :class:`~base.TrackerCollection`, which provides
methods for handling them efficiently. Moreover, custom trackers can be implemented by
deriving from :class:`~.trackers.base.TrackerBase`. Note that trackers generally receive
a view into the current state, implying that they can adjust the state by modifying it
in-place.

Interrupts determine when trackers are called:

.. autosummary::
   :nosignatures:

   ~interrupts.ConstantInterrupts
   ~interrupts.FixedInterrupts
   ~interrupts.IterationInterrupts
"""

from .base import FinishedSimulation, TrackerCollection, get_named_trackers  # noqa: F401
from .interrupts import (  # noqa: F401
    ConstantInterrupts,
    FixedInterrupts,
    IterationInterrupts,
    parse_interrupt,
)
from .trackers import *  # noqa: F403
