"""
Package containing several tools required in py-rdcases

.. autosummary::
   :nosignatures:

   config
   ffmpeg
   misc
   numba
"""
