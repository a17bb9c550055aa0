"""Helper functions for just-in-time compilation with numba.

.. autosummary::
   :nosignatures:

   numba_environment
   jit
   random_seed
"""

from __future__ import annotations

import logging
import os
from typing import Any, TypeVar

import numba as nb
import numpy as np
from numba.extending import is_jitted

from .. import config
from .misc import decorator_arguments

TFunc = TypeVar("TFunc")


def numba_environment() -> dict[str, Any]:
    """Return information about the numba setup used.

    Returns:
        (dict) information about the numba setup
    """
    return {
        "version": nb.__version__,
        "fastmath": config["numba.fastmath"],
        "debug": config["numba.debug"],
        "disable_jit": bool(nb.config.DISABLE_JIT),
        "omp_num_threads": os.environ.get("OMP_NUM_THREADS"),
        "num_threads": nb.config.NUMBA_NUM_THREADS,
    }


@decorator_arguments
def jit(function: TFunc, signature=None, **kwargs) -> TFunc:
    """Apply nb.jit with predefined arguments.

    Args:
        function: The function which is jitted
        signature: Signature of the function to compile
        **kwargs: Additional arguments to `nb.jit`

    Returns:
        Function that will be compiled using numba
    """
    if is_jitted(function):
        return function

    # prepare the compilation arguments
    if config["numba.fastmath"] is True:
        # enable some (but not all) fastmath flags. We skip the flags that affect
        # handling of infinities and NaN for safety by default
        kwargs.setdefault("fastmath", {"nsz", "arcp", "contract", "afn", "reassoc"})
    else:
        kwargs.setdefault("fastmath", config["numba.fastmath"])
    kwargs.setdefault("debug", config["numba.debug"])
    kwargs.setdefault("nopython", True)

    logger = logging.getLogger(__name__)
    name = getattr(function, "__name__", "<anonymous function>")
    logger.debug("Compile `%s`", name)

    return nb.jit(signature, **kwargs)(function)  # type: ignore


@nb.jit(nopython=True)
def _random_seed_compiled(seed: int) -> None:
    """Sets the seed of the random number generator of numba."""
    np.random.seed(seed)


def random_seed(seed: int = 0) -> None:
    """Sets the seed of the random number generator of numpy and numba.

    Args:
        seed (int): Sets random seed
    """
    np.random.seed(seed)
    if not nb.config.DISABLE_JIT:
        _random_seed_compiled(seed)
