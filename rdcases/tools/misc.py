"""Miscellaneous python functions.

.. autosummary::
   :nosignatures:

   module_available
   copy_to_directory
   decorator_arguments
"""

from __future__ import annotations

import functools
import importlib.util
import shutil
from pathlib import Path
from typing import Callable


@functools.lru_cache(maxsize=None)
def module_available(module_name: str) -> bool:
    """Check whether a python module can be imported.

    The module is located without importing it, so optional heavy dependencies like
    :mod:`ffmpeg` are only loaded when they are actually used.

    Args:
        module_name (str): The name of the module

    Returns:
        bool: Whether the module was found
    """
    try:
        return importlib.util.find_spec(module_name) is not None
    except (ImportError, ValueError):
        # a parent package is missing or the module has no spec
        return False


def copy_to_directory(source: str | Path, directory: str | Path) -> Path:
    """Copy a file into a directory, creating the directory if necessary.

    Args:
        source (str): Path of the file that is copied
        directory (str): Target directory. Existing files of the same name are replaced.

    Returns:
        :class:`~pathlib.Path`: Path of the copy
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    return Path(shutil.copy2(source, directory))


def decorator_arguments(decorator: Callable) -> Callable:
    r"""Allow a decorator to be used as `@decorator` and as `@decorator(\**kwargs)`.

    The wrapped `decorator` must take the decorated function as its first argument and
    all other arguments as keywords.

    Args:
        decorator: The decorator that is modified

    Returns:
        The decorator supporting both forms
    """

    @functools.wraps(decorator)
    def wrapper(*args, **kwargs):
        if len(args) == 1 and not kwargs and callable(args[0]):
            return decorator(args[0])
        if args:
            raise TypeError(f"`{decorator.__name__}` only accepts keyword arguments")
        return functools.partial(decorator, **kwargs)

    return wrapper
