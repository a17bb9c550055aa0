"""The py-rdcases package runs reaction-diffusion simulation cases on Cartesian grids."""

# determine the package version
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("py-rdcases")
except PackageNotFoundError:
    # package is not installed, so we cannot determine any version
    __version__ = "unknown"
del PackageNotFoundError, version  # clean name space

# initialize the configuration
from .tools.config import Config, Parameter, environment  # noqa: F401

config = Config()  # initialize the default configuration

# import most common classes into main name space
from .fields import *  # noqa: E402, F403
from .grids import *  # noqa: E402, F403
from .pdes import *  # noqa: E402, F403
from .solvers import *  # noqa: E402, F403
from .trackers import *  # noqa: E402, F403
from .visualization import *  # noqa: E402, F403

del Config  # clean name space
