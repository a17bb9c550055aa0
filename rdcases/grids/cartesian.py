"""Cartesian grids with uniform discretization.

The grids describe cell-centered discretizations of rectangular domains. They also
provide the coarsened grids that make up the hierarchy of multigrid solvers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np

_logger = logging.getLogger(__name__)


class DimensionError(ValueError):
    """Exception indicating that dimensions were inconsistent."""


def _check_shape(shape: int | Sequence[int]) -> tuple[int, ...]:
    """Checks the consistency of shape tuples."""
    if hasattr(shape, "__iter__"):
        shape_list: Sequence[int] = shape  # type: ignore
    else:
        shape_list = [shape]  # type: ignore

    if len(shape_list) == 0:
        raise ValueError("Require at least one dimension")

    # convert the shape to a tuple of integers
    result = []
    for dim in shape_list:
        if dim == int(dim) and dim >= 1:
            result.append(int(dim))
        else:
            raise ValueError(f"{dim!r} is not a valid number of support points")
    return tuple(result)


class CartesianGrid:
    r"""Cartesian grid with uniform discretization for each axis.

    The grids can be thought of as a collection of boxes, called cells, of equal length
    in each dimension. The bounds then defined the total volume covered by these cells,
    while the cell coordinates give the location of the box centers. In particular, the
    discretization along dimension :math:`k` is defined as

    .. math::
            x^{(k)}_i &= x^{(k)}_\mathrm{min} + \left(i + \frac12\right)
                \Delta x^{(k)}
            \quad \text{for} \quad i = 0, \ldots, N^{(k)} - 1
        \\
            \Delta x^{(k)} &= \frac{x^{(k)}_\mathrm{max} -
                                    x^{(k)}_\mathrm{min}}{N^{(k)}}

    where :math:`N^{(k)}` is the number of cells along this dimension.
    """

    def __init__(
        self,
        bounds: Sequence[tuple[float, float]],
        shape: int | Sequence[int],
    ):
        """
        Args:
            bounds (list of tuple):
                Give the coordinate range for each axis. This should be a tuple of two
                number (lower and upper bound) for each axis. The length of `bounds`
                thus determines the grid dimension.
            shape (list):
                The number of support points for each axis. A single number implies
                the same number of support points along all axes.
        """
        bounds_arr = np.array(bounds, ndmin=2, dtype=np.double)
        if bounds_arr.ndim != 2 or bounds_arr.shape[1] != 2:
            raise ValueError(
                f"Do not know how to interpret shape {bounds_arr.shape} for bounds"
            )
        if np.any(bounds_arr[:, 1] <= bounds_arr[:, 0]):
            raise ValueError("Upper bounds must be larger than lower bounds")
        self.dim = len(bounds_arr)

        # handle the shape array
        shape_tpl = _check_shape(shape)
        if len(shape_tpl) == 1 and self.dim > 1:
            shape_tpl = shape_tpl * self.dim
        if self.dim != len(shape_tpl):
            raise DimensionError("Dimension of `bounds` and `shape` are not compatible")
        self._shape = shape_tpl
        self._axes_bounds = tuple((float(a), float(b)) for a, b in bounds_arr)

        # determine the coordinates
        axes_coords, discretization = [], []
        for (x_min, x_max), num in zip(self._axes_bounds, self.shape):
            dx = (x_max - x_min) / num
            axes_coords.append(x_min + (np.arange(num) + 0.5) * dx)
            discretization.append(dx)
        self._axes_coords = tuple(axes_coords)
        self._discretization = np.array(discretization)
        self.axes = list("xyz"[: self.dim]) if self.dim <= 3 else None

    @classmethod
    def from_resolution(
        cls, resolution: int, size: float = 1, origin: float | Sequence[float] = 0
    ) -> CartesianGrid:
        """Create a square grid with the same number of cells along both axes.

        Args:
            resolution (int):
                Number of cells along each axis
            size (float):
                Length of the domain along each axis
            origin (float or list):
                Lower corner of the domain

        Returns:
            :class:`CartesianGrid`: the grid covering `[origin, origin + size]^2`
        """
        origin_arr = np.broadcast_to(np.asarray(origin, dtype=float), (2,))
        bounds = [(o, o + size) for o in origin_arr]
        return cls(bounds, resolution)

    @property
    def shape(self) -> tuple[int, ...]:
        """tuple of int: the number of cells along each axis"""
        return self._shape

    @property
    def num_cells(self) -> int:
        """int: total number of cells"""
        return int(np.prod(self.shape))

    @property
    def axes_bounds(self) -> tuple[tuple[float, float], ...]:
        """tuple: lower and upper bounds of each axis"""
        return self._axes_bounds

    @property
    def origin(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: coordinates of the lower corner"""
        return np.array([b[0] for b in self.axes_bounds])

    @property
    def size(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: lengths of the domain along all axes"""
        return np.array([b[1] - b[0] for b in self.axes_bounds])

    @property
    def discretization(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: the linear size of a cell along each axis"""
        return self._discretization

    @property
    def axes_coords(self) -> tuple[np.ndarray, ...]:
        """tuple: coordinates of the cell centers for each axis"""
        return self._axes_coords

    @property
    def cell_coords(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: coordinates of all cells (last axis: components)"""
        return np.stack(np.meshgrid(*self.axes_coords, indexing="ij"), axis=-1)

    @property
    def cell_volume(self) -> float:
        """float: volume of a single cell"""
        return float(np.prod(self.discretization))

    @property
    def volume(self) -> float:
        """float: total volume of the grid"""
        return float(np.prod(self.size))

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(bounds={self.axes_bounds}, "
            f"shape={self.shape})"
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, CartesianGrid):
            return NotImplemented
        return self.shape == other.shape and np.allclose(
            self.axes_bounds, other.axes_bounds
        )

    def __hash__(self):
        return hash((self.__class__.__name__, self.shape, self.axes_bounds))

    def assert_grid_compatible(self, other: CartesianGrid) -> None:
        """Checks whether `other` is compatible with the current grid.

        Args:
            other (:class:`CartesianGrid`): The grid compared to this one

        Raises:
            ValueError: if grids are not compatible
        """
        if self != other:
            raise ValueError(f"Grids {self} and {other} are incompatible")

    @property
    def can_coarsen(self) -> bool:
        """bool: whether all axes have an even number of at least two cells"""
        return all(n % 2 == 0 and n >= 2 for n in self.shape)

    def coarsen(self) -> CartesianGrid:
        """Return the grid covering the same domain with half the cells per axis.

        Raises:
            DimensionError: if the grid cannot be coarsened
        """
        if not self.can_coarsen:
            raise DimensionError(f"Cannot coarsen grid with shape {self.shape}")
        return self.__class__(self.axes_bounds, [n // 2 for n in self.shape])

    def levels(self, coarsest_size: int = 2) -> Iterator[CartesianGrid]:
        """Iterate over the grid hierarchy, starting with this grid.

        Args:
            coarsest_size (int):
                Grids are not coarsened further once any axis has fewer cells than
                twice this number

        Yields:
            :class:`CartesianGrid`: grids with successively fewer cells
        """
        grid = self
        yield grid
        while grid.can_coarsen and min(grid.shape) >= 2 * coarsest_size:
            grid = grid.coarsen()
            yield grid
