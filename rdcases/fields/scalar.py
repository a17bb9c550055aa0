"""Defines a scalar field over a grid."""

from __future__ import annotations

import numpy as np
from scipy.interpolate import RegularGridInterpolator

from ..grids.cartesian import CartesianGrid, DimensionError
from .base import FieldBase


class ScalarField(FieldBase):
    """Scalar field discretized on a grid."""

    def __init__(
        self,
        grid: CartesianGrid,
        data=0,
        *,
        label: str | None = None,
    ):
        """
        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                Grid defining the space on which this field is defined
            data (number or :class:`~numpy.ndarray`, optional):
                Field values at the support points of the grid. A single number sets
                the same value everywhere.
            label (str, optional):
                Name of the field
        """
        values = np.empty(grid.shape, dtype=np.double)
        data_arr = np.asarray(data, dtype=np.double)
        if data_arr.ndim > 0 and data_arr.shape != grid.shape:
            raise DimensionError(
                f"Data shape {data_arr.shape} does not match grid shape {grid.shape}"
            )
        values[...] = data_arr
        super().__init__(grid, values, label=label)

    @classmethod
    def random_uniform(
        cls,
        grid: CartesianGrid,
        vmin: float = 0,
        vmax: float = 1,
        *,
        label: str | None = None,
        rng: np.random.Generator | None = None,
    ) -> ScalarField:
        """Create field with uniform distributed random values.

        These values are uncorrelated in space.

        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                Grid defining the space on which this field is defined
            vmin (float):
                Smallest possible random value
            vmax (float):
                Largest random value
            label (str, optional):
                Name of the returned field
            rng (:class:`~numpy.random.Generator`):
                Random number generator (default: :func:`~numpy.random.default_rng()`)
        """
        rng = np.random.default_rng(rng)
        data = rng.uniform(vmin, vmax, size=grid.shape)
        return cls(grid, data=data, label=label)

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(grid={self.grid!r}, "
            f"data=Array{self.data.shape}, label={self.label!r})"
        )

    def copy(self, *, label: str | None = None) -> ScalarField:
        """Return a copy of the data, but not of the grid.

        Args:
            label (str, optional):
                Name of the returned field
        """
        if label is None:
            label = self.label
        return self.__class__(self.grid, data=self.data.copy(), label=label)

    @property
    def integral(self) -> float:
        """float: integral of the field over the grid"""
        return float(self.data.sum() * self.grid.cell_volume)

    @property
    def average(self) -> float:
        """float: the average of the field over the domain"""
        return self.integral / self.grid.volume

    @property
    def min(self) -> float:
        """float: smallest value of the field"""
        return float(self.data.min())

    @property
    def max(self) -> float:
        """float: largest value of the field"""
        return float(self.data.max())

    @property
    def std(self) -> float:
        """float: volume-weighted standard deviation of the field values"""
        mean = self.average
        mean2 = float((self.data**2).sum()) * self.grid.cell_volume / self.grid.volume
        return float(np.sqrt(max(0.0, mean2 - mean**2)))

    def laplace(self) -> ScalarField:
        """Apply the Laplace operator with zero-flux boundary conditions.

        Returns:
            :class:`ScalarField`: The Laplacian of the field
        """
        padded = np.pad(self.data, 1, mode="edge")  # zero-flux ghost cells
        result = np.zeros(self.grid.shape)
        core = (slice(1, -1),) * self.grid.dim
        for axis in range(self.grid.dim):
            dx2 = self.grid.discretization[axis] ** 2
            lower = list(core)
            upper = list(core)
            lower[axis] = slice(None, -2)
            upper[axis] = slice(2, None)
            result += (
                padded[tuple(lower)] + padded[tuple(upper)] - 2 * padded[core]
            ) / dx2
        return self.__class__(self.grid, data=result, label=f"laplace({self.label})")

    def interpolate_to_image(
        self, num_pixels: int, *, linear: bool = True
    ) -> np.ndarray:
        """Sample the field on a square raster of pixels.

        The raster covers the entire domain and pixel centers are sampled.

        Args:
            num_pixels (int):
                Number of pixels along each axis
            linear (bool):
                Use bilinear interpolation instead of the value of the enclosing cell

        Returns:
            :class:`~numpy.ndarray`: Sampled data. The first array axis corresponds to
            the x-axis of the grid.
        """
        if self.grid.dim != 2:
            raise DimensionError("Images can only be created for 2d grids")
        points = []
        for x_min, x_max in self.grid.axes_bounds:
            dp = (x_max - x_min) / num_pixels
            points.append(x_min + (np.arange(num_pixels) + 0.5) * dp)
        coords = np.stack(np.meshgrid(*points, indexing="ij"), axis=-1)

        interpolator = RegularGridInterpolator(
            self.grid.axes_coords,
            self.data,
            method="linear" if linear else "nearest",
            bounds_error=False,
            fill_value=None,  # extrapolate in the outer half cells
        )
        if linear:
            # clip coordinates, so the outer half cells take the boundary values
            for axis, coords_axis in enumerate(self.grid.axes_coords):
                np.clip(
                    coords[..., axis],
                    coords_axis[0],
                    coords_axis[-1],
                    out=coords[..., axis],
                )
        return interpolator(coords)  # type: ignore
