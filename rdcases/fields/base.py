"""Defines base class of fields or collections, which are discretized on grids."""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from typing import Callable, TypeVar

import numpy as np

from ..grids.cartesian import CartesianGrid

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for fields."""

TField = TypeVar("TField", bound="FieldBase")


class FieldBase(metaclass=ABCMeta):
    """Abstract base class for describing (discretized) fields."""

    _logger: logging.Logger  # logger instance to output information

    def __init__(self, grid: CartesianGrid, data: np.ndarray, *, label: str | None):
        """
        Args:
            grid (:class:`~rdcases.grids.CartesianGrid`):
                Grid defining the space on which this field is defined
            data (:class:`~numpy.ndarray`):
                Field values at the support points of the grid
            label (str, optional):
                Name of the field
        """
        self._grid = grid
        self._data = data
        self.label = label

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)
        # create logger for this specific field class
        cls._logger = _base_logger.getChild(cls.__qualname__)

    @property
    def grid(self) -> CartesianGrid:
        """:class:`~rdcases.grids.CartesianGrid`: the grid of this field"""
        return self._grid

    @property
    def data(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: discretized data at the support points"""
        return self._data

    @data.setter
    def data(self, value) -> None:
        if isinstance(value, FieldBase):
            self.assert_field_compatible(value)
            self._data[...] = value.data
        else:
            self._data[...] = value

    @abstractmethod
    def copy(self: TField, *, label: str | None = None) -> TField:
        """Return a new field with the data (but not the grid) copied.

        Args:
            label (str, optional):
                Name of the returned field

        Returns:
            A copy of the current field
        """

    def assert_field_compatible(self, other: FieldBase) -> None:
        """Checks whether `other` is compatible with the current field.

        Args:
            other (FieldBase):
                The other field this one is compared to
        """
        if self.__class__ != other.__class__:
            raise TypeError(f"Fields {self} and {other} are incompatible")
        self.grid.assert_grid_compatible(other.grid)

    def __eq__(self, other):
        """Test fields for equality, ignoring the label."""
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self.grid == other.grid and np.array_equal(self.data, other.data)

    def __neg__(self):
        """Return the negative of the current field."""
        result = self.copy()
        np.negative(self.data, out=result.data)
        return result

    def _binary_operation(self, other, op: Callable) -> FieldBase:
        """Perform a binary operation between this field and `other`

        Args:
            other (number of FieldBase):
                The second term of the operator
            op (callable):
                A binary function calculating the result

        Returns:
            :class:`FieldBase`: A field of the same type as `self`
        """
        result = self.copy()
        if isinstance(other, FieldBase):
            self.assert_field_compatible(other)
            op(self.data, other.data, out=result.data)
        else:
            op(self.data, other, out=result.data)
        return result

    def _binary_operation_inplace(self: TField, other, op_inplace: Callable) -> TField:
        """Perform an in-place binary operation between this field and `other`

        Args:
            other (number of FieldBase):
                The second term of the operator
            op_inplace (callable):
                A binary function storing its result in the first argument

        Returns:
            :class:`FieldBase`: The field `self` with updated data
        """
        if isinstance(other, FieldBase):
            self.assert_field_compatible(other)
            op_inplace(self.data, other.data, out=self.data)
        else:
            op_inplace(self.data, other, out=self.data)
        return self

    def __add__(self, other) -> FieldBase:
        """Add two fields."""
        return self._binary_operation(other, np.add)

    __radd__ = __add__

    def __iadd__(self: TField, other) -> TField:
        """Add `other` to the current field."""
        return self._binary_operation_inplace(other, np.add)

    def __sub__(self, other) -> FieldBase:
        """Subtract two fields."""
        return self._binary_operation(other, np.subtract)

    def __rsub__(self, other) -> FieldBase:
        """Subtract two fields."""
        return self._binary_operation(
            other, lambda x, y, out: np.subtract(y, x, out=out)
        )

    def __isub__(self: TField, other) -> TField:
        """Subtract `other` from the current field."""
        return self._binary_operation_inplace(other, np.subtract)

    def __mul__(self, other) -> FieldBase:
        """Multiply field by value."""
        return self._binary_operation(other, np.multiply)

    __rmul__ = __mul__

    def __imul__(self: TField, other) -> TField:
        """Multiply field by value."""
        return self._binary_operation_inplace(other, np.multiply)

    def __truediv__(self, other) -> FieldBase:
        """Divide field by value."""
        return self._binary_operation(other, np.true_divide)

    def __pow__(self, exponent: float) -> FieldBase:
        """Raise data of the field to a certain power."""
        if not np.isscalar(exponent):
            raise NotImplementedError("Only scalar exponents are supported")
        return self._binary_operation(exponent, np.power)
