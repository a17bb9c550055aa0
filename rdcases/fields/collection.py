"""Defines a collection of fields to represent multiple fields defined on a common grid."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

import numpy as np

from .base import FieldBase
from .scalar import ScalarField


class FieldCollection(FieldBase):
    """Collection of scalar fields defined on the same grid.

    The data of the individual fields is stored in a single array, so the fields are
    views into :attr:`data`. Modifying a field thus modifies the collection.
    """

    def __init__(
        self,
        fields: Sequence[ScalarField],
        *,
        copy_fields: bool = False,
        label: str | None = None,
    ):
        """
        Args:
            fields (sequence of :class:`ScalarField`):
                Sequence of the individual fields
            copy_fields (bool):
                Flag determining whether the individual fields given in `fields` are
                copied. Note that fields are always copied if some of the supplied
                fields are identical. If fields are not copied, the original fields are
                modified so their data points to the collection.
            label (str):
                Label of the field collection
        """
        if isinstance(fields, FieldCollection):
            fields = fields.fields
        if len(fields) == 0:
            raise ValueError("At least one field must be defined")

        # check that all fields have the same grid
        grid = fields[0].grid
        for field in fields[1:]:
            grid.assert_grid_compatible(field.grid)

        # check whether some fields are identical
        if not copy_fields and len(fields) != len({id(field) for field in fields}):
            self._logger.info("Creating a copy of identical fields in collection")
            copy_fields = True

        if copy_fields:
            fields = [field.copy() for field in fields]
        self._fields = list(fields)

        # create the stacked data array and link the individual fields to it
        data = np.empty((len(self._fields),) + grid.shape, dtype=np.double)
        for i, field in enumerate(self._fields):
            data[i] = field.data
            field._data = data[i]
        super().__init__(grid, data, label=label)

    @property
    def fields(self) -> list[ScalarField]:
        """list: the fields of this collection"""
        return self._fields

    @property
    def labels(self) -> list[str | None]:
        """list: the labels of all fields"""
        return [field.label for field in self.fields]

    def __repr__(self):
        fields = ", ".join(repr(f) for f in self.fields)
        return f"{self.__class__.__name__}([{fields}])"

    def __len__(self) -> int:
        """Return the number of stored fields."""
        return len(self.fields)

    def __iter__(self) -> Iterator[ScalarField]:
        """Return iterator over the actual fields."""
        return iter(self.fields)

    def __getitem__(self, index: int | str) -> ScalarField:
        """Returns one field from the collection.

        If `index` is an integer or string, the field at this position or with this
        label is returned, respectively.
        """
        if isinstance(index, (int, np.integer)):
            return self.fields[index]

        elif isinstance(index, str):
            for field in self.fields:
                if field.label == index:
                    return field
            raise KeyError(f"No field with name `{index}`")

        else:
            raise TypeError(f"Unsupported index `{index}`")

    def __setitem__(self, index: int | str, value) -> None:
        """Set the value of a specific field.

        Args:
            index (int or str):
                Determines which field is updated, either by position or by label
            value (float or :class:`~numpy.ndarray` or :class:`ScalarField`):
                The updated value(s) of the chosen field
        """
        # set the data explicitly to keep the field linked to the collection
        self[index].data = value

    def copy(self, *, label: str | None = None) -> FieldCollection:
        """Return a copy of the data, but not of the grid.

        Args:
            label (str, optional):
                Name of the copied field collection
        """
        if label is None:
            label = self.label
        return self.__class__(self.fields, copy_fields=True, label=label)

    def assert_field_compatible(self, other: FieldBase) -> None:
        super().assert_field_compatible(other)
        if len(self) != len(other):  # type: ignore
            raise ValueError("Collections have a different number of fields")
