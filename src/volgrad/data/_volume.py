from typing import Protocol, Union

import numpy as np
import torch


class Volume(Protocol):
    """A regularly sampled 3D scalar volume.

    Voxels are addressed by integer (x, y, z) coordinates and the
    spacing between neighbouring voxels is 1 along every axis.
    """

    def dims(self) -> tuple[int, int, int]:
        """Get the number of voxels along each axis."""
        ...

    def get_voxel(self, x: int, y: int, z: int) -> float:
        """Get the scalar value at an integer coordinate."""
        ...


class ScalarVolume:
    """A scalar volume backed by a tensor.

    Parameters
    ----------
    field : torch.Tensor | np.ndarray
        (x, y, z) array containing the scalar values. Numpy arrays
        are converted to tensors without copying where possible.
    """

    def __init__(self, field: Union[torch.Tensor, np.ndarray]):
        field = torch.as_tensor(field)
        if field.ndim != 3:
            raise ValueError(f"The field must be 3D, got shape {tuple(field.shape)}.")
        self._field = field

    @property
    def field(self) -> torch.Tensor:
        """Get the field."""
        return self._field

    def dims(self) -> tuple[int, int, int]:
        """Get the number of voxels along each axis."""
        x, y, z = self._field.shape
        return x, y, z

    def get_voxel(self, x: int, y: int, z: int) -> float:
        """Get the scalar value at (x, y, z).

        The coordinate is not checked. Negative values wrap around
        as in tensor indexing.
        """
        return self._field[x, y, z].item()
