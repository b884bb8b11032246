"""Central difference gradient fields and sampling.

The distance between neighbouring voxels is assumed to be 1
in all directions.
"""

import logging
import math
from typing import Optional, Sequence, Union

import torch

from volgrad.data import Volume
from volgrad.gradient._indexing import flat_index, flat_index_checked
from volgrad.gradient._voxel import ZERO_GRADIENT, GradientVoxel, InterpolationMode

logger = logging.getLogger(__name__)


def _volume_to_tensor(
    volume: Volume, dtype: torch.dtype, device: Optional[torch.device]
) -> torch.Tensor:
    """Get the scalar values of a volume as an (x, y, z) tensor."""
    field = getattr(volume, "field", None)
    if isinstance(field, torch.Tensor):
        if tuple(field.shape) != tuple(volume.dims()):
            raise ValueError(
                f"The volume field has shape {tuple(field.shape)}, "
                f"but the volume dims are {tuple(volume.dims())}."
            )
        return field.to(dtype=dtype, device=device)

    # gather the values one voxel at a time
    n_x, n_y, n_z = volume.dims()
    values = [
        volume.get_voxel(x, y, z)
        for x in range(n_x)
        for y in range(n_y)
        for z in range(n_z)
    ]
    return torch.tensor(values, dtype=dtype, device=device).reshape(n_x, n_y, n_z)


def compute_gradient_volume(
    volume: Volume,
    dtype: torch.dtype = torch.float32,
    device: Optional[torch.device] = None,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Compute the central difference gradient of every voxel in a volume.

    The gradient at an interior voxel is:
        ((f(x+1) - f(x-1)) / 2, (f(y+1) - f(y-1)) / 2, (f(z+1) - f(z-1)) / 2)
    Central differences are undefined on the boundary faces of the volume,
    so the gradient and magnitude of every boundary voxel is zero.

    Parameters
    ----------
    volume : Volume
        The scalar volume to compute the gradient of.
    dtype : torch.dtype
        The data type of the computed gradients. Default is torch.float32.
    device : torch.device, optional
        The device to store the gradients on. Default is the device of
        the volume field or the default torch device.

    Returns
    -------
    directions : torch.Tensor
        (n_voxels, 3) array containing the gradient vector of each voxel.
    magnitudes : torch.Tensor
        (n_voxels,) array containing the Euclidean norm of each gradient.
        Both arrays are ordered with x varying fastest, then y, then z.
    """
    field = _volume_to_tensor(volume, dtype=dtype, device=device)
    n_x, n_y, n_z = field.shape

    # allocate the full field so the boundary voxels are zero
    gradients = torch.zeros((n_x, n_y, n_z, 3), dtype=dtype, device=field.device)
    if min(n_x, n_y, n_z) > 2:
        gradients[1:-1, 1:-1, 1:-1, 0] = (
            field[2:, 1:-1, 1:-1] - field[:-2, 1:-1, 1:-1]
        ) / 2
        gradients[1:-1, 1:-1, 1:-1, 1] = (
            field[1:-1, 2:, 1:-1] - field[1:-1, :-2, 1:-1]
        ) / 2
        gradients[1:-1, 1:-1, 1:-1, 2] = (
            field[1:-1, 1:-1, 2:] - field[1:-1, 1:-1, :-2]
        ) / 2

    magnitudes = torch.linalg.vector_norm(gradients, ord=2, dim=-1)

    # (z, y, x) ordering flattens with x varying fastest
    directions = gradients.permute(2, 1, 0, 3).reshape(-1, 3)
    magnitudes = magnitudes.permute(2, 1, 0).reshape(-1)

    return directions, magnitudes


def compute_min_magnitude(magnitudes: torch.Tensor) -> float:
    """Get the smallest gradient magnitude.

    Raises a ValueError if magnitudes is empty.
    """
    if magnitudes.numel() == 0:
        raise ValueError("The gradient volume must contain at least one voxel.")
    return magnitudes.min().item()


def compute_max_magnitude(magnitudes: torch.Tensor) -> float:
    """Get the largest gradient magnitude.

    Raises a ValueError if magnitudes is empty.
    """
    if magnitudes.numel() == 0:
        raise ValueError("The gradient volume must contain at least one voxel.")
    return magnitudes.max().item()


class GradientVolume:
    """The gradient field of a scalar volume.

    The gradients are computed once when the GradientVolume is created
    and are not modified afterwards. Only the interpolation mode can be
    changed. It is not synchronized with concurrent sampling.

    Parameters
    ----------
    volume : Volume
        The scalar volume to compute the gradient field of.
    interpolation_mode : InterpolationMode | str
        The interpolation used by get_gradient_interpolate.
        Default is InterpolationMode.LINEAR.
    dtype : torch.dtype
        The data type used to store the gradients. Default is torch.float32.
    device : torch.device, optional
        The device to store the gradients on.
    """

    def __init__(
        self,
        volume: Volume,
        interpolation_mode: Union[InterpolationMode, str] = InterpolationMode.LINEAR,
        dtype: torch.dtype = torch.float32,
        device: Optional[torch.device] = None,
    ):
        self._dims = tuple(int(size) for size in volume.dims())
        self._directions, self._magnitudes = compute_gradient_volume(
            volume, dtype=dtype, device=device
        )
        self._min_magnitude = compute_min_magnitude(self._magnitudes)
        self._max_magnitude = compute_max_magnitude(self._magnitudes)
        self.interpolation_mode = interpolation_mode

        logger.debug(
            f"Computed gradient volume with dims {self._dims}, "
            f"magnitude range [{self._min_magnitude}, {self._max_magnitude}]"
        )

    @property
    def interpolation_mode(self) -> InterpolationMode:
        """Get the interpolation mode."""
        return self._interpolation_mode

    @interpolation_mode.setter
    def interpolation_mode(self, mode: Union[InterpolationMode, str]):
        """Set the interpolation mode."""
        self._interpolation_mode = InterpolationMode(mode)

    @property
    def directions(self) -> torch.Tensor:
        """Get the (n_voxels, 3) gradient vectors.

        The tensor must not be modified.
        """
        return self._directions

    @property
    def magnitudes(self) -> torch.Tensor:
        """Get the (n_voxels,) gradient magnitudes.

        The tensor must not be modified.
        """
        return self._magnitudes

    def dims(self) -> tuple[int, int, int]:
        """Get the number of voxels along each axis."""
        return self._dims

    def min_magnitude(self) -> float:
        """Get the smallest gradient magnitude in the volume."""
        return self._min_magnitude

    def max_magnitude(self) -> float:
        """Get the largest gradient magnitude in the volume."""
        return self._max_magnitude

    def to_grid(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Get the gradients as (z, y, x, 3) and (z, y, x) tensors."""
        n_x, n_y, n_z = self._dims
        return (
            self._directions.reshape(n_z, n_y, n_x, 3),
            self._magnitudes.reshape(n_z, n_y, n_x),
        )

    def _voxel_at(self, index: int) -> GradientVoxel:
        return GradientVoxel(
            direction=tuple(self._directions[index].tolist()),
            magnitude=self._magnitudes[index].item(),
        )

    def get_gradient(self, x: int, y: int, z: int) -> GradientVoxel:
        """Get the gradient of the voxel at (x, y, z).

        The coordinate is not checked. The caller must make sure
        0 <= coordinate < dims along each axis.
        """
        return self._voxel_at(flat_index(x, y, z, self._dims))

    def get_gradient_checked(self, x: int, y: int, z: int) -> GradientVoxel:
        """Get the gradient of the voxel at (x, y, z).

        Raises an IndexError if the coordinate is outside of the volume.
        """
        return self._voxel_at(flat_index_checked(x, y, z, self._dims))

    def get_gradient_interpolate(self, coord: Sequence[float]) -> GradientVoxel:
        """Sample the gradient at a position using the current interpolation mode.

        Parameters
        ----------
        coord : Sequence[float]
            The (x, y, z) position to sample the gradient at.

        Returns
        -------
        gradient : GradientVoxel
            The sampled gradient. Positions that can't be sampled
            return ZERO_GRADIENT.
        """
        mode = self._interpolation_mode
        if mode is InterpolationMode.NEAREST_NEIGHBOUR:
            return self.get_gradient_nearest_neighbour(coord)
        elif mode is InterpolationMode.LINEAR:
            return self.get_gradient_linear_interpolate(coord)
        elif mode is InterpolationMode.CUBIC:
            # no cubic reconstruction, linear is good enough for the gradient
            return self.get_gradient_linear_interpolate(coord)
        raise ValueError(f"Unknown interpolation mode: {mode!r}")

    def _is_outside(self, coord: Sequence[float]) -> bool:
        # NaN fails every comparison, so it counts as outside
        return not all(
            0 <= value < size for value, size in zip(coord, self._dims)
        )

    def get_gradient_nearest_neighbour(self, coord: Sequence[float]) -> GradientVoxel:
        """Get the gradient of the voxel nearest to a position.

        Halfway positions are rounded up. Positions outside of
        [0, dims) along any axis return ZERO_GRADIENT.
        """
        x, y, z = (float(value) for value in coord)
        if self._is_outside((x, y, z)):
            return ZERO_GRADIENT

        # [dims - 0.5, dims) rounds to dims, which is clamped to the last voxel
        x_index, y_index, z_index = (
            min(math.floor(value + 0.5), size - 1)
            for value, size in zip((x, y, z), self._dims)
        )
        return self.get_gradient(x_index, y_index, z_index)

    def get_gradient_linear_interpolate(
        self, coord: Sequence[float]
    ) -> GradientVoxel:
        """Sample the gradient at a position using trilinear interpolation.

        Positions whose interpolation cell is not fully inside the volume
        (coord < 0 or coord + 1 >= dims along any axis) return ZERO_GRADIENT.
        """
        x, y, z = (float(value) for value in coord)
        if self._is_outside((x, y, z)) or self._is_outside((x + 1, y + 1, z + 1)):
            return ZERO_GRADIENT

        # the lattice points of the cell containing the position
        x0, x1 = math.floor(x), math.ceil(x)
        y0, y1 = math.floor(y), math.ceil(y)
        z0, z1 = math.floor(z), math.ceil(z)

        # interpolate along x
        g00 = self.linear_interpolate(
            self.get_gradient(x0, y0, z0), self.get_gradient(x1, y0, z0), x - x0
        )
        g10 = self.linear_interpolate(
            self.get_gradient(x0, y1, z0), self.get_gradient(x1, y1, z0), x - x0
        )
        g01 = self.linear_interpolate(
            self.get_gradient(x0, y0, z1), self.get_gradient(x1, y0, z1), x - x0
        )
        g11 = self.linear_interpolate(
            self.get_gradient(x0, y1, z1), self.get_gradient(x1, y1, z1), x - x0
        )

        # interpolate along y
        g0 = self.linear_interpolate(g00, g10, y - y0)
        g1 = self.linear_interpolate(g01, g11, y - y0)

        # interpolate along z
        return self.linear_interpolate(g0, g1, z - z0)

    @staticmethod
    def linear_interpolate(
        g0: GradientVoxel, g1: GradientVoxel, factor: float
    ) -> GradientVoxel:
        """Linearly interpolate between two gradients.

        The magnitude and the direction are interpolated separately,
        so the magnitude of the result is generally not the norm
        of its direction.

        Parameters
        ----------
        g0 : GradientVoxel
            The gradient returned when factor is 0.
        g1 : GradientVoxel
            The gradient returned when factor is 1.
        factor : float
            The interpolation factor. Clamped to [0, 1].

        Returns
        -------
        gradient : GradientVoxel
            The interpolated gradient.
        """
        factor = min(max(float(factor), 0.0), 1.0)
        magnitude = (1.0 - factor) * g0.magnitude + factor * g1.magnitude
        direction = tuple(
            (1.0 - factor) * value_0 + factor * value_1
            for value_0, value_1 in zip(g0.direction, g1.direction)
        )
        return GradientVoxel(direction=direction, magnitude=magnitude)
