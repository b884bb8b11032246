from enum import Enum
from typing import NamedTuple


class GradientVoxel(NamedTuple):
    """The gradient of a scalar volume at a single position.

    Parameters
    ----------
    direction : tuple[float, float, float]
        The gradient vector.
    magnitude : float
        The gradient magnitude. For computed voxels this is the
        Euclidean norm of direction. Interpolated voxels blend the
        magnitude separately, so the two can differ.
    """

    direction: tuple[float, float, float]
    magnitude: float


# returned for positions that can't be sampled
ZERO_GRADIENT = GradientVoxel(direction=(0.0, 0.0, 0.0), magnitude=0.0)


class InterpolationMode(Enum):
    """How gradients are sampled between voxels."""

    NEAREST_NEIGHBOUR = "nearest_neighbour"
    LINEAR = "linear"
    # cubic sampling uses linear interpolation
    CUBIC = "cubic"
