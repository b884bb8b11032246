"""Functions to generate example volumes."""

import numpy as np
from skimage.morphology import ball

from volgrad.data._volume import ScalarVolume


def make_ramp_volume(
    dims: tuple[int, int, int],
    axis: int = 0,
    slope: float = 1.0,
) -> ScalarVolume:
    """Create a volume whose values increase linearly along one axis.

    The value at (x, y, z) is slope * (x, y, z)[axis], so the
    central difference gradient of every interior voxel is
    slope along axis.

    Parameters
    ----------
    dims : tuple[int, int, int]
        The number of voxels along each axis.
    axis : int
        The axis the values increase along. Default is 0.
    slope : float
        The increase in value per voxel. Default is 1.0.

    Returns
    -------
    volume : ScalarVolume
        The ramp volume.
    """
    if axis not in (0, 1, 2):
        raise ValueError(f"axis must be 0, 1 or 2, got {axis}.")

    # broadcast the coordinate along the other two axes
    shape = [1, 1, 1]
    shape[axis] = dims[axis]
    ramp = slope * np.arange(dims[axis], dtype=np.float32).reshape(shape)

    return ScalarVolume(np.ascontiguousarray(np.broadcast_to(ramp, dims)))


def make_ball_volume(radius: int, padding: int = 1) -> ScalarVolume:
    """Create a volume containing a solid ball.

    Voxels inside the ball are 1 and voxels outside are 0.
    The volume is centered on the ball.

    Parameters
    ----------
    radius : int
        The radius of the ball in voxels.
    padding : int
        The number of empty voxels added on each side of the ball.
        Default is 1.

    Returns
    -------
    volume : ScalarVolume
        (2 * (radius + padding) + 1,) * 3 volume containing the ball.
    """
    ball_mask = ball(radius).astype(np.float32)
    return ScalarVolume(np.pad(ball_mask, padding, mode="constant"))
