"""Addressing of voxels stored in flat arrays.

Voxels are stored in row-major order with x varying fastest.
"""


def flat_index(x, y, z, dims: tuple[int, int, int]):
    """Get the flat index of the voxel at (x, y, z).

    The coordinate is not checked. This works on Python integers
    as well as numpy, torch and jax integer arrays.

    Parameters
    ----------
    x, y, z : int or integer array
        The voxel coordinates.
    dims : tuple[int, int, int]
        The number of voxels along each axis.

    Returns
    -------
    index : int or integer array
        The position of the voxel in the flat array.
    """
    return x + dims[0] * (y + dims[1] * z)


def flat_index_checked(x: int, y: int, z: int, dims: tuple[int, int, int]) -> int:
    """Get the flat index of the voxel at (x, y, z).

    Raises an IndexError if the coordinate is outside of the volume.
    """
    for axis_name, value, size in zip("xyz", (x, y, z), dims):
        if not 0 <= value < size:
            raise IndexError(
                f"{axis_name}={value} is out of bounds for axis with size {size}"
            )
    return flat_index(x, y, z, dims)
