from typing import Union

import jax.numpy as jnp
from jax import Array as JaxArray

from volgrad.gradient import InterpolationMode, flat_index


def _stack_channels(directions: JaxArray, magnitudes: JaxArray) -> JaxArray:
    """Combine (n_voxels, 3) directions and (n_voxels,) magnitudes into (n_voxels, 4)."""
    return jnp.concatenate(
        [jnp.asarray(directions), jnp.asarray(magnitudes)[:, None]], axis=1
    )


def sample_gradient_nearest(
    coordinates: JaxArray,
    directions: JaxArray,
    magnitudes: JaxArray,
    dims: tuple[int, int, int],
) -> tuple[JaxArray, JaxArray]:
    """Sample a gradient field at the voxels nearest to the coordinates.

    Halfway coordinates are rounded up. Coordinates outside of
    [0, dims) along any axis return zero gradients.

    Parameters
    ----------
    coordinates : JaxArray
        (N, 3) array of (x, y, z) coordinates to sample at.
    directions : JaxArray
        (n_voxels, 3) array of gradient vectors ordered with x varying fastest.
    magnitudes : JaxArray
        (n_voxels,) array of gradient magnitudes.
    dims : tuple[int, int, int]
        The number of voxels along each axis.

    Returns
    -------
    sampled_directions : JaxArray
        (N, 3) array of the sampled gradient vectors.
    sampled_magnitudes : JaxArray
        (N,) array of the sampled gradient magnitudes.
    """
    values = _stack_channels(directions, magnitudes)
    max_indices = jnp.array(dims) - 1

    # Check bounds
    in_bounds = jnp.all((coordinates >= 0) & (coordinates < jnp.array(dims)), axis=1)

    # Round half up and clamp to the volume
    indices = jnp.floor(coordinates + 0.5).astype(jnp.int32)
    indices = jnp.clip(indices, 0, max_indices)

    samples = values[flat_index(indices[:, 0], indices[:, 1], indices[:, 2], dims)]
    samples = jnp.where(in_bounds[:, None], samples, 0.0)

    return samples[:, :3], samples[:, 3]


def sample_gradient_linear(
    coordinates: JaxArray,
    directions: JaxArray,
    magnitudes: JaxArray,
    dims: tuple[int, int, int],
) -> tuple[JaxArray, JaxArray]:
    """Sample a gradient field using trilinear interpolation.

    The magnitudes are interpolated separately from the directions.
    Coordinates whose interpolation cell is not fully inside the volume
    (coordinate < 0 or coordinate + 1 >= dims along any axis)
    return zero gradients.

    Parameters
    ----------
    coordinates : JaxArray
        (N, 3) array of (x, y, z) coordinates to sample at.
    directions : JaxArray
        (n_voxels, 3) array of gradient vectors ordered with x varying fastest.
    magnitudes : JaxArray
        (n_voxels,) array of gradient magnitudes.
    dims : tuple[int, int, int]
        The number of voxels along each axis.

    Returns
    -------
    sampled_directions : JaxArray
        (N, 3) array of the sampled gradient vectors.
    sampled_magnitudes : JaxArray
        (N,) array of the sampled gradient magnitudes.
    """
    values = _stack_channels(directions, magnitudes)
    max_indices = jnp.array(dims) - 1

    in_bounds = jnp.all(
        (coordinates >= 0) & (coordinates + 1 < jnp.array(dims)), axis=1
    )

    # Floor and ceil indices, clipped for safe access
    lower = jnp.floor(coordinates)
    upper = jnp.ceil(coordinates)
    fractions = coordinates - lower
    lower = jnp.clip(lower.astype(jnp.int32), 0, max_indices)
    upper = jnp.clip(upper.astype(jnp.int32), 0, max_indices)

    x0, y0, z0 = lower[:, 0], lower[:, 1], lower[:, 2]
    x1, y1, z1 = upper[:, 0], upper[:, 1], upper[:, 2]
    fx = fractions[:, 0:1]
    fy = fractions[:, 1:2]
    fz = fractions[:, 2:3]

    def get_sample(x_idx, y_idx, z_idx):
        return values[flat_index(x_idx, y_idx, z_idx, dims)]  # shape (N, 4)

    def lerp(v0, v1, factor):
        return (1.0 - factor) * v0 + factor * v1

    # interpolate along x, then y, then z
    c00 = lerp(get_sample(x0, y0, z0), get_sample(x1, y0, z0), fx)
    c10 = lerp(get_sample(x0, y1, z0), get_sample(x1, y1, z0), fx)
    c01 = lerp(get_sample(x0, y0, z1), get_sample(x1, y0, z1), fx)
    c11 = lerp(get_sample(x0, y1, z1), get_sample(x1, y1, z1), fx)
    c0 = lerp(c00, c10, fy)
    c1 = lerp(c01, c11, fy)
    samples = lerp(c0, c1, fz)

    samples = jnp.where(in_bounds[:, None], samples, 0.0)

    return samples[:, :3], samples[:, 3]


def sample_gradient(
    coordinates: JaxArray,
    directions: JaxArray,
    magnitudes: JaxArray,
    dims: tuple[int, int, int],
    mode: Union[InterpolationMode, str] = InterpolationMode.LINEAR,
) -> tuple[JaxArray, JaxArray]:
    """Sample a gradient field with the given interpolation mode.

    InterpolationMode.CUBIC samples with trilinear interpolation.
    See sample_gradient_nearest and sample_gradient_linear for
    the parameters and return values.
    """
    mode = InterpolationMode(mode)
    if mode is InterpolationMode.NEAREST_NEIGHBOUR:
        return sample_gradient_nearest(coordinates, directions, magnitudes, dims)
    elif mode in (InterpolationMode.LINEAR, InterpolationMode.CUBIC):
        return sample_gradient_linear(coordinates, directions, magnitudes, dims)
    raise ValueError(f"Unknown interpolation mode: {mode!r}")
