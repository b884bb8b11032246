import jax.numpy as jnp
import numpy as np
import pytest
import torch

from volgrad.data import ScalarVolume
from volgrad.gradient import GradientVolume, InterpolationMode
from volgrad.jax import sample_gradient, sample_gradient_linear, sample_gradient_nearest

COORDINATES = [
    [1.6, 1.2, 1.4],
    [2.0, 3.0, 4.0],
    [0.2, 0.7, 5.9],
    [3.3, 4.1, 2.8],
    [3.9, 2.0, 2.0],
    [4.0, 2.0, 2.0],
    [4.7, 5.6, 6.8],
    [-0.1, 2.0, 2.0],
    [2.0, 6.0, 2.0],
    [20.0, 20.0, 20.0],
]


@pytest.fixture
def gradient_volume() -> GradientVolume:
    torch.manual_seed(7)
    return GradientVolume(ScalarVolume(torch.rand((5, 6, 7))))


def _field_arrays(gradient_volume: GradientVolume):
    return (
        jnp.asarray(gradient_volume.directions.numpy()),
        jnp.asarray(gradient_volume.magnitudes.numpy()),
    )


def _sample_each(gradient_volume: GradientVolume, mode: InterpolationMode):
    """Sample the coordinates one at a time."""
    gradient_volume.interpolation_mode = mode
    gradients = [
        gradient_volume.get_gradient_interpolate(coordinate)
        for coordinate in COORDINATES
    ]
    directions = np.array([gradient.direction for gradient in gradients])
    magnitudes = np.array([gradient.magnitude for gradient in gradients])
    return directions, magnitudes


def test_sample_gradient_nearest(gradient_volume):
    """Batched nearest neighbour sampling matches single samples."""
    directions, magnitudes = _field_arrays(gradient_volume)

    sampled_directions, sampled_magnitudes = sample_gradient_nearest(
        jnp.array(COORDINATES), directions, magnitudes, gradient_volume.dims()
    )

    expected_directions, expected_magnitudes = _sample_each(
        gradient_volume, InterpolationMode.NEAREST_NEIGHBOUR
    )
    assert sampled_directions.shape == (len(COORDINATES), 3)
    assert sampled_magnitudes.shape == (len(COORDINATES),)
    np.testing.assert_allclose(sampled_directions, expected_directions, atol=1e-6)
    np.testing.assert_allclose(sampled_magnitudes, expected_magnitudes, atol=1e-6)


def test_sample_gradient_linear(gradient_volume):
    """Batched linear sampling matches single samples."""
    directions, magnitudes = _field_arrays(gradient_volume)

    sampled_directions, sampled_magnitudes = sample_gradient_linear(
        jnp.array(COORDINATES), directions, magnitudes, gradient_volume.dims()
    )

    expected_directions, expected_magnitudes = _sample_each(
        gradient_volume, InterpolationMode.LINEAR
    )
    np.testing.assert_allclose(sampled_directions, expected_directions, atol=1e-5)
    np.testing.assert_allclose(sampled_magnitudes, expected_magnitudes, atol=1e-5)

    # cells reaching past the volume are zero
    np.testing.assert_allclose(sampled_magnitudes[5:], 0.0)


def test_sample_gradient_modes(gradient_volume):
    """Cubic sampling uses linear interpolation."""
    directions, magnitudes = _field_arrays(gradient_volume)
    coordinates = jnp.array(COORDINATES)
    dims = gradient_volume.dims()

    linear = sample_gradient(coordinates, directions, magnitudes, dims, mode="linear")
    cubic = sample_gradient(
        coordinates, directions, magnitudes, dims, mode=InterpolationMode.CUBIC
    )
    nearest = sample_gradient(
        coordinates,
        directions,
        magnitudes,
        dims,
        mode=InterpolationMode.NEAREST_NEIGHBOUR,
    )

    np.testing.assert_array_equal(cubic[0], linear[0])
    np.testing.assert_array_equal(cubic[1], linear[1])
    np.testing.assert_allclose(
        nearest[1],
        sample_gradient_nearest(coordinates, directions, magnitudes, dims)[1],
    )

    with pytest.raises(ValueError):
        _ = sample_gradient(coordinates, directions, magnitudes, dims, mode="spline")


def test_sample_gradient_nan(gradient_volume):
    """NaN coordinates are zero in batched and single sampling."""
    directions, magnitudes = _field_arrays(gradient_volume)
    coordinates = [[float("nan"), 2.0, 2.0], [2.0, 2.0, float("nan")]]

    for mode in InterpolationMode:
        sampled_directions, sampled_magnitudes = sample_gradient(
            jnp.array(coordinates),
            directions,
            magnitudes,
            gradient_volume.dims(),
            mode=mode,
        )
        np.testing.assert_array_equal(sampled_directions, 0.0)
        np.testing.assert_array_equal(sampled_magnitudes, 0.0)

        gradient_volume.interpolation_mode = mode
        for coordinate in coordinates:
            gradient = gradient_volume.get_gradient_interpolate(coordinate)
            assert gradient.direction == (0.0, 0.0, 0.0)
            assert gradient.magnitude == 0.0
