import numpy as np
import pytest

from volgrad.gradient import flat_index, flat_index_checked


def test_flat_index():
    """Voxels are stored with x varying fastest."""
    dims = (3, 4, 5)

    assert flat_index(0, 0, 0, dims) == 0
    assert flat_index(1, 0, 0, dims) == 1
    assert flat_index(0, 1, 0, dims) == 3
    assert flat_index(0, 0, 1, dims) == 12
    assert flat_index(2, 3, 4, dims) == 59

    # works on arrays
    x = np.array([0, 1, 2])
    y = np.array([0, 1, 3])
    z = np.array([0, 1, 4])
    np.testing.assert_array_equal(flat_index(x, y, z, dims), [0, 16, 59])


def test_flat_index_checked():
    """Out of bounds coordinates raise an IndexError."""
    dims = (3, 4, 5)

    assert flat_index_checked(2, 3, 4, dims) == 59

    for coordinate in [(3, 0, 0), (0, 4, 0), (0, 0, 5), (0, -1, 0)]:
        with pytest.raises(IndexError):
            _ = flat_index_checked(*coordinate, dims)
