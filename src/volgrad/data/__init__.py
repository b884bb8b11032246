"""Scalar volumes that gradient fields are computed from."""

from volgrad.data._sample_data import make_ball_volume, make_ramp_volume
from volgrad.data._volume import ScalarVolume, Volume

__all__ = [
    "ScalarVolume",
    "Volume",
    "make_ball_volume",
    "make_ramp_volume",
]
