"""Gradient fields computed from scalar volumes."""

from volgrad.gradient._gradient_volume import (
    GradientVolume,
    compute_gradient_volume,
    compute_max_magnitude,
    compute_min_magnitude,
)
from volgrad.gradient._indexing import flat_index, flat_index_checked
from volgrad.gradient._voxel import ZERO_GRADIENT, GradientVoxel, InterpolationMode

__all__ = [
    "GradientVolume",
    "GradientVoxel",
    "InterpolationMode",
    "ZERO_GRADIENT",
    "compute_gradient_volume",
    "compute_max_magnitude",
    "compute_min_magnitude",
    "flat_index",
    "flat_index_checked",
]
