"""Batched gradient sampling with JAX."""

from volgrad.jax._sampling import (
    sample_gradient,
    sample_gradient_linear,
    sample_gradient_nearest,
)

__all__ = [
    "sample_gradient",
    "sample_gradient_linear",
    "sample_gradient_nearest",
]
