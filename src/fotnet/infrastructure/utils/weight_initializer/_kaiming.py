"""
Kaiming (He) weight initializers.

This module provides Kaiming (He) initialization strategies and registers them
into the global `WeightInitializer` registry.

Implemented variants
--------------------
- ``kaiming``:
    Kaiming normal initialization using ``std = sqrt(2 / fan_in)``.
- ``kaiming_leaky_relu_*``:
    Kaiming initialization adjusted for LeakyReLU activations with different
    negative slopes, registered via a helper.

Notes
-----
- Fan-in is computed from the matrix extents via ``_calculate_fan_in``.
- All initializers fill the provided matrix in-place and return it.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ...tensor import Matrix
from ....domain.utils._weight_initialization import _calculate_fan_in


@WeightInitializer.register_initializer("kaiming")
def kaiming(matrix: Matrix, rng: np.random.Generator) -> Matrix:
    """
    Apply standard Kaiming (He) normal initialization.

        std = sqrt(2 / fan_in)

    Parameters
    ----------
    matrix:
        The matrix to initialize in-place.
    rng:
        Random generator used for sampling.

    Returns
    -------
    Matrix
        The initialized matrix (same object).
    """
    fan_in = _calculate_fan_in(matrix.shape)
    std = math.sqrt(2.0 / float(fan_in))

    matrix[...] = rng.standard_normal(matrix.shape) * std
    return matrix


def register_kaiming_leaky_relu(name: str, *, negative_slope: float) -> None:
    """
    Register a Kaiming initializer configured for LeakyReLU.

    For LeakyReLU with negative slope ``a``, the Kaiming variance becomes:

        std = sqrt(2 / ((1 + a^2) * fan_in))

    Parameters
    ----------
    name:
        Registry key to associate with the initializer.
    negative_slope:
        The LeakyReLU negative slope parameter (``a``).
    """

    @WeightInitializer.register_initializer(name)
    def _init(matrix: Matrix, rng: np.random.Generator) -> Matrix:
        fan_in = _calculate_fan_in(matrix.shape)
        std = math.sqrt(2.0 / ((1.0 + negative_slope * negative_slope) * fan_in))

        matrix[...] = rng.standard_normal(matrix.shape) * std
        return matrix


register_kaiming_leaky_relu("kaiming_leaky_relu_0.01", negative_slope=0.01)
register_kaiming_leaky_relu("kaiming_leaky_relu_0.2", negative_slope=0.2)
