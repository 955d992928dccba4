"""
Xavier/Glorot weight initializers.

Implemented variants
--------------------
- ``xavier``:
    Xavier normal initialization using ``std = sqrt(2 / (fan_in + fan_out))``.
- ``xavier_uniform``:
    Xavier uniform initialization using
    ``U(-sqrt(6/(fan_in+fan_out)), +sqrt(6/(fan_in+fan_out)))``.

Notes
-----
Fan-in and fan-out are computed from the matrix extents via
``_calculate_fan_in_and_fan_out``.
"""

import math

import numpy as np

from ._base import WeightInitializer
from ...tensor import Matrix
from ....domain.utils._weight_initialization import _calculate_fan_in_and_fan_out


@WeightInitializer.register_initializer("xavier")
def xavier(matrix: Matrix, rng: np.random.Generator) -> Matrix:
    """
    Apply Xavier (Glorot) normal initialization.

        std = sqrt(2 / (fan_in + fan_out))

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
    fan_in, fan_out = _calculate_fan_in_and_fan_out(matrix.shape)
    std = math.sqrt(2.0 / float(fan_in + fan_out))

    matrix[...] = rng.standard_normal(matrix.shape) * std
    return matrix


@WeightInitializer.register_initializer("xavier_uniform")
def xavier_uniform(matrix: Matrix, rng: np.random.Generator) -> Matrix:
    fan_in, fan_out = _calculate_fan_in_and_fan_out(matrix.shape)
    limit = math.sqrt(6.0 / float(fan_in + fan_out))

    matrix[...] = rng.uniform(-limit, limit, size=matrix.shape)
    return matrix
