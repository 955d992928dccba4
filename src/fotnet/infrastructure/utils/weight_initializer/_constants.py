"""
Constant and uniform weight initializers.

Provided initializers
---------------------
- ``zeros``:
    Fill a matrix with zeros.
- ``ones``:
    Fill a matrix with ones.
- ``uniform``:
    Sample every cell from U(-1, 1). This is the default recipe of
    `Perceptron`.
- ``uniform_0.1``, ``uniform_0.01``:
    Narrower symmetric ranges. Further bounds are registered with
    `register_uniform`.

Constant initializers are typically used for tests or deterministic setups.
"""

import numpy as np

from ._base import WeightInitializer
from ...tensor import Matrix


@WeightInitializer.register_initializer("zeros")
def zeros(matrix: Matrix, rng: np.random.Generator) -> Matrix:
    """
    Fill a matrix with zeros.

    Parameters
    ----------
    matrix : Matrix
        The matrix to initialize in-place.
    rng : np.random.Generator
        Unused.

    Returns
    -------
    Matrix
        The initialized matrix (same object).
    """
    matrix[...] = 0.0
    return matrix


@WeightInitializer.register_initializer("ones")
def ones(matrix: Matrix, rng: np.random.Generator) -> Matrix:
    """
    Fill a matrix with ones.

    Parameters
    ----------
    matrix : Matrix
        The matrix to initialize in-place.
    rng : np.random.Generator
        Unused.

    Returns
    -------
    Matrix
        The initialized matrix (same object).
    """
    matrix[...] = 1.0
    return matrix


def register_uniform(name: str, *, low: float, high: float) -> None:
    """
    Register an initializer sampling every cell from U(low, high).

    Raises
    ------
    ValueError
        If `low` is not below `high`.
    """
    low, high = float(low), float(high)
    if not low < high:
        raise ValueError(f"uniform bounds must satisfy low < high, got ({low}, {high})")

    @WeightInitializer.register_initializer(name)
    def _init(matrix: Matrix, rng: np.random.Generator) -> Matrix:
        matrix[...] = rng.uniform(low, high, size=matrix.shape)
        return matrix


register_uniform("uniform", low=-1.0, high=1.0)
register_uniform("uniform_0.1", low=-0.1, high=0.1)
register_uniform("uniform_0.01", low=-0.01, high=0.01)
