"""
Activation function strategies.

Each class implements the domain `IActivationFunction` contract as a pair of
vectorized NumPy functions:

- ``activate(values)`` applies the nonlinearity elementwise;
- ``derive(values)`` applies its derivative elementwise.

Instances are injected into `ActivationLayer`, `RecurrentLayer` and
`Perceptron`. All of them are registered for JSON configuration.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ..domain._activation import IActivationFunction
from ..domain.model._stateless_mixin import StatelessConfigMixin
from .module._serialization_core import register_component


@register_component()
class ReLU(StatelessConfigMixin, IActivationFunction):
    """
    Rectified linear unit.

        f(x) = max(0, x)
    """

    def activate(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return np.maximum(x, 0.0)

    def derive(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return (x > 0.0).astype(np.float64)


@register_component()
class LeakyReLU(IActivationFunction):
    """
    Leaky rectified linear unit.

        f(x) = x               if x > 0
             = alpha * x       otherwise

    Parameters
    ----------
    alpha : float, default=0.01
        Slope for negative inputs.
    """

    def __init__(self, alpha: float = 0.01) -> None:
        self.alpha = float(alpha)

    def activate(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return np.where(x > 0.0, x, self.alpha * x)

    def derive(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return np.where(x > 0.0, 1.0, self.alpha)

    def get_config(self) -> Dict[str, Any]:
        return {"alpha": self.alpha}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "LeakyReLU":
        return cls(alpha=float(cfg.get("alpha", 0.01)))


@register_component()
class DoubleLeakyReLU(IActivationFunction):
    """
    Leaky ReLU with a second leak above one.

        f(x) = alpha * x                 if x < 0
             = x                         if 0 <= x <= 1
             = 1 + alpha * (x - 1)       if x > 1

    Parameters
    ----------
    alpha : float, default=0.01
        Slope outside of [0, 1].
    """

    def __init__(self, alpha: float = 0.01) -> None:
        self.alpha = float(alpha)

    def activate(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return np.where(
            x < 0.0,
            self.alpha * x,
            np.where(x > 1.0, 1.0 + self.alpha * (x - 1.0), x),
        )

    def derive(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return np.where((x < 0.0) | (x > 1.0), self.alpha, 1.0)

    def get_config(self) -> Dict[str, Any]:
        return {"alpha": self.alpha}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "DoubleLeakyReLU":
        return cls(alpha=float(cfg.get("alpha", 0.01)))


@register_component()
class Sigmoid(StatelessConfigMixin, IActivationFunction):
    """
    Logistic sigmoid.

        sigmoid(x) = 1 / (1 + exp(-x))
    """

    def activate(self, values: Any) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        return 1.0 / (1.0 + np.exp(-x))

    def derive(self, values: Any) -> np.ndarray:
        s = self.activate(values)
        return s * (1.0 - s)


@register_component()
class Tanh(StatelessConfigMixin, IActivationFunction):
    """Hyperbolic tangent."""

    def activate(self, values: Any) -> np.ndarray:
        return np.tanh(np.asarray(values, dtype=np.float64))

    def derive(self, values: Any) -> np.ndarray:
        t = np.tanh(np.asarray(values, dtype=np.float64))
        return 1.0 - t * t


def softmax(values: Any) -> np.ndarray:
    """
    Numerically stable softmax over a 1-D vector.

    The maximum is subtracted before exponentiation; the result is unchanged
    but cannot overflow.
    """
    x = np.asarray(values, dtype=np.float64)
    shifted = np.exp(x - np.max(x))
    return shifted / np.sum(shifted)
