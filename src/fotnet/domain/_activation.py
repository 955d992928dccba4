"""
Activation function strategy contract.

Activation functions are injected into the layers that need them
(ActivationLayer, RecurrentLayer, Perceptron). Each one is a pair of pure
vectorized functions.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IActivationFunction(Protocol):
    """
    Activation function interface.

    Both methods accept and return array-like vectors of identical shape.
    """

    def activate(self, values: Any) -> Any:
        """
        Apply the activation elementwise.
        """
        ...

    def derive(self, values: Any) -> Any:
        """
        Apply the activation's derivative elementwise.
        """
        ...
