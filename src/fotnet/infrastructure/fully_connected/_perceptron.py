"""
Fully-connected (perceptron) layer for FotNET.

The layer flattens its input into a vector ``x`` of length `size` and
produces ``W @ x + b`` as a single 1 x `next_size` channel. The activation
function is not applied in the forward pass; a following `ActivationLayer`
does that. It is only used by the backward pass (see `propagate_error`).

Two construction modes are supported:

- ``Perceptron(size, next_size, ...)``: trainable projection with weights
  drawn from the injected initialization.
- ``Perceptron(size)``: identity weights and zero bias, a pass-through layer
  whose output equals its flattened input until it is trained.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np

from ...domain._activation import IActivationFunction
from ...domain.utils._weight_initialization import IWeightsInitialization
from .._function import LeakyReLU
from .._layer import Layer
from ..module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from ..module._serialization_weights import TokenStream, format_value
from ..tensor import Matrix, Tensor
from ..utils.weight_initializer import WeightInitializer


@register_component()
class Perceptron(Layer):
    """
    Dense layer mapping `size` inputs to `next_size` outputs.

    Parameters
    ----------
    size : int
        Number of input values (flattened input length).
    next_size : int, optional
        Number of outputs. If None, the layer is built with identity weights
        of shape (size, size).
    initialization : IWeightsInitialization, optional
        Weight strategy for the projection mode. Defaults to the ``uniform``
        initializer. Ignored in identity mode.
    activation : IActivationFunction, optional
        Function whose derivative shapes the returned error. Defaults to
        `LeakyReLU`.

    Attributes
    ----------
    weights : Matrix
        Shape (next_size, size).
    bias : np.ndarray
        Shape (next_size,), zero at construction.
    """

    def __init__(
        self,
        size: int,
        next_size: Optional[int] = None,
        initialization: Optional[IWeightsInitialization] = None,
        activation: Optional[IActivationFunction] = None,
    ) -> None:
        super().__init__()
        if int(size) <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if next_size is not None and int(next_size) <= 0:
            raise ValueError(f"next_size must be positive, got {next_size}")

        self.activation: IActivationFunction = (
            LeakyReLU() if activation is None else activation
        )
        self.identity = next_size is None
        if self.identity:
            self.initialization: Optional[IWeightsInitialization] = None
            self.weights = Matrix.identity(int(size))
        else:
            self.initialization = (
                WeightInitializer("uniform") if initialization is None else initialization
            )
            self.weights = self.initialization.initialize(
                Matrix.zeros(int(next_size), int(size))
            )
        self.bias = np.zeros(self.weights.rows, dtype=np.float64)

    @property
    def size(self) -> int:
        return self.weights.columns

    @property
    def next_size(self) -> int:
        return self.weights.rows

    def produce_output(self, tensor: Tensor) -> Tensor:
        x = tensor.flatten()
        self._cache_input(Tensor(Matrix(x)))
        return Tensor(Matrix(self.weights.body @ x + self.bias))

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        """
        Backpropagate `error` and update the parameters.

        The returned error is ``n * activation.derive(n)`` with
        ``n = weights.T @ error``: the derivative is taken of the propagated
        error itself, not of the pre-activation signal of the previous layer.
        Networks trained with this layer depend on that numeric behavior.

        Parameters
        ----------
        error : Tensor
            Error w.r.t. the layer output; flattened to `next_size` values.
        learning_rate : float
            Step size.
        trainable : bool
            Whether the weights and bias are updated.

        Returns
        -------
        Tensor
            A single 1 x `size` channel.
        """
        x = self._consume_input().flatten()
        e = error.flatten()

        neurons_error = self.weights.body.T @ e
        if trainable:
            lr = float(learning_rate)
            self.weights = self.weights - Matrix(np.outer(e, x) * lr)
            self.bias = self.bias - e * lr

        derived = np.asarray(self.activation.derive(neurons_error), dtype=np.float64)
        return Tensor(Matrix(neurons_error * derived))

    def weight_tokens(self) -> List[str]:
        return self.weights.to_tokens() + [format_value(v) for v in self.bias]

    def load_tokens(self, stream: TokenStream) -> None:
        self.weights = Matrix(stream.next_array(self.weights.shape))
        self.bias = stream.next_array(self.bias.shape)

    def get_config(self) -> Dict[str, Any]:
        return {
            "size": self.size,
            "next_size": None if self.identity else self.next_size,
            "initialization": (
                None
                if self.initialization is None
                else component_to_config(self.initialization)
            ),
            "activation": component_to_config(self.activation),
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Perceptron":
        next_size = cfg.get("next_size")
        return cls(
            size=int(cfg["size"]),
            next_size=None if next_size is None else int(next_size),
            initialization=component_from_config(cfg.get("initialization")),
            activation=component_from_config(cfg.get("activation")),
        )
