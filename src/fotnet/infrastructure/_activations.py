"""
Activation and SoftMax layers.

- `ActivationLayer` applies an injected `IActivationFunction` elementwise to
  every channel and multiplies the incoming error by the function's
  derivative at the cached input.
- `SoftMaxLayer` normalizes the flattened tensor into a probability
  distribution and reshapes it back to the input extents.

Both layers own no trainable parameters.
"""

from __future__ import annotations

from typing import Any, Dict

from ..domain._activation import IActivationFunction
from ..domain.model._stateless_mixin import StatelessConfigMixin, StatelessWeightsMixin
from ._function import softmax
from ._layer import Layer
from .module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from .tensor import Matrix, Tensor


@register_component()
class ActivationLayer(StatelessWeightsMixin, Layer):
    """
    Elementwise activation layer.

    Parameters
    ----------
    function : IActivationFunction
        Nonlinearity and its derivative.
    """

    def __init__(self, function: IActivationFunction) -> None:
        super().__init__()
        self.function = function

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(tensor)
        return Tensor([Matrix(self.function.activate(m.body)) for m in tensor.channels])

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        cached = self._consume_input()
        return Tensor(
            [
                Matrix(e.body * self.function.derive(x.body))
                for e, x in zip(error.channels, cached.channels, strict=True)
            ]
        )

    def get_config(self) -> Dict[str, Any]:
        return {"function": component_to_config(self.function)}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ActivationLayer":
        return cls(component_from_config(cfg["function"]))


@register_component()
class SoftMaxLayer(StatelessConfigMixin, StatelessWeightsMixin, Layer):
    """
    SoftMax over all values of the input tensor.

    Notes
    -----
    The backward pass returns the incoming error unchanged. The layer is
    meant to terminate a network trained with cross-entropy on one-hot
    targets, where ``output - expected`` already is the gradient at the
    SoftMax input.
    """

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(tensor)
        probs = softmax(tensor.flatten())
        return Tensor.from_flat(probs, tensor.rows, tensor.columns, tensor.depth)

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        self._consume_input()
        return error
