"""
One-to-many recurrent layer for FotNET.

The layer takes a single scalar (the first flattened element of its input)
and unrolls a fixed number of time steps, emitting one output value per step.
The recurrence length equals ``hidden_size``, the row count of the
hidden-weight matrix, and does not depend on the input.

Parameters and shapes
---------------------
- input_weights  : (1, H)
- hidden_weights : (H, H)
- output_weights : (H, 1)
- hidden_bias    : (H,)
- output_bias    : (1,)

Forward
-------
    h_0 = act(x * input_weights)
    h_t = act(h_{t-1} @ hidden_weights + hidden_bias)    for t > 0
    y_t = h_t @ output_weights + output_bias

Backward (BPTT)
---------------
Steps are processed in reverse. The learning rate is divided by the sequence
length, and a running "next hidden" gradient is carried from later steps to
earlier ones through the activation derivative. All five parameter arrays
are updated in place during the single call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import numpy as np

from ...domain._activation import IActivationFunction
from ...domain.utils._weight_initialization import IWeightsInitialization
from .._layer import Layer
from ..module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from ..module._serialization_weights import TokenStream, format_value
from ..tensor import Matrix, Tensor
from ..utils.weight_initializer import WeightInitializer

logger = logging.getLogger(__name__)


@register_component()
class RecurrentLayer(Layer):
    """
    One-to-many recurrent layer.

    Parameters
    ----------
    hidden_size : int
        Hidden state width, which is also the number of time steps.
    activation : IActivationFunction
        Nonlinearity applied to every hidden state.
    initialization : IWeightsInitialization
        Strategy applied once to each of the three weight matrices. Biases
        start at zero.

    Attributes
    ----------
    hidden_states : list[np.ndarray]
        Per-step hidden states of the last forward pass.
    outputs : list[float]
        Per-step outputs of the last forward pass.
    """

    def __init__(
        self,
        hidden_size: int,
        activation: IActivationFunction,
        initialization: IWeightsInitialization,
    ) -> None:
        super().__init__()
        if int(hidden_size) <= 0:
            raise ValueError(f"hidden_size must be positive, got {hidden_size}")
        h = int(hidden_size)

        self.activation = activation
        self.initialization = initialization
        self.input_weights = initialization.initialize(Matrix.zeros(1, h))
        self.hidden_weights = initialization.initialize(Matrix.zeros(h, h))
        self.output_weights = initialization.initialize(Matrix.zeros(h, 1))
        self.hidden_bias = np.zeros(h, dtype=np.float64)
        self.output_bias = np.zeros(1, dtype=np.float64)

        self.hidden_states: List[np.ndarray] = []
        self.outputs: List[float] = []

    @property
    def hidden_size(self) -> int:
        return self.hidden_weights.rows

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(tensor)
        x = float(tensor.flatten()[0])

        iw = self.input_weights.body
        hw = self.hidden_weights.body
        ow = self.output_weights.body

        self.hidden_states = []
        self.outputs = []
        for step in range(self.hidden_size):
            if step > 0:
                pre = self.hidden_states[step - 1] @ hw + self.hidden_bias
            else:
                pre = (iw * x).reshape(-1)
            h = np.asarray(self.activation.activate(pre), dtype=np.float64)
            self.hidden_states.append(h)
            self.outputs.append(float((h @ ow + self.output_bias)[0]))

        return Tensor(Matrix(np.asarray(self.outputs, dtype=np.float64)))

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        """
        Run backpropagation through time and update the parameters.

        Returns
        -------
        Tensor
            `error`, unchanged. The layer consumes a single scalar, so no
            meaningful spatial error exists for the previous layer.
        """
        self._consume_input()
        sequence = error.flatten()
        hidden = self.hidden_states
        self.hidden_states, self.outputs = [], []

        if not (trainable and len(sequence)):
            return error

        h = self.hidden_size
        lr = float(learning_rate) / len(sequence)
        next_hidden = (self.output_weights.body.T * sequence[-1]).reshape(-1)

        for step in range(len(hidden) - 1, -1, -1):
            e = float(sequence[step])

            self.input_weights = self.input_weights - Matrix(
                (next_hidden * e).reshape(1, h) * lr
            )

            carried = self.output_weights.body.T.reshape(-1) * e
            carried = carried + next_hidden @ self.hidden_weights.body.T
            next_hidden = np.asarray(self.activation.derive(carried), dtype=np.float64)

            if step > 0:
                hw_grad = np.outer(hidden[step - 1], next_hidden)
                self.hidden_weights = self.hidden_weights - Matrix(hw_grad * lr)
                self.hidden_bias = self.hidden_bias - float(np.mean(hw_grad)) * lr

            self.output_weights = self.output_weights - Matrix(
                (hidden[step] * e).reshape(h, 1) * lr
            )
            self.output_bias = self.output_bias - e * lr

        logger.debug("RecurrentLayer updated over %d steps (lr=%g)", len(hidden), lr)
        return error

    def weight_tokens(self) -> List[str]:
        tokens: List[str] = []
        tokens.extend(self.input_weights.to_tokens())
        tokens.extend(self.hidden_weights.to_tokens())
        tokens.extend(self.output_weights.to_tokens())
        tokens.extend(format_value(v) for v in self.hidden_bias)
        tokens.extend(format_value(v) for v in self.output_bias)
        return tokens

    def load_tokens(self, stream: TokenStream) -> None:
        self.input_weights = Matrix(stream.next_array(self.input_weights.shape))
        self.hidden_weights = Matrix(stream.next_array(self.hidden_weights.shape))
        self.output_weights = Matrix(stream.next_array(self.output_weights.shape))
        self.hidden_bias = stream.next_array(self.hidden_bias.shape)
        self.output_bias = stream.next_array(self.output_bias.shape)

    def get_config(self) -> Dict[str, Any]:
        return {
            "hidden_size": self.hidden_size,
            "activation": component_to_config(self.activation),
            "initialization": component_to_config(self.initialization),
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "RecurrentLayer":
        initialization = component_from_config(cfg.get("initialization"))
        return cls(
            hidden_size=int(cfg["hidden_size"]),
            activation=component_from_config(cfg["activation"]),
            initialization=(
                WeightInitializer("zeros") if initialization is None else initialization
            ),
        )
