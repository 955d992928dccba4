"""
Layer interface definitions.

This module defines the domain-level contract shared by every layer variant
(Perceptron, Convolution, TransposedConvolution, Pooling, Recurrent, Flatten,
SoftMax, Activation) using structural subtyping via `typing.Protocol`.

The contract is a capability set:

- forward: ``produce_output(tensor) -> tensor``
- backward: ``propagate_error(error, learning_rate, trainable) -> error``
- persistence: ``serialize() -> text`` and ``deserialize(text) -> remainder``

Layers own their trainable parameters and mutate them in place during
`propagate_error`. Each layer keeps exactly one forward-input slot; a second
forward pass before backpropagation overwrites it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class ILayer(Protocol):
    """
    Domain-level layer interface.

    Notes
    -----
    - `propagate_error` must be called at most once per `produce_output`
      call on the same instance, with the error that corresponds to that
      call's output.
    - Parameter-free layers ignore `learning_rate` and `trainable`.
    - Parameter-free layers serialize to an empty string and return the
      text passed to `deserialize` unchanged.
    """

    def produce_output(self, tensor: ITensor) -> ITensor:
        """
        Run the forward computation and cache the input needed for backward.

        Parameters
        ----------
        tensor : ITensor
            Input tensor.

        Returns
        -------
        ITensor
            Output tensor.
        """
        ...

    def propagate_error(
        self, error: ITensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> ITensor:
        """
        Backpropagate `error`, updating parameters when allowed.

        Parameters
        ----------
        error : ITensor
            Error with respect to this layer's last output.
        learning_rate : float
            Step size used for parameter updates.
        trainable : bool
            Caller-side switch; parameters are only updated when it is set.

        Returns
        -------
        ITensor
            Error to pass to the previous layer.
        """
        ...

    def serialize(self) -> str:
        """
        Return the layer's parameters as whitespace-delimited decimal tokens.
        """
        ...

    def deserialize(self, text: str) -> str:
        """
        Consume this layer's tokens from `text` and return the remainder.
        """
        ...
