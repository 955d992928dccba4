"""
Domain-level optimization contracts for FotNET.

This module defines `ITransposedConvolutionOptimization`, the strategy that a
transposed-convolution layer delegates its entire backward pass to. Keeping
the gradient and update rule outside the layer lets alternative optimizers
be substituted without changing the layer itself.

Notes
-----
Domain contracts are backend-agnostic and must not depend on NumPy or
infrastructure implementations.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class ITransposedConvolutionOptimization(Protocol):
    """
    Backpropagation strategy for transposed-convolution layers.

    Implementations compute kernel and bias gradients from the cached input
    and the incoming error, update `filters` in place when `trainable` is
    set, and return the error for the previous layer.
    """

    def propagate_error(
        self,
        error: ITensor,
        learning_rate: float,
        trainable: bool,
        cached_input: ITensor,
        filters: Sequence[Any],
        stride: int,
    ) -> ITensor:
        """
        Run the backward pass of a transposed convolution.

        Parameters
        ----------
        error : ITensor
            Error with respect to the layer output.
        learning_rate : float
            Step size.
        trainable : bool
            Whether `filters` may be updated.
        cached_input : ITensor
            Input of the corresponding forward pass.
        filters : Sequence[Any]
            The layer's filters, updated in place.
        stride : int
            Upsampling stride used in the forward pass.

        Returns
        -------
        ITensor
            Error with respect to the layer input.
        """
        ...
