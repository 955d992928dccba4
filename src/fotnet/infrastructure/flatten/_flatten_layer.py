"""
Flatten layer for FotNET.

Collapses a multi-channel tensor into a single 1 x N channel, using the
row-major / channel-major ordering of `Tensor.flatten`. The backward pass
restores the error to the extents of the cached input with
`Tensor.from_flat`, the exact inverse.

Shape semantics
---------------
Input:
    depth x (rows, columns)

Output:
    1 x (1, rows * columns * depth)
"""

from __future__ import annotations

from ...domain.model._stateless_mixin import StatelessConfigMixin, StatelessWeightsMixin
from .._layer import Layer
from ..module._serialization_core import register_component
from ..tensor import Matrix, Tensor


@register_component()
class FlattenLayer(StatelessConfigMixin, StatelessWeightsMixin, Layer):
    """
    Flatten layer.

    Notes
    -----
    - This operation is a pure reshape (no numerical transformation).
    - `propagate_error` ignores its learning-rate and trainable arguments.
    """

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(tensor)
        return Tensor(Matrix(tensor.flatten()))

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        reference = self._consume_input()
        return Tensor.from_flat(
            error.flatten(), reference.rows, reference.columns, reference.depth
        )
