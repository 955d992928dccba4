"""
Infrastructure layer base class.

This module provides a concrete `Layer` implementation that satisfies the
domain-level `ILayer` protocol. It implements the conveniences shared by every
layer variant:

- the single forward-input cache slot (`_cache_input` / `_consume_input`)
- `__call__` forwarding to `produce_output` for ergonomic invocation
- weight text persistence built on a `TokenStream` cursor
  (`serialize`, `deserialize`, `load_tokens`)
- JSON configuration hooks (`get_config`, `from_config`)

Subclasses implement `produce_output`, `propagate_error` and, when they own
parameters, `weight_tokens` and `load_tokens`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..domain._errors import ForwardCacheError
from ..domain._layer import ILayer
from .module._serialization_weights import TokenStream, join_tokens
from .tensor import Tensor


class Layer(ILayer):
    """
    Infrastructure base class for layers.

    Attributes
    ----------
    _input : Optional[Tensor]
        Forward-input cache. Filled by `produce_output`, consumed by
        `propagate_error`.

    Notes
    -----
    The cache is a single slot, not a stack: a second forward call before
    backpropagation overwrites it. Interleaving forward and backward calls
    across different inputs is not supported.
    """

    def __init__(self) -> None:
        self._input: Optional[Tensor] = None

    # ------------------------------------------------------------------
    # Forward-input cache
    # ------------------------------------------------------------------
    def _cache_input(self, tensor: Tensor) -> None:
        self._input = tensor

    def _consume_input(self) -> Tensor:
        """
        Return the cached forward input and clear the slot.

        Raises
        ------
        ForwardCacheError
            If no forward pass has filled the slot since the last backward.
        """
        if self._input is None:
            raise ForwardCacheError(self.__class__.__name__)
        tensor, self._input = self._input, None
        return tensor

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------
    def produce_output(self, tensor: Tensor) -> Tensor:
        """
        Execute the forward computation of the layer.

        Subclasses must implement this.
        """
        raise NotImplementedError

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        """
        Execute the backward computation of the layer.

        Subclasses must implement this.
        """
        raise NotImplementedError

    def __call__(self, tensor: Tensor) -> Tensor:
        return self.produce_output(tensor)

    # ------------------------------------------------------------------
    # Weight text persistence
    # ------------------------------------------------------------------
    def weight_tokens(self) -> List[str]:
        """
        Return the layer's parameters as decimal tokens in traversal order.

        Parameter-free layers return an empty list.
        """
        return []

    def load_tokens(self, stream: TokenStream) -> None:
        """
        Consume this layer's parameters from `stream`, in traversal order.

        Parameter-free layers consume nothing.
        """
        return None

    def serialize(self) -> str:
        return join_tokens(self.weight_tokens())

    def deserialize(self, text: str) -> str:
        """
        Load parameters from `text` and return the unconsumed remainder.

        Raises
        ------
        WeightParseError
            If a token is not numeric or the text ends early.
        """
        stream = TokenStream(text)
        self.load_tokens(stream)
        return stream.remainder()

    # ------------------------------------------------------------------
    # Serialization hooks (opt-in contract)
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration for this layer.

        Raises
        ------
        NotImplementedError
            If the layer does not support JSON serialization.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement get_config(). "
            "This layer cannot be serialized to JSON."
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Layer":
        """
        Reconstruct a layer from a JSON configuration.

        Raises
        ------
        NotImplementedError
            If the layer does not support JSON deserialization.
        """
        raise NotImplementedError(
            f"{cls.__name__} does not implement from_config(). "
            "This layer cannot be deserialized from JSON."
        )
