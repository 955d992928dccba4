"""
Stateless configuration and weight mixins.

This module defines helper mixins for layers whose behavior does not depend on
any configurable hyperparameters or trainable parameters.

- `StatelessConfigMixin` provides no-op JSON configuration hooks.
- `StatelessWeightsMixin` provides the empty weight serialization and the
  pass-through deserialization shared by Flatten, SoftMax and similar layers.
"""

from typing import Any, Dict
from typing_extensions import Self


class StatelessConfigMixin:
    """
    Mixin providing configuration hooks for stateless components.

    Examples include structural layers, fixed activations or padding
    strategies that carry no tunable state.
    """

    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable configuration dictionary.

        Returns
        -------
        Dict[str, Any]
            An empty configuration dictionary.
        """
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> Self:
        """
        Reconstruct the component from a configuration dictionary.

        The configuration is ignored and a default instance is returned.
        """
        return cls()


class StatelessWeightsMixin:
    """
    Mixin for layers that own no trainable parameters.

    The serialized form is empty and deserialization consumes nothing.
    """

    def serialize(self) -> str:
        return ""

    def deserialize(self, text: str) -> str:
        return text

    def load_tokens(self, stream: Any) -> None:
        return None
