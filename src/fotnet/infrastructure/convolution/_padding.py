"""
Spatial padding strategies for convolution layers.

Both classes implement the domain `IPadding` contract and are injected into
`ConvolutionLayer` at construction:

- `IdentityPadding` returns the input unchanged, so the output shrinks by
  the usual ``(H - K) // stride + 1`` arithmetic ("valid" convolution).
- `SamePadding` zero-pads symmetrically by ``K - 1`` rows and columns in
  total, so a stride-1 convolution preserves the input extent. For even
  kernel sizes the extra row/column goes to the bottom/right.
"""

from __future__ import annotations

from typing import Any, Dict

from ...domain._padding import IPadding
from ...domain.model._stateless_mixin import StatelessConfigMixin
from ..module._serialization_core import register_component
from ..tensor import Filter, Tensor


@register_component()
class IdentityPadding(StatelessConfigMixin, IPadding):
    """Padding strategy that applies no padding."""

    def pad(self, tensor: Tensor) -> Tensor:
        return Tensor(tensor.channels)


@register_component()
class SamePadding(IPadding):
    """
    Size-preserving zero padding for a given kernel size.

    Parameters
    ----------
    kernel_rows : int
        Kernel height.
    kernel_columns : int, optional
        Kernel width. Defaults to `kernel_rows`.
    """

    def __init__(self, kernel_rows: int, kernel_columns: int | None = None) -> None:
        self.kernel_rows = int(kernel_rows)
        self.kernel_columns = int(kernel_rows if kernel_columns is None else kernel_columns)
        if self.kernel_rows <= 0 or self.kernel_columns <= 0:
            raise ValueError(
                f"kernel size must be positive, got "
                f"({self.kernel_rows}, {self.kernel_columns})"
            )

    @classmethod
    def for_filter(cls, f: Filter) -> "SamePadding":
        """Build the padding that preserves extents for `f`'s kernel size."""
        rows, columns = f.channels[0].shape
        return cls(rows, columns)

    def pad(self, tensor: Tensor) -> Tensor:
        total_h = self.kernel_rows - 1
        total_w = self.kernel_columns - 1
        top, left = total_h // 2, total_w // 2
        bottom, right = total_h - top, total_w - left
        return Tensor([m.pad(top, bottom, left, right) for m in tensor.channels])

    def get_config(self) -> Dict[str, Any]:
        return {"kernel_rows": self.kernel_rows, "kernel_columns": self.kernel_columns}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "SamePadding":
        return cls(int(cfg["kernel_rows"]), int(cfg["kernel_columns"]))
