"""
Pooling layers for FotNET.

Both variants reduce every channel independently through the NumPy kernels in
`fotnet.infrastructure.ops.pooling_cpu` and share the `Pooling` base for
caching, configuration and the channel-wise loop.

- `MaxPooling`: non-overlapping windows; backward re-scans each window of the
  cached input and routes the whole gradient to its first maximum.
- `AveragePooling`: windows with an independent stride; backward spreads each
  gradient evenly over its window.

Neither layer owns trainable parameters.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np

from ...domain.model._stateless_mixin import StatelessWeightsMixin
from .._layer import Layer
from ..module._serialization_core import register_component
from ..ops.pooling_cpu import (
    average_back_pool2d,
    average_pool2d,
    max_back_pool2d,
    max_pool2d,
)
from ..tensor import Matrix, Tensor


class Pooling(StatelessWeightsMixin, Layer):
    """
    Shared base of the pooling layers.

    Parameters
    ----------
    pool_size : int
        Square window size.

    Raises
    ------
    ValueError
        If `pool_size` is not positive.
    """

    def __init__(self, pool_size: int) -> None:
        super().__init__()
        if int(pool_size) <= 0:
            raise ValueError(f"pool_size must be positive, got {pool_size}")
        self.pool_size = int(pool_size)

    def _pool(self, channel: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def _back_pool(self, grad_out: np.ndarray, reference: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(tensor)
        return Tensor([Matrix(self._pool(m.body)) for m in tensor.channels])

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        """
        Route `error` back to the positions of the cached input.

        `learning_rate` and `trainable` are accepted for interface
        compatibility and ignored.
        """
        reference = self._consume_input()
        return Tensor(
            [
                Matrix(self._back_pool(e.body, r.body))
                for e, r in zip(error.channels, reference.channels, strict=True)
            ]
        )

    def get_config(self) -> Dict[str, Any]:
        return {"pool_size": self.pool_size}


@register_component()
class MaxPooling(Pooling):
    """
    Max pooling over non-overlapping ``pool_size x pool_size`` windows.

    Output extents are ``floor(H / pool_size)`` by ``floor(W / pool_size)``.
    Ties resolve to the first maximum in row-major order within the window.
    """

    def _pool(self, channel: np.ndarray) -> np.ndarray:
        return max_pool2d(channel, self.pool_size)

    def _back_pool(self, grad_out: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return max_back_pool2d(grad_out, reference, self.pool_size)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "MaxPooling":
        return cls(int(cfg["pool_size"]))


@register_component()
class AveragePooling(Pooling):
    """
    Average pooling with an independent stride.

    Parameters
    ----------
    pool_size : int
        Square window size.
    stride : int, optional
        Window step. Defaults to `pool_size`, which gives non-overlapping
        windows and ``floor(H / pool_size)`` output rows.
    """

    def __init__(self, pool_size: int, stride: Optional[int] = None) -> None:
        super().__init__(pool_size)
        if stride is not None and int(stride) <= 0:
            raise ValueError(f"stride must be positive, got {stride}")
        self.stride = self.pool_size if stride is None else int(stride)

    def _pool(self, channel: np.ndarray) -> np.ndarray:
        return average_pool2d(channel, self.pool_size, self.stride)

    def _back_pool(self, grad_out: np.ndarray, reference: np.ndarray) -> np.ndarray:
        return average_back_pool2d(grad_out, reference, self.pool_size, self.stride)

    def get_config(self) -> Dict[str, Any]:
        return {"pool_size": self.pool_size, "stride": self.stride}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "AveragePooling":
        stride = cfg.get("stride")
        return cls(int(cfg["pool_size"]), None if stride is None else int(stride))
