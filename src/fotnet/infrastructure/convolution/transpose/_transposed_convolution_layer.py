"""
Transposed-convolution (upsampling) layer for FotNET.

The forward pass scatters every input value into a kernel-sized
neighborhood of the output, anchored at ``stride`` times its position:

    H_out = (H_in - 1) * stride + K_h
    W_out = (W_in - 1) * stride + K_w

The backward pass is delegated entirely to an injected
`ITransposedConvolutionOptimization` strategy, so the update rule can be
swapped (see `TransposedConvolutionSGD`, `TransposedConvolutionAdam`)
without touching the layer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ....domain._optimizers import ITransposedConvolutionOptimization
from ....domain.utils._weight_initialization import IWeightsInitialization
from ..._layer import Layer
from ...module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from ...module._serialization_weights import TokenStream
from ...ops.convolution_transpose_cpu import transposed_convolve_filters
from ...tensor import Filter, Matrix, Tensor
from ...utils.weight_initializer import WeightInitializer
from .._convolution_layer import (
    INITIAL_BIAS,
    filter_weight_tokens,
    load_filter_tokens,
)
from ._optimization import TransposedConvolutionSGD


@register_component()
class TransposedConvolutionLayer(Layer):
    """
    Multi-filter 2-D transposed convolution.

    Parameters
    ----------
    filters : int
        Number of filters (output channels).
    filter_rows, filter_columns : int
        Kernel extents.
    filter_depth : int
        Channels per filter; must match the input depth.
    initialization : IWeightsInitialization
        Strategy applied once to every kernel channel.
    stride : int, default=1
        Upsampling stride.
    optimization : ITransposedConvolutionOptimization, optional
        Backward strategy. Defaults to `TransposedConvolutionSGD`.
    """

    def __init__(
        self,
        filters: int,
        filter_rows: int,
        filter_columns: int,
        filter_depth: int,
        initialization: IWeightsInitialization,
        stride: int = 1,
        optimization: Optional[ITransposedConvolutionOptimization] = None,
    ) -> None:
        super().__init__()
        for name, value in (
            ("filters", filters),
            ("filter_rows", filter_rows),
            ("filter_columns", filter_columns),
            ("filter_depth", filter_depth),
            ("stride", stride),
        ):
            if int(value) <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        self.stride = int(stride)
        self.initialization = initialization
        self.optimization: ITransposedConvolutionOptimization = (
            TransposedConvolutionSGD() if optimization is None else optimization
        )
        self.filters: List[Filter] = []
        for _ in range(int(filters)):
            channels = [
                initialization.initialize(Matrix.zeros(filter_rows, filter_columns))
                for _ in range(int(filter_depth))
            ]
            self.filters.append(Filter.with_bias(channels, INITIAL_BIAS))

    def produce_output(self, tensor: Tensor) -> Tensor:
        self._cache_input(Tensor(tensor.channels))
        return transposed_convolve_filters(tensor, self.filters, self.stride)

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        cached = self._consume_input()
        return self.optimization.propagate_error(
            error, learning_rate, trainable, cached, self.filters, self.stride
        )

    def weight_tokens(self) -> List[str]:
        return filter_weight_tokens(self.filters)

    def load_tokens(self, stream: TokenStream) -> None:
        load_filter_tokens(self.filters, stream)

    def get_config(self) -> Dict[str, Any]:
        first = self.filters[0].channels[0]
        return {
            "filters": len(self.filters),
            "filter_rows": first.rows,
            "filter_columns": first.columns,
            "filter_depth": len(self.filters[0].channels),
            "stride": self.stride,
            "initialization": component_to_config(self.initialization),
            "optimization": component_to_config(self.optimization),
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "TransposedConvolutionLayer":
        initialization = component_from_config(cfg.get("initialization"))
        return cls(
            filters=int(cfg["filters"]),
            filter_rows=int(cfg["filter_rows"]),
            filter_columns=int(cfg["filter_columns"]),
            filter_depth=int(cfg["filter_depth"]),
            initialization=(
                WeightInitializer("zeros") if initialization is None else initialization
            ),
            stride=int(cfg.get("stride", 1)),
            optimization=component_from_config(cfg.get("optimization")),
        )
