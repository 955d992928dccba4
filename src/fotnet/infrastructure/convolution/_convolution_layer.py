"""
Convolution layer implementation for FotNET.

`ConvolutionLayer` owns a bank of `Filter` objects and delegates the numeric
work to the naive CPU kernels in `fotnet.infrastructure.ops.convolution_cpu`.

Design overview
---------------
- Forward: the input is padded through the injected padding strategy, the
  padded tensor is cached, and every filter is cross-correlated against it
  (one output channel per filter, the filter bias added once per position).
- Backward: the cached input is reconciled against the error's channel count,
  each filter receives the strided kernel gradient of its own error channel,
  and the error for the previous layer is obtained by convolving the
  same-padded error with flipped, bias-free copies of the filters.
- The per-filter update is data-parallel. Filters share no mutable state, so
  the loop runs on a thread pool and is joined before returning.

Frozen kernel banks
-------------------
`ConvolutionLayer.from_text` / `ConvolutionLayer.from_file` load fixed
filters from a text resource. Such layers are permanently non-trainable:
forward and backward shapes are computed as usual but no update is applied.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from ...domain._padding import IPadding
from ...domain.utils._weight_initialization import IWeightsInitialization
from .._layer import Layer
from ..module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from ..module._serialization_weights import TokenStream, format_value
from ..ops.convolution_cpu import convolve_filters, kernel_gradient
from ..tensor import Filter, Matrix, Tensor
from ..utils.weight_initializer import WeightInitializer
from ._padding import IdentityPadding, SamePadding

logger = logging.getLogger(__name__)

INITIAL_BIAS = 0.001
FILTER_SEPARATOR = "/"


def filter_weight_tokens(filters: List[Filter]) -> List[str]:
    """
    Return the weight tokens of a filter bank.

    Each filter contributes the cells of all its channels, row-major and
    channel by channel, followed by its single bias scalar.
    """
    tokens: List[str] = []
    for f in filters:
        for channel in f.channels:
            tokens.extend(channel.to_tokens())
        tokens.append(format_value(f.bias))
    return tokens


def load_filter_tokens(filters: List[Filter], stream: TokenStream) -> None:
    """Overwrite a filter bank in place from `stream` (see `filter_weight_tokens`)."""
    for f in filters:
        for c, channel in enumerate(f.channels):
            f.channels[c] = Matrix(stream.next_array(channel.shape))
        f.bias = stream.next_float()


@register_component()
class ConvolutionLayer(Layer):
    """
    Multi-filter 2-D convolution layer.

    Parameters
    ----------
    filters : int
        Number of filters (output channels).
    filter_rows, filter_columns : int
        Kernel extents.
    filter_depth : int
        Channels per filter; must match the depth of the input tensor.
    initialization : IWeightsInitialization
        Strategy applied once to every kernel channel.
    stride : int, default=1
        Convolution stride.
    padding : IPadding, optional
        Padding strategy applied to every forward input. Defaults to
        `IdentityPadding`.

    Attributes
    ----------
    filters : list[Filter]
        The kernel bank. Each filter starts with a total bias of 0.001.
    trainable : bool
        False for layers built from a filter resource; never changes.

    Raises
    ------
    ValueError
        If any size or the stride is not positive.
    """

    def __init__(
        self,
        filters: int,
        filter_rows: int,
        filter_columns: int,
        filter_depth: int,
        initialization: IWeightsInitialization,
        stride: int = 1,
        padding: Optional[IPadding] = None,
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
        self.padding: IPadding = IdentityPadding() if padding is None else padding
        self.initialization: Optional[IWeightsInitialization] = initialization
        self.trainable = True

        self.filters: List[Filter] = []
        for _ in range(int(filters)):
            channels = [
                initialization.initialize(Matrix.zeros(filter_rows, filter_columns))
                for _ in range(int(filter_depth))
            ]
            self.filters.append(Filter.with_bias(channels, INITIAL_BIAS))

    # ------------------------------------------------------------------
    # Frozen construction
    # ------------------------------------------------------------------
    @classmethod
    def from_text(
        cls,
        text: str,
        filter_depth: int,
        stride: int = 1,
        padding: Optional[IPadding] = None,
    ) -> "ConvolutionLayer":
        """
        Build a frozen layer from a filter resource.

        Parameters
        ----------
        text : str
            Filter records separated by ``/``. Each record is a matrix in
            `Matrix.parse` format (rows on separate lines, values separated
            by whitespace) and is reused for every one of the
            `filter_depth` channels of its filter.
        filter_depth : int
            Channels per filter.
        stride : int, default=1
            Convolution stride.
        padding : IPadding, optional
            Padding strategy. Defaults to `IdentityPadding`.

        Returns
        -------
        ConvolutionLayer
            A layer whose `trainable` flag is permanently False.

        Raises
        ------
        ValueError
            If the resource holds no filter record or a record is not a
            rectangular numeric matrix.
        """
        records = [r for r in text.split(FILTER_SEPARATOR) if r.strip()]
        if not records:
            raise ValueError("filter resource holds no filter records")
        if int(filter_depth) <= 0:
            raise ValueError(f"filter_depth must be positive, got {filter_depth}")
        if int(stride) <= 0:
            raise ValueError(f"stride must be positive, got {stride}")

        layer = cls.__new__(cls)
        Layer.__init__(layer)
        layer.stride = int(stride)
        layer.padding = IdentityPadding() if padding is None else padding
        layer.initialization = None
        layer.trainable = False
        layer.filters = []
        for record in records:
            kernel = Matrix.parse(record)
            channels = [kernel.copy() for _ in range(int(filter_depth))]
            layer.filters.append(Filter.with_bias(channels, INITIAL_BIAS))
        return layer

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        filter_depth: int,
        stride: int = 1,
        padding: Optional[IPadding] = None,
    ) -> "ConvolutionLayer":
        """Read a filter resource from `path` and build a frozen layer (see `from_text`)."""
        path = Path(path)
        layer = cls.from_text(
            path.read_text(encoding="utf-8"), filter_depth, stride, padding
        )
        logger.info(
            "Loaded %d frozen filters (%dx%dx%d) from %s",
            len(layer.filters),
            layer.filter_rows,
            layer.filter_columns,
            filter_depth,
            path,
        )
        return layer

    # ------------------------------------------------------------------
    # Shape helpers
    # ------------------------------------------------------------------
    @property
    def filter_rows(self) -> int:
        return self.filters[0].channels[0].rows

    @property
    def filter_columns(self) -> int:
        return self.filters[0].channels[0].columns

    @property
    def filter_depth(self) -> int:
        return len(self.filters[0].channels)

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------
    def produce_output(self, tensor: Tensor) -> Tensor:
        padded = self.padding.pad(tensor)
        self._cache_input(padded)
        return convolve_filters(padded, self.filters, self.stride)

    def propagate_error(
        self, error: Tensor, learning_rate: float = 0.0, trainable: bool = True
    ) -> Tensor:
        """
        Backpropagate `error` through the convolution.

        Parameters
        ----------
        error : Tensor
            Error w.r.t. the layer output, one channel per filter.
        learning_rate : float
            Step size for the filter and bias updates.
        trainable : bool
            Caller-side update switch. Weights move only when both this flag
            and the layer's own `trainable` flag are set.

        Returns
        -------
        Tensor
            Error w.r.t. the layer input.
        """
        cached = self._consume_input()
        extended_input = cached.same_channels(error)

        # Snapshot taken before the update; channels are replaced, never mutated.
        backward_filters = [
            f.same_channels(error).without_biases().flip() for f in self.filters
        ]

        if self.trainable and trainable:
            self._update_filters(extended_input, error, float(learning_rate))

        padded_error = SamePadding.for_filter(backward_filters[0]).pad(error)
        return convolve_filters(padded_error, backward_filters, self.stride)

    def _update_filters(
        self, extended_input: Tensor, error: Tensor, learning_rate: float
    ) -> None:
        kernel_shape = (self.filter_rows, self.filter_columns)

        def update(index: int) -> None:
            f = self.filters[index]
            e = error.channels[index].body
            grad = kernel_gradient(
                extended_input.channels[index].body, e, self.stride, kernel_shape
            )
            step = Matrix(grad * learning_rate)
            bias_step = float(np.sum(e)) * learning_rate
            for c in range(len(f.channels)):
                f.channels[c] = f.channels[c] - step
            f.bias = f.bias - bias_step

        workers = max(1, min(len(self.filters), os.cpu_count() or 1))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # list() re-raises any worker exception here
            list(pool.map(update, range(len(self.filters))))

    # ------------------------------------------------------------------
    # Weight text persistence
    # ------------------------------------------------------------------
    def weight_tokens(self) -> List[str]:
        return filter_weight_tokens(self.filters)

    def load_tokens(self, stream: TokenStream) -> None:
        load_filter_tokens(self.filters, stream)

    # ------------------------------------------------------------------
    # JSON configuration
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        return {
            "filters": len(self.filters),
            "filter_rows": self.filter_rows,
            "filter_columns": self.filter_columns,
            "filter_depth": self.filter_depth,
            "stride": self.stride,
            "padding": component_to_config(self.padding),
            "initialization": (
                None
                if self.initialization is None
                else component_to_config(self.initialization)
            ),
            "trainable": self.trainable,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ConvolutionLayer":
        """
        Rebuild the layer structure from a configuration dict.

        Filter values are expected to be loaded afterwards from the weight
        text. Frozen layers are rebuilt with zero kernels and stay frozen.
        """
        initialization = component_from_config(cfg.get("initialization"))
        if initialization is None:
            initialization = WeightInitializer("zeros")
        layer = cls(
            filters=int(cfg["filters"]),
            filter_rows=int(cfg["filter_rows"]),
            filter_columns=int(cfg["filter_columns"]),
            filter_depth=int(cfg["filter_depth"]),
            initialization=initialization,
            stride=int(cfg.get("stride", 1)),
            padding=component_from_config(cfg.get("padding")),
        )
        if not bool(cfg.get("trainable", True)):
            layer.initialization = None
            layer.trainable = False
        return layer
