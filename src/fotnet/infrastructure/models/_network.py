"""
Network container for FotNET.

`Network` composes layers into an ordered pipeline:

    y = L_n(...L_2(L_1(x)))

and sequences the backward pass in reverse order, handing every layer the
error returned by the layer closer to the output.

It supports:

- deterministic layer ordering, indexing, iteration and `add`
- one-call training steps (`train_step`) with an output-minus-target error
- plain-text weight persistence, threading a single token cursor through all
  layers (`serialize`, `deserialize`, `save_weights`, `load_weights`)
- single-file JSON checkpoints holding architecture and weights
  (`save_json`, `load_json`)

Notes
-----
The `_layers` list is the authoritative ordered view; the JSON config
registry rebuilds it through `add()` on load.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .._layer import Layer
from ..module._serialization_core import (
    component_from_config,
    component_to_config,
    register_component,
)
from ..module._serialization_weights import TokenStream, join_tokens
from ..tensor import Tensor

logger = logging.getLogger(__name__)

CHECKPOINT_FORMAT = "fotnet.json.ckpt.v1"


@register_component()
class Network:
    """
    Ordered layer pipeline.

    Parameters
    ----------
    layers : Sequence[Layer], optional
        Layers appended in order.
    """

    def __init__(self, layers: Optional[Sequence[Layer]] = None) -> None:
        self._layers: List[Layer] = []
        for layer in layers or ():
            self.add(layer)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------
    def add(self, layer: Layer) -> None:
        """
        Append a layer to the pipeline.

        Raises
        ------
        TypeError
            If `layer` is not a `Layer`.
        """
        if not isinstance(layer, Layer):
            raise TypeError(f"Network.add expects a Layer, got: {type(layer)}")
        self._layers.append(layer)

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __getitem__(self, idx: int) -> Layer:
        return self._layers[idx]

    def layers(self) -> Tuple[Layer, ...]:
        return tuple(self._layers)

    def summary(self) -> str:
        """
        Return a human-readable description of the layers.

        Each line shows the layer index, its class name and the number of
        weight tokens it persists.
        """
        lines = [f"{self.__class__.__name__}("]
        for i, layer in enumerate(self._layers):
            lines.append(
                f"  ({i}) {layer.__class__.__name__}: "
                f"{len(layer.weight_tokens())} weights"
            )
        lines.append(")")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Forward / backward
    # ------------------------------------------------------------------
    def produce_output(self, tensor: Tensor) -> Tensor:
        out = tensor
        for layer in self._layers:
            out = layer.produce_output(out)
        return out

    def __call__(self, tensor: Tensor) -> Tensor:
        return self.produce_output(tensor)

    def propagate_error(
        self, error: Tensor, learning_rate: float, trainable: bool = True
    ) -> Tensor:
        """
        Backpropagate `error` through all layers in reverse order.

        Returns
        -------
        Tensor
            Error with respect to the network input.
        """
        for layer in reversed(self._layers):
            error = layer.propagate_error(error, learning_rate, trainable)
        return error

    def train_step(
        self, inputs: Tensor, expected: Tensor, learning_rate: float
    ) -> float:
        """
        Run one forward and backward pass on a single sample.

        Parameters
        ----------
        inputs : Tensor
            Network input.
        expected : Tensor
            Target with the same extents as the network output.
        learning_rate : float
            Step size passed to every layer.

        Returns
        -------
        float
            Mean squared error of the forward output, before the update.
        """
        output = self.produce_output(inputs)
        error = output - expected
        loss = float(np.mean(error.flatten() ** 2))
        self.propagate_error(error, learning_rate)
        logger.debug("train_step loss=%.6f lr=%g", loss, learning_rate)
        return loss

    # ------------------------------------------------------------------
    # Plain-text weights
    # ------------------------------------------------------------------
    def serialize(self) -> str:
        tokens: List[str] = []
        for layer in self._layers:
            tokens.extend(layer.weight_tokens())
        return join_tokens(tokens)

    def deserialize(self, text: str) -> str:
        """
        Load every layer's weights from `text`, in network order.

        Returns
        -------
        str
            Tokens left over after the last layer.

        Raises
        ------
        WeightParseError
            If a token is not numeric or the text ends early.
        """
        stream = TokenStream(text)
        for layer in self._layers:
            layer.load_tokens(stream)
        if len(stream):
            logger.warning(
                "Weight text has %d unconsumed tokens after loading %d layers",
                len(stream),
                len(self._layers),
            )
        logger.debug("Loaded %d weight tokens", stream.position)
        return stream.remainder()

    def save_weights(self, path: Union[str, Path]) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(self.serialize(), encoding="utf-8")
        logger.info("Saved weights of %d layers to %s", len(self._layers), p)

    def load_weights(self, path: Union[str, Path]) -> str:
        p = Path(path)
        remainder = self.deserialize(p.read_text(encoding="utf-8"))
        logger.info("Loaded weights of %d layers from %s", len(self._layers), p)
        return remainder

    # ------------------------------------------------------------------
    # JSON checkpoints
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Network":
        return cls()

    def save_json(self, path: Union[str, Path]) -> None:
        """
        Save architecture and weights into a single JSON file.

        Format
        ------
        {
          "format": "fotnet.json.ckpt.v1",
          "arch": {...},
          "weights": "<whitespace-delimited tokens>"
        }
        """
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "format": CHECKPOINT_FORMAT,
            "arch": component_to_config(self),
            "weights": self.serialize(),
        }
        p.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        logger.info("Saved checkpoint to %s", p)

    @classmethod
    def load_json(cls, path: Union[str, Path]) -> "Network":
        """
        Load a network from a checkpoint created by `save_json()`.

        Raises
        ------
        ValueError
            If the checkpoint format is not supported.
        TypeError
            If the stored architecture is not a `Network`.
        """
        p = Path(path)
        payload = json.loads(p.read_text(encoding="utf-8"))

        fmt = payload.get("format")
        if fmt != CHECKPOINT_FORMAT:
            raise ValueError(f"Unsupported checkpoint format: {fmt!r}")

        network = component_from_config(payload["arch"])
        if not isinstance(network, cls):
            raise TypeError(
                f"Loaded object is {type(network).__name__}, expected {cls.__name__}."
            )
        network.deserialize(payload.get("weights", ""))
        logger.info("Loaded checkpoint from %s", p)
        return network
