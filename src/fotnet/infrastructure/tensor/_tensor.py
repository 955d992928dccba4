"""
Multi-channel tensor and filter types.

A `Tensor` is an ordered list of `Matrix` channels and is the unit of data
exchanged between layers. A `Filter` is a `Tensor` plus exactly one bias
scalar per channel, positionally paired with ``channels[i]``; it serves both
as a trainable convolution kernel and as the unit manipulated by the
flip / strip-bias transforms of backpropagation.

Channel order is significant and preserved by every operation. Binary
operators require equal channel counts and equal per-channel extents.
Mismatched channel counts between an input and a gradient are resolved with
`Tensor.same_channels`, the channel reconciliation rule:

- fewer channels than the reference: replicate the **last** channel until
  the counts match (pad-up);
- more channels than the reference: pair channels two-by-two, in order, and
  keep the elementwise minimum of each pair (crop-down).
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np

from ._matrix import Matrix, Scalar


class Tensor:
    """
    Ordered list of `Matrix` channels.

    Parameters
    ----------
    channels : Matrix or Iterable[Matrix]
        A single channel or the channels in order. The list is copied; the
        matrices themselves are shared.
    """

    def __init__(self, channels: Union[Matrix, Iterable[Matrix]]) -> None:
        if isinstance(channels, Matrix):
            self._channels: List[Matrix] = [channels]
        else:
            self._channels = list(channels)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def from_flat(
        cls, values: Sequence[float], rows: int, columns: int, depth: int
    ) -> "Tensor":
        """
        Rebuild a tensor from its flattened form.

        This is the inverse of `flatten`: values are consumed row-major
        within each channel, channel-major overall.

        Parameters
        ----------
        values : Sequence[float]
            Flattened values; must hold exactly ``rows * columns * depth``
            entries.
        rows, columns : int
            Per-channel extents.
        depth : int
            Number of channels.

        Returns
        -------
        Tensor
            Tensor of the requested extents.
        """
        arr = np.asarray(values, dtype=np.float64).reshape(depth, rows, columns)
        return cls([Matrix(arr[c]) for c in range(depth)])

    @classmethod
    def zeros(cls, rows: int, columns: int, depth: int) -> "Tensor":
        return cls([Matrix.zeros(rows, columns) for _ in range(depth)])

    # ------------------------------------------------------------------
    # Shape and access
    # ------------------------------------------------------------------
    @property
    def channels(self) -> List[Matrix]:
        return self._channels

    @property
    def depth(self) -> int:
        return len(self._channels)

    @property
    def rows(self) -> int:
        return self._channels[0].rows

    @property
    def columns(self) -> int:
        return self._channels[0].columns

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[Matrix]:
        return iter(self._channels)

    def __getitem__(self, idx: int) -> Matrix:
        return self._channels[idx]

    def __repr__(self) -> str:
        if not self._channels:
            return f"{self.__class__.__name__}(depth=0)"
        return (
            f"{self.__class__.__name__}(rows={self.rows}, "
            f"columns={self.columns}, depth={self.depth})"
        )

    def copy(self) -> "Tensor":
        return Tensor([m.copy() for m in self._channels])

    def to_numpy(self) -> np.ndarray:
        """Return the channels stacked into an array of shape (depth, rows, columns)."""
        return np.stack([m.body for m in self._channels])

    # ------------------------------------------------------------------
    # Reductions and transforms
    # ------------------------------------------------------------------
    def flatten(self) -> np.ndarray:
        """
        Linearize all channels into one 1-D array.

        Ordering is row-major within each channel and channel-major overall;
        Flatten, Perceptron and SoftMax layers depend on it exactly.
        """
        if not self._channels:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate([m.flatten() for m in self._channels])

    def sum(self) -> float:
        return float(sum(m.sum() for m in self._channels))

    def flip(self) -> "Tensor":
        """Rotate every channel by 180 degrees."""
        return Tensor([m.flip() for m in self._channels])

    def as_filter(self, biases: Optional[Sequence[float]] = None) -> "Filter":
        return Filter(self._channels, biases)

    def same_channels(self, reference: "Tensor") -> "Tensor":
        """
        Reconcile this tensor's channel count with `reference`.

        Parameters
        ----------
        reference : Tensor
            Tensor whose channel count must be matched.

        Returns
        -------
        Tensor
            `self` when the counts already match; otherwise a new tensor
            built by the pad-up / crop-down rule.

        Notes
        -----
        Crop-down reads pairs ``(0, 1), (2, 3), ...`` until the reference
        count is reached. A tensor with fewer than twice the reference
        channels therefore fails with IndexError.
        """
        target = len(reference.channels)
        current = len(self._channels)
        if current == target:
            return self
        if current < target:
            return self._increase_channels(target - current)
        return self._crop_channels(target)

    def _increase_channels(self, count: int) -> "Tensor":
        channels = list(self._channels)
        for _ in range(count):
            channels.append(channels[-1].copy())
        return Tensor(channels)

    def _crop_channels(self, count: int) -> "Tensor":
        channels = []
        for i in range(0, count * 2, 2):
            channels.append(self._channels[i].minimum(self._channels[i + 1]))
        return Tensor(channels)

    # ------------------------------------------------------------------
    # Elementwise arithmetic
    # ------------------------------------------------------------------
    def _zip_with(self, other: Union["Tensor", Scalar], op) -> "Tensor":
        if isinstance(other, Tensor):
            return Tensor(
                [op(a, b) for a, b in zip(self._channels, other.channels, strict=True)]
            )
        return Tensor([op(a, other) for a in self._channels])

    def __add__(self, other: Union["Tensor", Scalar]) -> "Tensor":
        return self._zip_with(other, lambda a, b: a + b)

    def __sub__(self, other: Union["Tensor", Scalar]) -> "Tensor":
        return self._zip_with(other, lambda a, b: a - b)

    def __mul__(self, other: Union["Tensor", Scalar]) -> "Tensor":
        return self._zip_with(other, lambda a, b: a * b)

    def __rmul__(self, other: Scalar) -> "Tensor":
        return self._zip_with(other, lambda a, b: a * b)


class Filter(Tensor):
    """
    Tensor with one bias slot per channel.

    The filter adds the total of its slots once per output position. The
    training and persistence paths treat that total as a single scalar: the
    `bias` setter stores it in the lead slot and zeroes the others.

    Parameters
    ----------
    channels : Matrix or Iterable[Matrix]
        Kernel channels.
    biases : Optional[Sequence[float]]
        One bias per channel. Defaults to zeros.

    Raises
    ------
    ValueError
        If the number of biases differs from the number of channels.
    """

    def __init__(
        self,
        channels: Union[Matrix, Iterable[Matrix]],
        biases: Optional[Sequence[float]] = None,
    ) -> None:
        super().__init__(channels)
        if biases is None:
            self.biases: List[float] = [0.0] * len(self._channels)
        else:
            self.biases = [float(b) for b in biases]
        if len(self.biases) != len(self._channels):
            raise ValueError(
                f"Filter expects one bias per channel: got {len(self.biases)} "
                f"biases for {len(self._channels)} channels"
            )

    @classmethod
    def with_bias(
        cls, channels: Union[Matrix, Iterable[Matrix]], bias: float
    ) -> "Filter":
        """Build a filter whose total bias is `bias`."""
        f = cls(channels)
        f.bias = bias
        return f

    @property
    def bias(self) -> float:
        """Total bias the filter adds at every output position."""
        return float(sum(self.biases))

    @bias.setter
    def bias(self, value: float) -> None:
        self.biases = [float(value)] + [0.0] * (len(self._channels) - 1)

    def copy(self) -> "Filter":
        return Filter([m.copy() for m in self._channels], self.biases)

    def as_tensor(self) -> Tensor:
        return Tensor(self._channels)

    def flip(self) -> "Filter":
        """Rotate every channel by 180 degrees, keeping the biases."""
        return Filter([m.flip() for m in self._channels], self.biases)

    def without_biases(self) -> "Filter":
        """Return the same channels with all biases set to zero."""
        return Filter(self._channels)

    def same_channels(self, reference: Tensor) -> "Filter":
        """
        Reconcile the channel count with `reference`, keeping a bias per channel.

        Replicated channels reuse the last bias; cropped pairs keep the bias
        of the first channel of each pair.
        """
        reconciled = super().same_channels(reference)
        if reconciled is self:
            return self
        target = len(reconciled.channels)
        if target > len(self.biases):
            biases = self.biases + [self.biases[-1]] * (target - len(self.biases))
        else:
            biases = [self.biases[i] for i in range(0, target * 2, 2)]
        return Filter(reconciled.channels, biases)
