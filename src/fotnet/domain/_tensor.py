"""
Tensor interface definitions.

This module defines the domain-level contract for the multi-channel data unit
exchanged between layers. A tensor is an ordered list of 2-D channels; channel
order is significant and preserved by every operation.

Notes
-----
This module contains **no NumPy or backend-specific logic** and is safe to
depend on from any layer of the architecture.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable


@runtime_checkable
class ITensor(Protocol):
    """
    Domain-level tensor interface.

    Any object exposing an ordered channel list, a channel-major flatten and
    a scalar sum satisfies this protocol.
    """

    @property
    def channels(self) -> Sequence[Any]:
        """
        Return the ordered list of 2-D channels.

        Returns
        -------
        Sequence[Any]
            Channel matrices in their significant order.
        """
        ...

    def flatten(self) -> Any:
        """
        Linearize all channels into a single sequence.

        Ordering is row-major within each channel and channel-major overall.
        """
        ...

    def sum(self) -> float:
        """
        Reduce the tensor to a single scalar.
        """
        ...
