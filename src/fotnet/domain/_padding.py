"""
Spatial padding strategy contract.

Convolution layers pad their input exactly once per forward call through an
injected strategy rather than a hard-coded padding amount, so the same layer
can run with identity (valid) or size-preserving (same) semantics.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IPadding(Protocol):
    """
    Padding strategy interface.

    Implementations must be pure: the input tensor is never modified and a
    new tensor is returned.
    """

    def pad(self, tensor: ITensor) -> ITensor:
        """
        Return a padded copy of `tensor`.

        Parameters
        ----------
        tensor : ITensor
            Tensor to pad.

        Returns
        -------
        ITensor
            Padded tensor with the same channel count.
        """
        ...
