"""
Load- and state-related exceptions for FotNET.

This module defines the custom errors raised by the engine. The engine has
no recoverable-error taxonomy: both errors signal conditions that callers are
expected to treat as fatal (abort the load, fix the call order) rather than
retry.

Shape mismatches that fall outside channel reconciliation are intentionally
not represented here; they surface as the underlying NumPy indexing or
broadcasting errors.
"""

from typing import Optional


class WeightParseError(ValueError):
    """
    Raised when serialized weight text cannot be consumed.

    This covers both non-numeric tokens and token streams that end before a
    layer has read every value it needs.

    Attributes
    ----------
    token : Optional[str]
        The offending token, or None when the stream ran out.
    position : int
        Zero-based index of the offending token in the token stream.
    """

    def __init__(self, token: Optional[str], position: int) -> None:
        """
        Initialize the WeightParseError.

        Parameters
        ----------
        token : Optional[str]
            Token that failed to parse, or None if no token was available.
        position : int
            Index of the token in the whitespace-delimited stream.
        """
        if token is None:
            message = f"Weight text ended early: expected a value at token {position}."
        else:
            message = f"Invalid weight token {token!r} at position {position}."
        super().__init__(message)
        self.token = token
        self.position = position


class ForwardCacheError(RuntimeError):
    """
    Raised when a layer is asked to propagate error without a cached input.

    Every layer keeps a single forward-input slot that is filled by
    `produce_output` and consumed by `propagate_error`. Calling
    `propagate_error` twice, or before any forward pass, leaves the slot
    empty.
    """

    def __init__(self, layer: str) -> None:
        """
        Initialize the ForwardCacheError.

        Parameters
        ----------
        layer : str
            Name of the layer class whose cache was empty.
        """
        super().__init__(
            f"{layer}.propagate_error() called without a preceding produce_output()."
        )
        self.layer = layer
