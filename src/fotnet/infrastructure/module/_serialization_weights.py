"""
Plain-text weight persistence.

Weights are stored as whitespace-delimited decimal tokens consumed
left-to-right in a fixed per-layer traversal order. A layer consumes exactly
the tokens it needs and hands the unconsumed remainder to the next layer.

Rather than re-joining and re-splitting the remainder for every layer, the
text is tokenized once into a `TokenStream` whose cursor is advanced by each
layer's `load_tokens`. `remainder()` re-joins what is left when a caller
needs the string form.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from ...domain._errors import WeightParseError


def format_value(value: float) -> str:
    """
    Format one scalar as a weight token.

    `repr` of a Python float is the shortest text that parses back to the
    identical value.
    """
    return repr(float(value))


def join_tokens(tokens: Iterable[str]) -> str:
    """Join tokens into the whitespace-delimited text form."""
    return " ".join(tokens)


class TokenStream:
    """
    Cursor over a pre-tokenized weight text.

    Parameters
    ----------
    text : str
        Whitespace-delimited decimal tokens.

    Attributes
    ----------
    position : int
        Index of the next token to consume.
    """

    def __init__(self, text: str) -> None:
        self._tokens: List[str] = text.split()
        self.position = 0

    def __len__(self) -> int:
        return len(self._tokens) - self.position

    def next_float(self) -> float:
        """
        Consume one token and return it as a float.

        Raises
        ------
        WeightParseError
            If the stream is exhausted or the token is not numeric.
        """
        if self.position >= len(self._tokens):
            raise WeightParseError(None, self.position)
        token = self._tokens[self.position]
        try:
            value = float(token)
        except ValueError as e:
            raise WeightParseError(token, self.position) from e
        self.position += 1
        return value

    def next_array(self, shape: tuple[int, ...]) -> np.ndarray:
        """
        Consume ``prod(shape)`` tokens and return them as a row-major array.
        """
        count = int(np.prod(shape))
        values = [self.next_float() for _ in range(count)]
        return np.asarray(values, dtype=np.float64).reshape(shape)

    def remainder(self) -> str:
        """Return the unconsumed tokens re-joined with single spaces."""
        return join_tokens(self._tokens[self.position :])
