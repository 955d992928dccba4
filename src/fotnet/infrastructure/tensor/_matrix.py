"""
Dense 2-D matrix container (NumPy backend).

`Matrix` is the leaf numeric type of FotNET: a fixed-extent 2-D array of
float64 values with elementwise arithmetic, transpose, sum, 180° flip and
row-major flatten.

Design notes
------------
- Extents are fixed at construction time. Every shape-changing operation
  (transpose, pad, window extraction) returns a new `Matrix`.
- Binary operators never mutate their operands.
- Operations between two matrices require identical extents; mismatches are
  not validated and surface as NumPy broadcasting errors.
"""

from __future__ import annotations

from typing import Any, List, Tuple, Union

import numpy as np

Scalar = Union[int, float]


def _body_of(value: Union["Matrix", Scalar]) -> Union[np.ndarray, float]:
    """
    Return the raw operand used by elementwise operators.

    Parameters
    ----------
    value : Matrix or scalar
        Right-hand operand.

    Returns
    -------
    np.ndarray or float
        The matrix body, or the scalar converted to float.
    """
    if isinstance(value, Matrix):
        return value.body
    return float(value)


class Matrix:
    """
    Fixed-extent 2-D numeric container.

    Parameters
    ----------
    body : array-like
        Nested sequence or array. A 1-D input is treated as a single row.

    Attributes
    ----------
    body : np.ndarray
        Underlying float64 array of shape (rows, columns).
    """

    __slots__ = ("_body",)

    def __init__(self, body: Any) -> None:
        arr = np.array(body, dtype=np.float64)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2:
            raise ValueError(f"Matrix expects 2-D data, got shape {arr.shape}")
        self._body = arr

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(cls, rows: int, columns: int) -> "Matrix":
        """Create a zero-filled matrix of the given extents."""
        return cls(np.zeros((rows, columns), dtype=np.float64))

    @classmethod
    def identity(cls, size: int) -> "Matrix":
        """Create a square identity matrix."""
        return cls(np.eye(size, dtype=np.float64))

    @classmethod
    def parse(cls, text: str) -> "Matrix":
        """
        Parse a matrix from text.

        Rows are separated by newlines and values by whitespace. Blank lines
        are ignored.

        Parameters
        ----------
        text : str
            Matrix text, e.g. ``"1 0\\n0 1"``.

        Returns
        -------
        Matrix
            Parsed matrix.

        Raises
        ------
        ValueError
            If a value is not numeric or rows have different lengths.
        """
        rows = [line.split() for line in text.splitlines() if line.strip()]
        if not rows:
            raise ValueError("Cannot parse a matrix from empty text")
        widths = {len(row) for row in rows}
        if len(widths) != 1:
            raise ValueError(f"Ragged matrix text: row widths {sorted(widths)}")
        return cls([[float(v) for v in row] for row in rows])

    # ------------------------------------------------------------------
    # Shape and access
    # ------------------------------------------------------------------
    @property
    def body(self) -> np.ndarray:
        """Underlying float64 array."""
        return self._body

    @property
    def rows(self) -> int:
        return int(self._body.shape[0])

    @property
    def columns(self) -> int:
        return int(self._body.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.rows, self.columns)

    def __getitem__(self, key: Any) -> Any:
        return self._body[key]

    def __setitem__(self, key: Any, value: Any) -> None:
        self._body[key] = value

    def copy(self) -> "Matrix":
        return Matrix(self._body.copy())

    def __repr__(self) -> str:
        return f"Matrix(rows={self.rows}, columns={self.columns})"

    # ------------------------------------------------------------------
    # Elementwise arithmetic
    # ------------------------------------------------------------------
    def __add__(self, other: Union["Matrix", Scalar]) -> "Matrix":
        return Matrix(self._body + _body_of(other))

    def __radd__(self, other: Scalar) -> "Matrix":
        return Matrix(float(other) + self._body)

    def __sub__(self, other: Union["Matrix", Scalar]) -> "Matrix":
        return Matrix(self._body - _body_of(other))

    def __rsub__(self, other: Scalar) -> "Matrix":
        return Matrix(float(other) - self._body)

    def __mul__(self, other: Union["Matrix", Scalar]) -> "Matrix":
        return Matrix(self._body * _body_of(other))

    def __rmul__(self, other: Scalar) -> "Matrix":
        return Matrix(float(other) * self._body)

    def __truediv__(self, other: Scalar) -> "Matrix":
        return Matrix(self._body / float(other))

    def __neg__(self) -> "Matrix":
        return Matrix(-self._body)

    def minimum(self, other: "Matrix") -> "Matrix":
        """Elementwise minimum of two equally sized matrices."""
        return Matrix(np.minimum(self._body, other.body))

    # ------------------------------------------------------------------
    # Structural operations
    # ------------------------------------------------------------------
    def transpose(self) -> "Matrix":
        return Matrix(self._body.T.copy())

    def sum(self) -> float:
        return float(self._body.sum())

    def flip(self) -> "Matrix":
        """
        Rotate the matrix by 180 degrees.

        Used to turn a forward kernel into its backward-pass correlate.
        """
        return Matrix(self._body[::-1, ::-1].copy())

    def flatten(self) -> np.ndarray:
        """Return the cells in row-major order as a 1-D array."""
        return self._body.reshape(-1).copy()

    def pad(self, top: int, bottom: int, left: int, right: int) -> "Matrix":
        """
        Return a zero-padded copy of the matrix.

        Parameters
        ----------
        top, bottom, left, right : int
            Number of zero rows/columns added on each side.
        """
        return Matrix(
            np.pad(
                self._body,
                pad_width=((top, bottom), (left, right)),
                mode="constant",
                constant_values=0.0,
            )
        )

    def to_tokens(self) -> List[str]:
        """
        Return the cells as decimal tokens in row-major order.

        `repr` of a Python float is the shortest string that round-trips
        exactly, so `float(token)` restores the stored value.
        """
        return [repr(float(v)) for v in self._body.reshape(-1)]
