"""
Tensor public API.

Exports
-------
- Matrix: fixed-extent 2-D float64 container.
- Tensor: ordered list of Matrix channels.
- Filter: Tensor with one bias slot per channel and a single total bias.
"""

from ._matrix import Matrix
from ._tensor import Filter, Tensor

__all__ = [
    Matrix.__name__,
    Tensor.__name__,
    Filter.__name__,
]
