"""
Weight initialization public API.

This module aggregates and exposes all supported weight initialization
strategies and registers them into the global `WeightInitializer` registry via
import side effects.

Exports
-------
- WeightInitializer:
    The registry-backed initializer dispatcher used to apply a selected
    initialization strategy to matrices.
- register_uniform:
    Registers a uniform initializer with custom bounds.
"""

from ._constants import *
from ._xavier import *
from ._kaiming import *
from ._base import WeightInitializer

__all__ = [
    WeightInitializer.__name__,
    register_uniform.__name__,
]
