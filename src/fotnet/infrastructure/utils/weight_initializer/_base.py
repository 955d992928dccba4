"""
Weight initializer registry and dispatch utilities.

This module defines the concrete `WeightInitializer` used by layers to seed
their weight matrices. It is the infrastructure implementation of the
`IWeightsInitialization` strategy: layers receive an instance at
construction and call `initialize(matrix)` once per weight matrix.

Design
------
- Initializers are registered by string name via a decorator-based registry.
- Each initializer is a callable ``(matrix, rng) -> matrix`` that fills the
  matrix *in-place* and returns it.
- The dispatcher resolves an initializer by name at construction time and
  owns the `numpy.random.Generator` used for sampling, so a seed makes
  layer construction reproducible.

Usage example
-------------
Registering an initializer:

    @WeightInitializer.register_initializer("kaiming")
    def kaiming(matrix: Matrix, rng: np.random.Generator) -> Matrix:
        ...

Applying an initializer:

    init = WeightInitializer("kaiming", seed=0)
    init.initialize(weight_matrix)
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional, TypeVar

import numpy as np

from ....domain.utils._weight_initialization import _WeightInitializer
from ...module._serialization_core import register_component
from ...tensor import Matrix

T = TypeVar("T", bound=Callable[..., Matrix])


@register_component()
class WeightInitializer(_WeightInitializer):
    """
    Registry-backed weight initializer dispatcher.

    Parameters
    ----------
    initializer_name : str
        Registered initializer name, e.g. ``"kaiming"`` or ``"uniform"``.
    seed : Optional[int]
        Seed for the internal random generator.

    Raises
    ------
    ValueError
        If `initializer_name` is not registered.
    """

    INITIALIZERS: ClassVar[Dict[str, Callable[..., Matrix]]] = {}

    def __init__(self, initializer_name: str, *, seed: Optional[int] = None) -> None:
        try:
            self._initializer: Callable[..., Matrix] = self.INITIALIZERS[
                initializer_name
            ]
        except KeyError as e:
            available = ", ".join(sorted(self.INITIALIZERS)) or "<none>"
            raise ValueError(
                f"Unsupported initializer name: {initializer_name!r}. "
                f"Available: {available}"
            ) from e
        self.name = initializer_name
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Decorator to register a weight initializer under `name`.

        Parameters
        ----------
        name:
            Registry key used to retrieve the initializer later.
        overwrite:
            If False (default), raises if `name` is already registered.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Initializer name must be a non-empty string")

        def decorator(func: T) -> T:
            if not overwrite and name in cls.INITIALIZERS:
                raise ValueError(f"Initializer already registered: {name!r}")
            cls.INITIALIZERS[name] = func
            return func

        return decorator

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """Return registered initializer names (sorted)."""
        return tuple(sorted(cls.INITIALIZERS))

    def initialize(self, matrix: Matrix) -> Matrix:
        return self._initializer(matrix, self._rng)

    def __call__(self, matrix: Matrix) -> Matrix:
        return self.initialize(matrix)

    def get_config(self) -> Dict[str, Any]:
        return {"initializer_name": self.name, "seed": self.seed}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WeightInitializer":
        return cls(str(cfg["initializer_name"]), seed=cfg.get("seed"))
