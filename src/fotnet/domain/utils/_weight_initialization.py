"""
Abstract interfaces and utilities for weight initialization.

This module defines the contract for weight initialization strategies used
throughout the framework, along with shared helper functions for computing
fan-in and fan-out values from matrix extents.

The concrete implementation and registry logic live in the infrastructure
layer. This module exists in the domain layer to define contracts and shared
mathematical utilities without binding to any specific backend.
"""

from typing import Any, Callable, Dict, Protocol, TypeVar, runtime_checkable
from abc import ABC


T = TypeVar("T", bound=Callable[..., Any])


@runtime_checkable
class IWeightsInitialization(Protocol):
    """
    Weight initialization strategy interface.

    Layers call `initialize` once per weight matrix at construction. The
    strategy fills the matrix and returns it.
    """

    def initialize(self, matrix: Any) -> Any:
        """
        Fill `matrix` with initial values and return it.
        """
        ...


class _WeightInitializer(ABC):
    """
    Abstract base class for weight initializer dispatchers.

    This class defines the contract for registry-based weight initialization.
    Concrete subclasses are responsible for implementing registry behavior
    and dispatch logic.

    Design notes
    ------------
    - Initializers are identified by string names.
    - Each initializer is a callable that fills a matrix in-place and
      returns it.
    - This class does not prescribe how initializers are stored or invoked;
      it only defines the expected interface.
    """

    INITIALIZERS: Dict[str, Callable] = {}

    def __init__(self, initializer_name: str) -> None:
        """
        Construct a weight initializer dispatcher.

        Parameters
        ----------
        initializer_name:
            The string key identifying a registered initializer.
        """
        ...

    @classmethod
    def register_initializer(
        cls, name: str, *, overwrite: bool = False
    ) -> Callable[[T], T]:
        """
        Register a weight initializer under a given name.

        Parameters
        ----------
        name:
            Name used to identify the initializer.
        overwrite:
            Whether to allow overwriting an existing registration.

        Returns
        -------
        Callable
            A decorator that registers the initializer function.
        """
        ...

    @classmethod
    def available(cls) -> tuple[str, ...]:
        """
        Return the names of all registered initializers.
        """
        ...

    def initialize(self, matrix: Any) -> Any:
        """
        Apply the initializer to a matrix.

        Parameters
        ----------
        matrix:
            The matrix to be initialized.

        Returns
        -------
        Any
            The initialized matrix.
        """
        ...


def _calculate_fan_in(shape: tuple[int, ...]) -> int:
    """
    Compute the fan-in value for a weight matrix shape.

    Fan-in is defined as the number of input connections contributing to a
    single output unit. Matrices follow the (out_features, in_features)
    convention of the fully-connected layer, so fan-in is the column count.

    Parameters
    ----------
    shape:
        Shape of the weight matrix.

    Returns
    -------
    int
        The computed fan-in value.
    """
    if len(shape) == 0:
        return 1
    if len(shape) == 1:
        return shape[0]
    return max(1, int(shape[1]))


def _calculate_fan_in_and_fan_out(shape: tuple[int, ...]) -> tuple[int, int]:
    """
    Compute both fan-in and fan-out values for a weight matrix shape.

    Parameters
    ----------
    shape:
        Shape of the weight matrix.

    Returns
    -------
    tuple[int, int]
        A tuple of (fan_in, fan_out).
    """
    if len(shape) == 0:
        return 1, 1
    if len(shape) == 1:
        return shape[0], shape[0]
    fan_out, fan_in = int(shape[0]), int(shape[1])
    return max(1, fan_in), max(1, fan_out)
