from ._perceptron import Perceptron

__all__ = ["Perceptron"]
