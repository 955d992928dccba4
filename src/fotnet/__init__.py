"""
FotNET: a small NumPy neural-network engine.

Public API
----------
Tensors:
    Matrix, Tensor, Filter
Layers:
    ConvolutionLayer, TransposedConvolutionLayer, MaxPooling, AveragePooling,
    RecurrentLayer, Perceptron, FlattenLayer, SoftMaxLayer, ActivationLayer
Strategies:
    IdentityPadding, SamePadding, ReLU, LeakyReLU, DoubleLeakyReLU, Sigmoid,
    Tanh, WeightInitializer, TransposedConvolutionSGD, TransposedConvolutionAdam
Pipeline:
    Network
Errors:
    WeightParseError, ForwardCacheError
"""

from .domain._errors import ForwardCacheError, WeightParseError
from .infrastructure import (
    ActivationLayer,
    AveragePooling,
    ConvolutionLayer,
    DoubleLeakyReLU,
    Filter,
    FlattenLayer,
    IdentityPadding,
    Layer,
    LeakyReLU,
    Matrix,
    MaxPooling,
    Network,
    Perceptron,
    RecurrentLayer,
    ReLU,
    SamePadding,
    Sigmoid,
    SoftMaxLayer,
    Tanh,
    Tensor,
    TransposedConvolutionAdam,
    TransposedConvolutionLayer,
    TransposedConvolutionSGD,
    WeightInitializer,
)

__version__ = "0.1.0"

__all__ = [
    "Matrix",
    "Tensor",
    "Filter",
    "Layer",
    "ConvolutionLayer",
    "TransposedConvolutionLayer",
    "MaxPooling",
    "AveragePooling",
    "RecurrentLayer",
    "Perceptron",
    "FlattenLayer",
    "SoftMaxLayer",
    "ActivationLayer",
    "IdentityPadding",
    "SamePadding",
    "ReLU",
    "LeakyReLU",
    "DoubleLeakyReLU",
    "Sigmoid",
    "Tanh",
    "WeightInitializer",
    "TransposedConvolutionSGD",
    "TransposedConvolutionAdam",
    "Network",
    "WeightParseError",
    "ForwardCacheError",
]
