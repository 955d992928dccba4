"""
NumPy implementations of the FotNET layers, strategies and network.
"""

from ._activations import ActivationLayer, SoftMaxLayer
from ._function import DoubleLeakyReLU, LeakyReLU, ReLU, Sigmoid, Tanh
from ._layer import Layer
from .convolution import ConvolutionLayer, IdentityPadding, SamePadding
from .convolution.transpose import (
    TransposedConvolutionAdam,
    TransposedConvolutionLayer,
    TransposedConvolutionSGD,
)
from .flatten import FlattenLayer
from .fully_connected import Perceptron
from .models import Network
from .pooling import AveragePooling, MaxPooling
from .recurrent import RecurrentLayer
from .tensor import Filter, Matrix, Tensor
from .utils.weight_initializer import WeightInitializer
