from ._optimization import TransposedConvolutionAdam, TransposedConvolutionSGD
from ._transposed_convolution_layer import TransposedConvolutionLayer

__all__ = [
    "TransposedConvolutionLayer",
    "TransposedConvolutionSGD",
    "TransposedConvolutionAdam",
]
