from ._convolution_layer import ConvolutionLayer
from ._padding import IdentityPadding, SamePadding

__all__ = ["ConvolutionLayer", "IdentityPadding", "SamePadding"]
