from ._pooling_layer import AveragePooling, MaxPooling, Pooling

__all__ = ["Pooling", "MaxPooling", "AveragePooling"]
