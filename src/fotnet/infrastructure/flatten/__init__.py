from ._flatten_layer import FlattenLayer

__all__ = ["FlattenLayer"]
