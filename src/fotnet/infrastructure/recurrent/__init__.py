from ._recurrent_layer import RecurrentLayer

__all__ = ["RecurrentLayer"]
