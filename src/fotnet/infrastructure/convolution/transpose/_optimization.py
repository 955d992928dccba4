"""
Backpropagation strategies for transposed-convolution layers.

A `TransposedConvolutionLayer` delegates its whole backward pass to one of
these strategies. Both share the gradient kernel
`transposed_convolution_gradients` and differ only in the update rule:

- `TransposedConvolutionSGD`: plain gradient descent,
  ``k <- k - lr * grad``.
- `TransposedConvolutionAdam`: Adam with bias-corrected first and second
  moments kept per (filter, channel) kernel and per filter bias.

Update rule (Adam)
------------------
Let ``g_t`` be the gradient at step ``t``:

    m_t = beta1 * m_{t-1} + (1 - beta1) * g_t
    v_t = beta2 * v_{t-1} + (1 - beta2) * (g_t ** 2)
    m_hat = m_t / (1 - beta1^t)
    v_hat = v_t / (1 - beta2^t)
    p <- p - lr * m_hat / (sqrt(v_hat) + eps)

The learning rate is the one passed by the layer on every call.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np

from ....domain._optimizers import ITransposedConvolutionOptimization
from ....domain.model._stateless_mixin import StatelessConfigMixin
from ...module._serialization_core import register_component
from ...ops.convolution_transpose_cpu import transposed_convolution_gradients
from ...tensor import Filter, Matrix, Tensor


@register_component()
class TransposedConvolutionSGD(StatelessConfigMixin, ITransposedConvolutionOptimization):
    """Plain gradient-descent backward pass for transposed convolutions."""

    def propagate_error(
        self,
        error: Tensor,
        learning_rate: float,
        trainable: bool,
        cached_input: Tensor,
        filters: Sequence[Filter],
        stride: int,
    ) -> Tensor:
        kernel_grads, bias_grads, input_error = transposed_convolution_gradients(
            error, cached_input, filters, stride
        )
        if trainable:
            lr = float(learning_rate)
            for f, grads_f, bias_grad in zip(filters, kernel_grads, bias_grads):
                for c, grad in enumerate(grads_f):
                    f.channels[c] = f.channels[c] - Matrix(grad * lr)
                f.bias = f.bias - bias_grad * lr
        return input_error


@register_component()
class TransposedConvolutionAdam(ITransposedConvolutionOptimization):
    """
    Adam backward pass for transposed convolutions.

    Parameters
    ----------
    betas : tuple[float, float], optional
        Exponential decay rates for the first and second moments. Each must
        be in (0, 1). Defaults to (0.9, 0.999).
    eps : float, optional
        Numerical stability epsilon. Must be positive. Defaults to 1e-8.

    Notes
    -----
    - Moment state is created lazily on the first update and persists
      across calls. One strategy instance must serve one layer only.
    - Moment state is not part of the weight text.
    """

    def __init__(
        self, betas: Tuple[float, float] = (0.9, 0.999), eps: float = 1e-8
    ) -> None:
        self.betas = (float(betas[0]), float(betas[1]))
        self.eps = float(eps)

        b1, b2 = self.betas
        if not (0.0 < b1 < 1.0) or not (0.0 < b2 < 1.0):
            raise ValueError(f"betas must be in (0,1), got {self.betas}")
        if self.eps <= 0.0:
            raise ValueError(f"eps must be > 0, got {self.eps}")

        # (filter, channel) for kernels, (filter, "bias") for biases
        # -> {"t": int, "m": ndarray, "v": ndarray}
        self._state: Dict[Tuple[int, Union[int, str]], Dict[str, Any]] = {}

    def _step(
        self, key: Tuple[int, Union[int, str]], grad: np.ndarray, lr: float
    ) -> np.ndarray:
        b1, b2 = self.betas
        st = self._state.get(key)
        if st is None:
            st = {"t": 0, "m": np.zeros_like(grad), "v": np.zeros_like(grad)}
            self._state[key] = st

        st["t"] += 1
        t = st["t"]
        st["m"] = b1 * st["m"] + (1.0 - b1) * grad
        st["v"] = b2 * st["v"] + (1.0 - b2) * (grad * grad)

        c1 = 1.0 - b1**t
        c2 = 1.0 - b2**t
        return lr * (st["m"] / c1) / (np.sqrt(st["v"] / c2) + self.eps)

    def propagate_error(
        self,
        error: Tensor,
        learning_rate: float,
        trainable: bool,
        cached_input: Tensor,
        filters: Sequence[Filter],
        stride: int,
    ) -> Tensor:
        kernel_grads, bias_grads, input_error = transposed_convolution_gradients(
            error, cached_input, filters, stride
        )
        if trainable:
            lr = float(learning_rate)
            for i, (f, grads_f, bias_grad) in enumerate(
                zip(filters, kernel_grads, bias_grads)
            ):
                for c, grad in enumerate(grads_f):
                    f.channels[c] = f.channels[c] - Matrix(self._step((i, c), grad, lr))
                bias_step = self._step((i, "bias"), np.asarray(bias_grad), lr)
                f.bias = f.bias - float(bias_step)
        return input_error

    def get_config(self) -> Dict[str, Any]:
        return {"betas": list(self.betas), "eps": self.eps}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "TransposedConvolutionAdam":
        betas = cfg.get("betas", (0.9, 0.999))
        return cls(betas=(float(betas[0]), float(betas[1])), eps=float(cfg.get("eps", 1e-8)))
