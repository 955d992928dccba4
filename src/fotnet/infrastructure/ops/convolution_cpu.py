"""
CPU-based naive convolution kernels for FotNET.

This module provides reference implementations of the sliding-window
cross-correlation used by convolution layers, both for the forward pass and
for kernel gradients. These kernels are intentionally written in a clear,
explicit manner (nested Python loops) to prioritize correctness over
performance.

Design goals
------------
- Serve as the single convolution primitive: the backward pass of a
  convolution layer reuses `convolve_filters` with flipped, bias-free kernels.
- Remain independent of layer state and parameter handling.

Non-goals
---------
- High performance (no im2col, GEMM, or vectorization)
- Dilation or groups

Layout
------
Channels are 2-D arrays of shape (H, W). Padding is never applied here; the
caller pads inputs through a padding strategy first.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from ..tensor import Filter, Matrix, Tensor


def correlate2d(x: np.ndarray, kernel: np.ndarray, stride: int) -> np.ndarray:
    """
    Cross-correlate one channel with one kernel (no kernel flip).

    Parameters
    ----------
    x : np.ndarray
        Input channel of shape (H, W).
    kernel : np.ndarray
        Kernel of shape (K_h, K_w).
    stride : int
        Window step along both axes.

    Returns
    -------
    np.ndarray
        Output of shape (H_out, W_out), where:

        - H_out = (H - K_h) // stride + 1
        - W_out = (W - K_w) // stride + 1
    """
    K_h, K_w = kernel.shape
    H_out = (x.shape[0] - K_h) // stride + 1
    W_out = (x.shape[1] - K_w) // stride + 1

    y = np.zeros((max(H_out, 0), max(W_out, 0)), dtype=np.float64)
    for i in range(y.shape[0]):
        h0 = i * stride
        for j in range(y.shape[1]):
            w0 = j * stride
            patch = x[h0 : h0 + K_h, w0 : w0 + K_w]
            y[i, j] = np.sum(patch * kernel)
    return y


def convolve_filters(tensor: Tensor, filters: Sequence[Filter], stride: int) -> Tensor:
    """
    Convolve a tensor with a bank of filters.

    For each filter, every input channel is cross-correlated against the
    filter's matching channel, the results are summed across channels and the
    filter's bias is added once per output position.

    Parameters
    ----------
    tensor : Tensor
        Input tensor (already padded).
    filters : Sequence[Filter]
        Filters whose depth equals the tensor depth.
    stride : int
        Convolution stride.

    Returns
    -------
    Tensor
        One output channel per filter.

    Raises
    ------
    ValueError
        If a filter depth differs from the tensor depth.
    """
    outputs = []
    for f in filters:
        acc = None
        for x_c, k_c in zip(tensor.channels, f.channels, strict=True):
            y = correlate2d(x_c.body, k_c.body, stride)
            acc = y if acc is None else acc + y
        outputs.append(Matrix(acc + f.bias))
    return Tensor(outputs)


def kernel_gradient(
    x: np.ndarray,
    error: np.ndarray,
    stride: int,
    kernel_shape: Tuple[int, int],
) -> np.ndarray:
    """
    Compute the gradient of a strided cross-correlation w.r.t. its kernel.

    Each kernel cell accumulates the input values it was multiplied with,
    weighted by the error of the output position they produced:

        grad[kh, kw] = sum_{i, j} x[i * stride + kh, j * stride + kw] * error[i, j]

    With ``stride == 1`` this is the cross-correlation of `x` against
    `error`.

    Parameters
    ----------
    x : np.ndarray
        Forward input channel (padded), shape (H, W).
    error : np.ndarray
        Error of the output channel, shape (H_out, W_out).
    stride : int
        Forward stride.
    kernel_shape : tuple[int, int]
        Kernel extents (K_h, K_w).

    Returns
    -------
    np.ndarray
        Gradient of shape `kernel_shape`.
    """
    K_h, K_w = kernel_shape
    H_out, W_out = error.shape
    grad = np.zeros((K_h, K_w), dtype=np.float64)

    for kh in range(K_h):
        for kw in range(K_w):
            window = x[
                kh : kh + (H_out - 1) * stride + 1 : stride,
                kw : kw + (W_out - 1) * stride + 1 : stride,
            ]
            grad[kh, kw] = np.sum(window * error)
    return grad
