"""
CPU-based naive transposed-convolution kernels for FotNET.

This module provides reference implementations of transposed (upsampling)
convolution forward and backward passes using NumPy on the CPU. These kernels
are written with explicit Python loops to prioritize correctness and clarity.

The transposed convolution is the dual of the sliding-window reduction in
`convolution_cpu`: instead of gathering a window into one output value, each
input value is scattered into a kernel-sized neighborhood of the output,
anchored at ``stride`` times its position.

Layout
------
- Input: `Tensor` with C_in channels of shape (H_in, W_in)
- Filters: C_out `Filter` objects, each holding C_in kernels of shape (K_h, K_w)
- Output: `Tensor` with C_out channels of shape (H_out, W_out), where

    H_out = (H_in - 1) * stride + K_h
    W_out = (W_in - 1) * stride + K_w
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np

from ..tensor import Filter, Matrix, Tensor


def transposed_convolve_filters(
    tensor: Tensor, filters: Sequence[Filter], stride: int
) -> Tensor:
    """
    Compute the forward pass of a transposed convolution.

    Scatter-style accumulation:

        y[f][i*s + kh, j*s + kw] += x[c][i, j] * k[f][c][kh, kw]

    followed by the filter bias added once per output position.

    Parameters
    ----------
    tensor : Tensor
        Input tensor.
    filters : Sequence[Filter]
        Filters whose depth equals the tensor depth.
    stride : int
        Upsampling stride.

    Returns
    -------
    Tensor
        One upsampled output channel per filter.
    """
    H_in, W_in = tensor.rows, tensor.columns
    outputs = []

    for f in filters:
        K_h, K_w = f.channels[0].shape
        H_out = (H_in - 1) * stride + K_h
        W_out = (W_in - 1) * stride + K_w
        y = np.zeros((H_out, W_out), dtype=np.float64)

        for x_c, k_c in zip(tensor.channels, f.channels, strict=True):
            x = x_c.body
            k = k_c.body
            for i in range(H_in):
                h0 = i * stride
                for j in range(W_in):
                    w0 = j * stride
                    y[h0 : h0 + K_h, w0 : w0 + K_w] += x[i, j] * k

        outputs.append(Matrix(y + f.bias))
    return Tensor(outputs)


def transposed_convolution_gradients(
    error: Tensor,
    inputs: Tensor,
    filters: Sequence[Filter],
    stride: int,
) -> Tuple[List[List[np.ndarray]], List[float], Tensor]:
    """
    Compute the backward pass of a transposed convolution.

    Parameters
    ----------
    error : Tensor
        Error w.r.t. the output, one channel per filter.
    inputs : Tensor
        Input of the forward pass.
    filters : Sequence[Filter]
        Filters used in the forward pass.
    stride : int
        Stride used in the forward pass.

    Returns
    -------
    tuple
        - kernel_grads : ``kernel_grads[f][c]`` has the shape of kernel
          ``filters[f].channels[c]``
        - bias_grads : ``bias_grads[f]`` is the sum of ``error[f]``
        - input_error : Tensor shaped like `inputs`

    Notes
    -----
    Every scattered product ``x[c][i, j] * k[f][c][kh, kw]`` contributes to
    exactly one output cell, so both gradients gather that cell's error:

    - ``dk[f][c][kh, kw] += x[c][i, j] * e[f][i*s + kh, j*s + kw]``
    - ``dx[c][i, j] += k[f][c][kh, kw] * e[f][i*s + kh, j*s + kw]``
    """
    H_in, W_in = inputs.rows, inputs.columns
    input_error = [np.zeros((H_in, W_in), dtype=np.float64) for _ in inputs.channels]
    kernel_grads: List[List[np.ndarray]] = []
    bias_grads: List[float] = []

    for f, e_f in zip(filters, error.channels):
        e = e_f.body
        grads_f = []
        for c, (x_c, k_c) in enumerate(zip(inputs.channels, f.channels, strict=True)):
            x = x_c.body
            k = k_c.body
            K_h, K_w = k.shape
            grad_k = np.zeros((K_h, K_w), dtype=np.float64)
            grad_x = input_error[c]

            for i in range(H_in):
                h0 = i * stride
                for j in range(W_in):
                    w0 = j * stride
                    patch = e[h0 : h0 + K_h, w0 : w0 + K_w]
                    grad_k += x[i, j] * patch
                    grad_x[i, j] += np.sum(patch * k)

            grads_f.append(grad_k)
        kernel_grads.append(grads_f)
        bias_grads.append(float(e.sum()))

    return kernel_grads, bias_grads, Tensor([Matrix(g) for g in input_error])
