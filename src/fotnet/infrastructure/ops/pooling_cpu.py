"""
CPU reference implementations for 2D pooling (NumPy backend).

This module provides **naive, readable and correct** NumPy implementations of
the pooling reductions and their gradient-routing inverses ("back-pool") for a
single 2-D channel. Pooling layers apply them channel by channel.

Implemented variants
--------------------
- Max pooling (forward + back-pool)
- Average pooling with an independent stride (forward + back-pool)

Design notes
------------
- Max back-pool **re-scans** each window of the reference input instead of
  reusing indices recorded during the forward pass. Comparison is strict
  greater-than starting from ``-inf``, so ties resolve to the first position in
  row-major scan order within the window.
- Rows and columns that do not fill a whole window are dropped by the forward
  pass and receive zero gradient.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np


def _out_hw(H: int, W: int, pool_size: int, stride: int) -> Tuple[int, int]:
    """
    Compute output spatial dimensions for a pooling window.

    Parameters
    ----------
    H, W : int
        Input height and width.
    pool_size : int
        Square window size.
    stride : int
        Window step.

    Returns
    -------
    tuple[int, int]
        Output height and width.
    """
    H_out = (H - pool_size) // stride + 1 if H >= pool_size else 0
    W_out = (W - pool_size) // stride + 1 if W >= pool_size else 0
    return H_out, W_out


def max_pool2d(x: np.ndarray, pool_size: int) -> np.ndarray:
    """
    Max pooling over non-overlapping ``pool_size x pool_size`` windows.

    Parameters
    ----------
    x : np.ndarray
        Input channel of shape (H, W).
    pool_size : int
        Window size and stride.

    Returns
    -------
    np.ndarray
        Output of shape (H // pool_size, W // pool_size).
    """
    H_out, W_out = x.shape[0] // pool_size, x.shape[1] // pool_size
    y = np.empty((H_out, W_out), dtype=np.float64)

    for i in range(H_out):
        h0 = i * pool_size
        for j in range(W_out):
            w0 = j * pool_size
            y[i, j] = np.max(x[h0 : h0 + pool_size, w0 : w0 + pool_size])

    return y


def max_back_pool2d(
    grad_out: np.ndarray, reference: np.ndarray, pool_size: int
) -> np.ndarray:
    """
    Route max-pool gradients back to the winning input positions.

    Parameters
    ----------
    grad_out : np.ndarray
        Gradient with respect to the pooled output, shape (H_out, W_out).
    reference : np.ndarray
        The forward input channel, shape (H, W).
    pool_size : int
        Window size used in the forward pass.

    Returns
    -------
    np.ndarray
        Zero-initialized gradient of shape (H, W) where each output gradient
        was added to the first maximum of its window.
    """
    grad_x = np.zeros(reference.shape, dtype=np.float64)

    H_out, W_out = grad_out.shape
    for i in range(H_out):
        for j in range(W_out):
            max_val = -np.inf
            max_h, max_w = i * pool_size, j * pool_size

            for di in range(pool_size):
                for dj in range(pool_size):
                    h = i * pool_size + di
                    w_ = j * pool_size + dj
                    if reference[h, w_] > max_val:
                        max_val = reference[h, w_]
                        max_h, max_w = h, w_

            grad_x[max_h, max_w] += grad_out[i, j]

    return grad_x


def average_pool2d(
    x: np.ndarray, pool_size: int, stride: Optional[int] = None
) -> np.ndarray:
    """
    Average pooling with an independent stride.

    Parameters
    ----------
    x : np.ndarray
        Input channel of shape (H, W).
    pool_size : int
        Window size.
    stride : int, optional
        Window step. Defaults to `pool_size` (non-overlapping windows).

    Returns
    -------
    np.ndarray
        Output of shape ((H - k) // s + 1, (W - k) // s + 1).
    """
    s = pool_size if stride is None else stride
    H_out, W_out = _out_hw(x.shape[0], x.shape[1], pool_size, s)
    y = np.zeros((H_out, W_out), dtype=np.float64)
    denom = float(pool_size * pool_size)

    for i in range(H_out):
        h0 = i * s
        for j in range(W_out):
            w0 = j * s
            y[i, j] = np.sum(x[h0 : h0 + pool_size, w0 : w0 + pool_size]) / denom

    return y


def average_back_pool2d(
    grad_out: np.ndarray,
    reference: np.ndarray,
    pool_size: int,
    stride: Optional[int] = None,
) -> np.ndarray:
    """
    Distribute average-pool gradients uniformly over each window.

    Parameters
    ----------
    grad_out : np.ndarray
        Gradient with respect to the pooled output.
    reference : np.ndarray
        The forward input channel (only its shape is used).
    pool_size : int
        Window size.
    stride : int, optional
        Window step. Defaults to `pool_size`.

    Returns
    -------
    np.ndarray
        Gradient with respect to the input, shape of `reference`.
    """
    s = pool_size if stride is None else stride
    grad_x = np.zeros(reference.shape, dtype=np.float64)
    denom = float(pool_size * pool_size)

    H_out, W_out = grad_out.shape
    for i in range(H_out):
        h0 = i * s
        for j in range(W_out):
            w0 = j * s
            grad_x[h0 : h0 + pool_size, w0 : w0 + pool_size] += grad_out[i, j] / denom

    return grad_x
