"""
Naive NumPy CPU kernels.

Layers import the functions they need from the submodules directly:

- `convolution_cpu`: cross-correlation, filter-bank convolution, kernel
  gradients.
- `convolution_transpose_cpu`: transposed convolution and its gradients.
- `pooling_cpu`: max and average pooling with their back-pools.
"""
