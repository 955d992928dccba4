import unittest

import numpy as np

from fotnet.domain._errors import ForwardCacheError
from fotnet.infrastructure.convolution.transpose import (
    TransposedConvolutionAdam,
    TransposedConvolutionLayer,
    TransposedConvolutionSGD,
)
from fotnet.infrastructure.module._serialization_core import (
    component_from_config,
    component_to_config,
)
from fotnet.infrastructure.ops.convolution_transpose_cpu import (
    transposed_convolution_gradients,
)
from fotnet.infrastructure.tensor import Filter, Matrix, Tensor
from fotnet.infrastructure.utils.weight_initializer import WeightInitializer


def _input(depth: int = 2, rows: int = 3, columns: int = 3, seed: int = 0) -> Tensor:
    rng = np.random.default_rng(seed)
    return Tensor([Matrix(rng.normal(size=(rows, columns))) for _ in range(depth)])


def _snapshot(filters):
    return [Filter([m.copy() for m in f.channels], f.biases) for f in filters]


class TestTransposedConvolutionLayer(unittest.TestCase):
    def test_forward_upsamples(self):
        layer = TransposedConvolutionLayer(3, 2, 2, 2, WeightInitializer("ones"), stride=2)
        y = layer.produce_output(_input(rows=3, columns=4))
        self.assertEqual(y.depth, 3)
        self.assertEqual(y[0].shape, (6, 8))

    def test_default_optimization_is_sgd(self):
        layer = TransposedConvolutionLayer(1, 2, 2, 1, WeightInitializer("zeros"))
        self.assertIsInstance(layer.optimization, TransposedConvolutionSGD)

    def test_sgd_applies_plain_gradient_step(self):
        layer = TransposedConvolutionLayer(
            2, 3, 3, 2, WeightInitializer("uniform", seed=0), stride=2
        )
        x = _input()
        y = layer.produce_output(x)
        error = Tensor([Matrix(np.random.default_rng(1).normal(size=y[0].shape))] * 2)
        before = _snapshot(layer.filters)

        kernel_grads, bias_grads, input_error = transposed_convolution_gradients(
            error, x, before, 2
        )
        lr = 0.05
        out = layer.propagate_error(error, lr, True)

        np.testing.assert_allclose(out.to_numpy(), input_error.to_numpy(), atol=1e-12)
        for f, b, grads_f, bias_grad in zip(layer.filters, before, kernel_grads, bias_grads):
            for c in range(2):
                np.testing.assert_allclose(
                    f[c].body, b[c].body - grads_f[c] * lr, atol=1e-12
                )
            self.assertAlmostEqual(f.bias, b.bias - bias_grad * lr)

    def test_sgd_moves_deep_filter_bias_once(self):
        layer = TransposedConvolutionLayer(1, 2, 2, 2, WeightInitializer("zeros"))
        x = Tensor([Matrix(np.zeros((2, 2))) for _ in range(2)])
        y = layer.produce_output(x)
        self.assertEqual(y[0].shape, (3, 3))
        np.testing.assert_allclose(y[0].body, np.full((3, 3), 0.001))

        layer.propagate_error(Tensor(Matrix(np.ones((3, 3)))), 0.1, True)
        self.assertAlmostEqual(layer.filters[0].bias, 0.001 - 0.9)
        y = layer.produce_output(x)
        np.testing.assert_allclose(y[0].body, np.full((3, 3), 0.001 - 0.9))

    def test_token_order_is_all_cells_then_filter_bias(self):
        layer = TransposedConvolutionLayer(2, 1, 2, 2, WeightInitializer("ones"))
        layer.filters[1].bias = -0.5
        tokens = [float(t) for t in layer.serialize().split()]
        self.assertEqual(tokens, [1, 1, 1, 1, 0.001, 1, 1, 1, 1, -0.5])

    def test_not_trainable_leaves_filters(self):
        layer = TransposedConvolutionLayer(1, 2, 2, 2, WeightInitializer("uniform", seed=0))
        before = _snapshot(layer.filters)
        y = layer.produce_output(_input())
        layer.propagate_error(Tensor(Matrix(np.ones(y[0].shape))), 1.0, False)
        for c in range(2):
            np.testing.assert_array_equal(layer.filters[0][c].body, before[0][c].body)

    def test_backward_without_forward_raises(self):
        layer = TransposedConvolutionLayer(1, 2, 2, 1, WeightInitializer("zeros"))
        with self.assertRaises(ForwardCacheError):
            layer.propagate_error(Tensor(Matrix(np.ones((4, 4)))), 0.1)

    def test_serialization_round_trip(self):
        src = TransposedConvolutionLayer(2, 2, 3, 2, WeightInitializer("uniform", seed=3))
        dst = TransposedConvolutionLayer(2, 2, 3, 2, WeightInitializer("zeros"))
        self.assertEqual(dst.deserialize(src.serialize() + " 1 2"), "1 2")
        x = _input()
        np.testing.assert_array_equal(
            dst.produce_output(x).to_numpy(), src.produce_output(x).to_numpy()
        )

    def test_config_round_trip_keeps_optimization(self):
        layer = TransposedConvolutionLayer(
            2,
            3,
            3,
            1,
            WeightInitializer("kaiming", seed=0),
            stride=2,
            optimization=TransposedConvolutionAdam(betas=(0.5, 0.9)),
        )
        rebuilt = component_from_config(component_to_config(layer))
        self.assertIsInstance(rebuilt.optimization, TransposedConvolutionAdam)
        self.assertEqual(rebuilt.optimization.betas, (0.5, 0.9))
        self.assertEqual(rebuilt.get_config(), layer.get_config())


class TestTransposedConvolutionAdam(unittest.TestCase):
    def test_first_step_moves_each_weight_by_learning_rate(self):
        opt = TransposedConvolutionAdam()
        layer = TransposedConvolutionLayer(
            1, 2, 2, 1, WeightInitializer("uniform", seed=0), optimization=opt
        )
        before = _snapshot(layer.filters)
        x = _input(depth=1)
        y = layer.produce_output(x)
        error = Tensor(Matrix(np.random.default_rng(2).normal(size=y[0].shape)))
        kernel_grads, bias_grads, _ = transposed_convolution_gradients(error, x, before, 1)

        lr = 0.01
        layer.propagate_error(error, lr, True)

        # bias-corrected first step is lr * g / (|g| + eps)
        delta = before[0][0].body - layer.filters[0][0].body
        np.testing.assert_allclose(delta, lr * np.sign(kernel_grads[0][0]), rtol=1e-5)
        self.assertAlmostEqual(
            before[0].bias - layer.filters[0].bias,
            lr * np.sign(bias_grads[0]),
            places=6,
        )

    def test_deep_filter_bias_takes_one_adam_step(self):
        layer = TransposedConvolutionLayer(
            1, 2, 2, 2, WeightInitializer("zeros"), optimization=TransposedConvolutionAdam()
        )
        layer.produce_output(Tensor([Matrix(np.zeros((2, 2))) for _ in range(2)]))
        layer.propagate_error(Tensor(Matrix(np.ones((3, 3)))), 0.1, True)
        self.assertAlmostEqual(layer.filters[0].bias, 0.001 - 0.1, places=6)

    def test_state_persists_across_calls(self):
        opt = TransposedConvolutionAdam()
        layer = TransposedConvolutionLayer(
            1, 2, 2, 1, WeightInitializer("uniform", seed=0), optimization=opt
        )
        for _ in range(3):
            y = layer.produce_output(_input(depth=1))
            layer.propagate_error(Tensor(Matrix(np.ones(y[0].shape))), 0.01, True)
        self.assertEqual(opt._state[(0, 0)]["t"], 3)
        self.assertEqual(opt._state[(0, "bias")]["t"], 3)

    def test_invalid_hyperparameters(self):
        with self.assertRaises(ValueError):
            TransposedConvolutionAdam(betas=(1.0, 0.9))
        with self.assertRaises(ValueError):
            TransposedConvolutionAdam(eps=0.0)


if __name__ == "__main__":
    unittest.main()
