import tempfile
import unittest
from pathlib import Path

import numpy as np

from fotnet.domain._errors import ForwardCacheError, WeightParseError
from fotnet.infrastructure.convolution import (
    ConvolutionLayer,
    IdentityPadding,
    SamePadding,
)
from fotnet.infrastructure.module._serialization_core import (
    component_from_config,
    component_to_config,
)
from fotnet.infrastructure.ops.convolution_cpu import correlate2d
from fotnet.infrastructure.tensor import Matrix, Tensor
from fotnet.infrastructure.utils.weight_initializer import WeightInitializer

IDENTITY_TEXT = "0 0 0\n0 1 0\n0 0 0"


def _input(depth: int = 1, size: int = 5, seed: int = 0) -> Tensor:
    rng = np.random.default_rng(seed)
    return Tensor([Matrix(rng.normal(size=(size, size))) for _ in range(depth)])


class TestConvolutionForward(unittest.TestCase):
    def test_identity_kernel_reproduces_cropped_input(self):
        layer = ConvolutionLayer.from_text(IDENTITY_TEXT, filter_depth=1)
        layer.filters[0].bias = 0.0
        x = Tensor(Matrix(np.arange(25, dtype=np.float64).reshape(5, 5)))
        y = layer.produce_output(x)
        self.assertEqual(y.depth, 1)
        np.testing.assert_array_equal(y[0].body, x[0].body[1:4, 1:4])

    def test_initial_bias_is_added_once_per_position(self):
        layer = ConvolutionLayer(1, 3, 3, 2, WeightInitializer("zeros"))
        self.assertEqual(layer.filters[0].bias, 0.001)
        self.assertEqual(layer.filters[0].biases, [0.001, 0.0])
        y = layer.produce_output(_input(depth=2))
        np.testing.assert_allclose(y[0].body, np.full((3, 3), 0.001))

    def test_same_padding_preserves_extent(self):
        layer = ConvolutionLayer(
            4, 3, 3, 1, WeightInitializer("kaiming", seed=0), padding=SamePadding(3)
        )
        y = layer.produce_output(_input(size=6))
        self.assertEqual(y.depth, 4)
        self.assertEqual(y[0].shape, (6, 6))

    def test_same_padding_with_even_kernel(self):
        layer = ConvolutionLayer(1, 2, 2, 1, WeightInitializer("ones"), padding=SamePadding(2))
        y = layer.produce_output(Tensor(Matrix(np.ones((3, 3)))))
        self.assertEqual(y[0].shape, (3, 3))
        # extra row/column of padding goes to the bottom/right
        self.assertAlmostEqual(y[0][0, 0], 4.001)
        self.assertAlmostEqual(y[0][2, 2], 1.001)

    def test_stride_shrinks_output(self):
        layer = ConvolutionLayer(1, 3, 3, 1, WeightInitializer("ones"), stride=2)
        y = layer.produce_output(_input(size=7))
        self.assertEqual(y[0].shape, (3, 3))

    def test_invalid_hyperparameters(self):
        init = WeightInitializer("zeros")
        with self.assertRaises(ValueError):
            ConvolutionLayer(0, 3, 3, 1, init)
        with self.assertRaises(ValueError):
            ConvolutionLayer(1, 3, 3, 1, init, stride=0)


class TestConvolutionBackward(unittest.TestCase):
    def test_updates_filter_and_bias_by_gradient(self):
        layer = ConvolutionLayer(1, 3, 3, 1, WeightInitializer("uniform", seed=1))
        before = layer.filters[0][0].body.copy()
        x = _input(size=5)
        layer.produce_output(x)

        error = Tensor(Matrix(np.random.default_rng(2).normal(size=(3, 3))))
        lr = 0.1
        layer.propagate_error(error, lr, True)

        expected = before - correlate2d(x[0].body, error[0].body, 1) * lr
        np.testing.assert_allclose(layer.filters[0][0].body, expected, atol=1e-12)
        self.assertAlmostEqual(layer.filters[0].bias, 0.001 - error.sum() * lr)

    def test_deep_filter_bias_moves_once_per_step(self):
        layer = ConvolutionLayer(1, 3, 3, 3, WeightInitializer("zeros"))
        x = Tensor([Matrix(np.zeros((5, 5))) for _ in range(3)])
        layer.produce_output(x)
        layer.propagate_error(Tensor(Matrix(np.ones((3, 3)))), 0.1, True)

        self.assertAlmostEqual(layer.filters[0].bias, 0.001 - 0.9)
        y = layer.produce_output(x)
        np.testing.assert_allclose(y[0].body, np.full((3, 3), 0.001 - 0.9))

    def test_each_filter_uses_its_own_error_channel(self):
        layer = ConvolutionLayer(3, 2, 2, 1, WeightInitializer("zeros"))
        x = _input(size=4)
        layer.produce_output(x)
        error = Tensor([Matrix(np.full((3, 3), float(i + 1))) for i in range(3)])
        layer.propagate_error(error, 1.0, True)

        for i in range(3):
            expected = -correlate2d(x[0].body, error[i].body, 1)
            np.testing.assert_allclose(layer.filters[i][0].body, expected, atol=1e-12)

    def test_returned_error_uses_flipped_pre_update_filters(self):
        layer = ConvolutionLayer(1, 3, 3, 1, WeightInitializer("uniform", seed=4))
        kernel = layer.filters[0][0].body.copy()
        layer.produce_output(_input(size=5))
        error = Tensor(Matrix(np.random.default_rng(5).normal(size=(3, 3))))

        out = layer.propagate_error(error, 0.5, True)

        padded = np.pad(error[0].body, 1)
        np.testing.assert_allclose(
            out[0].body, correlate2d(padded, kernel[::-1, ::-1], 1), atol=1e-12
        )

    def test_caller_flag_disables_update(self):
        layer = ConvolutionLayer(2, 3, 3, 1, WeightInitializer("uniform", seed=0))
        before = [f[0].body.copy() for f in layer.filters]
        layer.produce_output(_input(size=5))
        layer.propagate_error(Tensor([Matrix(np.ones((3, 3)))] * 2), 1.0, False)
        for f, b in zip(layer.filters, before):
            np.testing.assert_array_equal(f[0].body, b)
            self.assertEqual(f.bias, 0.001)

    def test_backward_without_forward_raises(self):
        layer = ConvolutionLayer(1, 3, 3, 1, WeightInitializer("zeros"))
        layer.produce_output(_input())
        layer.propagate_error(Tensor(Matrix(np.ones((3, 3)))), 0.1)
        with self.assertRaises(ForwardCacheError):
            layer.propagate_error(Tensor(Matrix(np.ones((3, 3)))), 0.1)


class TestFrozenConvolution(unittest.TestCase):
    def test_records_are_replicated_across_depth(self):
        layer = ConvolutionLayer.from_text("1 2\n3 4 / 5 6\n7 8", filter_depth=3)
        self.assertFalse(layer.trainable)
        self.assertEqual(len(layer.filters), 2)
        self.assertEqual(layer.filter_depth, 3)
        for channel in layer.filters[1].channels:
            np.testing.assert_array_equal(channel.body, [[5, 6], [7, 8]])

    def test_empty_resource_raises(self):
        with self.assertRaises(ValueError):
            ConvolutionLayer.from_text(" / ", filter_depth=1)

    def test_repeated_backprop_never_changes_filters(self):
        layer = ConvolutionLayer.from_text(IDENTITY_TEXT + "/" + IDENTITY_TEXT, 1)
        before = [(f[0].body.copy(), list(f.biases)) for f in layer.filters]
        for scale in (0.1, 10.0, 1e6):
            layer.produce_output(_input())
            layer.propagate_error(
                Tensor([Matrix(np.full((3, 3), scale))] * 2), learning_rate=scale, trainable=True
            )
        for f, (body, biases) in zip(layer.filters, before):
            np.testing.assert_array_equal(f[0].body, body)
            self.assertEqual(f.biases, biases)

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "filters.txt"
            path.write_text(IDENTITY_TEXT + "\n/\n" + IDENTITY_TEXT, encoding="utf-8")
            with self.assertLogs("fotnet.infrastructure.convolution._convolution_layer", "INFO"):
                layer = ConvolutionLayer.from_file(path, filter_depth=2, padding=SamePadding(3))
        self.assertEqual(len(layer.filters), 2)
        y = layer.produce_output(_input(depth=2, size=4))
        self.assertEqual(y[0].shape, (4, 4))

    def test_frozen_flag_survives_config_round_trip(self):
        layer = ConvolutionLayer.from_text(IDENTITY_TEXT, 1, stride=1)
        rebuilt = component_from_config(component_to_config(layer))
        self.assertFalse(rebuilt.trainable)
        self.assertIsInstance(rebuilt.padding, IdentityPadding)


class TestConvolutionSerialization(unittest.TestCase):
    def test_round_trip_returns_extra_tokens(self):
        src = ConvolutionLayer(2, 3, 3, 2, WeightInitializer("uniform", seed=0))
        dst = ConvolutionLayer(2, 3, 3, 2, WeightInitializer("zeros"))
        remainder = dst.deserialize(src.serialize() + " 7.5 -1.25")
        self.assertEqual(remainder, "7.5 -1.25")

        x = _input(depth=2)
        np.testing.assert_array_equal(
            dst.produce_output(x).to_numpy(), src.produce_output(x).to_numpy()
        )

    def test_token_order_is_all_cells_then_filter_bias(self):
        layer = ConvolutionLayer.from_text("1 2\n3 4 / 5 6\n7 8", filter_depth=2)
        layer.filters[0].bias = 0.5
        layer.filters[1].bias = 0.25
        tokens = [float(t) for t in layer.serialize().split()]
        self.assertEqual(
            tokens, [1, 2, 3, 4, 1, 2, 3, 4, 0.5, 5, 6, 7, 8, 5, 6, 7, 8, 0.25]
        )

    def test_load_reads_one_bias_per_deep_filter(self):
        layer = ConvolutionLayer(1, 1, 2, 3, WeightInitializer("zeros"))
        remainder = layer.deserialize("1 2 3 4 5 6 -0.5 9")
        self.assertEqual(remainder, "9")
        self.assertEqual(
            [c.body.tolist() for c in layer.filters[0].channels],
            [[[1, 2]], [[3, 4]], [[5, 6]]],
        )
        self.assertEqual(layer.filters[0].bias, -0.5)
        self.assertEqual(layer.filters[0].biases, [-0.5, 0.0, 0.0])

    def test_truncated_text_raises(self):
        layer = ConvolutionLayer(1, 2, 2, 1, WeightInitializer("zeros"))
        with self.assertRaises(WeightParseError):
            layer.deserialize("1 2 3")

    def test_config_round_trip(self):
        layer = ConvolutionLayer(
            3, 2, 4, 2, WeightInitializer("xavier", seed=1), stride=2, padding=SamePadding(2, 4)
        )
        rebuilt = component_from_config(component_to_config(layer))
        self.assertEqual(rebuilt.get_config(), layer.get_config())


if __name__ == "__main__":
    unittest.main()
