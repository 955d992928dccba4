import unittest

import numpy as np

from fotnet.domain._errors import ForwardCacheError
from fotnet.infrastructure import LeakyReLU
from fotnet.infrastructure.fully_connected import Perceptron
from fotnet.infrastructure.module._serialization_core import (
    component_from_config,
    component_to_config,
)
from fotnet.infrastructure.tensor import Matrix, Tensor
from fotnet.infrastructure.utils.weight_initializer import WeightInitializer

W = np.array([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]])


def _layer(alpha: float = 0.5) -> Perceptron:
    layer = Perceptron(2, 3, WeightInitializer("zeros"), LeakyReLU(alpha=alpha))
    layer.weights = Matrix(W)
    layer.bias = np.array([0.1, 0.2, 0.3])
    return layer


class TestPerceptronForward(unittest.TestCase):
    def test_identity_mode_passes_flattened_input(self):
        layer = Perceptron(4)
        self.assertTrue(layer.identity)
        x = Tensor(Matrix([[1.0, 2.0], [3.0, 4.0]]))
        y = layer.produce_output(x)
        self.assertEqual(y[0].shape, (1, 4))
        np.testing.assert_array_equal(y[0].body[0], [1, 2, 3, 4])

    def test_projection(self):
        y = _layer().produce_output(Tensor(Matrix([[1.0, -1.0]])))
        np.testing.assert_allclose(y[0].body, [[-0.9, -0.8, -0.7]])

    def test_default_initialization_and_activation(self):
        layer = Perceptron(3, 2)
        self.assertEqual(layer.weights.shape, (2, 3))
        self.assertIsInstance(layer.activation, LeakyReLU)
        np.testing.assert_array_equal(layer.bias, np.zeros(2))

    def test_invalid_sizes(self):
        with self.assertRaises(ValueError):
            Perceptron(0)
        with self.assertRaises(ValueError):
            Perceptron(2, 0)


class TestPerceptronBackward(unittest.TestCase):
    def test_returned_error_uses_derivative_of_propagated_error(self):
        layer = _layer(alpha=0.5)
        layer.produce_output(Tensor(Matrix([[1.0, -1.0]])))
        out = layer.propagate_error(Tensor(Matrix([[0.1, -0.2, -0.3]])), 0.1, True)
        # W.T @ e = [-2.0, -2.4]; both negative, so the 0.5 leak applies
        np.testing.assert_allclose(out[0].body, [[-1.0, -1.2]])

    def test_gradient_step(self):
        layer = _layer()
        x = np.array([1.0, -1.0])
        e = np.array([0.1, -0.2, -0.3])
        layer.produce_output(Tensor(Matrix(x)))
        layer.propagate_error(Tensor(Matrix(e)), 0.1, True)
        np.testing.assert_allclose(layer.weights.body, W - np.outer(e, x) * 0.1)
        np.testing.assert_allclose(layer.bias, np.array([0.1, 0.2, 0.3]) - e * 0.1)

    def test_not_trainable(self):
        layer = _layer()
        layer.produce_output(Tensor(Matrix([[1.0, -1.0]])))
        layer.propagate_error(Tensor(Matrix([[1.0, 1.0, 1.0]])), 0.1, False)
        np.testing.assert_array_equal(layer.weights.body, W)

    def test_backward_without_forward_raises(self):
        with self.assertRaises(ForwardCacheError):
            _layer().propagate_error(Tensor(Matrix([[1.0, 1.0, 1.0]])), 0.1)


class TestPerceptronPersistence(unittest.TestCase):
    def test_token_order_is_weights_then_bias(self):
        tokens = [float(t) for t in _layer().serialize().split()]
        self.assertEqual(tokens, [1, 2, 3, 4, 5, 6, 0.1, 0.2, 0.3])

    def test_round_trip_with_extra_tokens(self):
        src = _layer()
        dst = Perceptron(2, 3, WeightInitializer("zeros"))
        self.assertEqual(dst.deserialize(src.serialize() + " 0.5"), "0.5")
        x = Tensor(Matrix([[0.3, 0.7]]))
        np.testing.assert_array_equal(
            dst.produce_output(x).to_numpy(), src.produce_output(x).to_numpy()
        )

    def test_config_round_trip(self):
        for layer in (Perceptron(3), _layer()):
            rebuilt = component_from_config(component_to_config(layer))
            self.assertEqual(rebuilt.get_config(), layer.get_config())
            self.assertEqual(rebuilt.weights.shape, layer.weights.shape)


if __name__ == "__main__":
    unittest.main()
