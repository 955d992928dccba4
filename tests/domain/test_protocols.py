import unittest

from fotnet.domain._activation import IActivationFunction
from fotnet.domain._layer import ILayer
from fotnet.domain._optimizers import ITransposedConvolutionOptimization
from fotnet.domain._padding import IPadding
from fotnet.domain._tensor import ITensor
from fotnet.domain.utils._weight_initialization import IWeightsInitialization
from fotnet.infrastructure import (
    ConvolutionLayer,
    FlattenLayer,
    IdentityPadding,
    LeakyReLU,
    Matrix,
    SamePadding,
    Tanh,
    Tensor,
    TransposedConvolutionAdam,
    TransposedConvolutionSGD,
    WeightInitializer,
)


class TestStrategyProtocols(unittest.TestCase):
    def test_padding_strategies_conform(self):
        self.assertIsInstance(IdentityPadding(), IPadding)
        self.assertIsInstance(SamePadding(3), IPadding)

    def test_activation_functions_conform(self):
        self.assertIsInstance(LeakyReLU(), IActivationFunction)
        self.assertIsInstance(Tanh(), IActivationFunction)

    def test_optimizations_conform(self):
        self.assertIsInstance(TransposedConvolutionSGD(), ITransposedConvolutionOptimization)
        self.assertIsInstance(TransposedConvolutionAdam(), ITransposedConvolutionOptimization)

    def test_weight_initializer_conforms(self):
        self.assertIsInstance(WeightInitializer("zeros"), IWeightsInitialization)


class TestLayerAndTensorProtocols(unittest.TestCase):
    def test_layers_conform(self):
        self.assertIsInstance(FlattenLayer(), ILayer)
        conv = ConvolutionLayer(1, 3, 3, 1, WeightInitializer("zeros"))
        self.assertIsInstance(conv, ILayer)

    def test_tensor_conforms(self):
        self.assertIsInstance(Tensor(Matrix([[1.0]])), ITensor)


if __name__ == "__main__":
    unittest.main()
