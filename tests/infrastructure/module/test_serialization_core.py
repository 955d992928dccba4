import unittest

from fotnet.infrastructure import (
    DoubleLeakyReLU,
    IdentityPadding,
    SamePadding,
    TransposedConvolutionAdam,
    WeightInitializer,
)
from fotnet.infrastructure.module._serialization_core import (
    component_from_config,
    component_to_config,
)


class TestComponentConfig(unittest.TestCase):
    def test_node_layout(self):
        node = component_to_config(SamePadding(3, 5))
        self.assertEqual(node["type"], "SamePadding")
        self.assertEqual(node["config"], {"kernel_rows": 3, "kernel_columns": 5})
        self.assertEqual(node["children"], {})

    def test_strategies_round_trip(self):
        for obj in (
            IdentityPadding(),
            SamePadding(2),
            DoubleLeakyReLU(alpha=0.2),
            TransposedConvolutionAdam(betas=(0.8, 0.99), eps=1e-6),
            WeightInitializer("xavier", seed=3),
        ):
            rebuilt = component_from_config(component_to_config(obj))
            self.assertIs(type(rebuilt), type(obj))
            self.assertEqual(rebuilt.get_config(), obj.get_config())

    def test_none_node_rebuilds_to_none(self):
        self.assertIsNone(component_from_config(None))

    def test_unknown_type_raises(self):
        with self.assertRaises(ValueError):
            component_from_config({"type": "NoSuchLayer", "config": {}})

    def test_children_require_add(self):
        node = component_to_config(IdentityPadding())
        node["children"] = {"0": component_to_config(IdentityPadding())}
        with self.assertRaises(ValueError):
            component_from_config(node)


if __name__ == "__main__":
    unittest.main()
