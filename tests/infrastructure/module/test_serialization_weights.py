import unittest

import numpy as np

from fotnet.domain._errors import WeightParseError
from fotnet.infrastructure.module._serialization_weights import (
    TokenStream,
    format_value,
    join_tokens,
)


class TestTokenStream(unittest.TestCase):
    def test_consumes_left_to_right_and_returns_remainder(self):
        stream = TokenStream("1.5  -2\n3e-1 4 5")
        self.assertEqual(stream.next_float(), 1.5)
        np.testing.assert_array_equal(stream.next_array((1, 2)), [[-2.0, 0.3]])
        self.assertEqual(stream.position, 3)
        self.assertEqual(len(stream), 2)
        self.assertEqual(stream.remainder(), "4 5")

    def test_non_numeric_token_raises_at_its_position(self):
        stream = TokenStream("1 2 x 4")
        stream.next_float()
        stream.next_float()
        with self.assertRaises(WeightParseError) as ctx:
            stream.next_float()
        self.assertEqual(ctx.exception.token, "x")
        self.assertEqual(ctx.exception.position, 2)

    def test_exhausted_stream_raises(self):
        stream = TokenStream("1")
        with self.assertRaises(WeightParseError) as ctx:
            stream.next_array((2,))
        self.assertIsNone(ctx.exception.token)
        self.assertEqual(ctx.exception.position, 1)

    def test_empty_text_has_empty_remainder(self):
        self.assertEqual(TokenStream("   ").remainder(), "")


class TestFormatting(unittest.TestCase):
    def test_format_value_round_trips(self):
        for v in (0.1, 1 / 3, -1e-300, 12345.678):
            self.assertEqual(float(format_value(v)), v)

    def test_join_tokens(self):
        self.assertEqual(join_tokens(["1.0", "2.0"]), "1.0 2.0")
        self.assertEqual(join_tokens([]), "")


if __name__ == "__main__":
    unittest.main()
