from __future__ import annotations

import unittest

import numpy as np

from posturecheck.smoothing import FeatureSmoother


class FeatureSmootherTests(unittest.TestCase):
    def test_first_update_seeds_the_average(self) -> None:
        smoother = FeatureSmoother()
        self.assertIsNone(smoother.value)
        out = smoother.update([1.0, 2.0, 3.0, 4.0])
        np.testing.assert_allclose(out, [1.0, 2.0, 3.0, 4.0])

    def test_exponential_blend(self) -> None:
        smoother = FeatureSmoother(alpha=0.3)
        smoother.update([0.0, 10.0])
        out = smoother.update([10.0, 0.0])
        np.testing.assert_allclose(out, [3.0, 7.0])

    def test_reset_forgets_history(self) -> None:
        smoother = FeatureSmoother()
        smoother.update([5.0, 5.0])
        smoother.reset()
        self.assertIsNone(smoother.value)
        np.testing.assert_allclose(smoother.update([1.0, 1.0]), [1.0, 1.0])

    def test_value_is_a_copy(self) -> None:
        smoother = FeatureSmoother()
        smoother.update([1.0, 1.0])
        v = smoother.value
        v[0] = 99.0
        np.testing.assert_allclose(smoother.value, [1.0, 1.0])

    def test_length_change_without_reset_raises(self) -> None:
        smoother = FeatureSmoother()
        smoother.update([1.0, 1.0, 1.0, 1.0])
        with self.assertRaises(ValueError):
            smoother.update([1.0, 1.0])

    def test_alpha_out_of_range(self) -> None:
        with self.assertRaises(ValueError):
            FeatureSmoother(alpha=0.0)


if __name__ == "__main__":
    unittest.main()
