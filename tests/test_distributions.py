"""Tests for sampling distributions and the distribution registry."""

import unittest
import numpy as np

from jobshopsim.core.exceptions import InvalidParameterError
from jobshopsim.workload.distributions import (
    ConstantDistribution,
    DistributionRegistry,
    ExponentialDistribution,
    GammaDistribution,
    LognormalDistribution,
    NormalDistribution,
    TriangularDistribution,
    UniformDistribution,
)


def draw(distribution, n, seed=42):
    rng = np.random.default_rng(seed)
    return np.array([distribution.sample(rng) for _ in range(n)])


class TestDistributions(unittest.TestCase):
    """Test cases for the distribution strategies."""

    def test_exponential_mean(self):
        """Test Exponential(0.5) has sample mean within 5% of 2.0."""
        samples = draw(ExponentialDistribution(0.5), 100_000)

        self.assertAlmostEqual(np.mean(samples), 2.0, delta=0.1)
        self.assertTrue(np.all(samples >= 0))

    def test_constant(self):
        samples = draw(ConstantDistribution(3.5), 10)
        self.assertTrue(np.all(samples == 3.5))

    def test_uniform_bounds(self):
        samples = draw(UniformDistribution(2.0, 6.0), 20_000)

        self.assertTrue(np.all(samples >= 2.0))
        self.assertTrue(np.all(samples < 6.0))
        self.assertAlmostEqual(np.mean(samples), 4.0, delta=0.05)

    def test_normal_moments(self):
        samples = draw(NormalDistribution(10.0, 2.0), 20_000)

        self.assertAlmostEqual(np.mean(samples), 10.0, delta=0.1)
        self.assertAlmostEqual(np.std(samples), 2.0, delta=0.1)

    def test_triangular(self):
        distribution = TriangularDistribution(2.0, 4.0, 9.0)
        samples = draw(distribution, 20_000)

        self.assertTrue(np.all(samples >= 2.0))
        self.assertTrue(np.all(samples <= 9.0))
        self.assertAlmostEqual(distribution.mean, 5.0)
        self.assertAlmostEqual(np.mean(samples), 5.0, delta=0.1)

    def test_lognormal_mean(self):
        distribution = LognormalDistribution(0.0, 0.5)
        samples = draw(distribution, 20_000)

        self.assertTrue(np.all(samples > 0))
        self.assertAlmostEqual(np.mean(samples), distribution.mean, delta=0.05)

    def test_gamma_mean(self):
        """Test both the Marsaglia-Tsang path and the shape < 1 boost."""
        for shape, scale in ((4.0, 1.0), (0.5, 2.0)):
            distribution = GammaDistribution(shape, scale)
            samples = draw(distribution, 50_000)

            self.assertTrue(np.all(samples >= 0))
            self.assertAlmostEqual(np.mean(samples), distribution.mean, delta=0.05 * distribution.mean)

    def test_same_seed_same_stream(self):
        distribution = GammaDistribution(2.0, 1.5)
        np.testing.assert_array_equal(draw(distribution, 100, seed=1), draw(distribution, 100, seed=1))

    def test_invalid_parameters(self):
        """Test invalid parameters are rejected at construction."""
        with self.assertRaises(InvalidParameterError):
            UniformDistribution(5.0, 1.0)
        with self.assertRaises(InvalidParameterError):
            ExponentialDistribution(0.0)
        with self.assertRaises(InvalidParameterError):
            NormalDistribution(1.0, -1.0)
        with self.assertRaises(InvalidParameterError):
            TriangularDistribution(1.0, 5.0, 3.0)
        with self.assertRaises(InvalidParameterError):
            GammaDistribution(0.0, 1.0)
        with self.assertRaises(InvalidParameterError):
            ConstantDistribution(float("nan"))

    def test_describe(self):
        self.assertEqual(UniformDistribution(2.0, 6.0).describe(), "Uniform(min=2, max=6)")
        self.assertEqual(ExponentialDistribution(0.5).to_dict(), {"type": "Exponential", "rate": 0.5})


class TestDistributionRegistry(unittest.TestCase):
    """Test cases for DistributionRegistry."""

    def setUp(self):
        """Set up test fixtures."""
        self.registry = DistributionRegistry()

    def test_registered_names(self):
        self.assertEqual(
            self.registry.names(),
            ["Constant", "Uniform", "Exponential", "Normal", "Triangular", "Lognormal", "Gamma"],
        )

    def test_create_with_defaults(self):
        """Test missing trailing parameters take their defaults."""
        uniform = self.registry.create("uniform", 1.0)
        self.assertEqual((uniform.min_value, uniform.max_value), (1.0, 6.0))

        exponential = self.registry.create("Exponential")
        self.assertEqual(exponential.rate, 0.25)

    def test_too_many_parameters(self):
        with self.assertRaises(InvalidParameterError):
            self.registry.create("Exponential", 1.0, 2.0)

    def test_unknown_name_falls_back(self):
        """Test unknown names produce the default constant with a warning."""
        with self.assertLogs("DistributionRegistry", level="WARNING"):
            distribution = self.registry.create("Weibull", 2.0)

        self.assertIsInstance(distribution, ConstantDistribution)
        self.assertEqual(distribution.value, 2.0)

    def test_from_config(self):
        uniform = self.registry.from_config({"type": "Uniform", "params": [2, 6]})
        self.assertIsInstance(uniform, UniformDistribution)

        normal = self.registry.from_config({"type": "normal", "mean": 5.0, "std": 1.0})
        self.assertEqual(normal.parameters(), {"mean": 5.0, "std_dev": 1.0})

        exponential = self.registry.from_config({"type": "Exponential", "mean": 4.0})
        self.assertAlmostEqual(exponential.rate, 0.25)

        self.assertIsInstance(self.registry.from_config(None), ConstantDistribution)

    def test_from_config_errors(self):
        with self.assertRaises(InvalidParameterError):
            self.registry.from_config({"params": [1.0]})
        with self.assertRaises(InvalidParameterError):
            self.registry.from_config({"type": "Uniform", "low": 1.0, "width": 2.0})

    def test_register_custom(self):
        self.registry.register("Fixed", ConstantDistribution, ["value"], [7.0])
        self.assertEqual(self.registry.create("fixed").mean, 7.0)


if __name__ == '__main__':
    unittest.main()
