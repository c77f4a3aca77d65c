"""Probability distributions for arrival and processing times.

Every distribution draws its uniforms from the generator passed to
``sample`` so that a whole run shares one seeded stream.
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from ..core.exceptions import InvalidParameterError
from ..utils.logger import setup_logger


def _standard_normal(rng: np.random.Generator) -> float:
    """One standard normal variate via the Box-Muller transform."""
    u1 = 1.0 - rng.random()  # (0, 1], keeps log() finite
    u2 = 1.0 - rng.random()
    return math.sqrt(-2.0 * math.log(u1)) * math.sin(2.0 * math.pi * u2)


def _require_finite(name: str, **values: float) -> None:
    for key, value in values.items():
        if value is None or not math.isfinite(float(value)):
            raise InvalidParameterError(f"{name}: '{key}' must be a finite number, got {value!r}")


class Distribution(ABC):
    """Abstract base class for sampling distributions."""

    name: str = ""

    @abstractmethod
    def sample(self, rng: np.random.Generator) -> float:
        """Draw one value.

        Args:
            rng: Engine-owned random generator

        Returns:
            Sampled value
        """
        pass

    @property
    @abstractmethod
    def mean(self) -> float:
        """Analytic mean."""
        pass

    @abstractmethod
    def parameters(self) -> Dict[str, float]:
        pass

    def describe(self) -> str:
        items = ", ".join(f"{k}={v:g}" for k, v in self.parameters().items())
        return f"{self.name}({items})"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.name, **self.parameters()}

    def __repr__(self) -> str:
        return self.describe()


class ConstantDistribution(Distribution):
    """Deterministic value."""

    name = "Constant"

    def __init__(self, value: float = 1.0):
        _require_finite(self.name, value=value)
        self.value = float(value)

    def sample(self, rng):
        return self.value

    @property
    def mean(self):
        return self.value

    def parameters(self):
        return {"value": self.value}


class UniformDistribution(Distribution):
    """Uniform on [min, max)."""

    name = "Uniform"

    def __init__(self, min_value: float = 0.0, max_value: float = 1.0):
        _require_finite(self.name, min=min_value, max=max_value)
        if min_value >= max_value:
            raise InvalidParameterError(f"Uniform: min ({min_value}) must be less than max ({max_value})")
        self.min_value = float(min_value)
        self.max_value = float(max_value)

    def sample(self, rng):
        return self.min_value + (self.max_value - self.min_value) * rng.random()

    @property
    def mean(self):
        return (self.min_value + self.max_value) / 2.0

    def parameters(self):
        return {"min": self.min_value, "max": self.max_value}


class ExponentialDistribution(Distribution):
    """Exponential with rate lambda, sampled by inverse CDF."""

    name = "Exponential"

    def __init__(self, rate: float = 1.0):
        _require_finite(self.name, rate=rate)
        if rate <= 0:
            raise InvalidParameterError(f"Exponential: rate must be positive, got {rate}")
        self.rate = float(rate)

    def sample(self, rng):
        return -math.log(1.0 - rng.random()) / self.rate

    @property
    def mean(self):
        return 1.0 / self.rate

    def parameters(self):
        return {"rate": self.rate}


class NormalDistribution(Distribution):
    """Gaussian, sampled with Box-Muller."""

    name = "Normal"

    def __init__(self, mean: float = 0.0, std_dev: float = 1.0):
        _require_finite(self.name, mean=mean, std_dev=std_dev)
        if std_dev <= 0:
            raise InvalidParameterError(f"Normal: std_dev must be positive, got {std_dev}")
        self._mean = float(mean)
        self.std_dev = float(std_dev)

    def sample(self, rng):
        return self._mean + self.std_dev * _standard_normal(rng)

    @property
    def mean(self):
        return self._mean

    def parameters(self):
        return {"mean": self._mean, "std_dev": self.std_dev}


class TriangularDistribution(Distribution):
    """Triangular with min, mode and max, sampled by the split inverse CDF."""

    name = "Triangular"

    def __init__(self, min_value: float = 0.0, mode: float = 0.5, max_value: float = 1.0):
        _require_finite(self.name, min=min_value, mode=mode, max=max_value)
        if min_value >= max_value or mode < min_value or mode > max_value:
            raise InvalidParameterError(
                f"Triangular: need min < max and min <= mode <= max, got ({min_value}, {mode}, {max_value})"
            )
        self.min_value = float(min_value)
        self.mode = float(mode)
        self.max_value = float(max_value)

    def sample(self, rng):
        u = rng.random()
        span = self.max_value - self.min_value
        split = (self.mode - self.min_value) / span
        if u < split:
            return self.min_value + math.sqrt(u * span * (self.mode - self.min_value))
        return self.max_value - math.sqrt((1.0 - u) * span * (self.max_value - self.mode))

    @property
    def mean(self):
        return (self.min_value + self.mode + self.max_value) / 3.0

    def parameters(self):
        return {"min": self.min_value, "mode": self.mode, "max": self.max_value}


class LognormalDistribution(Distribution):
    """Lognormal parameterised by the underlying normal's mu and sigma."""

    name = "Lognormal"

    def __init__(self, mu: float = 0.0, sigma: float = 1.0):
        _require_finite(self.name, mu=mu, sigma=sigma)
        if sigma <= 0:
            raise InvalidParameterError(f"Lognormal: sigma must be positive, got {sigma}")
        self.mu = float(mu)
        self.sigma = float(sigma)

    def sample(self, rng):
        return math.exp(self.mu + self.sigma * _standard_normal(rng))

    @property
    def mean(self):
        return math.exp(self.mu + self.sigma ** 2 / 2.0)

    def parameters(self):
        return {"mu": self.mu, "sigma": self.sigma}


class GammaDistribution(Distribution):
    """Gamma with shape (alpha) and scale (beta).

    Shape >= 1 uses Marsaglia-Tsang. Shape < 1 samples Gamma(shape + 1) and
    multiplies by U^(1/shape).
    """

    name = "Gamma"

    def __init__(self, shape: float = 2.0, scale: float = 1.0):
        _require_finite(self.name, shape=shape, scale=scale)
        if shape <= 0 or scale <= 0:
            raise InvalidParameterError(f"Gamma: shape and scale must be positive, got ({shape}, {scale})")
        self.shape = float(shape)
        self.scale = float(scale)

    def sample(self, rng):
        if self.shape >= 1.0:
            return self._marsaglia_tsang(rng, self.shape) * self.scale
        u = 1.0 - rng.random()
        return self._marsaglia_tsang(rng, self.shape + 1.0) * u ** (1.0 / self.shape) * self.scale

    @staticmethod
    def _marsaglia_tsang(rng: np.random.Generator, shape: float) -> float:
        d = shape - 1.0 / 3.0
        c = 1.0 / math.sqrt(9.0 * d)
        while True:
            x = _standard_normal(rng)
            v = 1.0 + c * x
            if v <= 0:
                continue
            v = v * v * v
            u = 1.0 - rng.random()
            if u < 1.0 - 0.0331 * x ** 4:
                return d * v
            if math.log(u) < 0.5 * x * x + d * (1.0 - v + math.log(v)):
                return d * v

    @property
    def mean(self):
        return self.shape * self.scale

    def parameters(self):
        return {"shape": self.shape, "scale": self.scale}


class DistributionRegistry:
    """Builds distributions from configuration names and parameters.

    Each entry holds the positional parameter names and their defaults, so
    ``create("Uniform", 2, 6)`` and ``from_config({"type": "uniform",
    "min": 2, "max": 6})`` are equivalent.
    """

    DEFAULT_DISTRIBUTION = "Constant"

    def __init__(self):
        """Initialize registry with the standard distributions."""
        self.logger = setup_logger(self.__class__.__name__)
        self._entries: Dict[str, Dict[str, Any]] = {}

        self.register("Constant", ConstantDistribution, ["value"], [4.0])
        self.register("Uniform", UniformDistribution, ["min", "max"], [2.0, 6.0])
        self.register("Exponential", ExponentialDistribution, ["rate"], [0.25])
        self.register("Normal", NormalDistribution, ["mean", "std_dev"], [4.0, 0.5])
        self.register("Triangular", TriangularDistribution, ["min", "mode", "max"], [2.0, 4.0, 6.0])
        self.register("Lognormal", LognormalDistribution, ["mu", "sigma"], [1.2, 0.3])
        self.register("Gamma", GammaDistribution, ["shape", "scale"], [4.0, 1.0])

    def register(self, name: str, factory: Callable[..., Distribution],
                 param_names: Sequence[str], defaults: Sequence[float]) -> None:
        """Register a distribution type.

        Args:
            name: Canonical name
            factory: Callable taking the positional parameters
            param_names: Names of the positional parameters
            defaults: Default value of each parameter
        """
        if len(param_names) != len(defaults):
            raise ValueError(f"{name}: parameter names and defaults differ in length")
        self._entries[name.lower()] = {
            "name": name,
            "factory": factory,
            "params": list(param_names),
            "defaults": list(defaults),
        }

    def names(self) -> List[str]:
        return [entry["name"] for entry in self._entries.values()]

    def create(self, name: str, *params: float) -> Distribution:
        """Create a distribution from positional parameters.

        Missing trailing parameters take their defaults. Unknown names fall
        back to the default constant distribution.

        Raises:
            InvalidParameterError: If the parameters are invalid
        """
        entry = self._lookup(name)
        if len(params) > len(entry["params"]):
            raise InvalidParameterError(
                f"{entry['name']} takes at most {len(entry['params'])} parameters, got {len(params)}"
            )
        values = [float(v) for v in params] + entry["defaults"][len(params):]
        return entry["factory"](*values)

    def from_config(self, config: Optional[Dict[str, Any]]) -> Distribution:
        """Create a distribution from a configuration dictionary.

        Accepts either ``{"type": "Uniform", "params": [2, 6]}`` or named
        parameters ``{"type": "uniform", "min": 2, "max": 6}``. Exponential
        also accepts ``mean`` in place of ``rate``.

        Args:
            config: Distribution configuration

        Returns:
            Configured distribution
        """
        if not config:
            return self.create(self.DEFAULT_DISTRIBUTION)

        dist_type = config.get("type") or config.get("distribution")
        if not dist_type:
            raise InvalidParameterError("Distribution definition requires a 'type' field")

        if "params" in config:
            return self.create(dist_type, *config["params"])

        entry = self._lookup(dist_type)
        named = {k: v for k, v in config.items() if k not in ("type", "distribution")}
        named = self._normalize_names(entry["name"], named)

        unknown = set(named) - set(entry["params"])
        if unknown:
            raise InvalidParameterError(f"{entry['name']}: unknown parameters {sorted(unknown)}")

        values = [float(named.get(p, default)) for p, default in zip(entry["params"], entry["defaults"])]
        return entry["factory"](*values)

    def _lookup(self, name: str) -> Dict[str, Any]:
        entry = self._entries.get(str(name).strip().lower())
        if entry is None:
            self.logger.warning(f"Unknown distribution '{name}', using {self.DEFAULT_DISTRIBUTION}")
            entry = self._entries[self.DEFAULT_DISTRIBUTION.lower()]
        return entry

    @staticmethod
    def _normalize_names(name: str, named: Dict[str, Any]) -> Dict[str, Any]:
        named = dict(named)
        renames = {"low": "min", "high": "max", "stdev": "std_dev", "std": "std_dev"}
        for old, new in renames.items():
            if old in named and new not in named:
                named[new] = named.pop(old)
        if name == "Exponential" and "mean" in named and "rate" not in named:
            mean = float(named.pop("mean"))
            if mean <= 0:
                raise InvalidParameterError(f"Exponential: mean must be positive, got {mean}")
            named["rate"] = 1.0 / mean
        return named
