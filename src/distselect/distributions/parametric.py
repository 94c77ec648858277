"""Parametric families fitted from a sample with closed-form estimators."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np
from scipy import stats

from .base import ScipyDistribution

EPS = 1e-12


def _require_positive(family: str, arr: np.ndarray) -> None:
    if np.any(arr <= 0):
        raise ValueError(f"{family}: all values must be strictly positive.")


def _require_non_negative(family: str, arr: np.ndarray) -> None:
    if np.any(arr < 0):
        raise ValueError(f"{family}: all values must be non-negative.")


class Normal(ScipyDistribution):
    family = "normal"
    parameter_names = ("mean", "std")
    positive_parameters = ("std",)

    def __init__(self, mean: float = 0.0, std: float = 1.0) -> None:
        super().__init__(mean, std)

    def _frozen(self) -> Any:
        return stats.norm(loc=self._params["mean"], scale=self._params["std"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        return {"mean": float(np.mean(arr)), "std": float(np.std(arr))}


class LogNormal(ScipyDistribution):
    """Log-normal law parameterised by the mean and std of ``log(x)``."""

    family = "lognormal"
    parameter_names = ("mu", "sigma")
    positive_parameters = ("sigma",)

    def __init__(self, mu: float = 0.0, sigma: float = 1.0) -> None:
        super().__init__(mu, sigma)

    def _frozen(self) -> Any:
        return stats.lognorm(s=self._params["sigma"], scale=np.exp(self._params["mu"]))

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_positive(self.family, arr)
        logs = np.log(arr)
        return {"mu": float(np.mean(logs)), "sigma": float(np.std(logs))}


class Exponential(ScipyDistribution):
    family = "exponential"
    parameter_names = ("rate",)
    positive_parameters = ("rate",)

    def __init__(self, rate: float = 1.0) -> None:
        super().__init__(rate)

    def _frozen(self) -> Any:
        return stats.expon(scale=1.0 / self._params["rate"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_non_negative(self.family, arr)
        mean = float(np.mean(arr))
        if mean <= 0:
            raise ValueError(f"{self.family}: sample mean must be positive.")
        return {"rate": 1.0 / mean}


class Gamma(ScipyDistribution):
    """Gamma law with shape ``k`` and scale ``theta``, fitted by moments."""

    family = "gamma"
    parameter_names = ("shape", "scale")
    positive_parameters = ("shape", "scale")

    def __init__(self, shape: float = 2.0, scale: float = 1.0) -> None:
        super().__init__(shape, scale)

    def _frozen(self) -> Any:
        return stats.gamma(a=self._params["shape"], scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_positive(self.family, arr)
        mean = float(np.mean(arr))
        variance = float(np.var(arr))
        if variance <= 0:
            raise ValueError(f"{self.family}: sample variance must be positive.")
        return {"shape": mean * mean / variance, "scale": variance / mean}


class FDistribution(ScipyDistribution):
    """Fisher-Snedecor law fitted by matching the first two moments.

    The mean fixes ``d2 = 2m / (m - 1)``; the variance then fixes ``d1``.
    Both moments only exist for ``d2 > 4``.
    """

    family = "f"
    parameter_names = ("d1", "d2")
    positive_parameters = ("d1", "d2")

    def __init__(self, d1: float = 10.0, d2: float = 10.0) -> None:
        super().__init__(d1, d2)

    def _frozen(self) -> Any:
        return stats.f(dfn=self._params["d1"], dfd=self._params["d2"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_positive(self.family, arr)
        mean = float(np.mean(arr))
        variance = float(np.var(arr))
        if mean <= 1.0:
            raise ValueError(f"{self.family}: sample mean must exceed 1.")
        d2 = 2.0 * mean / (mean - 1.0)
        if d2 <= 4.0:
            raise ValueError(f"{self.family}: sample mean too large for a finite variance.")
        denom = variance * (d2 - 2.0) ** 2 * (d2 - 4.0) - 2.0 * d2 * d2
        if denom <= EPS:
            raise ValueError(f"{self.family}: sample variance too small for the fitted d2.")
        d1 = 2.0 * d2 * d2 * (d2 - 2.0) / denom
        return {"d1": d1, "d2": d2}


class Weibull(ScipyDistribution):
    family = "weibull"
    parameter_names = ("shape", "scale")
    positive_parameters = ("shape", "scale")

    max_iter = 200
    tol = 1e-10

    def __init__(self, shape: float = 2.0, scale: float = 1.0) -> None:
        super().__init__(shape, scale)

    def _frozen(self) -> Any:
        return stats.weibull_min(c=self._params["shape"], scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_positive(self.family, arr)
        # the shape equation is scale invariant, so solve on x / max(x)
        top = float(np.max(arr))
        logs = np.log(arr / top)
        mean_log = float(np.mean(logs))
        spread = float(np.std(logs))
        if spread <= 0:
            raise ValueError(f"{self.family}: sample has no spread.")
        shape = 1.2 / spread
        for _ in range(self.max_iter):
            weights = np.exp(shape * logs)
            total = float(np.sum(weights))
            first = float(np.sum(weights * logs)) / total
            second = float(np.sum(weights * logs * logs)) / total
            value = first - 1.0 / shape - mean_log
            slope = second - first * first + 1.0 / (shape * shape)
            step = value / slope
            new_shape = shape - step
            while new_shape <= 0:
                step /= 2.0
                new_shape = shape - step
            shape = new_shape
            if abs(step) < self.tol * shape:
                break
        else:
            raise ValueError(f"{self.family}: shape estimate did not converge.")
        scale = top * float(np.mean(np.exp(shape * logs))) ** (1.0 / shape)
        return {"shape": shape, "scale": scale}


class Uniform(ScipyDistribution):
    family = "uniform"
    parameter_names = ("lower", "upper")

    def __init__(self, lower: float = 0.0, upper: float = 1.0) -> None:
        super().__init__(lower, upper)

    def _validate(self, params: Mapping[str, float]) -> None:
        super()._validate(params)
        if params["upper"] <= params["lower"]:
            raise ValueError(f"{self.family}: upper bound must exceed lower bound.")
        if not np.isfinite(params["upper"] - params["lower"]):
            raise ValueError(f"{self.family}: support width overflows.")

    def _frozen(self) -> Any:
        lower = self._params["lower"]
        return stats.uniform(loc=lower, scale=self._params["upper"] - lower)

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        return {"lower": float(np.min(arr)), "upper": float(np.max(arr))}


class Logistic(ScipyDistribution):
    family = "logistic"
    parameter_names = ("location", "scale")
    positive_parameters = ("scale",)

    def __init__(self, location: float = 3.0, scale: float = 2.0) -> None:
        super().__init__(location, scale)

    def _frozen(self) -> Any:
        return stats.logistic(loc=self._params["location"], scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        scale = float(np.sqrt(3.0 * np.var(arr)) / np.pi)
        return {"location": float(np.mean(arr)), "scale": scale}


class MaxwellBoltzmann(ScipyDistribution):
    family = "maxwell"
    parameter_names = ("scale",)
    positive_parameters = ("scale",)

    def __init__(self, scale: float = 1.0) -> None:
        super().__init__(scale)

    def _frozen(self) -> Any:
        return stats.maxwell(scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_non_negative(self.family, arr)
        return {"scale": float(np.mean(arr)) * float(np.sqrt(np.pi / 8.0))}


class Pareto(ScipyDistribution):
    """Pareto law with minimum ``scale`` and tail index ``shape`` (MLE)."""

    family = "pareto"
    parameter_names = ("scale", "shape")
    positive_parameters = ("scale", "shape")

    def __init__(self, scale: float = 1.0, shape: float = 3.0) -> None:
        super().__init__(scale, shape)

    def _frozen(self) -> Any:
        return stats.pareto(b=self._params["shape"], scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_positive(self.family, arr)
        scale = float(np.min(arr))
        total = float(np.sum(np.log(arr / scale)))
        if total <= 0:
            raise ValueError(f"{self.family}: sample has no spread above its minimum.")
        return {"scale": scale, "shape": arr.size / total}


class Rayleigh(ScipyDistribution):
    family = "rayleigh"
    parameter_names = ("scale",)
    positive_parameters = ("scale",)

    def __init__(self, scale: float = 2.0) -> None:
        super().__init__(scale)

    def _frozen(self) -> Any:
        return stats.rayleigh(scale=self._params["scale"])

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        _require_non_negative(self.family, arr)
        return {"scale": float(np.sqrt(np.sum(arr * arr) / (2.0 * arr.size)))}


PARAMETRIC_FAMILIES: tuple[type[ScipyDistribution], ...] = (
    Normal,
    LogNormal,
    Exponential,
    Gamma,
    FDistribution,
    Weibull,
    Uniform,
    Logistic,
    MaxwellBoltzmann,
    Pareto,
    Rayleigh,
)

__all__ = [
    "Normal",
    "LogNormal",
    "Exponential",
    "Gamma",
    "FDistribution",
    "Weibull",
    "Uniform",
    "Logistic",
    "MaxwellBoltzmann",
    "Pareto",
    "Rayleigh",
    "PARAMETRIC_FAMILIES",
]
