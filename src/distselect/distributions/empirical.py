"""Non-parametric and degenerate distributions built directly from a sample."""

from __future__ import annotations

import copy

import numpy as np
from scipy import stats

from .base import as_sample

CDF_BLOCK_SIZE = 1024


class PointMass:
    """All probability mass on a single value."""

    def __init__(self, value: float = 0.0) -> None:
        self.value = float(value)

    @property
    def name(self) -> str:
        return "point_mass"

    @property
    def parameters(self) -> dict[str, float]:
        return {"value": self.value}

    def estimate_parameters_from_sample(self, sample: np.ndarray) -> None:
        arr = as_sample(sample)
        if arr.size == 0:
            raise ValueError("point_mass: cannot estimate parameters from an empty sample.")
        if np.max(arr) != np.min(arr):
            raise ValueError("point_mass: sample is not constant.")
        self.value = float(arr[0])

    def pdf(self, x: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(x, dtype=float)
        return np.where(arr == self.value, np.inf, 0.0)

    def cdf(self, x: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(x, dtype=float)
        return np.where(arr >= self.value, 1.0, 0.0)

    def sample(self, size: int, random_state: np.random.Generator | None = None) -> np.ndarray:
        return np.full(size, self.value, dtype=float)

    def clone(self) -> PointMass:
        return PointMass(self.value)

    def __repr__(self) -> str:
        return f"PointMass(value={self.value:.6g})"


class KernelDensityEstimator:
    """Gaussian kernel density estimate wrapping :class:`scipy.stats.gaussian_kde`.

    ``bandwidth`` is passed through as ``bw_method`` (``"scott"``,
    ``"silverman"`` or a scalar factor). The estimate needs at least two
    distinct points; ``gaussian_kde`` raises ``LinAlgError`` for samples
    without spread.
    """

    def __init__(self, sample: np.ndarray | None = None, bandwidth: str | float = "scott") -> None:
        self.bandwidth = bandwidth
        self._kde: stats.gaussian_kde | None = None
        if sample is not None:
            self.estimate_parameters_from_sample(sample)

    @property
    def name(self) -> str:
        return "kde"

    @property
    def parameters(self) -> dict[str, float]:
        if self._kde is None:
            return {}
        return {"bandwidth": self.kernel_width, "points": float(self._kde.n)}

    @property
    def kernel_width(self) -> float:
        """Standard deviation of each Gaussian kernel."""
        return float(np.sqrt(self._fitted().covariance[0, 0]))

    def _fitted(self) -> stats.gaussian_kde:
        if self._kde is None:
            raise RuntimeError("KernelDensityEstimator has not been fitted to a sample.")
        return self._kde

    def estimate_parameters_from_sample(self, sample: np.ndarray) -> None:
        arr = as_sample(sample)
        if arr.size < 2:
            raise ValueError("kde: at least two observations are required.")
        if not np.all(np.isfinite(arr)):
            raise ValueError("kde: sample contains non-finite values.")
        self._kde = stats.gaussian_kde(arr, bw_method=self.bandwidth)

    def pdf(self, x: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(x, dtype=float)
        return self._fitted()(arr.ravel()).reshape(arr.shape)

    def cdf(self, x: np.ndarray | float) -> np.ndarray:
        kde = self._fitted()
        arr = np.asarray(x, dtype=float)
        flat = arr.ravel()
        points = kde.dataset[0]
        width = self.kernel_width
        values = np.empty(flat.size, dtype=float)
        # rows are evaluated in blocks so temporaries stay (CDF_BLOCK_SIZE, n)
        for start in range(0, flat.size, CDF_BLOCK_SIZE):
            block = flat[start : start + CDF_BLOCK_SIZE]
            z = (block[:, np.newaxis] - points[np.newaxis, :]) / width
            values[start : start + block.size] = stats.norm.cdf(z) @ kde.weights
        return values.reshape(arr.shape)

    def sample(self, size: int, random_state: np.random.Generator | None = None) -> np.ndarray:
        rng = random_state or np.random.default_rng()
        return self._fitted().resample(size, seed=rng)[0]

    def clone(self) -> KernelDensityEstimator:
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        if self._kde is None:
            return "KernelDensityEstimator(unfitted)"
        return f"KernelDensityEstimator(points={self._kde.n}, bandwidth={self.kernel_width:.6g})"


__all__ = ["PointMass", "KernelDensityEstimator"]
