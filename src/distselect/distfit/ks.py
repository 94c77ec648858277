"""Kolmogorov-Smirnov goodness-of-fit scoring."""

from __future__ import annotations

from typing import Any

import numpy as np
from scipy import stats

from ..core import ArrayLike, EmptyInputError
from ..distributions import Distribution, as_sample


class KSTest:
    """One-sample, two-sided KS test bound to a fixed sample.

    ``evaluate`` returns the p-value of the test against a candidate's CDF;
    larger values indicate a closer agreement with the empirical CDF.
    """

    def __init__(self, sample: ArrayLike) -> None:
        arr = as_sample(sample)
        if arr.size == 0:
            raise EmptyInputError("KS test requires a non-empty sample.")
        self.sample = np.sort(arr)

    def _run(self, distribution: Distribution) -> Any:
        return stats.kstest(self.sample, distribution.cdf)

    def evaluate(self, distribution: Distribution) -> float:
        pvalue = float(self._run(distribution).pvalue)
        if not np.isfinite(pvalue):
            raise ValueError(f"KS test returned a non-finite p-value for {distribution.name}.")
        return pvalue

    def statistic(self, distribution: Distribution) -> float:
        """Return the maximum distance between the empirical and candidate CDFs."""
        return float(self._run(distribution).statistic)
