import numpy as np
import pytest
from scipy import stats

import distselect
from distselect.core import EmptyInputError
from distselect.distfit import KSTest
from distselect.distributions import Normal, Uniform


def test_package_exports_distfit_module() -> None:
    assert hasattr(distselect, "distfit"), "distselect.distfit should be available from the root"
    assert hasattr(distselect.distfit, "DistributionSelector")
    assert distselect.select_best is distselect.distfit.select_best


def test_ks_test_matches_scipy() -> None:
    sample = np.random.default_rng(1).normal(2.0, 1.5, 80)
    dist = Normal(2.0, 1.5)
    expected = stats.kstest(sample, stats.norm(2.0, 1.5).cdf)
    test = KSTest(sample)
    assert test.evaluate(dist) == pytest.approx(expected.pvalue)
    assert test.statistic(dist) == pytest.approx(expected.statistic)


def test_ks_test_ranks_better_fit_higher() -> None:
    sample = np.random.default_rng(2).uniform(0.0, 1.0, 200)
    test = KSTest(sample)
    assert test.evaluate(Uniform(0.0, 1.0)) > test.evaluate(Normal(0.0, 1.0))
    assert 0.0 <= test.evaluate(Normal(0.0, 1.0)) <= 1.0


def test_ks_test_does_not_modify_sample() -> None:
    sample = np.array([3.0, 1.0, 2.0])
    KSTest(sample)
    assert sample.tolist() == [3.0, 1.0, 2.0]


def test_ks_test_rejects_empty_sample() -> None:
    with pytest.raises(EmptyInputError):
        KSTest([])
