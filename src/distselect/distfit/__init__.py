"""Best-fit distribution search over a set of candidate families."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeAlias

import numpy as np

from ..core import (
    ArrayLike,
    CandidateScore,
    EmptyInputError,
    FatalFittingError,
    Outcome,
    SelectionResult,
)
from ..distributions import (
    CandidateFactory,
    Distribution,
    KernelDensityEstimator,
    Normal,
    PointMass,
    as_sample,
    default_candidates,
    get_candidate,
)
from .ks import KSTest

logger = logging.getLogger(__name__)

CandidateSpec: TypeAlias = CandidateFactory | str | Distribution | Callable[[], Distribution]

NOT_CONSTANT = -1.0

# Errors that may escape when building the returned distribution itself.
_CONSTRUCTION_ERRORS = (ValueError, ArithmeticError, np.linalg.LinAlgError)


def check_constant(sample: ArrayLike) -> tuple[bool, float]:
    """Return ``(True, value)`` when every element equals the first one.

    Two values are equal when they are identical or adjacent doubles (one
    ulp apart). NaN never equals anything. Otherwise ``(False, -1.0)``.
    """
    arr = as_sample(sample)
    if arr.size == 0:
        raise EmptyInputError("Cannot inspect an empty sample.")
    first = arr[0]
    rest = arr[1:]
    with np.errstate(invalid="ignore"):
        equal = (rest == first) | (np.nextafter(first, rest) == rest)
    if np.all(equal):
        return True, float(first)
    return False, NOT_CONSTANT


def _candidate_name(spec: CandidateSpec) -> str:
    if isinstance(spec, CandidateFactory):
        return spec.name
    if isinstance(spec, str):
        return spec.lower()
    if isinstance(spec, type):
        return getattr(spec, "family", "") or spec.__name__
    if isinstance(spec, Distribution):
        return spec.name
    return getattr(spec, "__name__", type(spec).__name__)


def _check_spec(spec: Any) -> None:
    if isinstance(spec, (CandidateFactory, str, type, Distribution)) or callable(spec):
        return
    raise TypeError(
        f"Unsupported candidate {spec!r}. Expected a CandidateFactory, registered name, "
        "distribution instance, or zero-argument callable."
    )


def _materialize(spec: CandidateSpec) -> Distribution:
    """Return a fresh candidate instance owned by the current search."""
    if isinstance(spec, CandidateFactory):
        return spec.create()
    if isinstance(spec, str):
        return get_candidate(spec).create()
    if isinstance(spec, type):
        return spec()
    if isinstance(spec, Distribution):
        return spec.clone()
    return spec()


class DistributionSelector:
    """Pick the distribution that best explains a sample.

    Each candidate is fitted to the sample and scored with a KS test; the
    highest score wins, earlier candidates winning exact ties. When the best
    score is below ``kde_cutoff`` a kernel density estimate is returned
    instead. Candidates are produced fresh for every search so templates
    are never mutated and concurrent searches share no state.

    Parameters
    ----------
    candidates
        Candidate factories, registered names, distribution templates or
        zero-argument callables. Defaults to the built-in families.
    kde_cutoff
        Minimum winning score. Values ``<= 0`` never fall back to the KDE,
        values ``> 1`` always do (unless the sample is constant).
    max_workers
        Fit candidates on a thread pool of this size. ``None`` or ``1``
        runs sequentially.
    """

    def __init__(
        self,
        candidates: Sequence[CandidateSpec] | None = None,
        *,
        kde_cutoff: float = 0.0,
        max_workers: int | None = None,
    ) -> None:
        specs = default_candidates() if candidates is None else list(candidates)
        for spec in specs:
            _check_spec(spec)
        self.candidates: tuple[CandidateSpec, ...] = tuple(specs)
        self.kde_cutoff = float(kde_cutoff)
        self.max_workers = max_workers

    def _score_one(self, index: int, spec: CandidateSpec, test: KSTest) -> CandidateScore:
        name = _candidate_name(spec)
        try:
            candidate = _materialize(spec)
            with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
                candidate.estimate_parameters_from_sample(test.sample)
                score = test.evaluate(candidate)
        except Exception as exc:  # noqa: BLE001 - a failing candidate is only disqualified
            reason = f"{type(exc).__name__}: {exc}"
            logger.debug("Candidate %s disqualified: %s", name, reason)
            return CandidateScore(name=name, index=index, reason=reason)
        logger.debug("Candidate %s scored %.6g", name, score)
        return CandidateScore(name=name, index=index, score=score, distribution=candidate)

    def score_candidates(
        self,
        sample: ArrayLike,
        candidates: Sequence[CandidateSpec] | None = None,
    ) -> list[CandidateScore]:
        """Fit and score every candidate, in declaration order."""
        specs = self.candidates if candidates is None else tuple(candidates)
        test = KSTest(sample)
        if self.max_workers is not None and self.max_workers > 1 and len(specs) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [
                    pool.submit(self._score_one, index, spec, test)
                    for index, spec in enumerate(specs)
                ]
                return [future.result() for future in futures]
        return [self._score_one(index, spec, test) for index, spec in enumerate(specs)]

    def select(
        self,
        sample: ArrayLike,
        *,
        kde_cutoff: float | None = None,
        include_kde: bool = False,
    ) -> SelectionResult:
        """Run the search and return the chosen distribution with its evidence."""
        arr = as_sample(sample)
        if arr.size == 0:
            raise EmptyInputError("Cannot fit a distribution to an empty sample.")
        cutoff = self.kde_cutoff if kde_cutoff is None else float(kde_cutoff)

        constant, value = check_constant(arr)
        if constant:
            logger.info("Sample is constant at %g; returning a point mass.", value)
            return SelectionResult(PointMass(value), "degenerate", kde_cutoff=cutoff)

        specs: list[CandidateSpec] = list(self.candidates)
        if include_kde:
            specs.append(CandidateFactory("kde", KernelDensityEstimator))
        scores = self.score_candidates(arr, specs)

        best: CandidateScore | None = None
        best_score = 0.0
        for entry in scores:
            if entry.score is not None and entry.score > best_score:
                best = entry
                best_score = entry.score

        outcome: Outcome
        selected_index: int | None = None
        try:
            if best_score >= cutoff:
                if best is None or best.distribution is None:
                    distribution: Distribution = Normal(float(np.mean(arr)), float(np.std(arr)))
                    outcome = "default_normal"
                else:
                    distribution = best.distribution.clone()
                    selected_index = best.index
                    if isinstance(distribution, KernelDensityEstimator):
                        outcome = "kde"
                    else:
                        outcome = "parametric"
            else:
                distribution = KernelDensityEstimator(arr)
                outcome = "kde"
        except _CONSTRUCTION_ERRORS as exc:
            if float(np.std(arr)) == 0.0:
                logger.warning("No distribution could be determined for a zero-variance sample.")
                return SelectionResult(
                    None, "none", best_score=best_score, kde_cutoff=cutoff, scores=scores
                )
            raise FatalFittingError(
                "Catastrophic failure building a distribution for the sample."
            ) from exc

        logger.info(
            "Selected %s (%s, best score %.4g, cutoff %.4g)",
            distribution.name,
            outcome,
            best_score,
            cutoff,
        )
        return SelectionResult(
            distribution,
            outcome,
            best_score=best_score,
            kde_cutoff=cutoff,
            scores=scores,
            selected_index=selected_index,
        )

    def select_best(
        self,
        sample: ArrayLike,
        *,
        kde_cutoff: float | None = None,
        include_kde: bool = False,
    ) -> Distribution | None:
        """Return only the selected distribution (``None`` when nothing fits)."""
        return self.select(sample, kde_cutoff=kde_cutoff, include_kde=include_kde).distribution


def select_best(
    sample: ArrayLike,
    candidates: Sequence[CandidateSpec] | None = None,
    kde_cutoff: float = 0.0,
    *,
    max_workers: int | None = None,
) -> Distribution | None:
    """Return the best-fitting distribution for ``sample``."""
    selector = DistributionSelector(candidates, kde_cutoff=kde_cutoff, max_workers=max_workers)
    return selector.select_best(sample)


def search_including_kde(sample: ArrayLike, include_kde: bool = False) -> Distribution | None:
    """Search the default families, optionally letting a KDE compete as a candidate.

    With ``include_kde`` the KDE is scored like any other candidate and no
    cutoff is applied.
    """
    return DistributionSelector().select_best(sample, include_kde=include_kde)


__all__ = [
    "CandidateSpec",
    "DistributionSelector",
    "KSTest",
    "NOT_CONSTANT",
    "check_constant",
    "search_including_kde",
    "select_best",
]
