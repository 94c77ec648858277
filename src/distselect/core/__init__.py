"""Core dataclasses, shared type aliases and exception types for distselect modules."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal, TypeAlias

import numpy as np
import pandas as pd

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..distributions.base import Distribution

ArrayLike: TypeAlias = np.ndarray | Sequence[float]

Outcome: TypeAlias = Literal["degenerate", "parametric", "kde", "default_normal", "none"]


class DistSelectError(Exception):
    """Base exception for distselect errors."""


class EmptyInputError(DistSelectError, ValueError):
    """Raised when a distribution is requested for an empty sample."""


class FatalFittingError(DistSelectError, ArithmeticError):
    """Raised when even the fallback distribution cannot be built for a varying sample.

    Besides genuine estimator breakage this also covers finite samples whose
    spread overflows double precision, e.g. ``[1e308, -1e308]``: every
    candidate is disqualified and the default ``Normal(mean, std)`` is
    rejected because ``std`` is infinite.
    """


@dataclass(slots=True)
class CandidateScore:
    """Outcome of fitting and scoring a single candidate.

    Either ``score`` is set, or the candidate was disqualified and ``reason``
    holds the error that stopped it.
    """

    name: str
    index: int
    score: float | None = None
    reason: str | None = None
    distribution: Distribution | None = None

    @property
    def disqualified(self) -> bool:
        return self.score is None


@dataclass(slots=True)
class SelectionResult:
    """Selected distribution together with the per-candidate evidence."""

    distribution: Distribution | None
    outcome: Outcome
    best_score: float = 0.0
    kde_cutoff: float = 0.0
    scores: list[CandidateScore] = field(default_factory=list)
    selected_index: int | None = None

    @property
    def winner(self) -> CandidateScore | None:
        """Return the candidate whose fit was returned, if any."""
        if self.selected_index is None:
            return None
        for entry in self.scores:
            if entry.index == self.selected_index:
                return entry
        return None

    def to_frame(self) -> pd.DataFrame:
        """Return a tidy data frame summarising candidate scores."""
        records: list[dict[str, Any]] = []
        for entry in self.scores:
            record: dict[str, Any] = {
                "distribution": entry.name,
                "score": np.nan if entry.score is None else entry.score,
                "disqualified": entry.disqualified,
                "reason": entry.reason,
                "selected": entry.index == self.selected_index,
            }
            if entry.distribution is not None:
                record.update(entry.distribution.parameters)
            records.append(record)
        return pd.DataFrame.from_records(records)


__all__ = [
    "ArrayLike",
    "Outcome",
    "DistSelectError",
    "EmptyInputError",
    "FatalFittingError",
    "CandidateScore",
    "SelectionResult",
]
