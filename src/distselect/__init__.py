"""Top-level package exports for distselect."""

from __future__ import annotations

from importlib import metadata

__version__ = "0.1.0"

try:
    __version__ = metadata.version("distselect")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev fallback
    pass

from . import core as core  # noqa: F401
from . import distfit as distfit  # noqa: F401
from . import distributions as distributions  # noqa: F401
from .core import (  # noqa: F401
    CandidateScore,
    EmptyInputError,
    FatalFittingError,
    SelectionResult,
)
from .distfit import (  # noqa: F401
    DistributionSelector,
    check_constant,
    search_including_kde,
    select_best,
)

__all__ = [
    "__version__",
    "core",
    "distributions",
    "distfit",
    "CandidateScore",
    "EmptyInputError",
    "FatalFittingError",
    "SelectionResult",
    "DistributionSelector",
    "check_constant",
    "search_including_kde",
    "select_best",
]
