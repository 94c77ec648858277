"""Core distribution protocol and candidate registry infrastructure."""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from importlib import import_module, metadata
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import numpy as np
import yaml

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "distselect.candidates"


@runtime_checkable
class Distribution(Protocol):
    """Capabilities every selectable distribution provides."""

    @property
    def name(self) -> str: ...

    @property
    def parameters(self) -> dict[str, float]: ...

    def estimate_parameters_from_sample(self, sample: np.ndarray) -> None: ...

    def pdf(self, x: np.ndarray | float) -> np.ndarray: ...

    def cdf(self, x: np.ndarray | float) -> np.ndarray: ...

    def sample(
        self, size: int, random_state: np.random.Generator | None = None
    ) -> np.ndarray: ...

    def clone(self) -> Distribution: ...


def as_sample(sample: Any) -> np.ndarray:
    """Coerce ``sample`` to a flat float array."""
    return np.asarray(sample, dtype=float).ravel()


class ScipyDistribution:
    """Parametric family backed by a frozen ``scipy.stats`` law.

    Subclasses declare ``family`` and ``parameter_names``, build the frozen
    law in :meth:`_frozen` and estimate new parameters in :meth:`_estimate`.
    Estimators raise ``ValueError`` when the sample falls outside the
    family's support.
    """

    family: str = ""
    parameter_names: tuple[str, ...] = ()
    positive_parameters: tuple[str, ...] = ()

    def __init__(self, *values: float) -> None:
        if len(values) != len(self.parameter_names):
            raise TypeError(
                f"{type(self).__name__} expects {len(self.parameter_names)} parameters, "
                f"got {len(values)}."
            )
        self._params = dict(zip(self.parameter_names, (float(v) for v in values), strict=True))
        self._validate(self._params)
        self._law = self._frozen()

    @property
    def name(self) -> str:
        return self.family

    @property
    def parameters(self) -> dict[str, float]:
        return dict(self._params)

    def _validate(self, params: Mapping[str, float]) -> None:
        for key, value in params.items():
            if not np.isfinite(value):
                raise ValueError(f"{self.family}: parameter '{key}' must be finite, got {value}.")
        for key in self.positive_parameters:
            if params[key] <= 0:
                raise ValueError(f"{self.family}: parameter '{key}' must be positive.")

    def _frozen(self) -> Any:
        raise NotImplementedError

    def _estimate(self, arr: np.ndarray) -> dict[str, float]:
        raise NotImplementedError

    def estimate_parameters_from_sample(self, sample: np.ndarray) -> None:
        arr = as_sample(sample)
        if arr.size == 0:
            raise ValueError(f"{self.family}: cannot estimate parameters from an empty sample.")
        if not np.all(np.isfinite(arr)):
            raise ValueError(f"{self.family}: sample contains non-finite values.")
        params = {key: float(value) for key, value in self._estimate(arr).items()}
        self._validate(params)
        self._params = params
        self._law = self._frozen()

    def pdf(self, x: np.ndarray | float) -> np.ndarray:
        return self._law.pdf(np.asarray(x, dtype=float))

    def cdf(self, x: np.ndarray | float) -> np.ndarray:
        return self._law.cdf(np.asarray(x, dtype=float))

    def sample(self, size: int, random_state: np.random.Generator | None = None) -> np.ndarray:
        rng = random_state or np.random.default_rng()
        return np.asarray(self._law.rvs(size=size, random_state=rng), dtype=float)

    def clone(self) -> ScipyDistribution:
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        args = ", ".join(f"{key}={value:.6g}" for key, value in self._params.items())
        return f"{type(self).__name__}({args})"


@dataclass(frozen=True, slots=True)
class CandidateFactory:
    """Named zero-argument constructor for a fresh candidate distribution."""

    name: str
    factory: Callable[[], Distribution]
    notes: str | None = None

    def create(self) -> Distribution:
        return self.factory()


_REGISTRY: dict[str, CandidateFactory] = {}


def list_candidates() -> Iterable[str]:
    """Return registered candidate names."""
    return sorted(_REGISTRY.keys())


def get_candidate(name: str) -> CandidateFactory:
    """Retrieve a candidate factory by name."""
    key = name.lower()
    if key not in _REGISTRY:
        raise KeyError(f"Unknown candidate distribution '{name}'.")
    return _REGISTRY[key]


def register_candidate(candidate: CandidateFactory, *, overwrite: bool = False) -> None:
    """Register a candidate factory in the global registry."""
    key = candidate.name.lower()
    if key in _REGISTRY and not overwrite:
        raise ValueError(f"Candidate '{candidate.name}' already registered.")
    _REGISTRY[key] = candidate


def clear_registry() -> None:
    """Reset the registry (primarily for testing)."""
    _REGISTRY.clear()


def _iter_candidates(candidate: Any) -> Iterable[CandidateFactory]:
    if isinstance(candidate, CandidateFactory):
        yield candidate
    elif isinstance(candidate, Mapping) and "name" in candidate and "factory" in candidate:
        factory = _load_object(candidate["factory"])
        args = tuple(candidate.get("args", ()))
        kwargs = dict(candidate.get("kwargs", {}))

        def build(factory: Any = factory, args: tuple = args, kwargs: dict = kwargs) -> Any:
            return factory(*args, **kwargs)

        yield CandidateFactory(
            name=str(candidate["name"]),
            factory=build,
            notes=candidate.get("notes"),
        )
    elif isinstance(candidate, Iterable) and not isinstance(candidate, str | bytes):
        for item in candidate:
            yield from _iter_candidates(item)
    elif callable(candidate):
        result = candidate()
        yield from _iter_candidates(result)
    else:
        raise TypeError(
            "Unsupported candidate specification. Expected CandidateFactory, iterable of "
            "CandidateFactory instances, a callable returning them, or a mapping with "
            "name/factory keys."
        )


def _load_object(path: str) -> Any:
    module_name, _, attribute = path.partition(":")
    if not attribute:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ValueError(f"Invalid import path '{path}'. Expected 'module:callable'.")
    module = import_module(module_name)
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise AttributeError(f"Module '{module_name}' has no attribute '{attribute}'.") from exc


def load_entry_points(group: str = ENTRY_POINT_GROUP) -> list[str]:
    """Discover third-party candidates via entry points."""
    loaded: list[str] = []
    try:
        eps = metadata.entry_points()
        candidates: Iterable[Any] = eps.select(group=group)
    except Exception as exc:  # pragma: no cover - discovery failure
        logger.debug("Entry point discovery failed: %s", exc)
        return loaded

    for ep in candidates:
        try:
            obj = ep.load()
            for candidate in _iter_candidates(obj):
                register_candidate(candidate, overwrite=True)
                loaded.append(candidate.name)
        except Exception as exc:  # pragma: no cover - plugin failure
            logger.warning("Failed to load candidate entry point '%s': %s", ep.name, exc)
    return loaded


def load_yaml_config(path: str | os.PathLike[str]) -> list[str]:
    """Load additional candidates from a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        logger.debug("Skipping candidate config %s (file not found)", path)
        return []

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except Exception as exc:  # pragma: no cover - parse failure
        logger.warning("Failed to parse candidate config %s: %s", path, exc)
        return []

    registered: list[str] = []
    for item in data.get("candidates", []):
        try:
            for candidate in _iter_candidates(item):
                register_candidate(candidate, overwrite=item.get("overwrite", True))
                registered.append(candidate.name)
        except Exception as exc:
            logger.warning(
                "Failed to register candidate from %s (spec=%s): %s",
                path,
                item,
                exc,
            )
    return registered


__all__ = [
    "CandidateFactory",
    "Distribution",
    "ENTRY_POINT_GROUP",
    "ScipyDistribution",
    "as_sample",
    "list_candidates",
    "get_candidate",
    "register_candidate",
    "clear_registry",
    "load_entry_points",
    "load_yaml_config",
]
