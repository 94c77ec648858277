"""Candidate registry and canonical distribution implementations."""

from __future__ import annotations

import os
from functools import partial
from pathlib import Path

from .base import (
    CandidateFactory,
    Distribution,
    ScipyDistribution,
    as_sample,
    clear_registry,
    get_candidate,
    list_candidates,
    load_entry_points,
    load_yaml_config,
    register_candidate,
)
from .empirical import KernelDensityEstimator, PointMass
from .parametric import (
    PARAMETRIC_FAMILIES,
    Exponential,
    FDistribution,
    Gamma,
    Logistic,
    LogNormal,
    MaxwellBoltzmann,
    Normal,
    Pareto,
    Rayleigh,
    Uniform,
    Weibull,
)

__all__ = [
    "CandidateFactory",
    "Distribution",
    "ScipyDistribution",
    "as_sample",
    "PointMass",
    "KernelDensityEstimator",
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
    "DEFAULT_CANDIDATES",
    "default_candidates",
    "get_candidate",
    "list_candidates",
    "register_candidate",
    "clear_registry",
    "load_entry_points",
    "load_yaml_config",
]

CONFIG_ENV_VAR = "DISTSELECT_CANDIDATES"

# Declaration order is the tie-break order used by the selector.
DEFAULT_CANDIDATES: tuple[CandidateFactory, ...] = (
    CandidateFactory("normal", Normal, notes="Normal law from sample mean and std."),
    CandidateFactory("lognormal", LogNormal, notes="Log-normal law; positive samples only."),
    CandidateFactory("exponential", Exponential, notes="Exponential law with rate 1 / mean."),
    CandidateFactory(
        "gamma", partial(Gamma, 2.0, 1.0), notes="Gamma law fitted by the method of moments."
    ),
    CandidateFactory(
        "f",
        partial(FDistribution, 10.0, 10.0),
        notes="Fisher-Snedecor law fitted by the method of moments.",
    ),
    CandidateFactory(
        "weibull", partial(Weibull, 2.0, 1.0), notes="Two-parameter Weibull law (MLE)."
    ),
    CandidateFactory(
        "uniform", partial(Uniform, 0.0, 1.0), notes="Uniform law over the sample range."
    ),
    CandidateFactory(
        "logistic", partial(Logistic, 3.0, 2.0), notes="Logistic law matching mean and variance."
    ),
    CandidateFactory("maxwell", MaxwellBoltzmann, notes="Maxwell-Boltzmann speed law."),
    CandidateFactory("pareto", Pareto, notes="Pareto law with MLE tail index."),
    CandidateFactory("rayleigh", partial(Rayleigh, 2.0), notes="Rayleigh law (MLE scale)."),
)


def default_candidates() -> list[CandidateFactory]:
    """Return the built-in candidate factories in tie-break order."""
    return list(DEFAULT_CANDIDATES)


def _register_builtin() -> None:
    for candidate in DEFAULT_CANDIDATES:
        register_candidate(candidate, overwrite=True)
    register_candidate(
        CandidateFactory(
            "kde",
            KernelDensityEstimator,
            notes="Gaussian kernel density estimate (Scott bandwidth).",
        ),
        overwrite=True,
    )


def _load_config_files() -> None:
    project_root = Path(__file__).resolve().parents[3]
    config_dir = project_root / "config" / "candidates"
    if config_dir.exists():
        for path in sorted(config_dir.glob("*.yaml")):
            load_yaml_config(path)

    env_paths = os.environ.get(CONFIG_ENV_VAR)
    if env_paths:
        for item in env_paths.split(os.pathsep):
            load_yaml_config(item)


_register_builtin()
load_entry_points()
_load_config_files()
