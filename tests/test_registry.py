import importlib
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import numpy as np
import pytest

from distselect.distributions import (
    DEFAULT_CANDIDATES,
    CandidateFactory,
    Normal,
    clear_registry,
    default_candidates,
    get_candidate,
    list_candidates,
    register_candidate,
)
from distselect.distributions import base as base_registry


def _shifted_normal(mean: float = 5.0) -> Normal:
    return Normal(mean, 1.0)


def _reload_registry() -> None:
    """Reload the distributions module to restore built-ins after tests."""
    import distselect.distributions as dist_module

    importlib.reload(dist_module)


class _DummyEntryPoint:
    def __init__(self, name: str, obj: Any) -> None:
        self.name = name
        self._obj = obj

    def load(self) -> Any:
        return self._obj


def _make_entry_points(result: Iterable[_DummyEntryPoint]) -> Any:
    class _EntryPoints(list):
        def __init__(self, values: Iterable[_DummyEntryPoint]) -> None:
            super().__init__(values)

        def select(self, *, group: str) -> list[_DummyEntryPoint]:
            return list(self)

    return _EntryPoints(result)


def test_default_registry_contains_builtin_candidates() -> None:
    names = list(list_candidates())
    for expected in ("normal", "lognormal", "weibull", "pareto", "rayleigh", "kde"):
        assert expected in names
    assert get_candidate("WEIBULL").name == "weibull"


def test_default_candidates_order_and_seeds() -> None:
    names = [candidate.name for candidate in default_candidates()]
    assert names == [
        "normal",
        "lognormal",
        "exponential",
        "gamma",
        "f",
        "weibull",
        "uniform",
        "logistic",
        "maxwell",
        "pareto",
        "rayleigh",
    ]
    seeds = {candidate.name: candidate.create().parameters for candidate in DEFAULT_CANDIDATES}
    assert seeds["gamma"] == {"shape": 2.0, "scale": 1.0}
    assert seeds["f"] == {"d1": 10.0, "d2": 10.0}
    assert seeds["logistic"] == {"location": 3.0, "scale": 2.0}
    assert seeds["rayleigh"] == {"scale": 2.0}


def test_factories_return_fresh_instances() -> None:
    candidate = get_candidate("normal")
    first = candidate.create()
    second = candidate.create()
    assert first is not second
    first.estimate_parameters_from_sample(np.array([10.0, 12.0, 14.0]))
    assert second.parameters == {"mean": 0.0, "std": 1.0}


def test_unknown_candidate_raises_key_error() -> None:
    with pytest.raises(KeyError):
        get_candidate("does-not-exist")


def test_duplicate_registration_requires_overwrite() -> None:
    with pytest.raises(ValueError):
        register_candidate(CandidateFactory("normal", Normal))


def test_entry_point_registration(monkeypatch: pytest.MonkeyPatch) -> None:
    clear_registry()

    demo = CandidateFactory("entrypoint_demo", _shifted_normal, notes="Entry-point candidate.")

    monkeypatch.setattr(
        base_registry.metadata,
        "entry_points",
        lambda: _make_entry_points([_DummyEntryPoint("demo", lambda: demo)]),
    )

    loaded = base_registry.load_entry_points()
    assert loaded == ["entrypoint_demo"]
    assert list(list_candidates()) == ["entrypoint_demo"]
    assert get_candidate("entrypoint_demo").create().parameters["mean"] == pytest.approx(5.0)

    _reload_registry()


def test_yaml_registration(tmp_path: Path) -> None:
    clear_registry()

    config_path = tmp_path / "custom.yaml"
    config_path.write_text(
        """
candidates:
  - name: yaml_demo
    factory: tests.test_registry:_shifted_normal
    kwargs: {mean: 7.5}
    notes: "YAML supplied candidate."
  - name: broken
    factory: tests.test_registry:missing_callable
""",
        encoding="utf-8",
    )

    registered = base_registry.load_yaml_config(config_path)
    assert registered == ["yaml_demo"]
    candidate = get_candidate("yaml_demo")
    assert candidate.notes == "YAML supplied candidate."
    assert candidate.create().parameters["mean"] == pytest.approx(7.5)

    _reload_registry()


def test_missing_yaml_file_is_skipped(tmp_path: Path) -> None:
    assert base_registry.load_yaml_config(tmp_path / "absent.yaml") == []
