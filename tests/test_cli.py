from pathlib import Path

import numpy as np
import pandas as pd
from scipy import stats
from typer.testing import CliRunner

from distselect import __version__
from distselect.cli import _format_metric, app

runner = CliRunner()


def _write_sample(path: Path, values: np.ndarray, column: str = "value") -> Path:
    frame = pd.DataFrame({"label": [f"row{i}" for i in range(values.size)], column: values})
    frame.to_csv(path, index=False)
    return path


def test_registry_command_lists_candidates() -> None:
    result = runner.invoke(app, ["registry"])
    assert result.exit_code == 0
    assert "weibull" in result.stdout.lower()
    assert "Pareto law with MLE tail index." in result.stdout


def test_version_option() -> None:
    result = runner.invoke(app, ["--verbose"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_select_command_reports_winner(tmp_path: Path) -> None:
    values = stats.norm.ppf((np.arange(1, 301) - 0.5) / 300)
    data_file = _write_sample(tmp_path / "sample.csv", values)
    result = runner.invoke(app, ["select", str(data_file), "--column", "value"])
    assert result.exit_code == 0
    assert "KS Scores (value)" in result.stdout
    assert "Selected normal (parametric)" in result.stdout


def test_select_command_defaults_to_first_numeric_column(tmp_path: Path) -> None:
    data_file = _write_sample(tmp_path / "sample.csv", np.full(4, 2.5))
    result = runner.invoke(app, ["select", str(data_file)])
    assert result.exit_code == 0
    assert "Selected point_mass (degenerate) value=2.5000" in result.stdout


def test_select_command_kde_cutoff(tmp_path: Path) -> None:
    data_file = _write_sample(tmp_path / "sample.csv", np.array([1.0, 2.0, 3.0, 4.0, 5.0, 100.0]))
    result = runner.invoke(
        app,
        ["select", str(data_file), "--kde-cutoff", "1.5", "-d", "normal", "-d", "uniform"],
    )
    assert result.exit_code == 0
    assert "Selected kde (kde)" in result.stdout


def test_select_command_rejects_empty_column(tmp_path: Path) -> None:
    data_file = tmp_path / "empty.csv"
    data_file.write_text("value\n", encoding="utf-8")
    result = runner.invoke(app, ["select", str(data_file), "--column", "value"])
    assert result.exit_code == 1


def test_select_command_rejects_unknown_column(tmp_path: Path) -> None:
    data_file = _write_sample(tmp_path / "sample.csv", np.array([1.0, 2.0, 3.0]))
    result = runner.invoke(app, ["select", str(data_file), "--column", "missing"])
    assert result.exit_code == 1


def test_format_metric() -> None:
    assert _format_metric(None) == "-"
    assert _format_metric(float("nan")) == "-"
    assert _format_metric(0.123456) == "0.1235"
