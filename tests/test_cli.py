from __future__ import annotations

from pathlib import Path
import sys

sys.path.insert(0, "src")

import numpy as np
import pandas as pd
import yaml
from typer.testing import CliRunner

from gssss_sdof.cli import _ascii_plot, app

runner = CliRunner()


def _write_case(tmp_path: Path, **algorithm) -> Path:
    dt = 0.01
    t = dt * np.arange(300)
    acc = 0.3 * np.sin(2.0 * np.pi * 1.5 * t) * np.exp(-t)
    pd.DataFrame({"Time_s": t, "Acc_g": acc}).to_csv(tmp_path / "record.csv", index=False)

    cfg = {
        "system": {"k": 400.0, "m": 1.0, "ksi": 0.05},
        "algorithm": algorithm or {"name": "U0-V1-Opt", "rinf": 0.8},
        "excitation": {"csv_path": "record.csv", "time_column": "Time_s", "scale": 9.81},
    }
    cfg_path = tmp_path / "case.yml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return cfg_path


def test_run_writes_history_and_log(tmp_path: Path) -> None:
    cfg_path = _write_case(tmp_path)
    out = tmp_path / "results"
    result = runner.invoke(app, ["run", "--config", str(cfg_path), "--output-dir", str(out), "--ascii-plot"])
    assert result.exit_code == 0, result.output
    assert "Response summary" in result.output
    assert "ASCII response plot" in result.output

    df = pd.read_csv(out / "response.csv")
    assert len(df) == 300
    assert {"Time_s", "Displacement_m", "Velocity_m_s", "Acceleration_m_s2"} <= set(df.columns)
    assert np.all(np.isfinite(df["Displacement_m"]))

    log_text = (out / "run.log").read_text(encoding="utf-8")
    assert "Run completed." in log_text


def test_run_overrides_algorithm_and_reports_clamping(tmp_path: Path) -> None:
    cfg_path = _write_case(tmp_path)
    out = tmp_path / "results"
    result = runner.invoke(
        app,
        ["run", "-c", str(cfg_path), "-o", str(out), "-p", "hht", "-a", "HHT a-method", "--rinf", "0.2"],
    )
    assert result.exit_code == 0, result.output
    assert "U0-V1-CA" in result.output
    assert "Notice:" in result.output
    assert (out / "hht_response.csv").is_file()
    assert (out / "hht_run.log").is_file()


def test_run_recursion_method_matches_filter(tmp_path: Path) -> None:
    cfg_path = _write_case(tmp_path, name="WBZ", rinf=0.5)
    for method in ("filter", "recursion"):
        result = runner.invoke(
            app, ["run", "-c", str(cfg_path), "-o", str(tmp_path / method), "--method", method]
        )
        assert result.exit_code == 0, result.output
    u_f = pd.read_csv(tmp_path / "filter" / "response.csv")["Displacement_m"].to_numpy()
    u_r = pd.read_csv(tmp_path / "recursion" / "response.csv")["Displacement_m"].to_numpy()
    np.testing.assert_allclose(u_f, u_r, rtol=0, atol=1e-9 * np.max(np.abs(u_r)))


def test_run_rejects_invalid_input(tmp_path: Path) -> None:
    bad = tmp_path / "bad.yml"
    bad.write_text(yaml.safe_dump({"system": {"k": -1.0, "m": 1.0}}), encoding="utf-8")
    result = runner.invoke(app, ["run", "-c", str(bad), "-o", str(tmp_path / "out")])
    assert result.exit_code != 0

    cfg_path = _write_case(tmp_path)
    result = runner.invoke(app, ["run", "-c", str(cfg_path), "-o", str(tmp_path / "out"), "-a", "RK4"])
    assert result.exit_code != 0

    result = runner.invoke(app, ["run", "-c", str(cfg_path), "-o", str(tmp_path / "out"), "--method", "ode45"])
    assert result.exit_code != 0


def test_run_reports_unrecoverable_velocity(tmp_path: Path) -> None:
    vector = [0.0, 0.0, 0.0, 1.0, 0.5, 0.5, 1.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0]
    cfg_path = _write_case(tmp_path, coefficients=vector)
    out = tmp_path / "out"
    result = runner.invoke(app, ["run", "-c", str(cfg_path), "-o", str(out)])
    assert result.exit_code == 1
    assert "Analysis failed" in (out / "run.log").read_text(encoding="utf-8")


def test_algorithms_lists_schemes() -> None:
    result = runner.invoke(app, ["algorithms"])
    assert result.exit_code == 0
    for name in ("U0-V0-Opt", "U1-V0-DA", "Newmark ACA", "Fox-Goodwin"):
        assert name in result.output
    assert "rinf not used" in result.output


def test_convergence_command(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yml"
    cfg_path.write_text(
        yaml.safe_dump({"system": {"k": 39.4784176, "m": 1.0}, "algorithm": "Newmark ACA"}),
        encoding="utf-8",
    )
    out = tmp_path / "conv"
    result = runner.invoke(
        app, ["convergence", "-c", str(cfg_path), "--dts", "0.02,0.01", "--periods", "2", "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    summary = pd.read_csv(out / "convergence_summary.csv")
    assert list(summary["dt_s"]) == [0.02, 0.01]


def test_convergence_command_rejects_critical_damping(tmp_path: Path) -> None:
    cfg_path = tmp_path / "study.yml"
    cfg_path.write_text(
        yaml.safe_dump({"system": {"k": 39.4784176, "m": 1.0, "ksi": 1.0}, "algorithm": "Newmark ACA"}),
        encoding="utf-8",
    )
    result = runner.invoke(
        app, ["convergence", "-c", str(cfg_path), "--dts", "0.02,0.01", "-o", str(tmp_path / "conv")]
    )
    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)


def test_spectrum_command_reports_degenerate_scheme(tmp_path: Path) -> None:
    # W1L6 = W2L5 = W3L3 = 0 gives a zero amplification denominator
    vector = [-15.0, 45.0, -35.0, 1.0, 0.5, 0.0, 1.0, 0.0, 0.0, 1.0, 0.5, 0.25, 1.0, 0.5]
    cfg_path = _write_case(tmp_path, coefficients=vector)
    result = runner.invoke(
        app, ["spectrum", "-c", str(cfg_path), "--periods", "0.5", "-o", str(tmp_path / "spec")]
    )
    assert result.exit_code == 1
    assert not isinstance(result.exception, ValueError)


def test_spectrum_command(tmp_path: Path) -> None:
    cfg_path = _write_case(tmp_path)
    out = tmp_path / "spec"
    result = runner.invoke(
        app, ["spectrum", "-c", str(cfg_path), "--periods", "0.2 0.5 1.0", "-o", str(out), "--plot"]
    )
    assert result.exit_code == 0, result.output
    spectrum = pd.read_csv(out / "response_spectrum.csv")
    assert list(spectrum["Period_s"]) == [0.2, 0.5, 1.0]
    assert (out / "response_spectrum.png").is_file()


def test_ascii_plot_has_zero_line() -> None:
    t = np.linspace(0.0, 1.0, 50)
    text = _ascii_plot(t, np.sin(2.0 * np.pi * t), "u", "t", width=40, height=10)
    lines = text.splitlines()
    assert len(lines) == 12
    assert any(set(line) <= {"-", "*"} and "-" in line for line in lines[1:-1])
    assert _ascii_plot(np.array([]), np.array([]), "u", "t") == ""
