from __future__ import annotations

from pathlib import Path
import sys

sys.path.insert(0, "src")

import numpy as np
import pandas as pd
import pytest

from gssss_sdof.records import is_uniform, load_excitation, resample_uniform


def test_is_uniform() -> None:
    assert is_uniform(np.arange(10) * 0.01)
    assert is_uniform([0.0, 0.5])
    assert not is_uniform([0.0, 0.1, 0.3, 0.4])
    assert not is_uniform([0.0, 0.1, 0.1, 0.2])
    assert not is_uniform([0.0, -0.1])


def test_resample_uniform_is_linear_interpolation() -> None:
    t = np.array([0.0, 0.1, 0.3, 0.4])
    v = 10.0 * t
    t_new, v_new = resample_uniform(t, v, 0.1)
    np.testing.assert_allclose(t_new, [0.0, 0.1, 0.2, 0.3, 0.4])
    np.testing.assert_allclose(v_new, [0.0, 1.0, 2.0, 3.0, 4.0])


def test_resample_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        resample_uniform([0.0, 1.0], [1.0, 2.0], 0.0)
    with pytest.raises(ValueError):
        resample_uniform([0.0, 1.0, 0.5], [1.0, 2.0, 3.0], 0.1)
    with pytest.raises(ValueError):
        resample_uniform([0.0, 1.0], [1.0], 0.1)


def test_load_uniform_record_with_time_column(tmp_path: Path) -> None:
    t = 0.02 * np.arange(50)
    acc = np.sin(t)
    csv = tmp_path / "rec.csv"
    pd.DataFrame({"Time_s": t, "Acc_g": acc}).to_csv(csv, index=False)

    rec = load_excitation(csv, time_column="Time_s", scale=9.81)
    assert rec.dt == pytest.approx(0.02)
    assert not rec.resampled
    np.testing.assert_allclose(rec.values, 9.81 * acc)
    with pytest.raises(ValueError):
        rec.values[0] = 1.0


def test_irregular_record_is_resampled(tmp_path: Path) -> None:
    t = np.array([0.0, 0.01, 0.03, 0.04, 0.07, 0.08])
    csv = tmp_path / "rec.csv"
    pd.DataFrame({"t": t, "a": 2.0 * t, "b": -t}).to_csv(csv, index=False)

    rec = load_excitation(csv, time_column="t", acceleration_column="a", dt=0.01)
    assert rec.resampled
    assert rec.dt == 0.01
    assert rec.nstep == 9
    np.testing.assert_allclose(rec.values, 2.0 * 0.01 * np.arange(9), atol=1e-12)


def test_record_without_time_column_needs_dt(tmp_path: Path) -> None:
    csv = tmp_path / "rec.csv"
    pd.DataFrame({"acc": [0.0, 1.0, 0.5]}).to_csv(csv, index=False)

    rec = load_excitation(csv, dt=0.005)
    assert rec.dt == 0.005
    assert rec.nstep == 3
    assert rec.peak() == 1.0
    with pytest.raises(ValueError):
        load_excitation(csv)


def test_missing_columns_and_files(tmp_path: Path) -> None:
    csv = tmp_path / "rec.csv"
    pd.DataFrame({"t": [0.0, 0.1], "a": [1.0, 2.0]}).to_csv(csv, index=False)
    with pytest.raises(ValueError):
        load_excitation(csv, time_column="Time_s")
    with pytest.raises(ValueError):
        load_excitation(csv, time_column="t", acceleration_column="Acc")
    with pytest.raises(FileNotFoundError):
        load_excitation(tmp_path / "nope.csv", dt=0.01)
