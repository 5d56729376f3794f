# src/gssss_sdof/cli.py

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import typer

from .config import ConfigError, load_analysis_config
from .core.algorithms import list_schemes
from .core.engine import METHODS, ResponseHistory, compute_response
from .core.exceptions import GSSSSError
from .records import load_configured_excitation

app = typer.Typer(
    add_completion=False,
    help=(
        "GSSSS SDOF response CLI\n\n"
        "Linear dynamic response history of a single-degree-of-freedom system\n"
        "under ground acceleration, integrated with the GSSSS family of\n"
        "schemes (Zhou & Tamma, 2004) evaluated as a digital filter.\n"
        "Use 'run' for a single analysis, 'algorithms' to list the schemes,\n"
        "and 'convergence' / 'spectrum' for studies."
    ),
)

# Studies commands (convergence / response spectrum)
from .studies.cli import register_study_commands
register_study_commands(app)


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _ensure_output_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _setup_logger(output_dir: Path, log_stem: str) -> logging.Logger:
    """
    Set up a per-run logger writing to <output_dir>/<log_stem>.log.

    The handler is attached to the package logger so that library warnings
    (e.g. r∞ clamping) end up in the same file.
    """
    _ensure_output_dir(output_dir)
    logger = logging.getLogger("gssss_sdof")
    logger.setLevel(logging.INFO)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()

    log_file = output_dir / f"{log_stem}.log"
    handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logging.getLogger(f"gssss_sdof.cli.{log_stem}")


def _print_and_log(logger: logging.Logger, msg: str) -> None:
    typer.echo(msg)
    logger.info(msg)


def _ascii_plot(
    x: np.ndarray,
    y: np.ndarray,
    y_label: str,
    x_label: str,
    width: int = 70,
    height: int = 20,
) -> str:
    """
    Very simple ASCII plot of a signed history, with a zero line.
    """
    if len(x) == 0 or len(y) == 0:
        return ""

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    x_min = float(np.min(x))
    x_max = float(np.max(x))
    if x_max <= x_min:
        x_min, x_max = 0.0, 1.0

    y_min = min(float(np.min(y)), 0.0)
    y_max = max(float(np.max(y)), 0.0)
    if y_max <= y_min:
        y_max = y_min + 1.0

    grid = [[" " for _ in range(width)] for _ in range(height)]

    zero_row = height - 1 - int((0.0 - y_min) / (y_max - y_min + 1e-300) * (height - 1))
    if 0 <= zero_row < height:
        grid[zero_row] = ["-" for _ in range(width)]

    for xi, yi in zip(x, y):
        if not np.isfinite(yi):
            continue
        cx = (xi - x_min) / (x_max - x_min)
        cy = (yi - y_min) / (y_max - y_min)
        col = int(cx * (width - 1))
        row = int(cy * (height - 1))
        row_idx = height - 1 - row
        if 0 <= row_idx < height and 0 <= col < width:
            grid[row_idx][col] = "*"

    lines = [f"# {y_label} ({y_min:.3g} .. {y_max:.3g})"]
    for r in grid:
        lines.append("".join(r).rstrip())
    lines.append(f"# {x_label} ({x_min:.3g} .. {x_max:.3g})")
    return "\n".join(lines)


def _show_ascii_plot(results_df: pd.DataFrame, logger: logging.Logger) -> None:
    typer.echo("")
    typer.echo("ASCII response plot (Displacement_m vs Time_s):")
    ascii_str = _ascii_plot(
        results_df["Time_s"].to_numpy(),
        results_df["Displacement_m"].to_numpy(),
        "Displacement_m",
        "Time [s]",
    )
    typer.echo(ascii_str)
    logger.info("ASCII plot:\n%s", ascii_str)


def _show_matplotlib_plot(results_df: pd.DataFrame, title: str) -> None:
    t = results_df["Time_s"].to_numpy()
    fig, axes = plt.subplots(3, 1, sharex=True, figsize=(8, 7))
    for ax, col, label in zip(
        axes,
        ("Displacement_m", "Velocity_m_s", "Acceleration_m_s2"),
        ("Displacement [m]", "Velocity [m/s]", "Acceleration [m/s²]"),
    ):
        ax.plot(t, results_df[col].to_numpy(), label=col)
        ax.set_ylabel(label)
        ax.grid(True)
    axes[-1].set_xlabel("Time [s]")
    axes[0].set_title(title)
    fig.tight_layout()
    plt.show()


def _print_summary(res: ResponseHistory, logger: logging.Logger) -> None:
    typer.echo("")
    typer.echo("Response summary:")
    typer.echo(f"  Algorithm             : {res.selection.name} (rinf = {res.selection.rinf})")
    typer.echo(f"  Natural period        : {res.system.period:.6g} s")
    typer.echo(f"  Omega = omega*dt      : {res.system.Omega:.6g}")
    typer.echo(f"  Spectral radius       : {res.amplification.spectral_radius():.6g}")
    for key, value in res.peaks().items():
        typer.echo(f"  {key:<22}: {value:.6e}")
    logger.info("Response summary: %s", res.peaks())


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------


@app.command()
def run(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        exists=True,
        readable=True,
        help="YAML/JSON configuration file (system, algorithm, initial, excitation).",
    ),
    output_dir: Path = typer.Option(
        Path("results"),
        "--output-dir",
        "-o",
        help="Directory for result files.",
    ),
    prefix: str = typer.Option(
        "",
        "--prefix",
        "-p",
        help="Optional filename prefix for output files.",
    ),
    algorithm: Optional[str] = typer.Option(
        None,
        "--algorithm",
        "-a",
        help="Scheme name; overrides the algorithm section of the config.",
    ),
    rinf: Optional[float] = typer.Option(
        None,
        "--rinf",
        help="Spectral radius at infinity; overrides the config.",
    ),
    method: str = typer.Option(
        "filter",
        "--method",
        help=f"Evaluation method: {' | '.join(METHODS)}.",
    ),
    ascii_plot: bool = typer.Option(
        False,
        "--ascii-plot",
        help="Print an ASCII plot of displacement vs time to the console.",
    ),
    plot: bool = typer.Option(
        False,
        "--plot",
        help="Show a matplotlib window with the response histories.",
    ),
) -> None:
    """
    Run a single response history analysis.

    Examples
    --------
        gssss-sdof run --config examples/sine_pulse.yml --output-dir results/pulse

        gssss-sdof run -c examples/sine_pulse.yml -a WBZ --rinf 0.5 --ascii-plot
    """
    _ensure_output_dir(output_dir)

    filename_prefix = f"{prefix}_" if prefix else ""
    log_stem = f"{filename_prefix}run"
    logger = _setup_logger(output_dir, log_stem)

    _print_and_log(logger, f"Loading config: {config}")
    try:
        cfg = load_analysis_config(config)
        record = load_configured_excitation(cfg.excitation)
    except (ConfigError, FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        raise typer.BadParameter(str(e)) from e

    if record.resampled:
        _print_and_log(logger, f"Record resampled to uniform dt = {record.dt:g} s")
    _print_and_log(
        logger, f"Excitation: {record.nstep} samples, dt = {record.dt:g} s, peak = {record.peak():.4g}"
    )

    algo_spec = algorithm if algorithm is not None else cfg.algorithm.spec
    rinf_value = rinf if rinf is not None else cfg.algorithm.rinf

    _print_and_log(logger, "Running analysis ...")
    t0 = time.perf_counter()
    try:
        res = compute_response(
            cfg.system.k,
            cfg.system.m,
            record.dt,
            record.values,
            cfg.system.ksi,
            algo_spec,
            u0=cfg.initial.u0,
            ut0=cfg.initial.ut0,
            rinf=rinf_value,
            method=method,  # type: ignore[arg-type]
        )
    except GSSSSError as e:
        logger.error("Analysis failed: %s", e.to_diagnostics_dict())
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except ValueError as e:
        logger.error("%s", e)
        raise typer.BadParameter(str(e)) from e
    wall_time = time.perf_counter() - t0

    for notice in res.notices:
        _print_and_log(logger, f"Notice: {notice.message}")

    results_df = res.to_dataframe()
    csv_path = output_dir / f"{filename_prefix}response.csv"
    _print_and_log(logger, f"Writing time history to {csv_path}")
    results_df.to_csv(csv_path, index=False)

    _print_summary(res, logger)
    typer.echo(f"  Wall-clock time       : {wall_time:.3f} s")

    if ascii_plot:
        _show_ascii_plot(results_df, logger)

    if plot:
        _show_matplotlib_plot(results_df, f"{res.selection.name} response")

    log_file = output_dir / f"{log_stem}.log"
    typer.echo(f"\nDetailed log written to {log_file}")
    logger.info("Run completed.")


@app.command()
def algorithms() -> None:
    """List the available GSSSS schemes, their aliases and r∞ ranges."""
    for scheme in list_schemes():
        if scheme.rinf_range is None:
            rng = "rinf not used"
        else:
            lo, hi = scheme.rinf_range
            rng = f"rinf in [{lo:.4g}, {hi:.4g}]"
        aliases = f" (aliases: {', '.join(scheme.aliases)})" if scheme.aliases else ""
        typer.echo(f"{scheme.name:<12} {rng:<20} {scheme.description}{aliases}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
