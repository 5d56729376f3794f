"""
Typer CLI commands for studies.

Imported and registered from `gssss_sdof.cli`.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

import re

from ..core.exceptions import GSSSSError


def _parse_floats_csv(s: str) -> List[float]:
    """Parse comma/space-separated floats, e.g. "0.02,0.01,0.005"."""
    s = (s or '').strip()
    if not s:
        return []
    parts = [p for p in re.split(r'[\s,]+', s) if p]
    try:
        return [float(p) for p in parts]
    except ValueError as e:
        raise typer.BadParameter(f'Could not parse floats from: {s!r}') from e

# Public alias used by the commands below and by callers outside the CLI
parse_floats_csv = _parse_floats_csv


def register_study_commands(app: typer.Typer) -> None:
    @app.command("convergence")
    def convergence_cmd(
        config: Path = typer.Option(..., "--config", "-c", exists=True, readable=True, help="Config YAML (system + algorithm)"),
        dts: str = typer.Option("0.02,0.01,0.005,0.0025", "--dts", help="Comma/space-separated dt values [s]"),
        periods: float = typer.Option(5.0, "--periods", help="Duration in natural periods"),
        u0: float = typer.Option(1.0, "--u0", help="Initial displacement [m]"),
        out: Path = typer.Option(..., "--out", "-o", help="Output directory"),
        save_timeseries: bool = typer.Option(False, "--save-timeseries", help="Save timeseries CSVs for each run"),
    ) -> None:
        """Run time-step convergence study in free vibration."""
        from ..config import ConfigError, load_study_config
        from .convergence import run_convergence_study

        try:
            cfg = load_study_config(config)
        except ConfigError as e:
            raise typer.BadParameter(str(e)) from e
        try:
            summary = run_convergence_study(
                cfg.system.k,
                cfg.system.m,
                cfg.system.ksi,
                cfg.algorithm.spec,
                parse_floats_csv(dts),
                rinf=cfg.algorithm.rinf,
                u0=u0,
                ut0=0.0,
                periods=periods,
                out_dir=out,
                save_timeseries=save_timeseries,
            )
        except GSSSSError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
        typer.echo(summary.to_string(index=False))
        typer.echo(f"Saved to: {out}")

    @app.command("spectrum")
    def spectrum_cmd(
        config: Path = typer.Option(..., "--config", "-c", exists=True, readable=True, help="Config YAML with excitation"),
        periods: Optional[str] = typer.Option(None, "--periods", help="Comma/space-separated natural periods [s]"),
        out: Path = typer.Option(..., "--out", "-o", help="Output directory"),
        plot: bool = typer.Option(False, "--plot", help="Save a PNG of the pseudo-acceleration spectrum"),
    ) -> None:
        """Compute the linear elastic response spectrum of the configured record."""
        from ..config import ConfigError, load_analysis_config
        from ..records import load_configured_excitation
        from .spectrum import DEFAULT_PERIODS, compute_response_spectrum

        try:
            cfg = load_analysis_config(config)
            record = load_configured_excitation(cfg.excitation)
        except (ConfigError, FileNotFoundError, ValueError) as e:
            raise typer.BadParameter(str(e)) from e

        period_list = parse_floats_csv(periods) if periods else list(DEFAULT_PERIODS)
        try:
            spectrum = compute_response_spectrum(
                record.values,
                record.dt,
                period_list,
                ksi=cfg.system.ksi,
                algorithm=cfg.algorithm.spec,
                rinf=cfg.algorithm.rinf,
                out_dir=out,
            )
        except GSSSSError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from e
        except ValueError as e:
            raise typer.BadParameter(str(e)) from e
        typer.echo(spectrum.to_string(index=False))

        if plot:
            import matplotlib

            matplotlib.use("Agg")
            import matplotlib.pyplot as plt

            fig, ax = plt.subplots(figsize=(7.2, 3.6))
            ax.plot(spectrum["Period_s"], spectrum["PSa_m_s2"], marker="o", label="PSa")
            ax.plot(spectrum["Period_s"], spectrum["Sa_m_s2"], linestyle="--", label="Sa")
            ax.set_xlabel("Period [s]")
            ax.set_ylabel("Acceleration [m/s²]")
            ax.set_title(f"Response spectrum, ksi = {cfg.system.ksi:g}")
            ax.grid(True, alpha=0.3)
            ax.legend(loc="best", fontsize=8, frameon=False)
            fig.tight_layout()
            fig.savefig(out / "response_spectrum.png", dpi=150)
            plt.close(fig)

        typer.echo(f"Saved to: {out}")
