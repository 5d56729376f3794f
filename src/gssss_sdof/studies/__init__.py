"""
Studies framework: reproducible time-step convergence and response spectra.

All analyses are executed via `gssss_sdof.core.engine.compute_response`.
"""
from __future__ import annotations

from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict
import json
import subprocess

import numpy as np


# ----------------------------
# Reproducibility utilities
# ----------------------------

def get_git_hash() -> str:
    """Return current git hash (or 'unknown')."""
    try:
        proc = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
        return proc.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        return "unknown"


def _json_default(obj: Any) -> Any:
    if is_dataclass(obj):
        return asdict(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    return str(obj)


def save_study_metadata(output_dir: Path, *, metadata: Dict[str, Any]) -> None:
    """Write metadata JSON file to output directory."""
    output_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "git_hash": get_git_hash(),
        **metadata,
    }
    (output_dir / "run_metadata.json").write_text(
        json.dumps(payload, indent=2, default=_json_default),
        encoding="utf-8",
    )

