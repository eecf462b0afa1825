"""CSV export of integration trajectories."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

import numpy as np


def write_trajectory(
    path: str | Path,
    labels: Sequence[str],
    times: Sequence[float],
    states: np.ndarray,
) -> Path:
    """Write ``time, <label>...`` rows.

    Args:
        path: Output file, parent directories are created.
        labels: State labels, in state-vector order.
        times: Time points, shape ``(n_points,)``.
        states: States, shape ``(len(labels), n_points)``.

    Returns:
        The written path.
    """
    states = np.asarray(states, dtype=float)
    if states.shape != (len(labels), len(times)):
        raise ValueError(
            f"States shape {states.shape} does not match "
            f"{len(labels)} labels x {len(times)} time points"
        )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["time", *labels])
        for index, t_value in enumerate(times):
            writer.writerow([repr(float(t_value)), *(repr(float(v)) for v in states[:, index])])
    return path
