"""One-call simulation helpers: network + beam + solver settings -> trajectory."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from radiobio.beam import Beam
from radiobio.constants import MOLAR_TO_MICROMOLAR
from radiobio.environment import Environment, build_environment
from radiobio.integrators import IntegrationStats, integrate_rk4
from radiobio.network import ReactionNetwork
from radiobio.rhs import build_radiolysis_rhs


@dataclass(frozen=True)
class SimulationInputs:
    network: ReactionNetwork
    beam: Beam
    t_end: float
    step_size: float
    t0: float = 0.0
    unit_scale: float = MOLAR_TO_MICROMOLAR
    initial_state: Optional[np.ndarray] = None


@dataclass(frozen=True)
class SimulationResult:
    environment: Environment
    labels: List[str]
    time: np.ndarray
    states: np.ndarray
    stats: IntegrationStats

    def series(self) -> Dict[str, np.ndarray]:
        return {label: self.states[i] for i, label in enumerate(self.labels)}

    def final(self) -> Dict[str, float]:
        return {label: float(self.states[i, -1]) for i, label in enumerate(self.labels)}


def run_simulation(inputs: SimulationInputs) -> SimulationResult:
    env = build_environment(inputs.network, unit_scale=inputs.unit_scale)
    rhs = build_radiolysis_rhs(env, inputs.beam.dose_rate_at)

    initial_state = inputs.initial_state
    if initial_state is None:
        initial_state = env.initial_state()

    result = integrate_rk4(rhs, inputs.t0, initial_state, inputs.t_end, inputs.step_size)

    return SimulationResult(
        environment=env,
        labels=env.labels(),
        time=result.t,
        states=result.y,
        stats=result.stats,
    )
