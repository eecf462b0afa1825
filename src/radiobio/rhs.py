"""Right-hand side of the radiolysis ODE system.

The state vector holds one concentration per tracked species and one total
concentration per acid/base couple, in :attr:`Environment.state_species`
order. For a given state, time and dose rate the evaluator:

1. Builds the full concentration map: state values clamped at zero, then
   constant species.
2. Partitions every couple into its acid and base forms at the current
   [H+] and writes both partner entries.
3. Evaluates every reaction rate.
4. Folds the signed rates into the derivative of each state slot:

       dC_i/dt = sum(r_j, j produces i) - sum(r_j, j consumes i)

5. Scales every derivative by ``env.unit_scale``.

The environment is never mutated, so identical inputs give identical output.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping

import numpy as np

from radiobio.constants import PROTON_LABEL
from radiobio.environment import Environment
from radiobio.equilibrium import partition
from radiobio.errors import EvaluationError, UnknownSpeciesError
from radiobio.kinetics import reaction_rate

DoseRateSource = Callable[[float], float]


def concentration_map(env: Environment, state: np.ndarray) -> Dict[str, float]:
    """Concentrations of every species reachable by a reaction."""
    if len(state) != env.dimension:
        raise EvaluationError(
            f"State vector has {len(state)} components, expected {env.dimension}"
        )
    concentrations: Dict[str, float] = {}
    for sp in env.state_species:
        # Integrator overshoot can leave small negative values.
        concentrations[sp.label] = max(float(state[sp.index]), 0.0)
    for sp in env.constants():
        concentrations[sp.label] = sp.concentration
    apply_acid_base(env, concentrations)
    return concentrations


def apply_acid_base(env: Environment, concentrations: Dict[str, float]) -> None:
    """Write acid and base partner concentrations for every couple."""
    couples = env.couples()
    if not couples:
        return
    if PROTON_LABEL not in concentrations:
        raise UnknownSpeciesError(PROTON_LABEL, "acid/base partitioning")
    proton = concentrations[PROTON_LABEL]
    for couple in couples:
        try:
            split = partition(concentrations[couple.label], proton, couple.ka)
        except ValueError as exc:
            raise EvaluationError(
                f"Cannot partition couple {couple.label}: {exc}",
                context={"couple": couple.label},
            ) from exc
        concentrations[couple.acid] = split.acid
        concentrations[couple.base] = split.base


def reaction_rates(
    env: Environment, concentrations: Mapping[str, float], dose_rate: float
) -> List[float]:
    return [reaction_rate(reaction, concentrations, dose_rate) for reaction in env.reactions]


def evaluate_rhs(
    env: Environment, state: np.ndarray, time: float, dose_rate: float
) -> np.ndarray:
    """Compute dC/dt for ``state`` at ``time`` under ``dose_rate`` (Gy/s).

    Raises:
        EvaluationError: If a reaction references a species missing from the
            concentration map, or the state has the wrong size.
    """
    concentrations = concentration_map(env, state)
    rates = reaction_rates(env, concentrations, dose_rate)

    derivatives = np.zeros(env.dimension)
    for sp in env.state_species:
        value = 0.0
        for link in sp.links:
            value += link.sign * rates[link.reaction_index]
        derivatives[sp.index] = value
    return derivatives * env.unit_scale


def build_radiolysis_rhs(
    env: Environment, dose_rate_at: DoseRateSource
) -> Callable[[float, np.ndarray], np.ndarray]:
    """Build ``rhs(t, y)`` for the integrator.

    Args:
        env: Assembled environment.
        dose_rate_at: Callable returning the dose rate (Gy/s) at time t.

    Returns:
        A function with the ``scipy.integrate.solve_ivp`` RHS signature.
    """

    def rhs(t: float, state: np.ndarray) -> np.ndarray:
        return evaluate_rhs(env, state, t, dose_rate_at(t))

    return rhs
