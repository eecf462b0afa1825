"""Rate expressions for rate-law and radiolytic reactions."""

from __future__ import annotations

from typing import Mapping

from radiobio.constants import (
    AVOGADRO_CONSTANT,
    ELEMENTARY_CHARGE,
    GE_ENERGY_UNIT_EV,
    SOLVENT_DENSITY,
)
from radiobio.errors import UnknownSpeciesError
from radiobio.models import RadiolyticReaction, RateReaction, Reaction


def ge_to_kr(ge_value: float, density: float = SOLVENT_DENSITY) -> float:
    """Convert a radiolytic yield to a concentration yield.

    Ge is expressed in molecules / 100 eV; the returned Kr is in mol/l/Gy
    for a solvent of the given density (kg/l).
    """
    return ge_value * density / ELEMENTARY_CHARGE / GE_ENERGY_UNIT_EV / AVOGADRO_CONSTANT


def mass_action_rate(reaction: RateReaction, concentrations: Mapping[str, float]) -> float:
    """rate = k_eff * prod(C_i ** nu_i) over the reactants."""
    rate = reaction.effective_k
    for label, coefficient in reaction.reactants:
        try:
            concentration = concentrations[label]
        except KeyError:
            raise UnknownSpeciesError(label, reaction.equation()) from None
        rate *= concentration ** coefficient
    return rate


def radiolytic_rate(reaction: RadiolyticReaction, dose_rate: float) -> float:
    return reaction.kr * dose_rate


def reaction_rate(
    reaction: Reaction, concentrations: Mapping[str, float], dose_rate: float
) -> float:
    if isinstance(reaction, RateReaction):
        return mass_action_rate(reaction, concentrations)
    if isinstance(reaction, RadiolyticReaction):
        return radiolytic_rate(reaction, dose_rate)
    raise TypeError(f"Unsupported reaction type: {type(reaction).__name__}")
