"""Simulation environment and its assembly from a reaction network.

:func:`build_environment` runs once before integration. It classifies every
label of the network into a species variant, assigns state-vector slots,
creates the reactions and cross-links each reaction to the species it
produces or consumes. The resulting :class:`Environment` is read-only.

Assembly steps:
    1. Seed constant ``H_plus`` / ``OH_minus`` from the pH.
    2. One state slot per acid/base couple, plus acid and base partners.
    3. Reactant labels, then product labels, become tracked species
       (or constants when listed in the fixed concentrations).
    4. Radiolytic yields become radiolytic reactions.
    5. Label -> index map.
    6. Production/consumption links, partner links forwarded to the couple.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, List, Mapping, Optional, Tuple

import numpy as np

from radiobio.constants import (
    HYDROXIDE_LABEL,
    MOLAR_TO_MICROMOLAR,
    PKW,
    PROTON_LABEL,
)
from radiobio.errors import BuildError
from radiobio.kinetics import ge_to_kr
from radiobio.models import (
    AcidBaseCouple,
    AcidBasePartner,
    ConstantSpecies,
    PartnerRole,
    RadiolyticReaction,
    RateReaction,
    Reaction,
    ReactionRateLink,
    Species,
    StateSpecies,
    TrackedSpecies,
    collapse_stoichiometry,
    has_state_slot,
)
from radiobio.network import BioParameters, ReactionNetwork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Environment:
    """Indexed species and reactions shared read-only by the solver.

    Attributes:
        species: Every species variant, in registration order.
        reactions: Rate-law reactions followed by radiolytic reactions.
        bio_parameters: pH and radiolytic yields of the network.
        initial_concentrations: Explicit initial concentrations by label.
        unit_scale: Factor applied to every derivative (molar -> micromolar
            by default).
    """

    species: Tuple[Species, ...]
    reactions: Tuple[Reaction, ...]
    bio_parameters: BioParameters
    initial_concentrations: Mapping[str, float]
    unit_scale: float = MOLAR_TO_MICROMOLAR

    @cached_property
    def state_species(self) -> Tuple[StateSpecies, ...]:
        """Tracked species and couples ordered by state index."""
        slots = [sp for sp in self.species if has_state_slot(sp)]
        return tuple(sorted(slots, key=lambda sp: sp.index))

    @property
    def dimension(self) -> int:
        return len(self.state_species)

    def labels(self) -> List[str]:
        return [sp.label for sp in self.state_species]

    def tracked_species(self) -> List[TrackedSpecies]:
        return [sp for sp in self.species if isinstance(sp, TrackedSpecies)]

    def couples(self) -> List[AcidBaseCouple]:
        return [sp for sp in self.species if isinstance(sp, AcidBaseCouple)]

    def constants(self) -> List[ConstantSpecies]:
        return [sp for sp in self.species if isinstance(sp, ConstantSpecies)]

    @cached_property
    def _by_label(self) -> Dict[str, Species]:
        out: Dict[str, Species] = {}
        for sp in self.species:
            out[sp.label] = sp
        return out

    def get_species(self, label: str) -> Optional[Species]:
        return self._by_label.get(label)

    @cached_property
    def label_index(self) -> Dict[str, int]:
        """Map every label to an index.

        Tracked species and couples map to their state slot, partners to
        their couple's slot. Constants get keys past the end of the state
        vector; they are lookup keys only.
        """
        return _label_index(self.species)

    @property
    def proton_concentration(self) -> Optional[float]:
        sp = self.get_species(PROTON_LABEL)
        return sp.concentration if isinstance(sp, ConstantSpecies) else None

    @property
    def hydroxide_concentration(self) -> Optional[float]:
        sp = self.get_species(HYDROXIDE_LABEL)
        return sp.concentration if isinstance(sp, ConstantSpecies) else None

    def initial_state(self) -> np.ndarray:
        """State vector at t0 built from the explicit initial concentrations.

        Values given for a couple or for either of its partners add up to the
        couple's total concentration.
        """
        state = np.zeros(self.dimension)
        for label, value in self.initial_concentrations.items():
            sp = self.get_species(label)
            if isinstance(sp, TrackedSpecies):
                state[sp.index] = value
            elif isinstance(sp, AcidBaseCouple):
                state[sp.index] += value
            elif isinstance(sp, AcidBasePartner):
                state[sp.couple_index] += value
            elif isinstance(sp, ConstantSpecies):
                logger.debug("Ignoring initial concentration of constant species %s", label)
            else:
                logger.warning("Ignoring initial concentration of unknown species %s", label)
        return state

    def describe(self) -> str:
        lines = [f"pH = {self.bio_parameters.ph:g}", "State species:"]
        for sp in self.state_species:
            if isinstance(sp, AcidBaseCouple):
                lines.append(f"  [{sp.index}] {sp.label} (pKa = {sp.pka:g}, {len(sp.links)} links)")
            else:
                lines.append(f"  [{sp.index}] {sp.label} ({len(sp.links)} links)")
        constants = self.constants()
        if constants:
            lines.append("Constant species:")
            for sp in constants:
                lines.append(f"  {sp.label} = {sp.concentration:g}")
        lines.append("Reactions:")
        for i, reaction in enumerate(self.reactions):
            if isinstance(reaction, RateReaction):
                lines.append(f"  ({i}) {reaction.equation()}  k = {reaction.k_value:g}")
            else:
                lines.append(f"  ({i}) {reaction.equation()}  Ge = {reaction.ge_value:g}")
        return "\n".join(lines)


def _label_index(species: Tuple[Species, ...]) -> Dict[str, int]:
    dimension = sum(1 for sp in species if has_state_slot(sp))
    out: Dict[str, int] = {}
    constant_key = dimension
    for sp in species:
        if isinstance(sp, (TrackedSpecies, AcidBaseCouple)):
            out[sp.label] = sp.index
        elif isinstance(sp, AcidBasePartner):
            out[sp.label] = sp.couple_index
        elif isinstance(sp, ConstantSpecies):
            out[sp.label] = constant_key
            constant_key += 1
    return out


# --------------------------------------------------------------------------- #
# Assembly
# --------------------------------------------------------------------------- #
def _check_concentrations(values: Mapping[str, float], section: str) -> None:
    for label, value in values.items():
        if not math.isfinite(value) or value < 0.0:
            raise BuildError(
                f"Concentration of {label} in {section} must be finite and >= 0, got {value}"
            )


def _validate(network: ReactionNetwork) -> None:
    ph = network.bio_parameters.ph
    if not math.isfinite(ph):
        raise BuildError(f"pH must be finite, got {ph}")
    _check_concentrations(network.fixed_concentrations, "fixed_concentrations")
    _check_concentrations(network.initial_concentrations, "initial_concentrations")
    for label, ge_value in network.bio_parameters.radiolytic.items():
        if not math.isfinite(ge_value) or ge_value < 0.0:
            raise BuildError(f"Radiolytic yield of {label} must be finite and >= 0, got {ge_value}")
    for position, definition in enumerate(network.k_reactions):
        if not definition.reactants:
            raise BuildError(f"k_reactions[{position}] has no reactants")
        if not math.isfinite(definition.k_value) or definition.k_value < 0.0:
            raise BuildError(
                f"k_reactions[{position}] k_value must be finite and >= 0, "
                f"got {definition.k_value}"
            )


class _Registry:
    """Mutable label registry used only while assembling."""

    def __init__(self) -> None:
        self.species: List[Species] = []
        self.by_label: Dict[str, int] = {}
        self.next_index = 0

    def __contains__(self, label: str) -> bool:
        return label in self.by_label

    def get(self, label: str) -> Species:
        return self.species[self.by_label[label]]

    def add(self, species: Species) -> None:
        if species.label in self.by_label:
            raise BuildError(f"Species {species.label} is declared more than once")
        self.by_label[species.label] = len(self.species)
        self.species.append(species)

    def allocate_index(self) -> int:
        index = self.next_index
        self.next_index += 1
        return index

    def classify(self, label: str, fixed: Mapping[str, float]) -> None:
        if label in self:
            return
        if label in fixed:
            self.add(ConstantSpecies(label, fixed[label]))
            logger.debug("Classified %s as constant", label)
        else:
            self.add(TrackedSpecies(label, self.allocate_index()))
            logger.debug("Classified %s as tracked", label)

    def replace(self, label: str, species: Species) -> None:
        self.species[self.by_label[label]] = species


def _seed_water_ions(
    registry: _Registry, network: ReactionNetwork, partner_labels: set[str]
) -> None:
    ph = network.bio_parameters.ph
    defaults = (
        (PROTON_LABEL, 10.0 ** (-ph)),
        (HYDROXIDE_LABEL, 10.0 ** (ph - PKW)),
    )
    for label, value in defaults:
        if label in partner_labels:
            logger.debug("%s is declared by an acid/base couple, not seeded from pH", label)
            continue
        registry.add(ConstantSpecies(label, network.fixed_concentrations.get(label, value)))


def _add_couples(registry: _Registry, network: ReactionNetwork) -> None:
    for definition in network.acid_base:
        if definition.acid == definition.base:
            raise BuildError(f"Acid/base couple uses the same label twice: {definition.acid}")
        for label in (definition.acid, definition.base):
            if label in network.fixed_concentrations:
                raise BuildError(
                    f"Species {label} is both an acid/base partner and a fixed concentration"
                )
        couple = AcidBaseCouple(
            acid=definition.acid,
            base=definition.base,
            pka=definition.pka,
            index=registry.allocate_index(),
        )
        registry.add(couple)
        registry.add(AcidBasePartner(definition.acid, PartnerRole.ACID, couple.index))
        registry.add(AcidBasePartner(definition.base, PartnerRole.BASE, couple.index))


def _radiolytic_reactions(
    registry: _Registry, network: ReactionNetwork
) -> List[RadiolyticReaction]:
    out = []
    for label, ge_value in network.bio_parameters.radiolytic.items():
        if label not in registry and label not in network.fixed_concentrations:
            logger.info("Species %s is only produced radiolytically, tracking it", label)
        registry.classify(label, network.fixed_concentrations)
        if isinstance(registry.get(label), ConstantSpecies):
            logger.warning("Skipping radiolytic yield of constant species %s", label)
            continue
        out.append(RadiolyticReaction(product=label, ge_value=ge_value, kr=ge_to_kr(ge_value)))
    return out


def _link_reactions(
    species: List[Species], reactions: List[Reaction]
) -> Dict[int, List[ReactionRateLink]]:
    slot_of: Dict[str, int] = {}
    known = set()
    for sp in species:
        known.add(sp.label)
        if isinstance(sp, (TrackedSpecies, AcidBaseCouple)):
            slot_of[sp.label] = sp.index
        elif isinstance(sp, AcidBasePartner):
            slot_of[sp.label] = sp.couple_index

    links: Dict[int, List[ReactionRateLink]] = {}
    for reaction_index, reaction in enumerate(reactions):
        sides = (
            (reaction.reactants, ReactionRateLink.consumption),
            (reaction.products, ReactionRateLink.production),
        )
        for terms, make_link in sides:
            for label, _ in terms:
                if label not in known:
                    raise BuildError(f"Reaction {reaction} references undeclared species {label}")
                slot = slot_of.get(label)
                if slot is None:
                    continue
                links.setdefault(slot, []).append(make_link(reaction_index))
    return links


def build_environment(
    network: ReactionNetwork, *, unit_scale: float = MOLAR_TO_MICROMOLAR
) -> Environment:
    """Assemble an :class:`Environment` from a parsed reaction network.

    Args:
        network: Parsed reaction network.
        unit_scale: Factor applied to every derivative by the RHS evaluator.

    Returns:
        The assembled environment.

    Raises:
        BuildError: If the network is inconsistent. No partial environment
            is returned.
    """
    _validate(network)
    if not math.isfinite(unit_scale) or unit_scale <= 0.0:
        raise BuildError(f"unit_scale must be finite and > 0, got {unit_scale}")

    fixed = network.fixed_concentrations
    partner_labels = {d.acid for d in network.acid_base} | {d.base for d in network.acid_base}
    registry = _Registry()

    _seed_water_ions(registry, network, partner_labels)
    _add_couples(registry, network)

    for definition in network.k_reactions:
        for label in definition.reactants:
            registry.classify(label, fixed)
    for definition in network.k_reactions:
        for label in definition.products:
            registry.classify(label, fixed)

    reactions: List[Reaction] = [
        RateReaction(
            reactants=collapse_stoichiometry(definition.reactants),
            products=collapse_stoichiometry(definition.products),
            k_value=definition.k_value,
        )
        for definition in network.k_reactions
    ]
    reactions.extend(_radiolytic_reactions(registry, network))

    links = _link_reactions(registry.species, reactions)
    for sp in list(registry.species):
        if isinstance(sp, (TrackedSpecies, AcidBaseCouple)):
            registry.replace(
                sp.label, dataclasses.replace(sp, links=tuple(links.get(sp.index, ())))
            )

    environment = Environment(
        species=tuple(registry.species),
        reactions=tuple(reactions),
        bio_parameters=network.bio_parameters,
        initial_concentrations=dict(network.initial_concentrations),
        unit_scale=unit_scale,
    )
    logger.info(
        "Assembled environment: %d state species (%d tracked, %d acid/base couples), "
        "%d constants, %d reactions",
        environment.dimension,
        len(environment.tracked_species()),
        len(environment.couples()),
        len(environment.constants()),
        len(environment.reactions),
    )
    return environment
