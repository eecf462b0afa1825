"""Data structures for species, reactions and the links between them.

Species and reactions live in flat tuples owned by an
:class:`~radiobio.environment.Environment`; every cross reference is an
integer index into one of those tuples.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union

StoichiometricTerm = Tuple[str, int]


class LinkKind(str, Enum):
    PRODUCTION = "production"
    CONSUMPTION = "consumption"


@dataclass(frozen=True)
class ReactionRateLink:
    """Signed reference from a species to a reaction index."""

    kind: LinkKind
    reaction_index: int

    @property
    def sign(self) -> float:
        return 1.0 if self.kind is LinkKind.PRODUCTION else -1.0

    @classmethod
    def production(cls, reaction_index: int) -> "ReactionRateLink":
        return cls(LinkKind.PRODUCTION, reaction_index)

    @classmethod
    def consumption(cls, reaction_index: int) -> "ReactionRateLink":
        return cls(LinkKind.CONSUMPTION, reaction_index)


# --------------------------------------------------------------------------- #
# Species variants
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class TrackedSpecies:
    label: str
    index: int
    links: Tuple[ReactionRateLink, ...] = ()


@dataclass(frozen=True)
class ConstantSpecies:
    label: str
    concentration: float


@dataclass(frozen=True)
class AcidBaseCouple:
    """Acid/base pair in instantaneous equilibrium.

    The state vector holds the total concentration ``[acid] + [base]`` at
    ``index``.
    """

    acid: str
    base: str
    pka: float
    index: int
    links: Tuple[ReactionRateLink, ...] = ()

    @property
    def label(self) -> str:
        return f"{self.acid}/{self.base}"

    @property
    def ka(self) -> float:
        return 10.0 ** (-self.pka)


class PartnerRole(str, Enum):
    ACID = "acid"
    BASE = "base"


@dataclass(frozen=True)
class AcidBasePartner:
    """Acid or base half of a couple; ``couple_index`` is a lookup key only."""

    label: str
    role: PartnerRole
    couple_index: int


Species = Union[TrackedSpecies, ConstantSpecies, AcidBaseCouple, AcidBasePartner]
StateSpecies = Union[TrackedSpecies, AcidBaseCouple]


def has_state_slot(species: Species) -> bool:
    return isinstance(species, (TrackedSpecies, AcidBaseCouple))


# --------------------------------------------------------------------------- #
# Reaction variants
# --------------------------------------------------------------------------- #
def collapse_stoichiometry(labels: Iterable[str]) -> Tuple[StoichiometricTerm, ...]:
    """Collapse repeated labels into ``(label, coefficient)`` pairs.

    First-appearance order is preserved: ``["A", "B", "A"]`` gives
    ``(("A", 2), ("B", 1))``.
    """
    counts = Counter(labels)
    return tuple(counts.items())


def _format_side(terms: Tuple[StoichiometricTerm, ...]) -> str:
    parts = []
    for label, coefficient in terms:
        parts.append(label if coefficient == 1 else f"{coefficient} {label}")
    return " + ".join(parts)


@dataclass(frozen=True)
class RateReaction:
    """Mass-action reaction ``reactants -> products`` with constant ``k_value``."""

    reactants: Tuple[StoichiometricTerm, ...]
    products: Tuple[StoichiometricTerm, ...]
    k_value: float

    @property
    def number_of_reactants(self) -> int:
        return len(self.reactants)

    @property
    def effective_k(self) -> float:
        # Normalised by the number of distinct reactant slots.
        return self.k_value / self.number_of_reactants

    def species_labels(self) -> Tuple[str, ...]:
        return tuple(label for label, _ in self.reactants + self.products)

    def equation(self) -> str:
        return f"{_format_side(self.reactants)} -> {_format_side(self.products)}"

    def __str__(self) -> str:
        return self.equation()


@dataclass(frozen=True)
class RadiolyticReaction:
    """Zero-order production of ``product`` driven by the dose rate.

    Attributes:
        product: Produced species label.
        ge_value: Radiolytic yield (molecules / 100 eV).
        kr: Concentration yield (mol/l/Gy).
    """

    product: str
    ge_value: float
    kr: float

    @property
    def reactants(self) -> Tuple[StoichiometricTerm, ...]:
        return ()

    @property
    def products(self) -> Tuple[StoichiometricTerm, ...]:
        return ((self.product, 1),)

    def species_labels(self) -> Tuple[str, ...]:
        return (self.product,)

    def equation(self) -> str:
        return f"radiolysis -> {self.product}"

    def __str__(self) -> str:
        return self.equation()


Reaction = Union[RateReaction, RadiolyticReaction]
