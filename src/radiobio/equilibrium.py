"""Acid/base equilibrium partitioning."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ABPartition:
    """Split of a couple's total concentration at a given [H+].

    Attributes:
        acid: Concentration of the protonated form.
        base: Concentration of the deprotonated form.
        d_acid: d(acid)/d(total).
        d_base: d(base)/d(total).
    """

    acid: float
    base: float
    d_acid: float
    d_base: float


def partition(total: float, proton: float, ka: float) -> ABPartition:
    """Partition ``total`` into acid and base forms.

    Equations:
        base = total / (1 + [H+] / Ka)
        acid = total / (1 + Ka / [H+])

    Both fractions depend only on [H+] and Ka, so the derivatives with
    respect to the total are the fractions themselves.
    """
    if proton <= 0.0:
        raise ValueError(f"Proton concentration must be positive, got {proton}")
    if ka <= 0.0:
        raise ValueError(f"Ka must be positive, got {ka}")

    base_fraction = 1.0 / (1.0 + proton / ka)
    acid_fraction = 1.0 / (1.0 + ka / proton)
    return ABPartition(
        acid=total * acid_fraction,
        base=total * base_fraction,
        d_acid=acid_fraction,
        d_base=base_fraction,
    )
