"""Physical constants, unit factors and reserved species labels."""

from __future__ import annotations

from scipy.constants import Avogadro, elementary_charge

AVOGADRO_CONSTANT = Avogadro  # 1/mol
ELEMENTARY_CHARGE = elementary_charge  # C
SOLVENT_DENSITY = 1.0  # kg/l, liquid water

# Ge values are given in molecules / 100 eV.
GE_ENERGY_UNIT_EV = 100.0

MOLAR_TO_MICROMOLAR = 1.0e6
PKW = 14.0

PROTON_LABEL = "H_plus"
HYDROXIDE_LABEL = "OH_minus"
