"""Declarative reaction network records and JSON loading.

A network file looks like::

    {
      "bio_param": {"pH": 7.0, "radiolytic": {"e_aq": 2.8}},
      "fixed_concentrations": {"O2": 2.5e-4},
      "initial_concentrations": {"A": 1.0},
      "acid_base": [{"acid": "H2O2", "base": "HO2_minus", "pKa": 11.7}],
      "k_reactions": [{"reactants": ["A", "A"], "products": ["B"], "k_value": 2.0}]
    }

Only ``bio_param.pH`` is mandatory; every other section defaults to empty.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence, Tuple

from radiobio.errors import BuildError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BioParameters:
    ph: float
    radiolytic: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class AcidBaseDefinition:
    acid: str
    base: str
    pka: float


@dataclass(frozen=True)
class KReactionDefinition:
    reactants: Tuple[str, ...]
    products: Tuple[str, ...]
    k_value: float


@dataclass(frozen=True)
class ReactionNetwork:
    bio_parameters: BioParameters
    fixed_concentrations: Mapping[str, float] = field(default_factory=dict)
    initial_concentrations: Mapping[str, float] = field(default_factory=dict)
    acid_base: Tuple[AcidBaseDefinition, ...] = ()
    k_reactions: Tuple[KReactionDefinition, ...] = ()


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise BuildError(f"Expected a number for {where}, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise BuildError(f"Expected a finite number for {where}, got {value!r}")
    return number


def _label(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BuildError(f"Expected a species label for {where}, got {value!r}")
    return value.strip()


def _mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise BuildError(f"Section '{key}' must be an object, got {type(value).__name__}")
    return value


def _sequence(data: Mapping[str, Any], key: str) -> Sequence[Any]:
    value = data.get(key, [])
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise BuildError(f"Section '{key}' must be a list, got {type(value).__name__}")
    return value


def _concentrations(data: Mapping[str, Any], key: str) -> dict[str, float]:
    out = {}
    for label, value in _mapping(data, key).items():
        out[_label(label, key)] = _number(value, f"{key}.{label}")
    return out


def _parse_bio_parameters(data: Mapping[str, Any]) -> BioParameters:
    if "bio_param" not in data:
        raise BuildError("Missing required section 'bio_param'")
    section = _mapping(data, "bio_param")
    if "pH" not in section:
        raise BuildError("Missing required key 'bio_param.pH'")
    radiolytic = {}
    for label, value in _mapping(section, "radiolytic").items():
        radiolytic[_label(label, "bio_param.radiolytic")] = _number(
            value, f"bio_param.radiolytic.{label}"
        )
    return BioParameters(ph=_number(section["pH"], "bio_param.pH"), radiolytic=radiolytic)


def _parse_acid_base(entry: Any, position: int) -> AcidBaseDefinition:
    where = f"acid_base[{position}]"
    if not isinstance(entry, Mapping):
        raise BuildError(f"{where} must be an object, got {entry!r}")
    for key in ("acid", "base", "pKa"):
        if key not in entry:
            raise BuildError(f"Missing required key '{key}' in {where}")
    return AcidBaseDefinition(
        acid=_label(entry["acid"], f"{where}.acid"),
        base=_label(entry["base"], f"{where}.base"),
        pka=_number(entry["pKa"], f"{where}.pKa"),
    )


def _parse_k_reaction(entry: Any, position: int) -> KReactionDefinition:
    where = f"k_reactions[{position}]"
    if not isinstance(entry, Mapping):
        raise BuildError(f"{where} must be an object, got {entry!r}")
    for key in ("reactants", "products", "k_value"):
        if key not in entry:
            raise BuildError(f"Missing required key '{key}' in {where}")
    reactants = tuple(
        _label(label, f"{where}.reactants") for label in _sequence(entry, "reactants")
    )
    products = tuple(
        _label(label, f"{where}.products") for label in _sequence(entry, "products")
    )
    return KReactionDefinition(
        reactants=reactants,
        products=products,
        k_value=_number(entry["k_value"], f"{where}.k_value"),
    )


def parse_network(data: Mapping[str, Any]) -> ReactionNetwork:
    """Validate a decoded network document and build typed records."""
    if not isinstance(data, Mapping):
        raise BuildError(f"Reaction network must be an object, got {type(data).__name__}")

    network = ReactionNetwork(
        bio_parameters=_parse_bio_parameters(data),
        fixed_concentrations=_concentrations(data, "fixed_concentrations"),
        initial_concentrations=_concentrations(data, "initial_concentrations"),
        acid_base=tuple(
            _parse_acid_base(entry, i) for i, entry in enumerate(_sequence(data, "acid_base"))
        ),
        k_reactions=tuple(
            _parse_k_reaction(entry, i)
            for i, entry in enumerate(_sequence(data, "k_reactions"))
        ),
    )
    logger.debug(
        "Parsed network: %d acid/base couples, %d k-reactions, %d radiolytic yields",
        len(network.acid_base),
        len(network.k_reactions),
        len(network.bio_parameters.radiolytic),
    )
    return network


def load_network(path: str | Path) -> ReactionNetwork:
    """Read and parse a JSON reaction network file."""
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise BuildError(f"Reaction network file not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise BuildError(
            f"Failed to parse reaction network file {path}: {exc}",
            context={"path": str(path), "line": exc.lineno},
        ) from exc
    logger.info("Loaded reaction network from %s", path)
    return parse_network(data)
