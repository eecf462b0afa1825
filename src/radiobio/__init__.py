"""radiobio core package: radiolysis kinetics under a time-varying dose rate."""

from radiobio.beam import Beam, TimeStructure
from radiobio.environment import Environment, build_environment
from radiobio.equilibrium import ABPartition, partition
from radiobio.errors import (
    BuildError,
    EvaluationError,
    IntegrationError,
    PersistenceError,
    RadioBioError,
    UnknownSpeciesError,
)
from radiobio.integrators import RK4Result, integrate_rk4
from radiobio.kinetics import ge_to_kr
from radiobio.network import ReactionNetwork, load_network, parse_network
from radiobio.rhs import build_radiolysis_rhs, evaluate_rhs
from radiobio.simulation import SimulationInputs, SimulationResult, run_simulation

__version__ = "0.1.0"

__all__ = [
    "ABPartition",
    "Beam",
    "BuildError",
    "Environment",
    "EvaluationError",
    "IntegrationError",
    "PersistenceError",
    "RK4Result",
    "RadioBioError",
    "ReactionNetwork",
    "SimulationInputs",
    "SimulationResult",
    "TimeStructure",
    "UnknownSpeciesError",
    "build_environment",
    "build_radiolysis_rhs",
    "evaluate_rhs",
    "ge_to_kr",
    "integrate_rk4",
    "load_network",
    "parse_network",
    "partition",
    "run_simulation",
]
