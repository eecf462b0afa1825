"""Command-line entrypoints for radiobio."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path
from typing import Annotated, Any, Dict, Mapping

import typer

from radiobio.beam import beam_from_config
from radiobio.constants import MOLAR_TO_MICROMOLAR
from radiobio.environment import build_environment
from radiobio.errors import BuildError, PersistenceError, RadioBioError
from radiobio.logging_utils import configure_logging, log_exception
from radiobio.network import ReactionNetwork, load_network, parse_network
from radiobio.persistence import csv_store, sqlite_store
from radiobio.simulation import SimulationInputs, SimulationResult, run_simulation

app = typer.Typer(add_completion=False)

logger = logging.getLogger(__name__)


def _load_config(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r") as f:
            config = json.load(f)
    except FileNotFoundError:
        raise BuildError(f"Config not found: {config_file}") from None
    except json.JSONDecodeError as exc:
        raise BuildError(f"Failed to parse config {config_file}: {exc}") from exc
    if not isinstance(config, dict):
        raise BuildError(f"Config {config_file} must be a JSON object")
    return config


def _resolve_network(config: Dict[str, Any], base_dir: Path) -> ReactionNetwork:
    if "network" not in config:
        raise BuildError("Missing required section 'network'")
    network = config["network"]
    if isinstance(network, str):
        path = Path(network)
        if not path.is_absolute():
            path = base_dir / path
        return load_network(path)
    return parse_network(network)


def _parse_solver(data: Mapping[str, Any]) -> Dict[str, float]:
    if not isinstance(data, Mapping):
        raise BuildError(f"Section 'solver' must be an object, got {data!r}")
    try:
        return {
            "t0": float(data.get("t0", 0.0)),
            "t_end": float(data["t_end"]),
            "step_size": float(data["step_size"]),
        }
    except KeyError as exc:
        raise BuildError(f"Missing required key 'solver.{exc.args[0]}'") from None
    except (TypeError, ValueError) as exc:
        raise BuildError(f"Invalid solver configuration: {exc}") from exc


def _parse_unit_scale(config: Mapping[str, Any]) -> float:
    value = config.get("unit_scale", MOLAR_TO_MICROMOLAR)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise BuildError(f"Invalid unit_scale: {value!r}") from exc


def _save_project(
    project_file: Path,
    config: Dict[str, Any],
    solver: Dict[str, float],
    result: SimulationResult,
    duration_ms: int,
) -> int:
    try:
        connection = sqlite_store.connect(project_file)
    except sqlite3.Error as exc:
        raise PersistenceError(f"Cannot open project file {project_file}: {exc}") from exc
    try:
        sqlite_store.ensure_schema(connection)
        with connection:
            project_id = sqlite_store.create_project(
                connection,
                name=str(config.get("name", "radiolysis run")),
                notes="Generated by the radiobio CLI.",
            )
            sqlite_store.save_environment(connection, project_id, result.environment)
            run_id = sqlite_store.save_run(
                connection,
                project_id=project_id,
                beam=dict(config.get("beam", {})),
                solver={**solver, "method": "RK4"},
                manifest={
                    "final_state": result.final(),
                    "accepted_steps": result.stats.accepted_steps,
                    "num_eval": result.stats.num_eval,
                },
                duration_ms=duration_ms,
            )
            sqlite_store.save_profile(
                connection,
                run_id=run_id,
                times=result.time.tolist(),
                series={label: values.tolist() for label, values in result.series().items()},
            )
    except sqlite3.Error as exc:
        raise PersistenceError(
            f"Failed to save run in project file {project_file}: {exc}",
            context={"project_file": str(project_file)},
        ) from exc
    finally:
        connection.close()
    return run_id


@app.command()
def run(
    config_file: Annotated[
        Path, typer.Argument(help="Path to JSON run configuration file.")
    ],
    output: Annotated[
        Path | None, typer.Option(help="Path to save the trajectory as CSV.")
    ] = None,
    project_file: Annotated[
        Path | None, typer.Option(help="Optional SQLite project file to persist results.")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Run a radiolysis simulation from a config file."""
    configure_logging(verbose)
    try:
        config = _load_config(config_file)
        network = _resolve_network(config, config_file.parent)
        beam = beam_from_config(config.get("beam", {}))
        solver = _parse_solver(config.get("solver", {}))
        inputs = SimulationInputs(
            network=network,
            beam=beam,
            t0=solver["t0"],
            t_end=solver["t_end"],
            step_size=solver["step_size"],
            unit_scale=_parse_unit_scale(config),
        )
        started = time.perf_counter()
        result = run_simulation(inputs)
        duration_ms = int((time.perf_counter() - started) * 1000.0)

        if output is not None:
            csv_store.write_trajectory(output, result.labels, result.time, result.states)
            logger.info("Results saved in: %s", output)
        if project_file is not None:
            run_id = _save_project(project_file, config, solver, result, duration_ms)
            logger.info("Run %d saved in project file %s", run_id, project_file)
    except (RadioBioError, ValueError) as exc:
        log_exception(logger, exc, show_traceback=verbose)
        raise typer.Exit(code=1) from exc

    payload = {
        "labels": result.labels,
        "final": result.final(),
        "time_end": float(result.time[-1]),
        "stats": {
            "accepted_steps": result.stats.accepted_steps,
            "num_eval": result.stats.num_eval,
        },
    }
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def describe(
    network_file: Annotated[
        Path, typer.Argument(help="Path to JSON reaction network file.")
    ],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging.")] = False,
) -> None:
    """Assemble a reaction network and list its species and reactions."""
    configure_logging(verbose)
    try:
        env = build_environment(load_network(network_file))
    except RadioBioError as exc:
        log_exception(logger, exc, show_traceback=verbose)
        raise typer.Exit(code=1) from exc
    typer.echo(env.describe())
