"""SQLite persistence helpers for radiobio project files.

The writers do not commit. Callers group the writes of one run in a
``with connection:`` block.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from radiobio.environment import Environment
from radiobio.models import (
    AcidBaseCouple,
    AcidBasePartner,
    ConstantSpecies,
    RateReaction,
)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS project (
  id INTEGER PRIMARY KEY,
  name TEXT NOT NULL,
  created_utc TEXT,
  notes TEXT
);
CREATE TABLE IF NOT EXISTS species (
  id INTEGER PRIMARY KEY,
  project_id INTEGER REFERENCES project(id),
  label TEXT,
  kind TEXT,
  state_index INTEGER,
  concentration REAL,
  UNIQUE(project_id, label)
);
CREATE TABLE IF NOT EXISTS reaction (
  id INTEGER PRIMARY KEY,
  project_id INTEGER REFERENCES project(id),
  position INTEGER,
  kind TEXT,
  equation TEXT,
  rate_constant REAL,
  stoich JSON
);
CREATE TABLE IF NOT EXISTS run (
  id INTEGER PRIMARY KEY,
  project_id INTEGER REFERENCES project(id),
  beam JSON,
  solver JSON,
  manifest JSON,
  started TEXT,
  duration_ms INTEGER
);
CREATE TABLE IF NOT EXISTS profile (
  run_id INTEGER REFERENCES run(id),
  t REAL,
  var TEXT,
  value REAL,
  unit TEXT,
  PRIMARY KEY (run_id, t, var)
);
"""


def connect(project_file: str | Path) -> sqlite3.Connection:
    """Open (and create) a SQLite project file."""
    path = Path(project_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(path)
    connection.execute("PRAGMA foreign_keys = ON;")
    return connection


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create the project tables if they do not exist yet."""
    connection.executescript(SCHEMA_SQL)
    connection.commit()


def create_project(
    connection: sqlite3.Connection,
    name: str,
    notes: str | None = None,
    created_utc: str | None = None,
) -> int:
    """Create a project entry and return its ID."""
    created_utc = created_utc or _utc_now()
    cursor = connection.execute(
        "INSERT INTO project (name, created_utc, notes) VALUES (?, ?, ?)",
        (name, created_utc, notes),
    )
    return int(cursor.lastrowid)


def save_environment(
    connection: sqlite3.Connection, project_id: int, env: Environment
) -> None:
    """Store the species and reactions of an assembled environment."""
    species_rows = []
    for sp in env.species:
        if isinstance(sp, ConstantSpecies):
            species_rows.append((project_id, sp.label, "constant", None, sp.concentration))
        elif isinstance(sp, AcidBasePartner):
            species_rows.append((project_id, sp.label, f"partner_{sp.role.value}", sp.couple_index, None))
        elif isinstance(sp, AcidBaseCouple):
            species_rows.append((project_id, sp.label, "acid_base_couple", sp.index, None))
        else:
            species_rows.append((project_id, sp.label, "tracked", sp.index, None))
    connection.executemany(
        "INSERT INTO species (project_id, label, kind, state_index, concentration)"
        " VALUES (?, ?, ?, ?, ?)",
        species_rows,
    )

    reaction_rows = []
    for position, reaction in enumerate(env.reactions):
        stoich = {label: -coefficient for label, coefficient in reaction.reactants}
        for label, coefficient in reaction.products:
            stoich[label] = stoich.get(label, 0) + coefficient
        if isinstance(reaction, RateReaction):
            kind, constant = "k_reaction", reaction.k_value
        else:
            kind, constant = "radiolytic", reaction.kr
        reaction_rows.append(
            (project_id, position, kind, reaction.equation(), constant, json.dumps(stoich))
        )
    connection.executemany(
        "INSERT INTO reaction (project_id, position, kind, equation, rate_constant, stoich)"
        " VALUES (?, ?, ?, ?, ?, ?)",
        reaction_rows,
    )


def save_run(
    connection: sqlite3.Connection,
    project_id: int,
    beam: Mapping[str, object],
    solver: Mapping[str, object],
    manifest: Mapping[str, object],
    started_utc: str | None = None,
    duration_ms: int | None = None,
) -> int:
    """Persist a run record and return its ID."""
    started_utc = started_utc or _utc_now()
    cursor = connection.execute(
        "INSERT INTO run (project_id, beam, solver, manifest, started, duration_ms)"
        " VALUES (?, ?, ?, ?, ?, ?)",
        (
            project_id,
            _json_dumps(beam),
            _json_dumps(solver),
            _json_dumps(manifest),
            started_utc,
            duration_ms,
        ),
    )
    return int(cursor.lastrowid)


def save_profile(
    connection: sqlite3.Connection,
    run_id: int,
    times: Sequence[float],
    series: Mapping[str, Sequence[float]],
    units: Mapping[str, str | None] | None = None,
) -> None:
    """Save the trajectory of a run, one row per (time, variable)."""
    units = units or {}
    rows_list: list[tuple[object, ...]] = []
    for index, t_value in enumerate(times):
        for variable, values in series.items():
            rows_list.append(
                (run_id, float(t_value), variable, float(values[index]), units.get(variable)),
            )
    connection.executemany(
        "INSERT INTO profile (run_id, t, var, value, unit) VALUES (?, ?, ?, ?, ?)",
        rows_list,
    )


def load_profile(
    connection: sqlite3.Connection, run_id: int
) -> tuple[np.ndarray, Dict[str, np.ndarray]]:
    """Read back the times and per-variable series of a run."""
    rows = connection.execute(
        "SELECT t, var, value FROM profile WHERE run_id = ? ORDER BY t",
        (run_id,),
    ).fetchall()
    times: List[float] = []
    series: Dict[str, List[float]] = {}
    for t_value, variable, value in rows:
        if not times or times[-1] != t_value:
            times.append(t_value)
        series.setdefault(variable, []).append(value)
    return np.array(times), {name: np.array(values) for name, values in series.items()}


def _json_dumps(payload: Mapping[str, object]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
