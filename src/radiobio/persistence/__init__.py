"""Persistence helpers for radiobio."""

from radiobio.persistence.csv_store import write_trajectory
from radiobio.persistence.sqlite_store import (
    connect,
    create_project,
    ensure_schema,
    load_profile,
    save_environment,
    save_profile,
    save_run,
)

__all__ = [
    "connect",
    "create_project",
    "ensure_schema",
    "load_profile",
    "save_environment",
    "save_profile",
    "save_run",
    "write_trajectory",
]
