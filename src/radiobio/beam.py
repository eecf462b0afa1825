"""Radiation beam models providing the dose rate as a function of time."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from radiobio.errors import BuildError


@dataclass(frozen=True)
class TimeStructure:
    """Periodic on/off structure; a constant beam is always on."""

    period: float = math.inf
    on_time: float = math.inf

    @classmethod
    def constant(cls) -> "TimeStructure":
        return cls()

    @classmethod
    def pulsed(cls, period: float, on_time: float) -> "TimeStructure":
        if not (period > 0.0 and on_time > 0.0):
            raise BuildError(
                f"Pulse period ({period}) and on_time ({on_time}) must be positive"
            )
        if on_time > period:
            raise BuildError(
                f"While constructing beam, found on_time ({on_time}) > period ({period})"
            )
        return cls(period=period, on_time=on_time)

    @property
    def is_constant(self) -> bool:
        return math.isinf(self.period)

    @property
    def duty_cycle(self) -> float:
        if self.is_constant:
            return 1.0
        return self.on_time / self.period

    def is_on(self, time: float) -> bool:
        if self.is_constant:
            return True
        return math.fmod(time, self.period) <= self.on_time


@dataclass(frozen=True)
class Beam:
    """Particle beam.

    Attributes:
        particle: Particle name, informational only.
        dose_rate: Dose rate averaged over one period (Gy/s).
        structure: Time structure of the beam.
    """

    particle: str
    dose_rate: float
    structure: TimeStructure = field(default_factory=TimeStructure.constant)

    def __post_init__(self) -> None:
        if not math.isfinite(self.dose_rate) or self.dose_rate < 0.0:
            raise BuildError(f"Dose rate must be finite and >= 0, got {self.dose_rate}")

    @classmethod
    def constant(cls, particle: str, dose_rate: float) -> "Beam":
        return cls(particle, dose_rate, TimeStructure.constant())

    @classmethod
    def pulsed(cls, particle: str, dose_rate: float, period: float, on_time: float) -> "Beam":
        return cls(particle, dose_rate, TimeStructure.pulsed(period, on_time))

    @property
    def average_dose_rate(self) -> float:
        return self.dose_rate

    @property
    def peak_dose_rate(self) -> float:
        return self.dose_rate / self.structure.duty_cycle

    def dose_rate_at(self, time: float) -> float:
        return self.peak_dose_rate if self.structure.is_on(time) else 0.0

    def __call__(self, time: float) -> float:
        return self.dose_rate_at(time)


def beam_from_config(data: Mapping[str, Any]) -> Beam:
    """Build a beam from the ``beam`` section of a run configuration."""
    if not isinstance(data, Mapping):
        raise BuildError(f"Section 'beam' must be an object, got {data!r}")
    beam_type = str(data.get("type", "constant")).lower()
    particle = str(data.get("particle", "e"))
    try:
        dose_rate = float(data["dose_rate"])
        if beam_type == "constant":
            return Beam.constant(particle, dose_rate)
        if beam_type == "pulsed":
            return Beam.pulsed(particle, dose_rate, float(data["period"]), float(data["on_time"]))
    except KeyError as exc:
        raise BuildError(f"Missing required key 'beam.{exc.args[0]}'") from None
    except (TypeError, ValueError) as exc:
        raise BuildError(f"Invalid beam configuration: {exc}") from exc
    raise BuildError(f"Unknown beam type: {beam_type}")
