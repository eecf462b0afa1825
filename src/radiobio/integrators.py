"""Fixed-step explicit Runge-Kutta integration."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, List

import numpy as np

from radiobio.errors import IntegrationError

logger = logging.getLogger(__name__)

RHSFunction = Callable[[float, np.ndarray], np.ndarray]


@dataclass
class IntegrationStats:
    accepted_steps: int = 0
    num_eval: int = 0

    def __str__(self) -> str:
        return (
            f"Number of function evaluations: {self.num_eval}\n"
            f"Number of accepted steps: {self.accepted_steps}"
        )


@dataclass(frozen=True)
class RK4Result:
    """Trajectory recorded by :func:`integrate_rk4`.

    Attributes:
        t: Time points, shape ``(n_points,)``. ``t[0]`` is the start time.
        y: States, shape ``(dim, n_points)`` as returned by ``solve_ivp``.
        stats: Step and RHS evaluation counters.
    """

    t: np.ndarray
    y: np.ndarray
    stats: IntegrationStats

    @property
    def final_state(self) -> np.ndarray:
        return self.y[:, -1]


def number_of_steps(t0: float, t_end: float, step_size: float) -> int:
    """ceil((t_end - t0) / h), zero when t_end <= t0."""
    if t_end <= t0:
        return 0
    return int(math.ceil((t_end - t0) / step_size))


def rk4_step(rhs: RHSFunction, t: float, y: np.ndarray, step_size: float) -> np.ndarray:
    """One classic RK4 step, negative components clamped to zero.

    Equations:
        k1 = f(t, y)
        k2 = f(t + h/2, y + h/2 k1)
        k3 = f(t + h/2, y + h/2 k2)
        k4 = f(t + h, y + h k3)
        y_new = y + h/6 (k1 + 2 k2 + 2 k3 + k4)
    """
    half_step = step_size / 2.0
    k1 = np.asarray(rhs(t, y), dtype=float)
    k2 = np.asarray(rhs(t + half_step, y + half_step * k1), dtype=float)
    k3 = np.asarray(rhs(t + half_step, y + half_step * k2), dtype=float)
    k4 = np.asarray(rhs(t + step_size, y + step_size * k3), dtype=float)
    y_new = y + (k1 + 2.0 * k2 + 2.0 * k3 + k4) * (step_size / 6.0)
    return np.maximum(y_new, 0.0)


def integrate_rk4(
    rhs: RHSFunction,
    t0: float,
    y0: np.ndarray,
    t_end: float,
    step_size: float,
) -> RK4Result:
    """Integrate ``rhs`` from ``t0`` to ``t_end`` with a fixed step.

    The number of steps is ``ceil((t_end - t0) / step_size)``, so the last
    recorded time may exceed ``t_end`` by less than one step. Every step is
    recorded.

    Args:
        rhs: Function ``rhs(t, y)`` returning dy/dt.
        t0: Start time.
        y0: Initial state.
        t_end: End time.
        step_size: Constant step size, > 0.

    Returns:
        The recorded trajectory and statistics.

    Raises:
        IntegrationError: If an RHS evaluation fails. The failing step is not
            recorded.
    """
    if not (math.isfinite(t0) and math.isfinite(t_end)):
        raise ValueError(f"Integration bounds must be finite, got ({t0}, {t_end})")
    if not math.isfinite(step_size) or step_size <= 0.0:
        raise ValueError(f"step_size must be finite and > 0, got {step_size}")

    y = np.array(y0, dtype=float)
    t = float(t0)
    num_steps = number_of_steps(t0, t_end, step_size)
    stats = IntegrationStats()

    times: List[float] = [t]
    states: List[np.ndarray] = [y.copy()]

    logger.info(
        "Integrating %d state variables from t=%g to t=%g with h=%g (%d steps)",
        y.size,
        t0,
        t_end,
        step_size,
        num_steps,
    )
    for _ in range(num_steps):
        try:
            y_new = rk4_step(rhs, t, y, step_size)
        except Exception as exc:
            logger.error("RHS evaluation failed at t=%g: %s", t, exc)
            raise IntegrationError(t, exc) from exc

        t = t + step_size
        y = y_new
        times.append(t)
        states.append(y.copy())

        stats.num_eval += 4
        stats.accepted_steps += 1

    logger.info("Integration finished at t=%g after %d steps", t, stats.accepted_steps)
    return RK4Result(
        t=np.array(times),
        y=np.column_stack(states),
        stats=stats,
    )
