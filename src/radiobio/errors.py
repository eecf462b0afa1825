"""Error hierarchy for radiobio."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class RadioBioError(Exception):
    """Base exception for radiobio failures."""

    def __init__(
        self,
        message: str,
        *,
        user_message: Optional[str] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.user_message = message if user_message is None else user_message
        self.context = dict(context) if context else {}


class BuildError(RadioBioError):
    """Malformed reaction network, beam or run configuration."""


class EvaluationError(RadioBioError):
    """Failure while evaluating the right-hand side of the ODE system."""


class UnknownSpeciesError(EvaluationError):
    """A reaction references a species missing from the concentration map."""

    def __init__(self, label: str, reaction: Optional[str] = None) -> None:
        message = f"Unknown species encountered ({label})"
        if reaction is not None:
            message = f"{message} while computing reaction: {reaction}"
        super().__init__(message, context={"species": label, "reaction": reaction})
        self.label = label
        self.reaction = reaction


class IntegrationError(RadioBioError):
    """Integration aborted because a right-hand side evaluation failed."""

    def __init__(self, time: float, cause: BaseException) -> None:
        message = f"Integration failed at t={time:g}: {cause}"
        context: dict[str, Any] = {"time": time}
        if isinstance(cause, RadioBioError):
            context.update(cause.context)
        super().__init__(message, context=context)
        self.time = time
        self.cause = cause


class PersistenceError(RadioBioError):
    """A project file could not be opened or written."""


__all__ = [
    "RadioBioError",
    "BuildError",
    "EvaluationError",
    "UnknownSpeciesError",
    "IntegrationError",
    "PersistenceError",
]
