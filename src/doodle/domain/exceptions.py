"""Domain exceptions for doodle.

All domain-specific exceptions inherit from ``DoodleError`` so callers can
catch the full family with a single ``except`` clause when needed.  Only
``PersistenceFailure`` is expected to escape a research session; the
others are raised inside a step and absorbed at that step's boundary.
"""

from __future__ import annotations

from typing import Any


class DoodleError(Exception):
    """Base exception for all doodle domain errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class PlanningFailure(DoodleError):
    """Raised when the planning reply yields no key areas to research.

    Session-fatal: the controller aborts instead of guessing areas.
    """

    def __init__(
        self,
        message: str = "Planning failed",
        topic: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.topic = topic


class AreaResearchFailure(DoodleError):
    """Raised when a single area's research call fails or returns nothing usable."""

    def __init__(
        self,
        message: str = "Area research failed",
        area: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.area = area


class EvaluationParseFailure(DoodleError):
    """Raised when an evaluation reply cannot be obtained or parsed.

    The quality gate converts it into a default evaluation.
    """

    def __init__(
        self,
        message: str = "Evaluation could not be parsed",
        defaulted: tuple[str, ...] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.defaulted = defaulted


class SynthesisFailure(DoodleError):
    """Raised when the final synthesis call fails or returns a blank document."""


class PersistenceFailure(DoodleError):
    """Raised when the finished document cannot be saved.

    This is the one failure a research session does not absorb.
    """

    def __init__(
        self,
        message: str = "Could not persist research notes",
        topic: str = "",
        location: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.topic = topic
        self.location = location
