"""Value objects for doodle.

All types here are frozen dataclasses -- immutable, compared by value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .enums import ResearchPhase

DEFAULT_SCORE = 5.0
MIN_SCORE = 1.0
MAX_SCORE = 10.0


# ---------------------------------------------------------------------------
# ResearchSection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResearchSection:
    """The generated body (plus sources) produced for one area.

    ``title`` is the section's unique key within a session.  A section is
    never edited: researching the same title again replaces it whole.
    """

    title: str
    content: str
    sources: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("ResearchSection.title must not be empty")
        # Accept any sequence for sources but store it as a tuple.
        if not isinstance(self.sources, tuple):
            object.__setattr__(self, "sources", tuple(self.sources))

    def render(self) -> str:
        """Render as a level-two markdown heading followed by the body."""
        return f"## {self.title}\n\n{self.content.strip()}\n"


# ---------------------------------------------------------------------------
# QualityEvaluation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QualityEvaluation:
    """One quality-gate verdict on the aggregate document.

    Attributes
    ----------
    score:
        Overall quality in ``[1, 10]``.  Out-of-range values are clamped.
    is_complete:
        Explicit completeness signal from the evaluator.
    feedback:
        Free-text commentary.
    missing_areas:
        Area names the evaluator thinks the document still lacks.
    """

    score: float = DEFAULT_SCORE
    is_complete: bool = False
    feedback: str = ""
    missing_areas: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "score", min(MAX_SCORE, max(MIN_SCORE, float(self.score))))
        if not isinstance(self.missing_areas, tuple):
            object.__setattr__(self, "missing_areas", tuple(self.missing_areas))

    def meets(self, threshold: float) -> bool:
        """``True`` when the score reaches *threshold* and the document is complete."""
        return self.score >= threshold and self.is_complete


# ---------------------------------------------------------------------------
# ResearchPlan / NextStep
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResearchPlan:
    """Outcome of the planning step: a topic analysis and the areas to cover."""

    analysis: str
    key_areas: tuple[str, ...]


@dataclass(frozen=True)
class NextStep:
    """Focus selector's answer to "what should be researched next?"."""

    has_more: bool = False
    focus: str = ""
    reason: str = ""

    @property
    def actionable(self) -> bool:
        return self.has_more and bool(self.focus)


# ---------------------------------------------------------------------------
# ResearchReport
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResearchReport:
    """Observable outcome of one ``research(topic)`` call."""

    topic: str
    phase: ResearchPhase
    location: str
    iterations: int = 0
    section_count: int = 0
    character_length: int = 0
    final_score: float | None = None
    error: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.phase is ResearchPhase.DONE

    def to_dict(self) -> dict[str, Any]:
        return {
            "topic": self.topic,
            "phase": self.phase.value,
            "location": self.location,
            "iterations": self.iterations,
            "section_count": self.section_count,
            "character_length": self.character_length,
            "final_score": self.final_score,
            "error": self.error,
            "metadata": dict(self.metadata),
        }
