"""Domain layer for doodle: enums, value objects, aggregates and exceptions."""

from doodle.domain.aggregates import SectionStore, append_unique
from doodle.domain.enums import ResearchPhase
from doodle.domain.exceptions import (
    AreaResearchFailure,
    DoodleError,
    EvaluationParseFailure,
    PersistenceFailure,
    PlanningFailure,
    SynthesisFailure,
)
from doodle.domain.values import (
    NextStep,
    QualityEvaluation,
    ResearchPlan,
    ResearchReport,
    ResearchSection,
)

__all__ = [
    "AreaResearchFailure",
    "DoodleError",
    "EvaluationParseFailure",
    "NextStep",
    "PersistenceFailure",
    "PlanningFailure",
    "QualityEvaluation",
    "ResearchPhase",
    "ResearchPlan",
    "ResearchReport",
    "ResearchSection",
    "SectionStore",
    "SynthesisFailure",
    "append_unique",
]
