"""Service layer: prompts, reply parsing, per-step services and assembly."""

from doodle.services.assembly import (
    assemble,
    collect_references,
    finalize_synthesis,
    render_partial_document,
    slugify,
)
from doodle.services.planning import FocusSelector, Planner
from doodle.services.quality_gate import (
    QualityGate,
    build_digest,
    is_converged,
    should_stop,
)
from doodle.services.research import AreaResearcher, trailing_context
from doodle.services.synthesis import Synthesizer, section_draft

__all__ = [
    "AreaResearcher",
    "FocusSelector",
    "Planner",
    "QualityGate",
    "Synthesizer",
    "assemble",
    "build_digest",
    "collect_references",
    "finalize_synthesis",
    "is_converged",
    "render_partial_document",
    "section_draft",
    "should_stop",
    "slugify",
    "trailing_context",
]
