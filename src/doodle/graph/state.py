"""LangGraph state definition for a research session.

Defines ``ResearchState``, the ``TypedDict`` that flows through the
research ``StateGraph``.  ``events`` is an append-only channel
(``Annotated[list, operator.add]``); every other field is last-value.
Nodes never mutate the ``SectionStore`` they receive -- they return an
updated copy.

Note: ``from __future__ import annotations`` is not used here because
LangGraph resolves the type hints at runtime via ``get_type_hints()``.
"""

import operator
from typing import Annotated, Any, TypedDict

from doodle.domain.aggregates import SectionStore
from doodle.domain.enums import ResearchPhase
from doodle.domain.values import QualityEvaluation


class ResearchState(TypedDict, total=False):
    """State flowing through the research graph.

    Fields are grouped into:

    * **Session inputs** -- topic and limits, set once at invocation.
    * **Loop control** -- phase, iteration counter, error.
    * **Research content** -- plan analysis, key areas, sections.
    * **Synthesis output** -- extra knowledge and the final document.
    * **Accumulation channel** -- trace of notable events.
    """

    # -- Session inputs ------------------------------------------------------
    topic: str
    max_iterations: int
    quality_threshold: float

    # -- Loop control --------------------------------------------------------
    phase: ResearchPhase
    iteration: int
    error: str

    # -- Research content ----------------------------------------------------
    analysis: str
    key_areas: list[str]
    sections: SectionStore
    evaluation: QualityEvaluation | None

    # -- Synthesis output ----------------------------------------------------
    extra_knowledge: str
    document: str

    # -- Accumulation channel ------------------------------------------------
    events: Annotated[list, operator.add]

    # -- Extensibility -------------------------------------------------------
    metadata: dict[str, Any]


def initial_state(
    topic: str,
    max_iterations: int,
    quality_threshold: float,
) -> dict[str, Any]:
    """Fresh state for one session."""
    return {
        "topic": topic,
        "max_iterations": max_iterations,
        "quality_threshold": quality_threshold,
        "phase": ResearchPhase.PLANNING,
        "iteration": 0,
        "error": "",
        "analysis": "",
        "key_areas": [],
        "sections": SectionStore(),
        "evaluation": None,
        "extra_knowledge": "",
        "document": "",
        "events": [],
        "metadata": {},
    }
