"""LangGraph node functions for the research loop.

Each ``make_*_node`` factory closes over a service instance and returns
a node that takes a ``ResearchState`` and returns a partial update dict.
The nodes delegate to the services rather than reimplementing any logic;
their own job is phase bookkeeping, absorbing step-level failures and
recording them on the ``events`` channel.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

from doodle.domain.aggregates import SectionStore, append_unique
from doodle.domain.enums import ResearchPhase, can_transition
from doodle.domain.exceptions import AreaResearchFailure, PlanningFailure, SynthesisFailure
from doodle.domain.values import QualityEvaluation
from doodle.services.assembly import assemble, render_partial_document
from doodle.services.planning import FocusSelector, Planner
from doodle.services.quality_gate import QualityGate
from doodle.services.research import AreaResearcher
from doodle.services.synthesis import Synthesizer

logger = logging.getLogger(__name__)

Node = Callable[[dict[str, Any]], dict[str, Any]]


def advance_phase(
    state: dict[str, Any],
    target: ResearchPhase,
    current: ResearchPhase | None = None,
) -> ResearchPhase:
    """Return *target* after checking it may follow the current phase.

    Raises
    ------
    ValueError
        If the transition is not allowed.
    """
    if current is None:
        current = state.get("phase", ResearchPhase.PLANNING)
    if not can_transition(current, target):
        raise ValueError(
            f"Invalid phase transition: {current.value} -> {target.value}"
        )
    logger.debug("phase: %s -> %s", current.value, target.value)
    return target


def pending_areas(
    key_areas: Iterable[str],
    sections: SectionStore,
    evaluation: QualityEvaluation | None = None,
) -> list[str]:
    """Key areas without a section, plus those the evaluation named missing."""
    missing = set(evaluation.missing_areas) if evaluation is not None else set()
    return [area for area in key_areas if area not in sections or area in missing]


def _event(kind: str, iteration: int, **details: Any) -> dict[str, Any]:
    return {
        "type": kind,
        "iteration": iteration,
        "timestamp": time.time(),
        **details,
    }


def make_plan_node(planner: Planner) -> Node:
    """Planning node: sets ``analysis`` and ``key_areas``, or ``error``."""

    def plan_node(state: dict[str, Any]) -> dict[str, Any]:
        topic = state["topic"]
        try:
            plan = planner.plan(topic)
        except PlanningFailure as exc:
            logger.warning("plan_node: %s", exc)
            return {
                "error": str(exc),
                "analysis": exc.details.get("analysis", ""),
                "events": [_event("planning_failed", 0, error=str(exc))],
            }

        return {
            "analysis": plan.analysis,
            "key_areas": list(plan.key_areas),
            "events": [
                _event("plan_created", 0, key_areas=list(plan.key_areas))
            ],
        }

    return plan_node


def make_research_node(
    researcher: AreaResearcher,
    focus_selector: FocusSelector | None = None,
) -> Node:
    """Research node: one iteration over every pending area.

    When nothing is pending, the focus selector (if given) may propose
    one more area, which is added to the key areas and researched now.
    A failing area is logged and skipped; it stays pending.
    """

    def research_node(state: dict[str, Any]) -> dict[str, Any]:
        phase = advance_phase(state, ResearchPhase.RESEARCHING)
        topic = state["topic"]
        iteration = state.get("iteration", 0) + 1
        store = state.get("sections", SectionStore()).copy()
        key_areas = list(state.get("key_areas", []))
        evaluation = state.get("evaluation")
        events: list[dict[str, Any]] = []

        pending = pending_areas(key_areas, store, evaluation)
        if not pending and focus_selector is not None:
            feedback = evaluation.feedback if evaluation is not None else ""
            step = focus_selector.next_step(topic, store.render(), store.titles, feedback)
            if step.actionable:
                key_areas = append_unique(key_areas, [step.focus])
                pending = [step.focus]
                events.append(
                    _event(
                        "focus_selected",
                        iteration,
                        focus=step.focus,
                        reason=step.reason,
                    )
                )

        logger.info(
            "research_node: iteration %d/%d, %d pending area(s)",
            iteration,
            state.get("max_iterations", 0),
            len(pending),
        )

        for area in pending:
            try:
                section = researcher.research(topic, area, store.sections)
            except AreaResearchFailure as exc:
                logger.warning("research_node: skipping %r: %s", area, exc)
                events.append(
                    _event(
                        "area_research_failed",
                        iteration,
                        area=area,
                        error=str(exc),
                    )
                )
                continue
            replaced = store.upsert(section)
            events.append(
                _event(
                    "section_replaced" if replaced else "section_added",
                    iteration,
                    area=area,
                    chars=len(section.content),
                )
            )

        return {
            "phase": phase,
            "iteration": iteration,
            "sections": store,
            "key_areas": key_areas,
            "events": events,
        }

    return research_node


def make_evaluate_node(gate: QualityGate) -> Node:
    """Evaluate node: scores the document and merges missing areas."""

    def evaluate_node(state: dict[str, Any]) -> dict[str, Any]:
        phase = advance_phase(state, ResearchPhase.EVALUATING)
        store = state.get("sections", SectionStore())
        evaluation, failure = gate.assess(state["topic"], store.sections)

        key_areas = list(state.get("key_areas", []))
        merged = append_unique(key_areas, evaluation.missing_areas)
        added = merged[len(key_areas):]
        if added:
            logger.info("evaluate_node: new area(s) to research: %s", ", ".join(added))

        events = [
            _event(
                "evaluation_completed",
                state.get("iteration", 0),
                score=evaluation.score,
                is_complete=evaluation.is_complete,
                added_areas=added,
            )
        ]
        if failure is not None:
            events.append(
                _event(
                    "evaluation_defaulted",
                    state.get("iteration", 0),
                    error=str(failure),
                    defaulted=list(failure.defaulted),
                )
            )

        return {
            "phase": phase,
            "evaluation": evaluation,
            "key_areas": merged,
            "events": events,
        }

    return evaluate_node


def make_synthesize_node(synthesizer: Synthesizer) -> Node:
    """Synthesis node: extra knowledge, then the final document.

    A failed synthesis falls back to the locally assembled document.
    """

    def synthesize_node(state: dict[str, Any]) -> dict[str, Any]:
        current = advance_phase(state, ResearchPhase.SYNTHESIZING)
        topic = state["topic"]
        store = state.get("sections", SectionStore())
        events: list[dict[str, Any]] = []

        extra = synthesizer.extra_knowledge(topic, store.titles)
        try:
            document = synthesizer.polish(topic, store.sections, extra)
        except SynthesisFailure as exc:
            logger.warning("synthesize_node: %s; using assembled document", exc)
            events.append(
                _event("synthesis_failed", state.get("iteration", 0), error=str(exc))
            )
            document = assemble(topic, store.sections, extra)

        iteration = state.get("iteration", 0)
        events.append(_event("document_synthesized", iteration, chars=len(document)))
        return {
            "phase": advance_phase(state, ResearchPhase.DONE, current=current),
            "extra_knowledge": extra,
            "document": document,
            "events": events,
        }

    return synthesize_node


def abort_node(state: dict[str, Any]) -> dict[str, Any]:
    """Render the partial, error-annotated document for an aborted session."""
    phase = advance_phase(state, ResearchPhase.ABORTED)
    store = state.get("sections", SectionStore())
    error = state.get("error", "") or "unknown error"
    document = render_partial_document(
        state.get("topic", ""),
        error,
        state.get("analysis", ""),
        store.sections,
    )
    logger.warning("abort_node: session aborted: %s", error)
    return {
        "phase": phase,
        "document": document,
        "events": [_event("session_aborted", state.get("iteration", 0), error=error)],
    }
