"""Conditional edge functions for the research graph."""

from __future__ import annotations

import logging
from typing import Any, Literal

from doodle.services.quality_gate import should_stop

logger = logging.getLogger(__name__)


def after_planning(state: dict[str, Any]) -> Literal["research", "abort"]:
    """Route to the research loop, or to abort when planning failed."""
    if state.get("error"):
        return "abort"
    return "research"


def should_continue_research(state: dict[str, Any]) -> Literal["research", "synthesize"]:
    """After evaluate, loop back to research or move on to synthesis.

    Stops once the iteration budget is spent, or when the latest
    evaluation both reaches the quality threshold and is marked complete.
    """
    iteration = state.get("iteration", 0)
    if should_stop(
        iteration,
        state.get("max_iterations", 0),
        state.get("evaluation"),
        state.get("quality_threshold", 0.0),
    ):
        logger.debug("should_continue_research: stop at iteration %d", iteration)
        return "synthesize"
    return "research"
