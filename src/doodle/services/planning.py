"""Planning and focus selection.

``Planner`` turns a topic into a :class:`ResearchPlan`.  A reply without a
key-area list is a :class:`PlanningFailure` -- the session has nothing to
research and must not guess.

``FocusSelector`` asks which area deserves attention next once every
known area has a section.
"""

from __future__ import annotations

import logging

from doodle.domain.exceptions import PlanningFailure
from doodle.domain.values import NextStep, ResearchPlan
from doodle.infrastructure.llm import TextGenerator
from doodle.services.parsing import parse_next_step, parse_plan
from doodle.services.prompts import next_step_prompt, planning_prompt

logger = logging.getLogger(__name__)


class Planner:
    """Issues the planning prompt and parses the key-area list."""

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    def plan(self, topic: str) -> ResearchPlan:
        """Analyze *topic* and enumerate the areas to research.

        Raises
        ------
        PlanningFailure
            If the service call fails or the reply has no key areas.
        """
        try:
            reply = self.generator.generate(planning_prompt(topic))
        except Exception as exc:
            raise PlanningFailure(
                f"Planning call failed: {exc}", topic=topic
            ) from exc

        parsed = parse_plan(reply)
        if not parsed.key_areas:
            raise PlanningFailure(
                "Planning reply contained no KEY_AREAS list",
                topic=topic,
                details={"analysis": parsed.analysis, "reply_chars": len(reply)},
            )

        logger.info(
            "Planner: %d key area(s) for %r: %s",
            len(parsed.key_areas),
            topic,
            ", ".join(parsed.key_areas),
        )
        return parsed.to_plan()


class FocusSelector:
    """Chooses the next focus area when no key area is left uncovered.

    Failures are absorbed: a broken call or reply means "nothing more".
    """

    def __init__(self, generator: TextGenerator) -> None:
        self.generator = generator

    def next_step(
        self,
        topic: str,
        document: str,
        completed_areas: list[str],
        feedback: str = "",
    ) -> NextStep:
        prompt = next_step_prompt(topic, document, completed_areas, feedback)
        try:
            reply = self.generator.generate(prompt)
        except Exception as exc:
            logger.warning("FocusSelector: next-step call failed: %s", exc)
            return NextStep()

        step = parse_next_step(reply).to_next_step()
        logger.debug(
            "FocusSelector: has_more=%s focus=%r", step.has_more, step.focus
        )
        return step
