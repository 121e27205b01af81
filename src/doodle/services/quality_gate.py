"""Quality gate: scores the aggregate document and decides convergence.

The loop may stop early only when the score reaches the threshold **and**
the evaluator explicitly marks the document complete; either signal alone
is not enough.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from doodle.domain.exceptions import EvaluationParseFailure
from doodle.domain.values import QualityEvaluation, ResearchSection
from doodle.infrastructure.llm import TextGenerator
from doodle.services.parsing import parse_evaluation
from doodle.services.prompts import evaluation_prompt

logger = logging.getLogger(__name__)


def is_converged(evaluation: QualityEvaluation | None, threshold: float) -> bool:
    """Early-stop test: score >= *threshold* and marked complete."""
    return evaluation is not None and evaluation.meets(threshold)


def should_stop(
    iteration: int,
    max_iterations: int,
    evaluation: QualityEvaluation | None,
    threshold: float,
) -> bool:
    """``True`` once the budget is spent or the document has converged."""
    return iteration >= max_iterations or is_converged(evaluation, threshold)


def build_digest(sections: Sequence[ResearchSection], section_chars: int = 0) -> str:
    """Document body sent for evaluation.

    With ``section_chars > 0`` each section body is cut to that many
    characters and marked as truncated.
    """
    parts: list[str] = []
    for section in sections:
        body = section.content.strip()
        if section_chars > 0 and len(body) > section_chars:
            body = body[:section_chars].rstrip() + "\n\n[... section truncated ...]"
        parts.append(f"## {section.title}\n\n{body}\n")
    return "\n".join(parts)


class QualityGate:
    """Evaluates the document through the text-generation service.

    Parameters
    ----------
    generator:
        Text-generation backend.
    threshold:
        Score (1-10) required for early stopping.
    section_chars:
        Per-section truncation for the evaluation digest (0 = full body).
    """

    def __init__(
        self,
        generator: TextGenerator,
        threshold: float = 8.0,
        section_chars: int = 0,
    ) -> None:
        self.generator = generator
        self.threshold = threshold
        self.section_chars = section_chars

    def evaluate(self, topic: str, sections: Sequence[ResearchSection]) -> QualityEvaluation:
        """Score the current document.

        Never raises: a failed call or a reply with no recognizable fields
        yields the default evaluation (score 5, incomplete, nothing
        missing).
        """
        evaluation, _ = self.assess(topic, sections)
        return evaluation

    def assess(
        self,
        topic: str,
        sections: Sequence[ResearchSection],
    ) -> tuple[QualityEvaluation, EvaluationParseFailure | None]:
        """Like :meth:`evaluate`, also returning the absorbed failure, if any.

        The failure is set when the call failed, or when the reply lacked
        a ``SCORE`` or ``COMPLETE`` field and defaults were applied.
        """
        digest = build_digest(sections, self.section_chars)
        logger.debug("QualityGate: evaluating %d chars", len(digest))
        try:
            reply = self.generator.generate(evaluation_prompt(topic, digest))
        except Exception as exc:
            failure = EvaluationParseFailure(
                f"Evaluation call failed: {exc}",
                defaulted=("score", "is_complete", "feedback", "missing_areas"),
            )
            logger.warning("QualityGate: %s; using default evaluation", failure)
            return QualityEvaluation(), failure

        parsed = parse_evaluation(reply)
        failure = None
        if "score" in parsed.defaulted or "is_complete" in parsed.defaulted:
            failure = EvaluationParseFailure(
                "Evaluation reply was incomplete", defaulted=parsed.defaulted
            )
            logger.warning(
                "QualityGate: %s; defaults applied for %s",
                failure,
                ", ".join(failure.defaulted),
            )

        evaluation = parsed.to_evaluation()
        logger.info(
            "QualityGate: score=%.1f/10 complete=%s missing=%s",
            evaluation.score,
            evaluation.is_complete,
            list(evaluation.missing_areas) or "none",
        )
        return evaluation, failure

    def is_satisfied(self, evaluation: QualityEvaluation | None) -> bool:
        return is_converged(evaluation, self.threshold)
