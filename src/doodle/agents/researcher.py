"""Research controller: runs one session end to end.

``ResearchController`` builds the research graph from a single
:class:`TextGenerator`, streams it to completion and hands the resulting
document to a :class:`NoteWriter`.  Every failure inside the session is
absorbed into the document; only a failed save escapes
(:class:`PersistenceFailure`).
"""

from __future__ import annotations

import logging
from typing import Any

from doodle.domain.aggregates import SectionStore
from doodle.domain.enums import ResearchPhase
from doodle.domain.values import ResearchReport
from doodle.graph.graph import build_research_graph
from doodle.graph.state import initial_state
from doodle.infrastructure.config import ResearchConfig
from doodle.infrastructure.llm import TextGenerator
from doodle.infrastructure.llm.factory import create_generator
from doodle.infrastructure.persistence import MarkdownNoteWriter, NoteWriter
from doodle.services.assembly import render_partial_document
from doodle.services.planning import FocusSelector, Planner
from doodle.services.quality_gate import QualityGate
from doodle.services.research import AreaResearcher
from doodle.services.synthesis import Synthesizer

logger = logging.getLogger(__name__)


class ResearchController:
    """Drives plan -> research/evaluate loop -> synthesis -> save.

    Parameters
    ----------
    generator:
        Text-generation backend used for every prompt of the session.
    writer:
        Persistence collaborator.  Defaults to a
        :class:`MarkdownNoteWriter` in ``config.output_dir``.
    config:
        Session limits.  Defaults to ``ResearchConfig()``.

    Raises
    ------
    ValueError
        If *config* is invalid.
    """

    def __init__(
        self,
        generator: TextGenerator,
        writer: NoteWriter | None = None,
        config: ResearchConfig | None = None,
    ) -> None:
        self.config = config if config is not None else ResearchConfig()
        self.config.validate()
        self.generator = generator
        self.writer = writer if writer is not None else MarkdownNoteWriter(self.config.output_dir)

    def build_graph(self) -> Any:
        """Compile a fresh research graph bound to this controller's services."""
        generator = self.generator
        config = self.config
        return build_research_graph(
            planner=Planner(generator),
            researcher=AreaResearcher(generator, context_chars=config.context_chars),
            gate=QualityGate(
                generator,
                threshold=config.quality_threshold,
                section_chars=config.evaluation_section_chars,
            ),
            synthesizer=Synthesizer(generator, placeholder=config.extra_knowledge_placeholder),
            focus_selector=FocusSelector(generator),
        )

    def run(self, topic: str) -> dict[str, Any]:
        """Run the graph for *topic* and return the final state.

        An exception escaping the graph aborts the session: the last
        streamed state is turned into an error-annotated partial document.
        """
        if not topic or not topic.strip():
            raise ValueError("topic must not be empty")

        state = initial_state(topic, self.config.max_iterations, self.config.quality_threshold)
        graph = self.build_graph()
        logger.info(
            "ResearchController: starting %r (max_iterations=%d, threshold=%.1f, provider=%s)",
            topic,
            self.config.max_iterations,
            self.config.quality_threshold,
            self.generator.provider_name,
        )

        try:
            for snapshot in graph.stream(
                state,
                config={"recursion_limit": self.config.recursion_limit},
                stream_mode="values",
            ):
                state = snapshot
        except Exception as exc:
            logger.exception("ResearchController: session for %r failed", topic)
            state = self._aborted(state, exc)

        return state

    def research(self, topic: str) -> ResearchReport:
        """Research *topic*, save the document and report the outcome.

        Raises
        ------
        PersistenceFailure
            If the writer cannot save the document.
        """
        state = self.run(topic)
        document = state.get("document", "")
        location = self.writer.save(topic, document)

        evaluation = state.get("evaluation")
        sections = state.get("sections", SectionStore())
        report = ResearchReport(
            topic=topic,
            phase=state.get("phase", ResearchPhase.ABORTED),
            location=location,
            iterations=state.get("iteration", 0),
            section_count=len(sections),
            character_length=len(document),
            final_score=evaluation.score if evaluation is not None else None,
            error=state.get("error", ""),
            metadata={
                "key_areas": list(state.get("key_areas", [])),
                "events": list(state.get("events", [])),
            },
        )

        if report.succeeded:
            logger.info(
                "ResearchController: saved %s (%d iteration(s), %d section(s), %d chars)",
                location,
                report.iterations,
                report.section_count,
                report.character_length,
            )
        else:
            logger.warning(
                "ResearchController: partial notes saved to %s after error: %s",
                location,
                report.error,
            )
        return report

    @staticmethod
    def _aborted(state: dict[str, Any], exc: Exception) -> dict[str, Any]:
        error = f"{type(exc).__name__}: {exc}"
        sections = state.get("sections", SectionStore())
        aborted = dict(state)
        aborted.update(
            phase=ResearchPhase.ABORTED,
            error=error,
            document=render_partial_document(
                state.get("topic", ""),
                error,
                state.get("analysis", ""),
                sections.sections,
            ),
        )
        return aborted


def research(
    topic: str,
    config: ResearchConfig | None = None,
    generator: TextGenerator | None = None,
    writer: NoteWriter | None = None,
) -> ResearchReport:
    """Run one research session on *topic*.

    Without an explicit *generator* the backend is built from *config*
    (``provider``, ``model``, ``temperature``) and the matching API key
    in the environment.

    Raises
    ------
    LLMConfigurationError
        If no generator is given and the configured backend cannot be built.
    PersistenceFailure
        If the document cannot be saved.
    """
    config = config if config is not None else ResearchConfig.from_env()
    if generator is None:
        generator = create_generator(config)
    return ResearchController(generator, writer=writer, config=config).research(topic)
