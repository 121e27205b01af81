"""Final synthesis: extra knowledge plus a polished document.

A failed extra-knowledge call yields the configured placeholder.  A failed
or blank synthesis raises :class:`SynthesisFailure`; the graph then falls
back to the deterministic :func:`~doodle.services.assembly.assemble` output.
A successful reply is kept as written; only a missing reference list is
appended.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from doodle.domain.exceptions import SynthesisFailure
from doodle.domain.values import ResearchSection
from doodle.infrastructure.config import DEFAULT_EXTRA_KNOWLEDGE_PLACEHOLDER
from doodle.infrastructure.llm import TextGenerator
from doodle.services.assembly import collect_references, finalize_synthesis, format_references
from doodle.services.prompts import extra_knowledge_prompt, synthesis_prompt

logger = logging.getLogger(__name__)


def section_draft(sections: Sequence[ResearchSection]) -> str:
    """Section bodies and their reference list, as sent for synthesis."""
    parts = [section.render() for section in sections]
    references = collect_references(sections)
    if references:
        parts.append(format_references(references))
    return "\n".join(parts)


class Synthesizer:
    """Produces the final document from the gathered sections.

    Parameters
    ----------
    generator:
        Text-generation backend.
    placeholder:
        Text used for the extra-knowledge block when its call fails.
    """

    def __init__(
        self,
        generator: TextGenerator,
        placeholder: str = DEFAULT_EXTRA_KNOWLEDGE_PLACEHOLDER,
    ) -> None:
        self.generator = generator
        self.placeholder = placeholder

    def extra_knowledge(self, topic: str, areas: list[str]) -> str:
        try:
            reply = self.generator.generate(extra_knowledge_prompt(topic, areas))
        except Exception as exc:
            logger.warning("Synthesizer: extra-knowledge call failed: %s", exc)
            return self.placeholder
        reply = reply.strip()
        return reply or self.placeholder

    def polish(
        self,
        topic: str,
        sections: Sequence[ResearchSection],
        extra_knowledge: str,
    ) -> str:
        """Ask the model for the polished document.

        Raises
        ------
        SynthesisFailure
            If the call fails or the reply is blank.
        """
        draft = section_draft(sections)
        try:
            reply = self.generator.generate(synthesis_prompt(topic, draft, extra_knowledge))
        except Exception as exc:
            raise SynthesisFailure(f"Synthesis call failed: {exc}") from exc
        if not reply.strip():
            raise SynthesisFailure("Synthesis reply was blank")
        return finalize_synthesis(reply, sections)
