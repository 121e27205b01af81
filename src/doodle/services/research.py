"""Per-area research."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from doodle.domain.exceptions import AreaResearchFailure
from doodle.domain.values import ResearchSection
from doodle.infrastructure.llm import TextGenerator
from doodle.services.parsing import parse_section
from doodle.services.prompts import research_prompt

logger = logging.getLogger(__name__)


def trailing_context(sections: Iterable[ResearchSection], max_chars: int) -> str:
    """The last *max_chars* characters of the rendered sections."""
    if max_chars <= 0:
        return ""
    rendered = "\n".join(section.render() for section in sections)
    return rendered[-max_chars:]


class AreaResearcher:
    """Researches a single area and returns its section.

    Parameters
    ----------
    generator:
        Text-generation backend.
    context_chars:
        Size of the trailing window of already gathered content that is
        included in each prompt.
    """

    def __init__(self, generator: TextGenerator, context_chars: int = 2000) -> None:
        self.generator = generator
        self.context_chars = context_chars

    def research(
        self,
        topic: str,
        area: str,
        gathered: Iterable[ResearchSection] = (),
    ) -> ResearchSection:
        """Generate the section for *area*.

        Raises
        ------
        AreaResearchFailure
            If the call fails or the reply has no body text.
        """
        context = trailing_context(gathered, self.context_chars)
        try:
            reply = self.generator.generate(research_prompt(topic, area, context))
        except Exception as exc:
            raise AreaResearchFailure(
                f"Research call for {area!r} failed: {exc}", area=area
            ) from exc

        parsed = parse_section(reply)
        if not parsed.content.strip():
            raise AreaResearchFailure(
                f"Research reply for {area!r} had no content", area=area
            )

        logger.debug(
            "AreaResearcher: %r -> %d chars, %d source(s)",
            area,
            len(parsed.content),
            len(parsed.sources),
        )
        return parsed.to_section(area)
