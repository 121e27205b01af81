"""Persistence collaborators for finished research notes.

``NoteWriter`` is the one-method contract the controller depends on:
``save(topic, content) -> location``.  Filename derivation and the
metadata header are the writer's business; the controller only hands
over the final (or partial) document text.
"""

from __future__ import annotations

import datetime
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from doodle.domain.exceptions import PersistenceFailure

logger = logging.getLogger(__name__)

DEFAULT_AGENT_NAME = "doodle v0"


class NoteWriter(ABC):
    """Abstract persistence collaborator."""

    @abstractmethod
    def save(self, topic: str, content: str) -> str:
        """Persist *content* for *topic* and return its location.

        Raises
        ------
        PersistenceFailure
            If the content could not be stored.
        """
        ...


def clean_topic(topic: str) -> str:
    """Reduce *topic* to a lowercase, hyphen-separated filename stem."""
    stem = re.sub(r"[^a-zA-Z0-9\s-]", "", topic)
    stem = re.sub(r"\s+", "-", stem.strip()).lower()
    return stem or "untitled"


def note_filename(topic: str, created: datetime.datetime) -> str:
    """``<clean-topic>-<YYYY-MM-DDTHH-MM-SS>.md``"""
    timestamp = created.strftime("%Y-%m-%dT%H-%M-%S")
    return f"{clean_topic(topic)}-{timestamp}.md"


def metadata_header(topic: str, created: datetime.datetime, agent: str) -> str:
    """Front matter block prepended to every saved note."""
    title = topic.replace('"', '\\"')
    return (
        "---\n"
        f'title: "{title}"\n'
        f"created: {created.isoformat()}\n"
        f"agent: {agent}\n"
        "---\n\n"
    )


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class MarkdownNoteWriter(NoteWriter):
    """Writes each note as a markdown file with a front matter header.

    Parameters
    ----------
    output_dir:
        Directory to write into; created on first save.
    agent:
        Value recorded in the ``agent`` header field.
    clock:
        Callable returning the creation time.  Injected for tests.
    """

    def __init__(
        self,
        output_dir: str | Path = "research-notes",
        agent: str = DEFAULT_AGENT_NAME,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.agent = agent
        self._clock = clock or _utcnow

    def save(self, topic: str, content: str) -> str:
        created = self._clock()
        path = self.output_dir / note_filename(topic, created)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                metadata_header(topic, created, self.agent) + content,
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceFailure(
                f"Could not write research notes to {path}: {exc}",
                topic=topic,
                location=str(path),
            ) from exc
        logger.info("MarkdownNoteWriter: saved %d chars to %s", len(content), path)
        return str(path)
