"""Infrastructure layer: configuration, persistence and text-generation backends."""

from doodle.infrastructure.config import ResearchConfig, load_config_from_json
from doodle.infrastructure.persistence import MarkdownNoteWriter, NoteWriter

__all__ = [
    "MarkdownNoteWriter",
    "NoteWriter",
    "ResearchConfig",
    "load_config_from_json",
]
