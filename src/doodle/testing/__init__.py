"""Public testing utilities for doodle.

Provides scripted text generators and an in-memory note writer for
writing self-contained examples and tests without API keys.
"""

from doodle.testing.mock_llm import RecordingNoteWriter, ScriptedTextGenerator

__all__ = ["RecordingNoteWriter", "ScriptedTextGenerator"]
