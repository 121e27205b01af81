"""Shared fixtures for the doodle test suite."""

from __future__ import annotations

import re

import pytest

from doodle.domain.values import QualityEvaluation, ResearchSection
from doodle.infrastructure.config import ResearchConfig
from doodle.testing import RecordingNoteWriter

PLAN_REPLY = (
    "ANALYSIS:\n"
    "Graph coloring assigns colors to vertices so that adjacent vertices differ.\n"
    "KEY_AREAS:\n"
    "- Fundamentals\n"
    "- Algorithms\n"
)

_AREA = re.compile(r'^You are researching "(?P<area>.+?)" as part')
_DRAFT = re.compile(
    r"Researched sections:\n---\n(?P<draft>.*?)\n---\n\n"
    r"Extra knowledge:\n---\n(?P<extra>.*?)\n---\n",
    re.S,
)


def classify(prompt: str) -> str:
    """Name the kind of prompt from its opening words."""
    if prompt.startswith("You are a research expert"):
        return "plan"
    if prompt.startswith("You are researching"):
        return "research"
    if prompt.startswith("Evaluate the quality"):
        return "evaluate"
    if prompt.startswith("Review the current research document"):
        return "next_step"
    if prompt.startswith("Based on research about"):
        return "extra"
    if prompt.startswith("Polish and finalize"):
        return "synthesis"
    return "unknown"


class PromptRouter:
    """Answers each prompt kind from its own script.

    ``sections`` maps an area to a reply (or a list of replies consumed in
    order); unmapped areas get ``default_section``.  ``evaluations`` is
    consumed in order, then ``default_evaluation`` repeats.  The default
    synthesis echoes the draft and extra knowledge it was given.  Exceptions are raised.
    """

    def __init__(self) -> None:
        self.plan: str | Exception = PLAN_REPLY
        self.sections: dict[str, str | Exception | list[str | Exception]] = {}
        self.default_section = "Body text about {area}.\nSOURCES:\n- Source for {area}\n"
        self.evaluations: list[str | Exception] = []
        self.default_evaluation = (
            "SCORE: 6\nCOMPLETE: false\nFEEDBACK: Needs more depth.\nMISSING_AREAS: none\n"
        )
        self.next_step: str | Exception = "HAS_MORE: false\nFOCUS: none\nREASON: Covered.\n"
        self.extra: str | Exception = "Extra insights about the field."
        self.synthesis: str | Exception | None = None
        self.calls: list[str] = []
        self.researched: list[str] = []

    def __call__(self, prompt: str) -> str:
        kind = classify(prompt)
        self.calls.append(kind)
        reply = self._reply(kind, prompt)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def _reply(self, kind: str, prompt: str) -> str | Exception:
        if kind == "plan":
            return self.plan
        if kind == "research":
            match = _AREA.match(prompt)
            area = match.group("area") if match else "?"
            self.researched.append(area)
            scripted = self.sections.get(area)
            if isinstance(scripted, list):
                return scripted.pop(0) if scripted else self.default_section.format(area=area)
            if scripted is not None:
                return scripted
            return self.default_section.format(area=area)
        if kind == "evaluate":
            return self.evaluations.pop(0) if self.evaluations else self.default_evaluation
        if kind == "next_step":
            return self.next_step
        if kind == "extra":
            return self.extra
        if kind == "synthesis":
            if self.synthesis is not None:
                return self.synthesis
            match = _DRAFT.search(prompt)
            if match is None:
                return ""
            return f"{match.group('draft')}\n## Extra Knowledge\n\n{match.group('extra')}\n"
        raise AssertionError(f"Unexpected prompt: {prompt[:80]!r}")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def router() -> PromptRouter:
    return PromptRouter()


@pytest.fixture
def writer() -> RecordingNoteWriter:
    return RecordingNoteWriter()


@pytest.fixture
def small_config(tmp_path) -> ResearchConfig:
    """Three iterations, default threshold, notes under ``tmp_path``."""
    return ResearchConfig(max_iterations=3, output_dir=str(tmp_path / "notes"))


@pytest.fixture
def sample_sections() -> list[ResearchSection]:
    return [
        ResearchSection("Fundamentals", "Vertices and edges.", ("A", "B")),
        ResearchSection("Algorithms", "Greedy and DSatur.", ("A", "C")),
    ]


@pytest.fixture
def complete_evaluation() -> QualityEvaluation:
    return QualityEvaluation(score=9.0, is_complete=True, feedback="Thorough.")
