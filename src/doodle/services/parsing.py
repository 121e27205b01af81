"""Response parser for the marker-based text protocol.

The text-generation service answers in free text that carries tagged
lines such as ``SCORE: 8``, ``COMPLETE: true`` or a ``KEY_AREAS:`` line
followed by a bulleted list.  Every function here is pure: it takes the
reply string and returns a ``pydantic`` record.

Each field is extracted independently.  A missing or malformed field
falls back to its default (score 5, booleans false, lists empty, text
empty) and is listed in the record's ``defaulted`` tuple, so one bad
field never invalidates the others.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field

from doodle.domain.values import (
    DEFAULT_SCORE,
    MAX_SCORE,
    MIN_SCORE,
    NextStep,
    QualityEvaluation,
    ResearchPlan,
    ResearchSection,
)

# -- Markers -----------------------------------------------------------------

ANALYSIS = "ANALYSIS"
KEY_AREAS = "KEY_AREAS"
SOURCES = "SOURCES"
SCORE = "SCORE"
COMPLETE = "COMPLETE"
FEEDBACK = "FEEDBACK"
MISSING_AREAS = "MISSING_AREAS"
SUGGESTIONS = "SUGGESTIONS"
HAS_MORE = "HAS_MORE"
FOCUS = "FOCUS"
REASON = "REASON"

MARKERS = (
    ANALYSIS, KEY_AREAS, SOURCES, SCORE, COMPLETE, FEEDBACK,
    MISSING_AREAS, SUGGESTIONS, HAS_MORE, FOCUS, REASON,
)

# Leading markdown decoration tolerated before a marker: "## ", "**", "- ".
_DECORATION = r"[ \t#>*_\-]*"
_ANY_MARKER = re.compile(
    rf"^{_DECORATION}(?:{'|'.join(MARKERS)})[*_]*[ \t]*:",
    re.MULTILINE | re.IGNORECASE,
)
_LIST_PREFIX = re.compile(r"^\s*(?:[-*+•]|\d+[.)])\s+")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?")
_FIRST_WORD = re.compile(r"[^a-z]*([a-z]+)")
_TRUE_WORDS = frozenset({"true", "yes", "y"})
_FALSE_WORDS = frozenset({"false", "no", "n"})
_NONE_WORDS = frozenset({"none", "n/a", "nothing"})


def _marker_pattern(marker: str) -> re.Pattern[str]:
    return re.compile(
        rf"^{_DECORATION}{marker}[*_]*[ \t]*:[*_]*[ \t]*(?P<rest>.*)$",
        re.MULTILINE | re.IGNORECASE,
    )


# -- Primitive extractors ----------------------------------------------------


def extract_field(text: str, marker: str) -> str | None:
    """Return the rest of the first line tagged with *marker*, stripped.

    Returns ``None`` when the marker does not occur.
    """
    match = _marker_pattern(marker).search(text)
    if match is None:
        return None
    return _strip_emphasis(match.group("rest"))


def extract_block(text: str, marker: str, last: bool = False) -> str | None:
    """Return everything after the *marker* line up to the next marker line.

    Any text on the marker line itself is included.  With ``last=True``
    the final occurrence of the marker is used.
    """
    matches = list(_marker_pattern(marker).finditer(text))
    if not matches:
        return None
    match = matches[-1] if last else matches[0]
    tail = text[match.end():]
    next_marker = _ANY_MARKER.search(tail)
    if next_marker is not None:
        tail = tail[: next_marker.start()]
    # tail starts with the newline that ends the marker line
    return (match.group("rest").strip() + tail).strip()


def parse_number(raw: str | None, default: float = DEFAULT_SCORE) -> float:
    """First number in *raw* (decimals allowed), else *default*."""
    if not raw:
        return default
    match = _NUMBER.search(raw)
    return float(match.group()) if match else default


def parse_bool(raw: str | None, default: bool = False) -> bool:
    """``true``/``yes`` -> True, ``false``/``no`` -> False, anything else -> *default*."""
    if not raw:
        return default
    match = _FIRST_WORD.match(raw.lower())
    if match is None:
        return default
    word = match.group(1)
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    return default


def split_items(raw: str | None, delimiter: str) -> list[str]:
    """Split *raw* on *delimiter*, trimming and dropping empty entries."""
    if not raw:
        return []
    items = [_strip_emphasis(item) for item in raw.split(delimiter)]
    return [item for item in items if item]


def parse_list_lines(block: str | None) -> list[str]:
    """One item per line, with bullet or number prefixes removed.

    If any line carries a bullet or number, only such lines are items and
    surrounding prose is ignored; otherwise every non-empty line is one.
    """
    if not block:
        return []
    lines = [line for line in block.splitlines() if line.strip()]
    if any(_LIST_PREFIX.match(line) for line in lines):
        lines = [line for line in lines if _LIST_PREFIX.match(line)]
    items: list[str] = []
    for line in lines:
        item = _strip_emphasis(_LIST_PREFIX.sub("", line))
        if item and not is_none(item):
            items.append(item)
    return items


def is_none(value: str) -> bool:
    """``True`` for the literal "none" (and close variants)."""
    return value.strip().strip("[]().").strip().lower() in _NONE_WORDS


def _strip_emphasis(value: str) -> str:
    return value.strip().strip("*_`").strip()


def _unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


# -- Structured records ------------------------------------------------------


class PlanOutput(BaseModel):
    """Parsed planning reply."""

    analysis: str = ""
    key_areas: list[str] = Field(default_factory=list)
    defaulted: tuple[str, ...] = ()

    def to_plan(self) -> ResearchPlan:
        return ResearchPlan(analysis=self.analysis, key_areas=tuple(self.key_areas))


class SectionOutput(BaseModel):
    """Parsed area-research reply: body text plus an optional sources block."""

    content: str = ""
    sources: list[str] = Field(default_factory=list)
    defaulted: tuple[str, ...] = ()

    def to_section(self, title: str) -> ResearchSection:
        return ResearchSection(title=title, content=self.content, sources=tuple(self.sources))


class EvaluationOutput(BaseModel):
    """Parsed quality-evaluation reply."""

    score: float = Field(default=DEFAULT_SCORE, ge=MIN_SCORE, le=MAX_SCORE)
    is_complete: bool = False
    feedback: str = ""
    missing_areas: list[str] = Field(default_factory=list)
    defaulted: tuple[str, ...] = ()

    def to_evaluation(self) -> QualityEvaluation:
        return QualityEvaluation(
            score=self.score,
            is_complete=self.is_complete,
            feedback=self.feedback,
            missing_areas=tuple(self.missing_areas),
        )


class NextStepOutput(BaseModel):
    """Parsed focus-selection reply."""

    has_more: bool = False
    focus: str = ""
    reason: str = ""
    defaulted: tuple[str, ...] = ()

    def to_next_step(self) -> NextStep:
        return NextStep(has_more=self.has_more, focus=self.focus, reason=self.reason)


# -- Reply parsers -----------------------------------------------------------


def parse_plan(text: str) -> PlanOutput:
    """Parse a planning reply.

    ``ANALYSIS:`` holds the topic overview; when absent, everything before
    the ``KEY_AREAS:`` line is taken as the analysis.  ``KEY_AREAS:`` is
    followed by one area per bulleted or numbered line (or a comma
    separated list on the marker line).  Duplicate areas are dropped.
    """
    defaulted: list[str] = []

    areas_block = extract_block(text, KEY_AREAS)
    if areas_block is None:
        key_areas: list[str] = []
        defaulted.append("key_areas")
    else:
        lines = [line for line in areas_block.splitlines() if line.strip()]
        if len(lines) == 1 and not _LIST_PREFIX.match(lines[0]) and "," in lines[0]:
            key_areas = [a for a in split_items(lines[0], ",") if not is_none(a)]
        else:
            key_areas = parse_list_lines(areas_block)
        key_areas = _unique(key_areas)
        if not key_areas:
            defaulted.append("key_areas")

    analysis = extract_block(text, ANALYSIS)
    if analysis is None:
        match = _marker_pattern(KEY_AREAS).search(text)
        analysis = text[: match.start()].strip() if match else text.strip()
    if not analysis:
        defaulted.append("analysis")

    return PlanOutput(analysis=analysis, key_areas=key_areas, defaulted=tuple(defaulted))


def parse_section(text: str) -> SectionOutput:
    """Split an area-research reply into body and trailing ``SOURCES:`` list."""
    matches = list(_marker_pattern(SOURCES).finditer(text))
    if not matches:
        return SectionOutput(content=text.strip(), defaulted=("sources",))

    marker = matches[-1]
    content = text[: marker.start()].rstrip()
    sources = _unique(parse_list_lines(extract_block(text, SOURCES, last=True)))
    defaulted = () if sources else ("sources",)
    return SectionOutput(content=content, sources=sources, defaulted=defaulted)


def parse_evaluation(text: str) -> EvaluationOutput:
    """Parse ``SCORE``, ``COMPLETE``, ``FEEDBACK`` and ``MISSING_AREAS``.

    ``MISSING_AREAS`` is semicolon-delimited (comma-delimited if it holds
    no semicolon); the literal ``none`` means an empty list.  The older
    ``SUGGESTIONS`` marker is read when ``MISSING_AREAS`` is absent.
    """
    defaulted: list[str] = []

    raw_score = extract_field(text, SCORE)
    score = parse_number(raw_score)
    if raw_score is None or not _NUMBER.search(raw_score):
        defaulted.append("score")
    score = min(MAX_SCORE, max(MIN_SCORE, score))

    raw_complete = extract_field(text, COMPLETE)
    is_complete = parse_bool(raw_complete)
    if raw_complete is None:
        defaulted.append("is_complete")

    feedback = extract_block(text, FEEDBACK)
    if feedback is None:
        feedback = ""
        defaulted.append("feedback")

    raw_missing = extract_field(text, MISSING_AREAS)
    if raw_missing is None:
        raw_missing = extract_field(text, SUGGESTIONS)
    if raw_missing is None:
        missing: list[str] = []
        defaulted.append("missing_areas")
    elif is_none(raw_missing):
        missing = []
    else:
        delimiter = ";" if ";" in raw_missing else ","
        missing = _unique([m for m in split_items(raw_missing, delimiter) if not is_none(m)])

    return EvaluationOutput(
        score=score,
        is_complete=is_complete,
        feedback=feedback,
        missing_areas=missing,
        defaulted=tuple(defaulted),
    )


def parse_next_step(text: str) -> NextStepOutput:
    """Parse ``HAS_MORE``, ``FOCUS`` and ``REASON``; a ``none`` focus is empty."""
    defaulted: list[str] = []

    raw_more = extract_field(text, HAS_MORE)
    if raw_more is None:
        defaulted.append("has_more")
    has_more = parse_bool(raw_more)

    focus = extract_field(text, FOCUS)
    if focus is None:
        defaulted.append("focus")
        focus = ""
    elif is_none(focus):
        focus = ""

    reason = extract_field(text, REASON)
    if reason is None:
        defaulted.append("reason")
        reason = ""

    return NextStepOutput(
        has_more=has_more,
        focus=focus.strip("[]").strip(),
        reason=reason,
        defaulted=tuple(defaulted),
    )
