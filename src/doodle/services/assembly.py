"""Deterministic document assembly.

Everything in this module is a pure function of its arguments and never
calls the text-generation service, so :func:`assemble` can stand in for
model-driven synthesis when that fails.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from doodle.domain.values import ResearchSection

INTRODUCTION_TITLE = "Introduction"
EXTRA_KNOWLEDGE_TITLE = "Extra Knowledge"
REFERENCES_TITLE = "References"

_REFERENCE_MARKERS = ("references", "sources")


def slugify(title: str) -> str:
    """Anchor slug: lowercase, whitespace runs become ``-``.

    Characters other than letters, digits, ``-`` and ``_`` are dropped so
    that the anchor matches the rendered heading.
    """
    slug = re.sub(r"\s+", "-", title.strip().lower())
    return re.sub(r"[^\w-]", "", slug)


def collect_references(sections: Iterable[ResearchSection]) -> list[str]:
    """All section sources, exact duplicates removed, first-seen order kept."""
    seen: set[str] = set()
    references: list[str] = []
    for section in sections:
        for source in section.sources:
            if source not in seen:
                seen.add(source)
                references.append(source)
    return references


def format_references(references: Sequence[str]) -> str:
    """Numbered markdown list under a references heading."""
    lines = [f"## {REFERENCES_TITLE}", ""]
    lines.extend(f"{number}. {reference}" for number, reference in enumerate(references, 1))
    return "\n".join(lines) + "\n"


def has_references_heading(document: str) -> bool:
    """``True`` if *document* mentions references or sources, in any case.

    Bold titles such as ``**References and Further Reading**`` count as
    well as markdown headings.
    """
    lowered = document.lower()
    return any(marker in lowered for marker in _REFERENCE_MARKERS)


def _table_of_contents(titles: Sequence[str]) -> str:
    lines = ["## Table of Contents", ""]
    lines.extend(
        f"{number}. [{title}](#{slugify(title)})"
        for number, title in enumerate(titles, 1)
    )
    return "\n".join(lines) + "\n"


def _introduction(topic: str, sections: Sequence[ResearchSection]) -> str:
    if sections:
        areas = ", ".join(section.title for section in sections)
        body = (
            f"This document collects research notes on **{topic}**, "
            f"organized into {len(sections)} area(s): {areas}."
        )
    else:
        body = f"This document collects research notes on **{topic}**."
    return f"## {INTRODUCTION_TITLE}\n\n{body}\n"


def assemble(
    topic: str,
    sections: Sequence[ResearchSection],
    extra_knowledge: str,
) -> str:
    """Merge sections, extra knowledge and references into one document.

    Layout: title, table of contents, introduction, one ``##`` section per
    research section in order, the extra-knowledge block (omitted when
    blank) and a numbered, deduplicated reference list (omitted when no
    section has sources).
    """
    sections = list(sections)
    extra = extra_knowledge.strip()
    references = collect_references(sections)

    titles = [INTRODUCTION_TITLE] + [section.title for section in sections]
    if extra:
        titles.append(EXTRA_KNOWLEDGE_TITLE)
    if references:
        titles.append(REFERENCES_TITLE)

    parts = [
        f"# {topic}\n",
        _table_of_contents(titles),
        _introduction(topic, sections),
    ]
    parts.extend(section.render() for section in sections)
    if extra:
        parts.append(f"## {EXTRA_KNOWLEDGE_TITLE}\n\n{extra}\n")
    if references:
        parts.append(format_references(references))
    return "\n".join(parts)


def finalize_synthesis(document: str, sections: Sequence[ResearchSection]) -> str:
    """Append the reference list to a model-synthesized *document* if it has none.

    The document text itself is never altered: when it already mentions
    references or sources it is returned as is, otherwise the list is
    appended after a blank line.
    """
    references = collect_references(sections)
    if not references or has_references_heading(document):
        return document
    separator = "\n" if document.endswith("\n") else "\n\n"
    return f"{document}{separator}{format_references(references)}"


def render_partial_document(
    topic: str,
    error: str,
    analysis: str = "",
    sections: Sequence[ResearchSection] = (),
) -> str:
    """Error-annotated document for an aborted session.

    Keeps whatever was produced before the failure: the plan analysis and
    any researched sections.
    """
    parts = [f"# Research Failed for {topic}\n", f"Error: {error or 'unknown error'}\n"]
    if analysis.strip():
        parts.append(f"## Research Plan\n\n{analysis.strip()}\n")
    parts.extend(section.render() for section in sections)
    references = collect_references(sections)
    if references:
        parts.append(format_references(references))
    return "\n".join(parts)
