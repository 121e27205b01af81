"""Tests for deterministic document assembly."""

from __future__ import annotations

from doodle.domain.values import ResearchSection
from doodle.services.assembly import (
    assemble,
    collect_references,
    finalize_synthesis,
    format_references,
    has_references_heading,
    render_partial_document,
    slugify,
)


class TestSlugify:

    def test_lowercase_and_hyphens(self) -> None:
        assert slugify("Graph Coloring Basics") == "graph-coloring-basics"

    def test_punctuation_dropped(self) -> None:
        assert slugify("Time & Space: Complexity") == "time--space-complexity"

    def test_existing_hyphens_kept(self) -> None:
        assert slugify("Four-Color Theorem") == "four-color-theorem"


class TestReferences:

    def test_first_seen_order(self) -> None:
        sections = [
            ResearchSection("X", "x", ("A", "B")),
            ResearchSection("Y", "y", ("A", "C")),
        ]
        assert collect_references(sections) == ["A", "B", "C"]

    def test_numbered_list(self) -> None:
        assert format_references(["A", "B", "C"]) == "## References\n\n1. A\n2. B\n3. C\n"

    def test_heading_detection(self) -> None:
        assert has_references_heading("# T\n\n## References and Further Reading\n")
        assert has_references_heading("### sources\n- a")
        assert has_references_heading("**References and Further Reading**\n1. Foo")
        assert has_references_heading("See the REFERENCES below.")
        assert not has_references_heading("# T\n\nGreedy coloring.\n")


class TestAssemble:

    def test_layout(self, sample_sections) -> None:
        document = assemble("Graph Coloring", sample_sections, "Planar graphs are 4-colorable.")

        assert document.startswith("# Graph Coloring\n")
        order = [
            "## Table of Contents",
            "## Introduction",
            "## Fundamentals",
            "## Algorithms",
            "## Extra Knowledge",
            "## References",
        ]
        positions = [document.index(heading) for heading in order]
        assert positions == sorted(positions)

    def test_table_of_contents_links(self, sample_sections) -> None:
        document = assemble("Graph Coloring", sample_sections, "extra")
        assert "1. [Introduction](#introduction)" in document
        assert "2. [Fundamentals](#fundamentals)" in document
        assert "3. [Algorithms](#algorithms)" in document
        assert "4. [Extra Knowledge](#extra-knowledge)" in document
        assert "5. [References](#references)" in document

    def test_references_deduplicated(self, sample_sections) -> None:
        document = assemble("Graph Coloring", sample_sections, "")
        assert document.endswith("## References\n\n1. A\n2. B\n3. C\n")

    def test_blank_extra_knowledge_omitted(self, sample_sections) -> None:
        document = assemble("Graph Coloring", sample_sections, "   ")
        assert "Extra Knowledge" not in document

    def test_no_sources_no_references(self) -> None:
        document = assemble("T", [ResearchSection("A", "a")], "")
        assert "References" not in document

    def test_pure(self, sample_sections) -> None:
        first = assemble("Graph Coloring", sample_sections, "extra")
        second = assemble("Graph Coloring", list(sample_sections), "extra")
        assert first == second

    def test_empty_sections(self) -> None:
        document = assemble("T", [], "")
        assert document.startswith("# T\n")
        assert "## Introduction" in document


class TestFinalizeSynthesis:

    def test_appends_references_when_missing(self, sample_sections) -> None:
        result = finalize_synthesis("# Polished\n\nBody.\n", sample_sections)
        assert result == "# Polished\n\nBody.\n\n## References\n\n1. A\n2. B\n3. C\n"

    def test_untouched_when_heading_present(self, sample_sections) -> None:
        document = "# Polished\n\n## References and Further Reading\n\n- A\n"
        assert finalize_synthesis(document, sample_sections) == document

    def test_bold_reference_title_untouched(self) -> None:
        document = "# Polished\n\nBody.\n\n**References and Further Reading**\n1. Foo\n"
        assert finalize_synthesis(document, [ResearchSection("X", "x", ("A",))]) == document

    def test_text_kept_verbatim_when_appending(self, sample_sections) -> None:
        result = finalize_synthesis("# Polished\n\nBody.  ", sample_sections)
        assert result.startswith("# Polished\n\nBody.  \n\n## References\n")

    def test_untouched_without_sources(self) -> None:
        document = "# Polished\n"
        assert finalize_synthesis(document, [ResearchSection("A", "a")]) == document


class TestRenderPartialDocument:

    def test_error_header_and_content(self, sample_sections) -> None:
        document = render_partial_document(
            "Graph Coloring",
            "Planning reply contained no KEY_AREAS list",
            analysis="A classic problem.",
            sections=sample_sections[:1],
        )
        assert document.startswith("# Research Failed for Graph Coloring\n")
        assert "Error: Planning reply contained no KEY_AREAS list" in document
        assert "## Research Plan\n\nA classic problem." in document
        assert "## Fundamentals" in document
        assert "1. A\n2. B" in document

    def test_minimal(self) -> None:
        document = render_partial_document("T", "")
        assert document == "# Research Failed for T\n\nError: unknown error\n"
