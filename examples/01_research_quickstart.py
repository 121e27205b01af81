#!/usr/bin/env python3
"""Example 01: research a topic and save markdown notes.

Plans the topic into key areas, researches them, evaluates the document
after every iteration and stops once it scores at least the quality
threshold and is marked complete (or the iteration budget runs out).

Self-contained: runs with a scripted backend by default (no API key
required).  Set GOOGLE_API_KEY (or MODEL_PROVIDER=openai plus
OPENAI_API_KEY) for a real model.

Run:
    PYTHONPATH=src python examples/01_research_quickstart.py "Graph Coloring"
"""

from __future__ import annotations

import logging
import os
import sys

from doodle import ResearchConfig, research
from doodle.infrastructure.llm.factory import API_KEY_VARS
from doodle.testing import ScriptedTextGenerator


def _scripted_reply(prompt: str) -> str:
    """Canned replies keyed on the opening words of each prompt."""
    if prompt.startswith("You are a research expert"):
        return (
            "ANALYSIS:\n"
            "Graph coloring assigns colors to vertices so that no edge joins two "
            "vertices of the same color.\n"
            "KEY_AREAS:\n"
            "- Fundamentals\n"
            "- Algorithms\n"
        )
    if prompt.startswith("You are researching \"Fundamentals\""):
        return (
            "A proper coloring uses the fewest colors possible; that number is "
            "the chromatic number.\n\n"
            "SOURCES:\n"
            "- Diestel, Graph Theory, chapter 5\n"
        )
    if prompt.startswith("You are researching"):
        return (
            "Greedy coloring uses at most one more color than the maximum degree. "
            "DSatur picks the vertex with the most distinct neighbor colors first.\n\n"
            "SOURCES:\n"
            "- Brelaz, New methods to color the vertices of a graph (1979)\n"
        )
    if prompt.startswith("Evaluate the quality"):
        return "SCORE: 9\nCOMPLETE: true\nFEEDBACK: Clear and focused.\nMISSING_AREAS: none\n"
    if prompt.startswith("Based on research about"):
        return "Register allocation in compilers is a graph coloring problem."
    return ""  # blank synthesis reply: the assembled document is used


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    topic = " ".join(sys.argv[1:]) or "Graph Coloring"

    config = ResearchConfig.from_env()
    generator = None
    if not os.environ.get(API_KEY_VARS.get(config.provider, "")):
        print("No API key found; using the scripted backend.\n")
        generator = ScriptedTextGenerator(handler=_scripted_reply)

    report = research(topic, config=config, generator=generator)

    print(f"\nPhase:      {report.phase.value}")
    print(f"Iterations: {report.iterations}")
    print(f"Sections:   {report.section_count}")
    print(f"Characters: {report.character_length}")
    print(f"Saved to:   {report.location}")
    if report.error:
        print(f"Error:      {report.error}")


if __name__ == "__main__":
    main()
