"""End-to-end tests for the research controller."""

from __future__ import annotations

import logging

import pytest

from doodle import research
from doodle.agents.researcher import ResearchController
from doodle.domain.enums import ResearchPhase
from doodle.domain.exceptions import PersistenceFailure
from doodle.infrastructure.config import ResearchConfig
from doodle.infrastructure.llm import LLMError
from doodle.services.assembly import assemble
from doodle.testing import RecordingNoteWriter, ScriptedTextGenerator

TOPIC = "Graph Coloring"


class TestGraphColoringScenario:
    """Two key areas, score 9 and complete on the first evaluation."""

    def test_single_iteration_with_both_headings(self, router, writer) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true\nFEEDBACK: Great.\nMISSING_AREAS: none"]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.DONE
        assert report.succeeded
        assert report.iterations == 1
        assert report.section_count == 2
        assert report.final_score == 9.0
        assert report.location == "memory://1"

        saved_topic, content = writer.saved[0]
        assert saved_topic == TOPIC
        assert "## Fundamentals" in content
        assert "## Algorithms" in content
        assert report.character_length == len(content)

    def test_summary_logged(self, router, writer, caplog) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)
        with caplog.at_level(logging.INFO, logger="doodle.agents.researcher"):
            controller.research(TOPIC)
        assert "memory://1" in caplog.text
        assert "1 iteration(s), 2 section(s)" in caplog.text


class TestAbort:

    def test_planning_without_key_areas(self, router, writer) -> None:
        router.plan = "ANALYSIS:\nGraph coloring is hard.\n"
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.ABORTED
        assert "KEY_AREAS" in report.error
        assert len(writer.saved) == 1
        content = writer.last_content
        assert content.startswith(f"# Research Failed for {TOPIC}")
        assert "Graph coloring is hard." in content

    def test_internal_error_keeps_partial_content(self, router, writer, monkeypatch) -> None:
        def broken(*args, **kwargs):
            raise RuntimeError("store corrupted")

        monkeypatch.setattr("doodle.graph.nodes.pending_areas", broken)
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.ABORTED
        assert "RuntimeError: store corrupted" in report.error
        content = writer.last_content
        assert content.startswith(f"# Research Failed for {TOPIC}")
        assert "## Research Plan" in content

    def test_blank_topic_rejected(self, writer) -> None:
        controller = ResearchController(ScriptedTextGenerator(), writer)
        with pytest.raises(ValueError, match="topic"):
            controller.research("   ")
        assert writer.saved == []


class TestBackendErrors:
    """Backends may raise any exception; each step absorbs it."""

    def test_area_error_retried_next_iteration(self, router, writer) -> None:
        router.sections["Algorithms"] = [ConnectionError("reset"), "Recovered body."]
        router.evaluations = [
            "SCORE: 6\nCOMPLETE: false",
            "SCORE: 9\nCOMPLETE: true",
        ]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.DONE
        assert report.error == ""
        assert report.iterations == 2
        assert report.section_count == 2
        assert "Recovered body." in writer.last_content

    def test_synthesis_timeout_yields_assembled_document(self, router, writer) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        router.synthesis = TimeoutError("synthesis timed out")
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        state = controller.run(TOPIC)

        expected = assemble(TOPIC, state["sections"].sections, state["extra_knowledge"])
        assert state["phase"] is ResearchPhase.DONE
        assert state["document"] == expected
        assert state["document"].startswith(f"# {TOPIC}\n")

    def test_evaluation_error_uses_defaults(self, router, writer) -> None:
        router.evaluations = [RuntimeError("evaluator crashed")]
        config = ResearchConfig(max_iterations=2)
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer, config)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.DONE
        assert report.iterations == 2


class TestSynthesisFallback:

    def test_synthesis_error_yields_assembled_document(self, router, writer) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        router.synthesis = LLMError("synthesis unavailable")
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        state = controller.run(TOPIC)

        expected = assemble(TOPIC, state["sections"].sections, state["extra_knowledge"])
        assert state["phase"] is ResearchPhase.DONE
        assert state["document"] == expected

    def test_extra_knowledge_error_uses_placeholder(self, router, writer) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        router.extra = LLMError("down")
        config = ResearchConfig(extra_knowledge_placeholder="_nothing extra_")
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer, config)

        state = controller.run(TOPIC)

        assert state["extra_knowledge"] == "_nothing extra_"
        assert "_nothing extra_" in state["document"]


class TestLoopBounds:

    def test_iteration_cap(self, router, writer, small_config) -> None:
        router.default_evaluation = "SCORE: 9\nCOMPLETE: false"
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer, small_config)

        report = controller.research(TOPIC)

        assert report.phase is ResearchPhase.DONE
        assert report.iterations == small_config.max_iterations
        assert router.calls.count("evaluate") == small_config.max_iterations

    def test_single_iteration_budget(self, router, writer) -> None:
        config = ResearchConfig(max_iterations=1)
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer, config)
        assert controller.research(TOPIC).iterations == 1

    def test_evaluation_failure_does_not_stop_loop(self, router, writer) -> None:
        router.evaluations = [LLMError("timeout"), "SCORE: 9\nCOMPLETE: true"]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        report = controller.research(TOPIC)

        assert report.iterations == 2
        types = [event["type"] for event in report.metadata["events"]]
        assert "evaluation_defaulted" in types


class TestAreaBookkeeping:

    def test_missing_areas_deduplicated_and_updated_in_place(self, router, writer) -> None:
        router.evaluations = [
            "SCORE: 6\nCOMPLETE: false\nMISSING_AREAS: Algorithms; History",
            "SCORE: 9\nCOMPLETE: true\nMISSING_AREAS: none",
        ]
        router.sections["Algorithms"] = [
            "Greedy only.\nSOURCES:\n- Brooks 1941",
            "Greedy and DSatur.\nSOURCES:\n- Brelaz 1979",
        ]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        state = controller.run(TOPIC)

        assert state["key_areas"] == ["Fundamentals", "Algorithms", "History"]
        assert state["sections"].titles == ["Fundamentals", "Algorithms", "History"]
        assert state["sections"].get("Algorithms").content == "Greedy and DSatur."
        assert router.researched.count("Algorithms") == 2

    def test_failed_area_retried_next_iteration(self, router, writer) -> None:
        router.sections["Algorithms"] = [LLMError("flaky"), "Recovered.\nSOURCES:\n- x"]
        router.evaluations = ["SCORE: 6\nCOMPLETE: false", "SCORE: 9\nCOMPLETE: true"]
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer)

        state = controller.run(TOPIC)

        assert state["iteration"] == 2
        assert state["sections"].get("Algorithms").content == "Recovered."

    def test_focus_selection_only_after_areas_covered(self, router, writer) -> None:
        router.next_step = "HAS_MORE: true\nFOCUS: Applications\nREASON: Not covered."
        config = ResearchConfig(max_iterations=2)
        controller = ResearchController(ScriptedTextGenerator(handler=router), writer, config)

        state = controller.run(TOPIC)

        first_focus = router.calls.index("next_step")
        assert router.calls[:first_focus].count("research") == 2
        assert state["sections"].titles == ["Fundamentals", "Algorithms", "Applications"]


class TestPersistence:

    def test_persistence_failure_propagates(self, router) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        controller = ResearchController(
            ScriptedTextGenerator(handler=router), RecordingNoteWriter(fail=True)
        )
        with pytest.raises(PersistenceFailure):
            controller.research(TOPIC)

    def test_default_writer_saves_markdown(self, router, small_config) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        controller = ResearchController(ScriptedTextGenerator(handler=router), config=small_config)

        report = controller.research(TOPIC)

        assert report.location.startswith(small_config.output_dir)
        assert report.location.endswith(".md")
        with open(report.location, encoding="utf-8") as handle:
            text = handle.read()
        assert "agent: doodle v0" in text
        assert "## Fundamentals" in text


class TestResearchFunction:

    def test_with_explicit_generator(self, router, writer) -> None:
        router.evaluations = ["SCORE: 9\nCOMPLETE: true"]
        report = research(
            TOPIC,
            config=ResearchConfig(),
            generator=ScriptedTextGenerator(handler=router),
            writer=writer,
        )
        assert report.succeeded
        assert len(writer.saved) == 1

    def test_invalid_config_rejected_before_session(self, writer) -> None:
        generator = ScriptedTextGenerator()
        with pytest.raises(ValueError, match="max_iterations"):
            research(TOPIC, ResearchConfig(max_iterations=0), generator, writer)
        assert generator.call_count == 0
