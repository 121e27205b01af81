"""Build the research StateGraph.

``build_research_graph()`` wires the plan, research, evaluate, synthesize
and abort nodes into a compiled LangGraph::

    START -> plan -> research -> evaluate -> (research | synthesize) -> END
                 \\-> abort -> END
"""

from typing import Any

from langgraph.graph import END, START, StateGraph

from doodle.graph.edges import after_planning, should_continue_research
from doodle.graph.nodes import (
    abort_node,
    make_evaluate_node,
    make_plan_node,
    make_research_node,
    make_synthesize_node,
)
from doodle.graph.state import ResearchState
from doodle.services.planning import FocusSelector, Planner
from doodle.services.quality_gate import QualityGate
from doodle.services.research import AreaResearcher
from doodle.services.synthesis import Synthesizer


def build_research_graph(
    planner: Planner,
    researcher: AreaResearcher,
    gate: QualityGate,
    synthesizer: Synthesizer,
    focus_selector: FocusSelector | None = None,
) -> Any:
    """Build and compile the research StateGraph.

    Parameters
    ----------
    planner:
        Produces the analysis and key areas.
    researcher:
        Researches one area at a time.
    gate:
        Scores the document after each research iteration.
    synthesizer:
        Produces the extra-knowledge block and the final document.
    focus_selector:
        Optional; proposes a new area when none is pending.

    Returns
    -------
    CompiledStateGraph
        A compiled graph ready for ``.invoke()`` or ``.stream()``.
    """
    graph = StateGraph(ResearchState)

    graph.add_node("plan", make_plan_node(planner))
    graph.add_node("research", make_research_node(researcher, focus_selector))
    graph.add_node("evaluate", make_evaluate_node(gate))
    graph.add_node("synthesize", make_synthesize_node(synthesizer))
    graph.add_node("abort", abort_node)

    graph.add_edge(START, "plan")
    graph.add_conditional_edges(
        "plan",
        after_planning,
        {"research": "research", "abort": "abort"},
    )
    graph.add_edge("research", "evaluate")
    graph.add_conditional_edges(
        "evaluate",
        should_continue_research,
        {"research": "research", "synthesize": "synthesize"},
    )
    graph.add_edge("synthesize", END)
    graph.add_edge("abort", END)

    return graph.compile()
