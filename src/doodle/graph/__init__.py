"""LangGraph research loop.

Public API
----------
build_research_graph
    Build and compile the plan / research / evaluate / synthesize graph.
ResearchState
    The TypedDict state flowing through the graph.

Node factories:
    make_plan_node, make_research_node, make_evaluate_node,
    make_synthesize_node, abort_node

Edge functions:
    after_planning, should_continue_research
"""

from doodle.graph.edges import after_planning, should_continue_research
from doodle.graph.graph import build_research_graph
from doodle.graph.nodes import (
    abort_node,
    advance_phase,
    make_evaluate_node,
    make_plan_node,
    make_research_node,
    make_synthesize_node,
    pending_areas,
)
from doodle.graph.state import ResearchState, initial_state

__all__ = [
    "ResearchState",
    "abort_node",
    "advance_phase",
    "after_planning",
    "build_research_graph",
    "initial_state",
    "make_evaluate_node",
    "make_plan_node",
    "make_research_node",
    "make_synthesize_node",
    "pending_areas",
    "should_continue_research",
]
