"""doodle: iterative, self-evaluating research notes.

Plans a topic into key areas, researches them over a bounded
evaluate-and-refine loop driven by a LangGraph ``StateGraph``, and
saves a synthesized markdown document.
"""

__version__ = "0.1.0"

from doodle.agents.researcher import ResearchController, research
from doodle.domain.values import ResearchReport
from doodle.graph import ResearchState, build_research_graph
from doodle.infrastructure.config import ResearchConfig

__all__ = [
    "ResearchConfig",
    "ResearchController",
    "ResearchReport",
    "ResearchState",
    "build_research_graph",
    "research",
]
