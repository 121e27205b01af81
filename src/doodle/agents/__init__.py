"""Session orchestration."""

from doodle.agents.researcher import ResearchController, research

__all__ = ["ResearchController", "research"]
