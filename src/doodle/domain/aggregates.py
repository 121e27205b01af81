"""Aggregates for doodle.

``SectionStore`` is the ordered collection of research sections owned by
one session.  Sections are keyed by title; ``upsert`` replaces an
existing section in its original position or appends a new one, so the
rendering order is the order in which titles were first researched.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .values import ResearchSection


class SectionStore:
    """Ordered mapping of section title -> :class:`ResearchSection`."""

    def __init__(self, sections: Iterable[ResearchSection] = ()) -> None:
        self._sections: dict[str, ResearchSection] = {}
        for section in sections:
            self.upsert(section)

    def upsert(self, section: ResearchSection) -> bool:
        """Insert or replace *section* by title.

        Returns ``True`` if an existing section was replaced.
        """
        replaced = section.title in self._sections
        # dict assignment keeps the original slot for an existing key
        self._sections[section.title] = section
        return replaced

    def get(self, title: str) -> ResearchSection | None:
        return self._sections.get(title)

    @property
    def titles(self) -> list[str]:
        return list(self._sections)

    @property
    def sections(self) -> list[ResearchSection]:
        return list(self._sections.values())

    def copy(self) -> SectionStore:
        return SectionStore(self._sections.values())

    def render(self) -> str:
        """Concatenate every section as heading + body."""
        return "\n".join(section.render() for section in self._sections.values())

    def __contains__(self, title: object) -> bool:
        return title in self._sections

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[ResearchSection]:
        return iter(list(self._sections.values()))

    def __repr__(self) -> str:
        return f"SectionStore(titles={self.titles!r})"


def append_unique(existing: Iterable[str], new: Iterable[str]) -> list[str]:
    """Return *existing* followed by the items of *new* not already present.

    Matching is exact string equality; order is preserved and blank items
    are skipped.
    """
    result = list(existing)
    seen = set(result)
    for item in new:
        if item and item not in seen:
            result.append(item)
            seen.add(item)
    return result
