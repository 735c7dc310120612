"""Pydantic models for Resume Tailoring Engine output."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from gap_tailor.models.base import WireModel

BULLET = "•"


class Recommendation(str, Enum):
    ORIGINAL = "original"
    TAILORED = "tailored"


class Section(WireModel):
    """One labeled group of bullets with original and tailored phrasings.

    ``tailored_bullets`` may be longer or shorter than ``original_bullets``;
    nothing here truncates or pads the data.
    """

    title: str
    original_bullets: list[str] = Field(default_factory=list)
    tailored_bullets: list[str] = Field(default_factory=list)
    ai_recommendations: list[Recommendation] | None = None

    def rows(self) -> list[tuple[str | None, str | None, Recommendation | None]]:
        """Index-aligned (original, tailored, recommendation) rows for display."""
        recs = self.ai_recommendations or []
        count = max(len(self.original_bullets), len(self.tailored_bullets))
        return [
            (
                self.original_bullets[i] if i < len(self.original_bullets) else None,
                self.tailored_bullets[i] if i < len(self.tailored_bullets) else None,
                recs[i] if i < len(recs) else None,
            )
            for i in range(count)
        ]

    def with_bullet(self, index: int, text: str) -> Section:
        """Return a copy with one tailored bullet replaced."""
        if not 0 <= index < len(self.tailored_bullets):
            raise IndexError(f"bullet index {index} out of range for section {self.title!r}")
        bullets = list(self.tailored_bullets)
        bullets[index] = text
        return self.model_copy(update={"tailored_bullets": bullets})

    def as_text(self) -> str:
        lines = [self.title]
        lines.extend(f"{BULLET} {b}" for b in self.tailored_bullets)
        return "\n".join(lines)


class TailoredData(WireModel):
    sections: list[Section] = Field(default_factory=list)
    summary: str = ""
    key_matches: list[str] = Field(default_factory=list)

    def with_bullet(self, section_index: int, bullet_index: int, text: str) -> TailoredData:
        """Return a copy with one tailored bullet edited; every other bullet is untouched."""
        if not 0 <= section_index < len(self.sections):
            raise IndexError(f"section index {section_index} out of range")
        sections = list(self.sections)
        sections[section_index] = sections[section_index].with_bullet(bullet_index, text)
        return self.model_copy(update={"sections": sections})

    def as_text(self) -> str:
        """All tailored bullets as plain text, one block per section."""
        return "\n\n".join(s.as_text() for s in self.sections)
