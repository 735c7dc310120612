"""Pydantic models for job postings (scraped or typed in)."""

from __future__ import annotations

from pydantic import Field

from gap_tailor.models.base import WireModel

DEFAULT_TITLE = "Job Position"
DEFAULT_COMPANY = "Company"


class JobPosting(WireModel):
    title: str = DEFAULT_TITLE
    company: str = DEFAULT_COMPANY
    description: str = ""
    raw_text: str = ""
    url: str | None = None
    requirements: list[str] = Field(default_factory=list)
    responsibilities: list[str] = Field(default_factory=list)

    @classmethod
    def manual(cls, title: str, company: str, description: str) -> JobPosting:
        """Build a posting from manually entered fields."""
        description = (description or "").strip()
        return cls(
            title=(title or "").strip() or DEFAULT_TITLE,
            company=(company or "").strip() or DEFAULT_COMPANY,
            description=description,
            raw_text=description,
        )

    @property
    def text_for_model(self) -> str:
        """The job text sent to the model: description, else the raw page text."""
        return self.description or self.raw_text
