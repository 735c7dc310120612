"""Data models for the gap-tailor pipeline."""

from gap_tailor.models.gaps import (
    GapAnalysisResult,
    GapAnswer,
    GapQuestion,
    Priority,
)
from gap_tailor.models.job import JobPosting
from gap_tailor.models.resume import FileType, ResumeDocument
from gap_tailor.models.tailoring import Recommendation, Section, TailoredData

__all__ = [
    "FileType",
    "GapAnalysisResult",
    "GapAnswer",
    "GapQuestion",
    "JobPosting",
    "Priority",
    "Recommendation",
    "ResumeDocument",
    "Section",
    "TailoredData",
]
