"""Pydantic models for extracted resume documents."""

from __future__ import annotations

from enum import Enum

from gap_tailor.models.base import WireModel


class FileType(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    LATEX = "latex"


class ResumeDocument(WireModel):
    content: str  # full extracted plain text
    filename: str
    file_type: FileType
