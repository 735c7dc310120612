"""DOCX output renderer - the same header/section/bullet layout as the PDF."""

from __future__ import annotations

import io
import logging
from typing import Sequence

from docx import Document
from docx.shared import Pt, RGBColor

from gap_tailor.errors import RenderError
from gap_tailor.export.pdf_renderer import DEFAULT_BYLINE, DEFAULT_TITLE
from gap_tailor.models.tailoring import Section

logger = logging.getLogger(__name__)


def render_docx(
    sections: Sequence[Section],
    title: str = DEFAULT_TITLE,
    byline: str = DEFAULT_BYLINE,
) -> bytes:
    """Generate a .docx from the tailored sections and return its bytes."""
    try:
        doc = Document()

        font = doc.styles["Normal"].font
        font.name = "Calibri"
        font.size = Pt(10)

        doc.add_heading(title, level=0)
        byline_run = doc.add_paragraph().add_run(byline)
        byline_run.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

        for section in sections:
            _render_section(doc, section)

        buf = io.BytesIO()
        doc.save(buf)
        return buf.getvalue()
    except Exception as exc:
        logger.exception("DOCX rendering failed")
        raise RenderError(f"Failed to generate DOCX: {exc}") from exc


def _render_section(doc: Document, section: Section) -> None:
    heading = doc.add_heading(section.title.upper(), level=2)
    heading.runs[0].font.color.rgb = RGBColor(0x1A, 0x1A, 0x1A)
    for bullet in section.tailored_bullets:
        doc.add_paragraph(bullet, style="List Bullet")
