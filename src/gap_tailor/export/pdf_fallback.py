"""Fallback PDF renderer using fpdf2 (pure Python, no system deps)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from gap_tailor.models.tailoring import BULLET, Section

logger = logging.getLogger(__name__)

# Unicode-capable font search paths (Linux, macOS, Windows)
_UNICODE_FONT_PATHS = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


def _find_unicode_font() -> str | None:
    for path in _UNICODE_FONT_PATHS:
        if Path(path).exists():
            return path
    return None


def sections_to_pdf_fpdf2(
    sections: Sequence[Section],
    title: str = "Tailored Resume",
    byline: str = "Generated with Resume Tailor",
) -> bytes:
    """Draw the header and each section's tailored bullets on Letter pages."""
    pdf = FPDF(format="letter")
    pdf.set_margins(14, 14)
    pdf.set_auto_page_break(auto=True, margin=14)
    pdf.add_page()

    font_name = "Helvetica"
    font_path = _find_unicode_font()
    if font_path:
        try:
            pdf.add_font("ResumeFont", "", font_path)
            font_name = "ResumeFont"
        except (OSError, RuntimeError):
            logger.debug("Failed to load font %s", font_path)

    pdf.set_font(font_name, size=24)
    pdf.multi_cell(0, 11, _safe_text(title, pdf), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font_size(10)
    pdf.set_text_color(0x66, 0x66, 0x66)
    pdf.multi_cell(0, 6, _safe_text(byline, pdf), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_text_color(0, 0, 0)
    pdf.ln(6)

    for section in sections:
        pdf.set_font_size(14)
        pdf.multi_cell(
            0, 8, _safe_text(section.title.upper(), pdf), new_x=XPos.LMARGIN, new_y=YPos.NEXT
        )
        pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
        pdf.ln(2)
        pdf.set_font_size(10)
        for bullet in section.tailored_bullets:
            text = _safe_text(f"{BULLET}  {bullet}", pdf)
            pdf.multi_cell(0, 5, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(1)
        pdf.ln(4)

    return bytes(pdf.output())


def _safe_text(text: str, pdf: FPDF) -> str:
    """Ensure text is encodable by the current font. Replace if needed."""
    if pdf.is_ttf_font:
        return text
    # Built-in fonts (Helvetica etc.) are latin-1 only
    text = text.replace(BULLET, "-")
    try:
        text.encode("latin-1")
        return text
    except UnicodeEncodeError:
        return text.encode("latin-1", errors="replace").decode("latin-1")
