"""Document export (PDF and DOCX) for tailored resumes."""

import re

from gap_tailor.export.docx_renderer import render_docx
from gap_tailor.export.pdf_renderer import render_html_preview, render_pdf

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def download_filename(company: str | None = None, ext: str = "pdf") -> str:
    """``tailored-resume-<company-slug>.<ext>``, with ``custom`` when there is no company."""
    slug = re.sub(r"[^a-z0-9]+", "-", (company or "").lower()).strip("-") or "custom"
    return f"tailored-resume-{slug}.{ext}"


__all__ = [
    "DOCX_MEDIA_TYPE",
    "PDF_MEDIA_TYPE",
    "download_filename",
    "render_docx",
    "render_html_preview",
    "render_pdf",
]
