import io
import logging
import re
from pathlib import PurePath

from gap_tailor.errors import InvalidInput, ParseError, UnsupportedFormat
from gap_tailor.models.resume import FileType, ResumeDocument
from gap_tailor.parsers.latex import latex_to_text

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_EXTENSIONS = {
    ".pdf": FileType.PDF,
    ".docx": FileType.DOCX,
    ".tex": FileType.LATEX,
    ".latex": FileType.LATEX,
}
_MIME_TYPES = {
    PDF_MIME: FileType.PDF,
    DOCX_MIME: FileType.DOCX,
}

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def detect_file_type(filename: str, mime_type: str | None = None) -> FileType:
    """Detect the resume format by extension, then by declared MIME type.

    LaTeX is recognised by extension only. Content is never sniffed.
    """
    suffix = PurePath(filename or "").suffix.lower()
    if suffix in _EXTENSIONS:
        return _EXTENSIONS[suffix]
    if mime_type:
        base = mime_type.split(";", 1)[0].strip().lower()
        if base in _MIME_TYPES:
            return _MIME_TYPES[base]
    raise UnsupportedFormat(f"Unsupported file type: {filename}")


def parse_resume(
    data: bytes,
    filename: str,
    mime_type: str | None = None,
    *,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> ResumeDocument:
    """Extract a resume upload into a ResumeDocument."""
    if not data:
        raise InvalidInput("No file provided")
    if len(data) > max_bytes:
        raise InvalidInput(f"File is too large (limit {max_bytes // (1024 * 1024)} MB)")

    file_type = detect_file_type(filename, mime_type)
    content = extract(data, filename, mime_type, file_type=file_type)
    logger.info("Extracted %d characters from %s (%s)", len(content), filename, file_type.value)
    return ResumeDocument(content=content, filename=filename, file_type=file_type)


def extract(
    data: bytes,
    filename: str,
    mime_type: str | None = None,
    *,
    file_type: FileType | None = None,
) -> str:
    """Return the plain text of a PDF, DOCX or LaTeX resume."""
    file_type = file_type or detect_file_type(filename, mime_type)
    if file_type is FileType.PDF:
        return clean_text(_parse_pdf(data))
    if file_type is FileType.DOCX:
        return clean_text(_parse_docx(data))
    return latex_to_text(data.decode("utf-8", errors="replace"))


def clean_text(text: str) -> str:
    """Clean extraction artifacts from PDF/DOCX text.

    Handles: unicode artifacts, runs of spaces, trailing whitespace and
    excessive blank lines. Bullet glyphs are kept as-is.
    """
    # BOM, zero-width spaces, soft hyphens
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)

    lines = [re.sub(r"[ \t]{2,}", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _parse_pdf(data: bytes) -> str:
    import fitz  # pymupdf

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise ParseError(f"Failed to parse PDF: {exc}") from exc
    try:
        return "\n".join(page.get_text() for page in doc)
    except Exception as exc:
        raise ParseError(f"Failed to parse PDF: {exc}") from exc
    finally:
        doc.close()


def _parse_docx(data: bytes) -> str:
    from docx import Document

    try:
        doc = Document(io.BytesIO(data))
    except Exception as exc:
        raise ParseError(f"Failed to parse DOCX: {exc}") from exc

    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)
