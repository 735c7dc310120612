"""Exception hierarchy shared by the extractor, scraper, model steps and surfaces.

Each error carries the HTTP status the API answers with and a short message
that is safe to show to the user.
"""

from __future__ import annotations


class GapTailorError(Exception):
    """Base class for all expected, user-recoverable failures."""

    status_code: int = 500
    user_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidInput(GapTailorError, ValueError):
    """Missing or malformed request fields."""

    status_code = 400
    user_message = "Invalid input."


class OperationInProgress(InvalidInput):
    """The same step is already running for this session."""

    status_code = 409
    user_message = "This step is already running. Wait for it to finish."


class UnsupportedFormat(InvalidInput):
    """The uploaded resume is not PDF, DOCX or LaTeX."""

    user_message = "Unsupported file type. Upload a PDF, DOCX or LaTeX (.tex) file."


class InvalidUrl(InvalidInput):
    """The job posting URL is malformed or points somewhere we refuse to fetch."""

    user_message = "Invalid URL format."


class ParseError(GapTailorError):
    """The extraction library rejected the file content."""

    status_code = 400
    user_message = "Could not read the uploaded file."


class FetchError(GapTailorError):
    """Retrieving the job posting failed (HTTP status or network)."""

    status_code = 500
    user_message = "Failed to fetch the job posting. Try again or enter it manually."

    def __init__(self, message: str | None = None, status: int | None = None):
        super().__init__(message)
        self.status = status


class ModelError(GapTailorError):
    """The language model call itself failed."""

    status_code = 500
    user_message = "The analysis failed. Please try again."


class MalformedResponse(ModelError):
    """The model answered with something that is not the expected JSON."""

    def __init__(self, message: str | None = None, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class TimeoutExceeded(GapTailorError):
    """An outbound call did not finish before its deadline."""

    status_code = 504
    user_message = "The request took too long. Please try again."

    def __init__(self, operation: str, seconds: float | None = None):
        detail = f"{operation} timed out"
        if seconds is not None:
            detail += f" after {seconds:g}s"
        super().__init__(detail)
        self.operation = operation
        self.seconds = seconds


class Cancelled(GapTailorError):
    """An outbound call was cancelled by its caller."""

    status_code = 499
    user_message = "The request was cancelled."

    def __init__(self, operation: str):
        super().__init__(f"{operation} was cancelled")
        self.operation = operation


class RenderError(GapTailorError):
    """Producing the downloadable document failed."""

    status_code = 500
    user_message = "Failed to generate the document."


class InvalidTransition(GapTailorError):
    """A gap-resolution action is not allowed in the current state."""

    status_code = 409
    user_message = "That action is not available right now."
