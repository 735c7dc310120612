"""HTTP API: the stateless boundary operations, one request per user action.

Run with ``gap-tailor serve`` or ``uvicorn --factory gap_tailor.api:create_app``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from starlette.concurrency import run_in_threadpool

from gap_tailor.config import AppConfig, load_config
from gap_tailor.errors import GapTailorError, InvalidInput
from gap_tailor.export import DOCX_MEDIA_TYPE, PDF_MEDIA_TYPE
from gap_tailor.models.gaps import GapAnswer
from gap_tailor.models.tailoring import Section
from gap_tailor.pipeline.orchestrator import TailorOrchestrator

logger = logging.getLogger(__name__)


class _Request(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScrapeJobRequest(_Request):
    url: str = ""


class AnalyzeGapsRequest(_Request):
    resume_content: str = ""
    job_description: str = ""
    job_title: str = ""
    company: str = ""


class TailorResumeRequest(AnalyzeGapsRequest):
    gap_answers: list[GapAnswer] = Field(default_factory=list)


class RenderRequest(_Request):
    sections: list[Section] | None = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _attachment(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def create_app(
    config: AppConfig | None = None,
    orchestrator: TailorOrchestrator | None = None,
) -> FastAPI:
    config = config or load_config()
    orchestrator = orchestrator or TailorOrchestrator.from_config(config)

    app = FastAPI(title="gap-tailor", version="0.1.0")
    app.state.orchestrator = orchestrator

    @app.exception_handler(GapTailorError)
    async def _handle_app_error(request: Request, exc: GapTailorError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"Invalid request: {field + ': ' if field else ''}{first.get('msg', '')}"
        else:
            message = "Invalid request"
        return _error(400, message)

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.post("/api/parse-resume")
    async def parse_resume(file: UploadFile | None = File(None)) -> dict:
        if file is None:
            raise InvalidInput("No file provided")
        # One byte past the limit is enough to reject an oversized upload
        data = await file.read(config.limits.max_upload_bytes + 1)
        document = await run_in_threadpool(
            orchestrator.extract_resume, data, file.filename or "", file.content_type
        )
        return document.to_wire()

    @app.post("/api/scrape-job")
    async def scrape_job(body: ScrapeJobRequest) -> dict:
        if not body.url.strip():
            raise InvalidInput("No URL provided")
        job = await orchestrator.fetch_job(body.url)
        return job.to_wire()

    @app.post("/api/analyze-gaps")
    async def analyze_gaps(body: AnalyzeGapsRequest) -> dict:
        if not body.resume_content.strip() or not body.job_description.strip():
            raise InvalidInput("Resume content and job description are required")
        result = await orchestrator.run_analysis(
            body.resume_content, body.job_description, body.job_title, body.company
        )
        return result.to_wire()

    @app.post("/api/tailor-resume")
    async def tailor_resume(body: TailorResumeRequest) -> dict:
        if not body.resume_content.strip():
            raise InvalidInput("No resume content provided")
        if not body.job_description.strip():
            raise InvalidInput("No job description provided")
        result = await orchestrator.run_tailor(
            body.resume_content,
            body.job_description,
            body.job_title or "Position",
            body.company or "Company",
            body.gap_answers,
        )
        return result.to_wire()

    @app.post("/api/generate-pdf")
    async def generate_pdf(body: RenderRequest) -> Response:
        if body.sections is None:
            raise InvalidInput("Invalid sections data")
        pdf = await run_in_threadpool(orchestrator.render_sections_pdf, body.sections)
        return _attachment(pdf, PDF_MEDIA_TYPE, "tailored-resume.pdf")

    @app.post("/api/generate-docx")
    async def generate_docx(body: RenderRequest) -> Response:
        if body.sections is None:
            raise InvalidInput("Invalid sections data")
        docx = await run_in_threadpool(orchestrator.render_sections_docx, body.sections)
        return _attachment(docx, DOCX_MEDIA_TYPE, "tailored-resume.docx")

    return app
