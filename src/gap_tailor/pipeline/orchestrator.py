"""Session controller - sequences extraction, retrieval, analysis, tailoring and export."""

from __future__ import annotations

import logging

from gap_tailor.clients.llm_client import LLMClient
from gap_tailor.config import AppConfig
from gap_tailor.errors import InvalidInput
from gap_tailor.export import render_docx, render_pdf
from gap_tailor.models.gaps import GapAnalysisResult, GapAnswer
from gap_tailor.models.job import JobPosting
from gap_tailor.models.resume import ResumeDocument
from gap_tailor.models.tailoring import Section, TailoredData
from gap_tailor.parsers.resume_parser import parse_resume
from gap_tailor.pipeline.gap_analyzer import GapAnalyzer
from gap_tailor.pipeline.resume_tailor import ResumeTailor
from gap_tailor.scraping.scraper import JobScraper
from gap_tailor.session import TailorSession
from gap_tailor.utils.deadline import CancelToken, Deadline

logger = logging.getLogger(__name__)


class TailorOrchestrator:
    """Wires the extractor, scraper, model steps and renderer together.

    The ``run_*``/``fetch_job``/``extract_resume`` methods are stateless and
    back the HTTP API. The step methods take a TailorSession, update it by
    its reset rules and return it.
    """

    def __init__(
        self,
        llm: LLMClient,
        config: AppConfig | None = None,
        *,
        scraper: JobScraper | None = None,
    ):
        self.config = config or AppConfig()
        self.llm = llm
        self.scraper = scraper or JobScraper.from_config(self.config.scraper)
        self.analyzer = GapAnalyzer(
            llm,
            model=self.config.llm.analyzer_model,
            temperature=self.config.llm.analyzer_temperature,
            max_tokens=self.config.llm.analyzer_max_tokens,
            max_gaps=self.config.gaps.max_gaps,
        )
        self.tailor_engine = ResumeTailor(
            llm,
            model=self.config.llm.tailor_model,
            temperature=self.config.llm.tailor_temperature,
            max_tokens=self.config.llm.tailor_max_tokens,
        )

    @classmethod
    def from_config(cls, config: AppConfig) -> TailorOrchestrator:
        return cls(LLMClient(timeout=config.llm.timeout), config)

    def _model_deadline(self) -> Deadline:
        return Deadline.after(self.config.llm.timeout)

    # -- stateless operations ----------------------------------------------

    def extract_resume(
        self, data: bytes, filename: str, mime_type: str | None = None
    ) -> ResumeDocument:
        return parse_resume(
            data, filename, mime_type, max_bytes=self.config.limits.max_upload_bytes
        )

    async def fetch_job(self, url: str, *, cancel: CancelToken | None = None) -> JobPosting:
        return await self.scraper.fetch_job(
            url,
            deadline=Deadline.after(self.config.scraper.timeout),
            cancel=cancel,
        )

    async def run_analysis(
        self,
        resume_text: str,
        job_description: str,
        job_title: str = "",
        company: str = "",
        *,
        cancel: CancelToken | None = None,
    ) -> GapAnalysisResult:
        return await self.analyzer.analyze(
            resume_text,
            job_description,
            job_title,
            company,
            deadline=self._model_deadline(),
            cancel=cancel,
        )

    async def run_tailor(
        self,
        resume_text: str,
        job_description: str,
        job_title: str = "Position",
        company: str = "Company",
        gap_answers: list[GapAnswer] | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> TailoredData:
        return await self.tailor_engine.tailor(
            resume_text,
            job_description,
            job_title,
            company,
            gap_answers,
            deadline=self._model_deadline(),
            cancel=cancel,
        )

    def render_sections_pdf(self, sections: list[Section]) -> bytes:
        return render_pdf(sections, title=self.config.render.title, byline=self.config.render.byline)

    def render_sections_docx(self, sections: list[Section]) -> bytes:
        return render_docx(sections, title=self.config.render.title, byline=self.config.render.byline)

    # -- session steps -----------------------------------------------------

    def upload_resume(
        self,
        session: TailorSession,
        data: bytes,
        filename: str,
        mime_type: str | None = None,
    ) -> TailorSession:
        session.load_resume(self.extract_resume(data, filename, mime_type))
        return session

    async def load_job_from_url(
        self, session: TailorSession, url: str, *, cancel: CancelToken | None = None
    ) -> TailorSession:
        with session.in_flight("fetch-job"):
            job = await self.fetch_job(url, cancel=cancel)
        session.load_job(job)
        return session

    def load_job_manual(
        self, session: TailorSession, title: str, company: str, description: str
    ) -> TailorSession:
        if not (description or "").strip():
            raise InvalidInput("Enter the job description")
        session.load_job(JobPosting.manual(title, company, description))
        return session

    async def analyze_gaps(
        self, session: TailorSession, *, cancel: CancelToken | None = None
    ) -> TailorSession:
        inputs = session.snapshot()
        with session.in_flight("analyze-gaps"):
            result = await self.run_analysis(
                inputs.resume_text,
                inputs.job.text_for_model,
                inputs.job.title,
                inputs.job.company,
                cancel=cancel,
            )
        if inputs.revision != session.revision:
            logger.info("Discarding stale gap analysis (revision %d)", inputs.revision)
            return session
        session.record_gap_analysis(result)
        return session

    async def tailor(
        self, session: TailorSession, *, cancel: CancelToken | None = None
    ) -> TailorSession:
        inputs = session.snapshot()
        with session.in_flight("tailor"):
            result = await self.run_tailor(
                inputs.resume_text,
                inputs.job.text_for_model,
                inputs.job.title,
                inputs.job.company,
                list(inputs.gap_answers),
                cancel=cancel,
            )
        session.record_tailored(result, inputs)
        return session

    def render_pdf(self, session: TailorSession) -> bytes:
        if session.tailored is None:
            raise InvalidInput("Nothing has been tailored yet")
        return self.render_sections_pdf(session.tailored.sections)

    def render_docx(self, session: TailorSession) -> bytes:
        if session.tailored is None:
            raise InvalidInput("Nothing has been tailored yet")
        return self.render_sections_docx(session.tailored.sections)
