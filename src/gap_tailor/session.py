"""Per-user session state for the tailoring flow.

Downstream state is invalidated whenever an upstream input changes:

- a new resume or a new job posting clears the gap analysis, the gap
  answers and the tailored result;
- a new gap analysis clears the answers and the tailored result;
- new answers clear the tailored result.

Every such change bumps ``revision``. A tailoring run captures the revision
in its ``TailorInputs`` snapshot, and a result arriving for an older
revision is discarded.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

from gap_tailor.errors import InvalidInput, OperationInProgress
from gap_tailor.models.gaps import GapAnalysisResult, GapAnswer
from gap_tailor.models.job import JobPosting
from gap_tailor.models.resume import ResumeDocument
from gap_tailor.models.tailoring import TailoredData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TailorInputs:
    """Everything a tailoring run reads, frozen at the moment it starts."""

    revision: int
    resume_text: str
    job: JobPosting
    gap_answers: tuple[GapAnswer, ...] = ()


@dataclass
class TailorSession:
    resume: ResumeDocument | None = None
    job: JobPosting | None = None
    gap_analysis: GapAnalysisResult | None = None
    gap_answers: list[GapAnswer] = field(default_factory=list)
    tailored: TailoredData | None = None
    revision: int = 0
    _running: set[str] = field(default_factory=set, repr=False)

    # -- inputs ------------------------------------------------------------

    def load_resume(self, resume: ResumeDocument) -> None:
        self.resume = resume
        self._invalidate_analysis()
        logger.debug("Session resume loaded: %s (revision %d)", resume.filename, self.revision)

    def load_job(self, job: JobPosting) -> None:
        self.job = job
        self._invalidate_analysis()
        logger.debug("Session job loaded: %s (revision %d)", job.title, self.revision)

    def record_gap_analysis(self, result: GapAnalysisResult) -> None:
        self.gap_analysis = result
        self.gap_answers = []
        self.tailored = None
        self.revision += 1

    def record_gap_answers(self, answers: list[GapAnswer]) -> None:
        """Store the answers from gap resolution; an empty list means skipped."""
        known = self.gap_analysis.question_ids if self.gap_analysis else set()
        unknown = [a.question_id for a in answers if a.question_id not in known]
        if unknown:
            raise InvalidInput(f"Answers reference unknown questions: {', '.join(unknown)}")
        self.gap_answers = list(answers)
        self.tailored = None
        self.revision += 1

    def _invalidate_analysis(self) -> None:
        self.gap_analysis = None
        self.gap_answers = []
        self.tailored = None
        self.revision += 1

    # -- tailoring ---------------------------------------------------------

    @property
    def ready_to_tailor(self) -> bool:
        return self.resume is not None and self.job is not None

    def snapshot(self) -> TailorInputs:
        if self.resume is None:
            raise InvalidInput("Upload a resume first")
        if self.job is None:
            raise InvalidInput("Load a job posting first")
        return TailorInputs(
            revision=self.revision,
            resume_text=self.resume.content,
            job=self.job,
            gap_answers=tuple(self.gap_answers),
        )

    def record_tailored(self, result: TailoredData, inputs: TailorInputs) -> bool:
        """Keep ``result`` unless the session moved on since ``inputs`` was taken."""
        if inputs.revision != self.revision:
            logger.info(
                "Discarding stale tailoring result (revision %d, now %d)",
                inputs.revision,
                self.revision,
            )
            return False
        self.tailored = result
        return True

    def edit_bullet(self, section_index: int, bullet_index: int, text: str) -> TailoredData:
        """Replace one tailored bullet; every other bullet is left as it was."""
        if self.tailored is None:
            raise InvalidInput("Nothing has been tailored yet")
        try:
            self.tailored = self.tailored.with_bullet(section_index, bullet_index, text)
        except IndexError as exc:
            raise InvalidInput(str(exc)) from exc
        return self.tailored

    # -- in-flight guard ---------------------------------------------------

    def is_running(self, action: str) -> bool:
        return action in self._running

    @contextmanager
    def in_flight(self, action: str) -> Iterator[None]:
        """Mark ``action`` as running; a second concurrent entry is refused."""
        if action in self._running:
            raise OperationInProgress(f"{action} is already running")
        self._running.add(action)
        try:
            yield
        finally:
            self._running.discard(action)
