"""Interactive gap resolution: one analysis run, one question at a time.

States::

    ANALYZING -> QUESTIONS | NO_GAPS | ERROR
    QUESTIONS -> COMPLETE            (last answer submitted, or skip)
    ERROR     -> ANALYZING | COMPLETE (retry, or skip)
    NO_GAPS   -> COMPLETE            (continue)

``on_complete`` receives the ordered answers exactly once. Skipping yields an
empty list even when some questions were already answered.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Awaitable, Callable

from gap_tailor.errors import GapTailorError, InvalidTransition
from gap_tailor.models.gaps import COMPENSATION_TEMPLATE, GapAnalysisResult, GapAnswer, GapQuestion

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    ANALYZING = "analyzing"
    QUESTIONS = "questions"
    NO_GAPS = "no-gaps"
    ERROR = "error"
    COMPLETE = "complete"


class Choice(str, Enum):
    UNANSWERED = "unanswered"
    HAS_EXPERIENCE = "has-experience"
    NO_EXPERIENCE = "no-experience"


class GapResolution:
    def __init__(self, on_complete: Callable[[list[GapAnswer]], None] | None = None):
        self.phase = Phase.ANALYZING
        self.analysis: GapAnalysisResult | None = None
        self.answers: list[GapAnswer] = []
        self.index = 0
        self.choice = Choice.UNANSWERED
        self.response = ""
        self.error: str | None = None
        self.result: list[GapAnswer] | None = None
        self._on_complete = on_complete

    def _require(self, *phases: Phase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise InvalidTransition(f"Not allowed in state {self.phase.value!r} (needs {allowed})")

    # -- analysis outcome --------------------------------------------------

    def analysis_succeeded(self, result: GapAnalysisResult) -> None:
        self._require(Phase.ANALYZING)
        self.analysis = result
        self.error = None
        self._reset_question()
        self.phase = Phase.QUESTIONS if result.gaps else Phase.NO_GAPS

    def analysis_failed(self, message: str) -> None:
        self._require(Phase.ANALYZING)
        self.error = message or "Analysis failed"
        self.phase = Phase.ERROR

    def retry(self) -> None:
        self._require(Phase.ERROR)
        self.error = None
        self.phase = Phase.ANALYZING

    def skip(self) -> None:
        self._require(Phase.QUESTIONS, Phase.ERROR)
        self._complete([])

    def continue_(self) -> None:
        self._require(Phase.NO_GAPS)
        self._complete([])

    # -- per-question answering --------------------------------------------

    @property
    def questions(self) -> list[GapQuestion]:
        return self.analysis.gaps if self.analysis else []

    @property
    def current_question(self) -> GapQuestion | None:
        if self.phase is not Phase.QUESTIONS:
            return None
        return self.questions[self.index]

    @property
    def question_number(self) -> int:
        return self.index + 1

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def answered(self) -> int:
        return len(self.answers)

    @property
    def remaining(self) -> int:
        return self.total - self.answered

    @property
    def compensation_note(self) -> str | None:
        question = self.current_question
        if question is None or self.choice is not Choice.NO_EXPERIENCE:
            return None
        return COMPENSATION_TEMPLATE.format(skill=question.skill)

    @property
    def can_submit(self) -> bool:
        if self.phase is not Phase.QUESTIONS:
            return False
        if self.choice is Choice.NO_EXPERIENCE:
            return True
        return self.choice is Choice.HAS_EXPERIENCE and bool(self.response.strip())

    def choose_has_experience(self) -> None:
        self._require(Phase.QUESTIONS)
        self.choice = Choice.HAS_EXPERIENCE

    def choose_no_experience(self) -> None:
        self._require(Phase.QUESTIONS)
        self.choice = Choice.NO_EXPERIENCE
        self.response = ""

    def set_response(self, text: str) -> None:
        self._require(Phase.QUESTIONS)
        if self.choice is not Choice.HAS_EXPERIENCE:
            raise InvalidTransition("Choose 'has experience' before describing it")
        self.response = text or ""

    def revert(self) -> None:
        """Return the current question to the unanswered state."""
        self._require(Phase.QUESTIONS)
        self._reset_question()

    def submit(self) -> GapAnswer:
        self._require(Phase.QUESTIONS)
        if not self.can_submit:
            raise InvalidTransition("Describe your experience before submitting")

        question = self.questions[self.index]
        if self.choice is Choice.HAS_EXPERIENCE:
            answer = GapAnswer.with_experience(question, self.response)
        else:
            answer = GapAnswer.without_experience(question)
        self.answers.append(answer)

        if self.index < self.total - 1:
            self.index += 1
            self._reset_question()
        else:
            self._complete(list(self.answers))
        return answer

    def _reset_question(self) -> None:
        self.choice = Choice.UNANSWERED
        self.response = ""

    def _complete(self, answers: list[GapAnswer]) -> None:
        self.phase = Phase.COMPLETE
        self.result = answers
        logger.info("Gap resolution complete with %d answers", len(answers))
        if self._on_complete is not None:
            self._on_complete(answers)


async def run_gap_analysis(
    resolution: GapResolution,
    analyze: Callable[[], Awaitable[GapAnalysisResult]],
) -> None:
    """Run one analysis call and feed its outcome into ``resolution``.

    Expected failures move the machine to ERROR; anything else propagates.
    """
    if resolution.phase is not Phase.ANALYZING:
        raise InvalidTransition("Analysis can only run in the analyzing state")
    try:
        result = await analyze()
    except GapTailorError as exc:
        logger.warning("Gap analysis failed: %s", exc)
        resolution.analysis_failed(str(exc))
        return
    resolution.analysis_succeeded(result)
