"""Pydantic models for Gap Analyzer output and the user's gap answers."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from gap_tailor.models.base import WireModel

COMPENSATION_TEMPLATE = "Emphasize transferable skills related to {skill}"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class GapQuestion(WireModel):
    id: str
    skill: str
    context: str = ""  # why this skill matters for the job
    question: str
    priority: Priority


class GapAnalysisResult(WireModel):
    gaps: list[GapQuestion] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    job_requirements: list[str] = Field(default_factory=list)

    @property
    def question_ids(self) -> set[str]:
        return {g.id for g in self.gaps}


def _pick(data: dict, name: str, alias: str) -> Any:
    return data[alias] if alias in data else data.get(name)


class GapAnswer(WireModel):
    """The user's answer to one gap question.

    ``user_response`` is present exactly when ``has_experience`` is true;
    ``compensation_strategy`` is present exactly when it is false.
    """

    question_id: str
    skill: str
    has_experience: bool
    user_response: str | None = None
    compensation_strategy: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        response = _pick(data, "user_response", "userResponse")
        if isinstance(response, str):
            response = response.strip() or None
        for key in ("user_response", "userResponse"):
            data.pop(key, None)
        data["user_response"] = response

        has_experience = _pick(data, "has_experience", "hasExperience")
        strategy = _pick(data, "compensation_strategy", "compensationStrategy")
        skill = _pick(data, "skill", "skill")
        if has_experience is False and not strategy and isinstance(skill, str):
            for key in ("compensation_strategy", "compensationStrategy"):
                data.pop(key, None)
            data["compensation_strategy"] = COMPENSATION_TEMPLATE.format(skill=skill)
        return data

    @model_validator(mode="after")
    def _check_invariant(self) -> GapAnswer:
        if self.has_experience:
            if not self.user_response:
                raise ValueError("userResponse is required when hasExperience is true")
            if self.compensation_strategy is not None:
                raise ValueError("compensationStrategy must be absent when hasExperience is true")
        else:
            if self.user_response is not None:
                raise ValueError("userResponse must be absent when hasExperience is false")
            if not self.compensation_strategy:
                raise ValueError("compensationStrategy is required when hasExperience is false")
        return self

    @classmethod
    def with_experience(cls, question: GapQuestion, response: str) -> GapAnswer:
        return cls(
            question_id=question.id,
            skill=question.skill,
            has_experience=True,
            user_response=response,
        )

    @classmethod
    def without_experience(cls, question: GapQuestion) -> GapAnswer:
        return cls(
            question_id=question.id,
            skill=question.skill,
            has_experience=False,
            compensation_strategy=COMPENSATION_TEMPLATE.format(skill=question.skill),
        )
