"""Gap Analyzer - finds job requirements the resume does not clearly evidence."""

from __future__ import annotations

import logging
from typing import Any

from gap_tailor.clients.llm_client import LLMClient
from gap_tailor.errors import InvalidInput, MalformedResponse
from gap_tailor.models.gaps import GapAnalysisResult, GapQuestion, Priority
from gap_tailor.utils.deadline import CancelToken, Deadline
from gap_tailor.utils.json_parser import ParseFailure, string_list

logger = logging.getLogger(__name__)

MAX_GAPS = 5

SYSTEM_PROMPT = """\
You are an expert career coach analyzing a resume against a job posting to identify skill gaps.

Your task:
1. Extract ALL requirements from the job posting (skills, technologies, responsibilities, qualifications)
2. Identify which requirements are ALREADY demonstrated in the resume
3. Identify 3-5 MOST IMPORTANT gaps (skills/experiences in job but not clearly in resume)
4. Prioritize gaps by importance for getting past ATS and impressing recruiters

For each gap, create a short, friendly yes/no question asking if the candidate has related experience.

CRITICAL: Only identify genuine gaps. If the resume shows equivalent experience with different terminology, that's NOT a gap.

Return JSON:
{
  "gaps": [
    {
      "id": "gap-1",
      "skill": "Kubernetes",
      "context": "Job requires container orchestration for their microservices architecture",
      "question": "Have you worked with Kubernetes or similar container orchestration tools (Docker Swarm, ECS, etc.)?",
      "priority": "high"
    }
  ],
  "matchedSkills": ["Python", "AWS", "CI/CD"],
  "jobRequirements": ["Kubernetes", "Python", "AWS", "CI/CD", "Team Leadership"]
}"""


def build_prompt(resume_text: str, job_description: str, job_title: str, company: str) -> str:
    return f"""Analyze this resume against the job posting.

JOB: {job_title} at {company}

JOB DESCRIPTION:
{job_description}

---

RESUME:
{resume_text}

Return ONLY valid JSON, no explanation."""


def _parse_priority(value: Any) -> Priority:
    if isinstance(value, str):
        try:
            return Priority(value.strip().lower())
        except ValueError:
            pass
    logger.warning("Unknown gap priority %r, treating as low", value)
    return Priority.LOW


def parse_gaps(items: list, max_gaps: int = MAX_GAPS) -> list[GapQuestion]:
    """Validate raw gap entries, rank them by priority and keep the top ``max_gaps``.

    Entries without a usable skill are dropped. Ids are filled in and made
    unique. The sort is stable, so equal priorities keep model order.
    """
    gaps: list[GapQuestion] = []
    seen_ids: set[str] = set()
    for n, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            logger.warning("Dropping gap entry that is not an object: %r", item)
            continue
        skill = item.get("skill")
        if not isinstance(skill, str) or not skill.strip():
            logger.warning("Dropping gap entry without a skill: %r", item)
            continue
        skill = skill.strip()

        gap_id = item.get("id")
        gap_id = gap_id.strip() if isinstance(gap_id, str) and gap_id.strip() else f"gap-{n}"
        base_id, suffix = gap_id, 2
        while gap_id in seen_ids:
            gap_id = f"{base_id}-{suffix}"
            suffix += 1
        seen_ids.add(gap_id)

        question = item.get("question")
        if not isinstance(question, str) or not question.strip():
            question = f"Do you have experience with {skill}?"
        context = item.get("context")

        gaps.append(
            GapQuestion(
                id=gap_id,
                skill=skill,
                context=context.strip() if isinstance(context, str) else "",
                question=question.strip(),
                priority=_parse_priority(item.get("priority")),
            )
        )

    gaps.sort(key=lambda g: g.priority.rank)
    return gaps[:max_gaps]


class GapAnalyzer:
    def __init__(
        self,
        llm: LLMClient,
        model: str = "claude-haiku-4-5-20251001",
        temperature: float = 0.3,
        max_tokens: int = 2048,
        max_gaps: int = MAX_GAPS,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_gaps = max_gaps

    async def analyze(
        self,
        resume_text: str,
        job_description: str,
        job_title: str = "",
        company: str = "",
        *,
        deadline: Deadline | None = None,
        cancel: CancelToken | None = None,
    ) -> GapAnalysisResult:
        """Ask the model for gaps and return a validated, ranked result.

        Raises InvalidInput, ModelError, MalformedResponse, TimeoutExceeded
        or Cancelled. Nothing is retried.
        """
        if not (resume_text or "").strip() or not (job_description or "").strip():
            raise InvalidInput("Resume content and job description are required")

        outcome = await self.llm.generate_json(
            prompt=build_prompt(resume_text, job_description, job_title, company),
            system=SYSTEM_PROMPT,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            deadline=deadline,
            cancel=cancel,
        )
        if isinstance(outcome, ParseFailure):
            logger.warning("Gap analysis response was not JSON: %s", outcome.reason)
            raise MalformedResponse("Gap analysis returned an unreadable response", outcome.raw_text)

        data = outcome.value
        if not isinstance(data, dict):
            raise MalformedResponse(
                f"Expected a JSON object from gap analysis, got {type(data).__name__}"
            )
        raw_gaps = data.get("gaps", [])
        if not isinstance(raw_gaps, list):
            raise MalformedResponse("Gap analysis response has no gap list")

        result = GapAnalysisResult(
            gaps=parse_gaps(raw_gaps, self.max_gaps),
            matched_skills=string_list(data.get("matchedSkills")),
            job_requirements=string_list(data.get("jobRequirements")),
        )
        logger.info(
            "Gap analysis: %d gaps, %d matched skills",
            len(result.gaps),
            len(result.matched_skills),
        )
        return result
