"""Resume Tailoring Engine - rewords existing bullets toward a job posting."""

from __future__ import annotations

import logging
from typing import Any

from gap_tailor.clients.llm_client import LLMClient
from gap_tailor.errors import InvalidInput, MalformedResponse
from gap_tailor.models.gaps import GapAnswer
from gap_tailor.models.tailoring import Recommendation, Section, TailoredData
from gap_tailor.utils.deadline import CancelToken, Deadline
from gap_tailor.utils.json_parser import ParseFailure, aligned_list, string_list

logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLE = "Section"

SYSTEM_PROMPT = """\
You are an expert resume writer and career coach. Your task is to reword resume bullet points to better align with a specific job posting using professional resume best practices.

CRITICAL RULES:
1. You may ONLY use information that exists in the original resume
2. DO NOT fabricate, invent, or add any new experiences, skills, employers, titles or achievements
3. You may reword, rephrase, and emphasize existing information to better match the job
4. You may reorder bullet points to prioritize the most relevant ones
5. You may use keywords from the job posting IF they accurately describe existing experience
6. Maintain truthfulness - if someone has "Python" experience, don't upgrade it to "Expert Python" unless the resume says so

RESUME BEST PRACTICES:

XYZ FORMULA:
"Accomplished [X] as measured by [Y], by doing [Z]"
- X = What you accomplished (the result/impact)
- Y = How it was measured (metrics, numbers, percentages)
- Z = How you did it (the action/method)

CAR METHOD (Challenge-Action-Result):
- Challenge: What problem or situation did you face?
- Action: What specific actions did you take?
- Result: What was the measurable outcome?

STRONG ACTION VERBS - Start every bullet with one:
- Leadership: Spearheaded, Directed, Orchestrated, Championed, Pioneered
- Achievement: Achieved, Exceeded, Delivered, Accomplished, Attained
- Creation: Developed, Built, Designed, Engineered, Architected, Created
- Improvement: Optimized, Enhanced, Streamlined, Accelerated, Transformed
- Analysis: Analyzed, Evaluated, Identified, Diagnosed, Assessed
- Collaboration: Collaborated, Partnered, Coordinated, Facilitated, Led

WORDS TO AVOID (replace with stronger alternatives):
- "Helped" -> "Enabled", "Facilitated", "Drove"
- "Worked on" -> "Developed", "Implemented", "Executed"
- "Responsible for" -> "Managed", "Directed", "Oversaw"
- "Assisted" -> "Supported", "Contributed to", "Partnered with"
- "Was part of" -> "Collaborated on", "Contributed to"
- "Various" or "Multiple" -> Use specific numbers

METRICS & QUANTIFIABLE RESULTS (CRITICAL):
- ALWAYS preserve ALL metrics, numbers, percentages, dollar amounts and timeframes from original bullets, verbatim
- If a metric exists, it MUST appear in the tailored version
- Position metrics prominently

SKILLS & TECHNOLOGY MAPPING:
- Use EXACT terminology from the job posting only when the candidate has equivalent experience
- Example: Job says "CI/CD pipelines" and resume says "automated deployments" -> use "CI/CD pipelines"

OUTPUT FORMAT:
Return a JSON object with this exact structure:
{
  "sections": [
    {
      "title": "Section Name (e.g., Experience, Projects, Skills)",
      "originalBullets": ["original bullet 1", "original bullet 2"],
      "tailoredBullets": ["reworded bullet 1", "reworded bullet 2"],
      "aiRecommendations": ["tailored", "original"]
    }
  ],
  "summary": "A brief 2-3 sentence summary of how the resume was tailored",
  "keyMatches": ["skill or keyword that matches between resume and job"]
}

"aiRecommendations" says, per bullet, which version you recommend."""


def build_gap_context(gap_answers: list[GapAnswer]) -> str:
    """Additional-context block for the prompt, or ``""`` without answers."""
    if not gap_answers:
        return ""
    experienced = [
        f"- {a.skill}: {a.user_response}" for a in gap_answers if a.has_experience and a.user_response
    ]
    transferable = [
        f"- {a.skill}: Candidate does not have direct experience. Emphasize transferable skills."
        for a in gap_answers
        if not a.has_experience
    ]
    return f"""
---

USER-PROVIDED ADDITIONAL CONTEXT:
The candidate has provided additional information about their experience:

{chr(10).join(experienced)}

{chr(10).join(transferable)}

IMPORTANT: Weave the user-provided experience into relevant existing bullet points naturally. Do not create new sections.
"""


def build_prompt(
    resume_text: str,
    job_description: str,
    job_title: str,
    company: str,
    gap_answers: list[GapAnswer],
) -> str:
    return f"""Please tailor this resume for the following job posting.

JOB DETAILS:
Position: {job_title}
Company: {company}

JOB DESCRIPTION:
{job_description}

---
{build_gap_context(gap_answers)}
ORIGINAL RESUME:
{resume_text}

---

INSTRUCTIONS:
1. Identify the KEY REQUIREMENTS from the job description
2. Scan the resume for experiences, projects and skills that map to those requirements
3. For each bullet point:
   - Use the XYZ formula or the CAR method where the source supports it
   - Start with a STRONG ACTION VERB (never "helped", "worked on", "responsible for")
   - PRESERVE all metrics, numbers and percentages, and position them prominently
   - Use exact keywords from the job posting where experience matches
4. Prioritize bullets that best demonstrate required skills

Return ONLY the JSON object, no additional text or explanation."""


def _parse_recommendations(value: Any) -> list[Recommendation] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        logger.warning("Ignoring aiRecommendations that is not a list: %r", value)
        return None
    try:
        return [Recommendation(str(v).strip().lower()) for v in value]
    except ValueError:
        logger.warning("Ignoring invalid aiRecommendations: %r", value)
        return None


def parse_sections(items: list) -> list[Section]:
    sections = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Dropping section that is not an object: %r", item)
            continue
        title = item.get("title")
        sections.append(
            Section(
                title=title.strip() if isinstance(title, str) and title.strip() else DEFAULT_SECTION_TITLE,
                original_bullets=aligned_list(item.get("originalBullets")),
                tailored_bullets=aligned_list(item.get("tailoredBullets")),
                ai_recommendations=_parse_recommendations(item.get("aiRecommendations")),
            )
        )
    return sections


class ResumeTailor:
    def __init__(
        self,
        llm: LLMClient,
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def tailor(
        self,
        resume_text: str,
        job_description: str,
        job_title: str = "Position",
        company: str = "Company",
        gap_answers: list[GapAnswer] | None = None,
        *,
        deadline: Deadline | None = None,
        cancel: CancelToken | None = None,
    ) -> TailoredData:
        """Reword the resume's bullets for the job; nothing is invented or retried."""
        if not (resume_text or "").strip():
            raise InvalidInput("No resume content provided")
        if not (job_description or "").strip():
            raise InvalidInput("No job description provided")
        gap_answers = gap_answers or []

        outcome = await self.llm.generate_json(
            prompt=build_prompt(
                resume_text,
                job_description,
                job_title or "Position",
                company or "Company",
                gap_answers,
            ),
            system=SYSTEM_PROMPT,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            deadline=deadline,
            cancel=cancel,
        )
        if isinstance(outcome, ParseFailure):
            logger.warning("Tailoring response was not JSON: %s", outcome.reason)
            raise MalformedResponse("Tailoring returned an unreadable response", outcome.raw_text)

        data = outcome.value
        if not isinstance(data, dict):
            raise MalformedResponse(
                f"Expected a JSON object from tailoring, got {type(data).__name__}"
            )
        raw_sections = data.get("sections", [])
        if not isinstance(raw_sections, list):
            raise MalformedResponse("Tailoring response has no section list")

        summary = data.get("summary")
        result = TailoredData(
            sections=parse_sections(raw_sections),
            summary=summary.strip() if isinstance(summary, str) else "",
            key_matches=string_list(data.get("keyMatches")),
        )
        logger.info(
            "Tailored %d sections using %d gap answers", len(result.sections), len(gap_answers)
        )
        return result
