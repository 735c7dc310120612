"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from gap_tailor.clients.llm_client import LLMClient, LLMResponse
from gap_tailor.models.gaps import GapAnalysisResult, GapQuestion, Priority
from gap_tailor.models.job import JobPosting
from gap_tailor.models.resume import FileType, ResumeDocument
from gap_tailor.models.tailoring import Recommendation, Section, TailoredData
from gap_tailor.utils.json_parser import ParsedJson


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane@example.com | 555-0100

Experience
Acme Corp - Data Engineer (2021 - present)
• Built a pipeline processing 1M records/day with Python and Airflow
• Helped reduce warehouse costs by 30% by rewriting nightly jobs
• Worked on automated deployments for 12 services

Skills
Python, SQL, Airflow, AWS, Docker
"""


@pytest.fixture
def sample_job_description() -> str:
    return """Senior Data Engineer

Responsibilities:
- You will design and operate batch and streaming pipelines
- Own CI/CD pipelines for data services

Requirements:
- 5+ years experience with Python and SQL
- Experience with Kubernetes in production
- Familiarity with Kafka or similar streaming platforms
"""


@pytest.fixture
def sample_resume(sample_resume_text: str) -> ResumeDocument:
    return ResumeDocument(content=sample_resume_text, filename="resume.pdf", file_type=FileType.PDF)


@pytest.fixture
def sample_job(sample_job_description: str) -> JobPosting:
    return JobPosting(
        title="Senior Data Engineer",
        company="Globex",
        description=sample_job_description,
        raw_text=sample_job_description,
        url="https://boards.greenhouse.io/globex/jobs/1",
    )


@pytest.fixture
def sample_gap_analysis() -> GapAnalysisResult:
    return GapAnalysisResult(
        gaps=[
            GapQuestion(
                id="gap-1",
                skill="Kubernetes",
                context="The role runs pipelines on Kubernetes",
                question="Have you worked with Kubernetes or similar container orchestration tools?",
                priority=Priority.HIGH,
            ),
            GapQuestion(
                id="gap-2",
                skill="Kafka",
                context="Streaming pipelines use Kafka",
                question="Have you used Kafka or another streaming platform?",
                priority=Priority.MEDIUM,
            ),
        ],
        matched_skills=["Python", "SQL", "Airflow"],
        job_requirements=["Python", "SQL", "Kubernetes", "Kafka", "CI/CD"],
    )


@pytest.fixture
def sample_tailored() -> TailoredData:
    return TailoredData(
        sections=[
            Section(
                title="Experience",
                original_bullets=[
                    "Built a pipeline processing 1M records/day with Python and Airflow",
                    "Helped reduce warehouse costs by 30% by rewriting nightly jobs",
                ],
                tailored_bullets=[
                    "Engineered a Python/Airflow batch pipeline processing 1M records/day",
                    "Cut warehouse costs by 30% by rewriting nightly jobs",
                ],
                ai_recommendations=[Recommendation.TAILORED, Recommendation.TAILORED],
            ),
            Section(
                title="Skills",
                original_bullets=["Python, SQL, Airflow, AWS, Docker"],
                tailored_bullets=["Python, SQL, Airflow, AWS, Docker, CI/CD pipelines"],
            ),
        ],
        summary="Emphasized pipeline scale and CI/CD terminology.",
        key_matches=["Python", "SQL", "CI/CD"],
    )


@pytest.fixture
def gap_payload() -> dict:
    """A well-formed gap analysis payload as the model returns it."""
    return {
        "gaps": [
            {
                "id": "gap-1",
                "skill": "Kafka",
                "context": "Streaming",
                "question": "Have you used Kafka?",
                "priority": "medium",
            },
            {
                "id": "gap-2",
                "skill": "Kubernetes",
                "context": "Container orchestration",
                "question": "Have you worked with Kubernetes?",
                "priority": "high",
            },
        ],
        "matchedSkills": ["Python", "SQL"],
        "jobRequirements": ["Python", "SQL", "Kafka", "Kubernetes"],
    }


@pytest.fixture
def tailor_payload() -> dict:
    """A well-formed tailoring payload as the model returns it."""
    return {
        "sections": [
            {
                "title": "Experience",
                "originalBullets": ["Built a pipeline processing 1M records/day"],
                "tailoredBullets": ["Engineered a pipeline processing 1M records/day"],
                "aiRecommendations": ["tailored"],
            }
        ],
        "summary": "Reworded for data engineering.",
        "keyMatches": ["Python"],
    }


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value=ParsedJson({}))
    return client


@pytest.fixture
def public_dns():
    """Make every hostname resolve to a public address."""
    fake_result = [(2, 1, 6, "", ("93.184.216.34", 0))]
    with patch("socket.getaddrinfo", return_value=fake_result):
        yield
