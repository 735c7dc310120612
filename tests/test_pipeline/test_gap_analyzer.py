"""Tests for the Gap Analyzer with a mocked LLM."""

import pytest

from gap_tailor.errors import InvalidInput, MalformedResponse, ModelError
from gap_tailor.models.gaps import GapAnalysisResult, Priority
from gap_tailor.pipeline.gap_analyzer import GapAnalyzer, build_prompt, parse_gaps
from gap_tailor.utils.json_parser import ParsedJson, ParseFailure


def _gap(n: int, priority: str, skill: str | None = None) -> dict:
    return {
        "id": f"gap-{n}",
        "skill": skill or f"Skill {n}",
        "context": "Needed for the role",
        "question": f"Have you used Skill {n}?",
        "priority": priority,
    }


class TestParseGaps:
    def test_ranked_and_capped(self):
        items = [
            _gap(1, "low"),
            _gap(2, "high"),
            _gap(3, "medium"),
            _gap(4, "high"),
            _gap(5, "low"),
            _gap(6, "medium"),
            _gap(7, "high"),
        ]
        gaps = parse_gaps(items)
        assert len(gaps) == 5
        ranks = [g.priority.rank for g in gaps]
        assert ranks == sorted(ranks)
        assert [g.id for g in gaps] == ["gap-2", "gap-4", "gap-7", "gap-3", "gap-6"]

    def test_custom_cap(self):
        assert len(parse_gaps([_gap(n, "high") for n in range(1, 9)], max_gaps=3)) == 3

    def test_unknown_priority_is_low(self):
        gaps = parse_gaps([_gap(1, "urgent"), _gap(2, "MEDIUM")])
        assert [g.priority for g in gaps] == [Priority.MEDIUM, Priority.LOW]

    def test_drops_entries_without_skill(self):
        items = [{"id": "gap-1", "priority": "high"}, "not a dict", _gap(3, "low", skill="Kafka")]
        gaps = parse_gaps(items)
        assert [g.skill for g in gaps] == ["Kafka"]

    def test_fills_missing_fields(self):
        gaps = parse_gaps([{"skill": "Terraform", "priority": "high"}])
        assert gaps[0].id == "gap-1"
        assert gaps[0].context == ""
        assert gaps[0].question == "Do you have experience with Terraform?"

    def test_duplicate_ids_made_unique(self):
        items = [_gap(1, "high", "A"), _gap(1, "high", "B"), _gap(1, "high", "C")]
        assert [g.id for g in parse_gaps(items)] == ["gap-1", "gap-1-2", "gap-1-3"]

    def test_empty(self):
        assert parse_gaps([]) == []


class TestBuildPrompt:
    def test_contains_inputs(self):
        prompt = build_prompt("RESUME TEXT", "JD TEXT", "Data Engineer", "Globex")
        assert "JOB: Data Engineer at Globex" in prompt
        assert "JD TEXT" in prompt
        assert "RESUME TEXT" in prompt
        assert prompt.rstrip().endswith("Return ONLY valid JSON, no explanation.")


class TestGapAnalyzer:
    async def test_analyze(self, mock_llm_client, gap_payload):
        mock_llm_client.generate_json.return_value = ParsedJson(gap_payload)
        analyzer = GapAnalyzer(mock_llm_client, model="test-model")

        result = await analyzer.analyze("resume", "job", "Data Engineer", "Globex")

        assert isinstance(result, GapAnalysisResult)
        assert [g.skill for g in result.gaps] == ["Kubernetes", "Kafka"]
        assert result.matched_skills == ["Python", "SQL"]
        assert result.job_requirements == ["Python", "SQL", "Kafka", "Kubernetes"]

        kwargs = mock_llm_client.generate_json.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 2048

    async def test_no_gaps(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ParsedJson(
            {"gaps": [], "matchedSkills": ["Python"], "jobRequirements": ["Python"]}
        )
        result = await GapAnalyzer(mock_llm_client).analyze("resume", "job")
        assert result.gaps == []
        assert result.matched_skills == ["Python"]

    async def test_missing_lists_default_to_empty(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ParsedJson({"matchedSkills": "Python"})
        result = await GapAnalyzer(mock_llm_client).analyze("resume", "job")
        assert result == GapAnalysisResult()

    async def test_unreadable_response(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ParseFailure(
            raw_text="Sorry, I can't do that", reason="no json"
        )
        with pytest.raises(MalformedResponse) as exc_info:
            await GapAnalyzer(mock_llm_client).analyze("resume", "job")
        assert exc_info.value.raw_text == "Sorry, I can't do that"
        assert exc_info.value.status_code == 500

    async def test_non_object_response(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ParsedJson(["Kafka"])
        with pytest.raises(MalformedResponse, match="JSON object"):
            await GapAnalyzer(mock_llm_client).analyze("resume", "job")

    async def test_gaps_not_a_list(self, mock_llm_client):
        mock_llm_client.generate_json.return_value = ParsedJson({"gaps": "none"})
        with pytest.raises(MalformedResponse):
            await GapAnalyzer(mock_llm_client).analyze("resume", "job")

    @pytest.mark.parametrize("resume, job", [("", "job"), ("resume", "  "), ("", "")])
    async def test_requires_inputs(self, mock_llm_client, resume, job):
        with pytest.raises(InvalidInput, match="required"):
            await GapAnalyzer(mock_llm_client).analyze(resume, job)
        mock_llm_client.generate_json.assert_not_called()

    async def test_model_error_propagates(self, mock_llm_client):
        mock_llm_client.generate_json.side_effect = ModelError("Model call failed: boom")
        with pytest.raises(ModelError, match="boom"):
            await GapAnalyzer(mock_llm_client).analyze("resume", "job")
        assert mock_llm_client.generate_json.call_count == 1
