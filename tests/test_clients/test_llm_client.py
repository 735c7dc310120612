"""Tests for LLMClient."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from gap_tailor.clients.llm_client import LLMClient, LLMResponse
from gap_tailor.errors import Cancelled, ModelError, TimeoutExceeded
from gap_tailor.utils.deadline import CancelToken, Deadline
from gap_tailor.utils.json_parser import ParsedJson, ParseFailure


def _make_api_message(
    text: str, input_tokens: int = 10, output_tokens: int = 5, stop_reason: str = "end_turn"
) -> MagicMock:
    """Build a minimal mock that looks like an anthropic Message object."""
    msg = MagicMock()
    msg.content = [MagicMock(text=text)]
    msg.usage = MagicMock(input_tokens=input_tokens, output_tokens=output_tokens)
    msg.stop_reason = stop_reason
    return msg


def _mock_client(mock_cls: MagicMock, create: AsyncMock) -> MagicMock:
    mock_client = MagicMock()
    mock_client.api_key = "test-key"
    mock_client.messages.create = create
    mock_cls.return_value = mock_client
    return mock_client


class TestLLMClientInit:
    def test_retries_disabled(self):
        """The SDK client is built with automatic retries turned off."""
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="k", timeout=30)

        kwargs = mock_cls.call_args.kwargs
        assert kwargs["max_retries"] == 0
        assert kwargs["api_key"] == "k"
        assert kwargs["timeout"] == 30

    def test_omits_unset_options(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            llm = LLMClient()

        assert mock_cls.call_args.kwargs == {"max_retries": 0}
        assert llm.timeout is None


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        """generate() returns an LLMResponse with text and token counts."""
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(
                mock_cls,
                AsyncMock(return_value=_make_api_message("hello world", 15, 7)),
            )
            llm = LLMClient()
            result = await llm.generate("say hello")

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 15
        assert result.output_tokens == 7
        assert result.stop_reason == "end_turn"

    async def test_generate_passes_system_prompt(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            create = AsyncMock(return_value=_make_api_message("ok"))
            _mock_client(mock_cls, create)
            llm = LLMClient()
            await llm.generate("prompt", system="be brief", temperature=0.3, max_tokens=100)

        kwargs = create.call_args.kwargs
        assert kwargs["system"] == "be brief"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 100
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    async def test_generate_without_system_omits_it(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            create = AsyncMock(return_value=_make_api_message("ok"))
            _mock_client(mock_cls, create)
            llm = LLMClient()
            await llm.generate("prompt")

        assert "system" not in create.call_args.kwargs

    async def test_generate_appends_to_token_log(self):
        """Each successful generate() call appends one (model, in, out) entry."""
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(mock_cls, AsyncMock(return_value=_make_api_message("resp", 20, 8)))
            llm = LLMClient()
            await llm.generate("prompt", model="claude-haiku-4-5-20251001")

        assert llm._token_log == [("claude-haiku-4-5-20251001", 20, 8)]

    async def test_missing_api_key_is_model_error(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = _mock_client(mock_cls, AsyncMock())
            mock_client.api_key = None
            llm = LLMClient()
            with pytest.raises(ModelError, match="ANTHROPIC_API_KEY"):
                await llm.generate("prompt")

        mock_client.messages.create.assert_not_called()

    async def test_api_error_is_model_error(self):
        """SDK failures surface as ModelError, with no retry."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            create = AsyncMock(side_effect=anthropic.APIConnectionError(request=request))
            _mock_client(mock_cls, create)
            llm = LLMClient()
            with pytest.raises(ModelError, match="Model call failed"):
                await llm.generate("prompt")

        assert create.call_count == 1

    async def test_sdk_timeout_is_timeout_exceeded(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(mock_cls, AsyncMock(side_effect=anthropic.APITimeoutError(request=request)))
            llm = LLMClient(timeout=5)
            with pytest.raises(TimeoutExceeded) as exc_info:
                await llm.generate("prompt")

        assert exc_info.value.status_code == 504

    async def test_deadline_abandons_slow_call(self):
        async def slow(**kwargs):
            await asyncio.sleep(5)
            return _make_api_message("late")

        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(mock_cls, AsyncMock(side_effect=slow))
            llm = LLMClient()
            with pytest.raises(TimeoutExceeded):
                await llm.generate("prompt", deadline=Deadline.after(0.05))

        assert llm._token_log == []

    async def test_cancelled_token_stops_call(self):
        token = CancelToken()
        token.cancel()
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(mock_cls, AsyncMock(return_value=_make_api_message("ok")))
            llm = LLMClient()
            with pytest.raises(Cancelled):
                await llm.generate("prompt", cancel=token)


class TestLLMClientGenerateJson:
    async def test_generate_json_parses_valid_json_text(self):
        """generate_json() returns ParsedJson when the response contains valid JSON."""
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(
                mock_cls,
                AsyncMock(return_value=_make_api_message('```json\n{"key": "value"}\n```')),
            )
            llm = LLMClient()
            result = await llm.generate_json("give me json")

        assert result == ParsedJson({"key": "value"})

    async def test_generate_json_reports_unparseable_text(self):
        """Non-JSON text becomes a ParseFailure carrying the raw text."""
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            _mock_client(
                mock_cls, AsyncMock(return_value=_make_api_message("this is plain text, not json"))
            )
            llm = LLMClient()
            result = await llm.generate_json("give me json")

        assert isinstance(result, ParseFailure)
        assert result.raw_text == "this is plain text, not json"


class TestLLMClientTokenSummary:
    def test_get_token_summary_returns_correct_totals(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic"):
            llm = LLMClient()
        llm._token_log = [
            ("claude-haiku-4-5-20251001", 100, 50),
            ("claude-sonnet-4-5-20250929", 200, 80),
        ]

        summary = llm.get_token_summary()

        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2

    def test_get_token_summary_clears_log_after_return(self):
        with patch("gap_tailor.clients.llm_client.anthropic.AsyncAnthropic"):
            llm = LLMClient()
        llm._token_log = [("claude-haiku-4-5-20251001", 50, 25)]

        llm.get_token_summary()
        second = llm.get_token_summary()

        assert second == {"input": 0, "output": 0, "calls": []}
