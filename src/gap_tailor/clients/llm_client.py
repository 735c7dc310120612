"""Claude API wrapper with async support, deadlines and cancellation.

Calls are never retried automatically: a failed or timed-out call surfaces
to the caller, who decides whether to try again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic

from gap_tailor.errors import Cancelled, ModelError, TimeoutExceeded
from gap_tailor.utils.deadline import CancelToken, Deadline, guarded
from gap_tailor.utils.json_parser import ParseOutcome, parse_model_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int
    stop_reason: str | None = None


class LLMClient:
    """Async Claude API client."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.timeout = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def _call_api(
        self,
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> anthropic.types.Message:
        messages = [{"role": "user", "content": prompt}]
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        return await self.client.messages.create(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        *,
        deadline: Deadline | None = None,
        cancel: CancelToken | None = None,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage."""
        if not self.client.api_key:
            raise ModelError("ANTHROPIC_API_KEY is not set.")

        logger.debug("LLM call: model=%s temperature=%s", model, temperature)
        try:
            message = await guarded(
                self._call_api(
                    prompt=prompt,
                    system=system,
                    model=model,
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                operation="Model call",
                deadline=deadline,
                cancel=cancel,
            )
        except (TimeoutExceeded, Cancelled):
            logger.warning("LLM call abandoned: model=%s", model)
            raise
        except anthropic.APITimeoutError as exc:
            raise TimeoutExceeded("Model call", self.timeout) from exc
        except anthropic.AnthropicError as exc:
            logger.error("LLM call failed", exc_info=True)
            raise ModelError(f"Model call failed: {exc}") from exc

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))

        stop_reason = getattr(message, "stop_reason", None)
        if stop_reason == "max_tokens":
            logger.warning("LLM response truncated at max_tokens=%d (model=%s)", max_tokens, model)

        text = "".join(
            block.text for block in message.content if isinstance(getattr(block, "text", None), str)
        )
        return LLMResponse(
            text=text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            stop_reason=stop_reason if isinstance(stop_reason, str) else None,
        )

    async def generate_json(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        *,
        deadline: Deadline | None = None,
        cancel: CancelToken | None = None,
    ) -> ParseOutcome:
        """Send a prompt and parse JSON from the response.

        Returns ParsedJson or ParseFailure; the payload is untrusted either
        way and must be validated by the caller.
        """
        response = await self.generate(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            deadline=deadline,
            cancel=cancel,
        )
        return parse_model_json(response.text)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
