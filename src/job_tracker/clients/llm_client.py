"""Async Anthropic client used for job-description analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import anthropic
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"

ANALYST_SYSTEM_PROMPT = (
    "You extract structured data from job postings. "
    "Answer with a single JSON object and nothing else."
)

# Auth and bad-request errors will not get better on a second try.
RETRYABLE_ERRORS = (
    anthropic.APIConnectionError,
    anthropic.RateLimitError,
    anthropic.InternalServerError,
)


@dataclass
class LLMResponse:
    """Completion text plus the metadata needed to spot truncation."""

    text: str
    input_tokens: int
    output_tokens: int
    stop_reason: str | None = None

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_tokens"


@dataclass(frozen=True)
class TokenUsage:
    model: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Thin wrapper over ``AsyncAnthropic`` with retries and a usage log."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.max_retries = max_retries
        self.usage: list[TokenUsage] = []

    @staticmethod
    def _build_request(
        prompt: str,
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> dict:
        request: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system
        return request

    async def _send(self, request: dict) -> anthropic.types.Message:
        """Call the Messages API, retrying transient failures with backoff."""
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(min=1, max=10),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning("Retrying LLM call (attempt %d)", attempt.retry_state.attempt_number)
                return await self.client.messages.create(**request)

    async def generate(
        self,
        prompt: str,
        system: str = ANALYST_SYSTEM_PROMPT,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 1000,
    ) -> LLMResponse:
        """Send one prompt and return the first text block of the reply."""
        logger.debug("LLM call: model=%s max_tokens=%d", model, max_tokens)
        try:
            message = await self._send(
                self._build_request(prompt, system, model, temperature, max_tokens)
            )
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise

        texts = [block.text for block in message.content if getattr(block, "type", "text") == "text"]
        if not texts:
            raise ValueError("Unexpected response format from Anthropic: no text content")

        usage = TokenUsage(model, message.usage.input_tokens, message.usage.output_tokens)
        self.usage.append(usage)
        logger.debug("LLM response: %d input, %d output tokens", usage.input_tokens, usage.output_tokens)
        return LLMResponse(
            text=texts[0],
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            stop_reason=getattr(message, "stop_reason", None),
        )

    def token_summary(self) -> dict:
        """Totals since the last summary; the usage log is reset."""
        summary = {
            "calls": len(self.usage),
            "input": sum(u.input_tokens for u in self.usage),
            "output": sum(u.output_tokens for u in self.usage),
        }
        self.usage.clear()
        return summary
