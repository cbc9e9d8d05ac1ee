"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest
from tenacity import wait_none

from job_tracker.clients.llm_client import ANALYST_SYSTEM_PROMPT, LLMClient, LLMResponse, TokenUsage


def _make_api_message(
    text: str,
    input_tokens: int = 100,
    output_tokens: int = 50,
    stop_reason: str = "end_turn",
) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.content = [MagicMock(type="text", text=text)]
    message.stop_reason = stop_reason
    return message


def _request() -> httpx.Request:
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


class TestLLMClientInit:
    def test_init_default_creates_client_with_no_kwargs(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with()

    def test_init_with_api_key_and_timeout(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0)


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message("hello world", input_tokens=100, output_tokens=50)
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            result = await llm.generate("say hello", max_tokens=200)

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        assert result.input_tokens == 100
        assert result.output_tokens == 50
        assert result.truncated is False
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["max_tokens"] == 200
        assert kwargs["system"] == ANALYST_SYSTEM_PROMPT
        assert kwargs["messages"] == [{"role": "user", "content": "say hello"}]

    async def test_generate_flags_truncation(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message('{"salaryMin": 1', stop_reason="max_tokens")
            )
            mock_cls.return_value = mock_client

            result = await LLMClient().generate("analyze")

        assert result.truncated is True

    async def test_generate_skips_non_text_blocks(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            message = _make_api_message("answer")
            message.content = [MagicMock(type="thinking"), MagicMock(type="text", text="answer")]
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(return_value=message)
            mock_cls.return_value = mock_client

            result = await LLMClient().generate("prompt")

        assert result.text == "answer"

    async def test_generate_without_text_raises(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            message = _make_api_message("unused")
            message.content = []
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(return_value=message)
            mock_cls.return_value = mock_client

            with pytest.raises(ValueError, match="no text content"):
                await LLMClient().generate("prompt")

    async def test_empty_system_prompt_omitted(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(return_value=_make_api_message("ok"))
            mock_cls.return_value = mock_client

            await LLMClient().generate("prompt", system="")

        assert "system" not in mock_client.messages.create.call_args.kwargs

    async def test_usage_log_records_model_and_counts(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message("resp", input_tokens=20, output_tokens=8)
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            await llm.generate("prompt", model="claude-haiku-4-5-20251001")
            await llm.generate("prompt again")

        assert llm.usage == [
            TokenUsage("claude-haiku-4-5-20251001", 20, 8),
            TokenUsage("claude-haiku-4-5-20251001", 20, 8),
        ]


class TestLLMClientRetry:
    async def test_retries_connection_errors(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls, \
                patch("job_tracker.clients.llm_client.wait_exponential", return_value=wait_none()):
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                side_effect=[anthropic.APIConnectionError(request=_request()), _make_api_message("ok")]
            )
            mock_cls.return_value = mock_client

            result = await LLMClient(max_retries=3).generate("prompt")

        assert result.text == "ok"
        assert mock_client.messages.create.await_count == 2

    async def test_gives_up_after_max_retries(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls, \
                patch("job_tracker.clients.llm_client.wait_exponential", return_value=wait_none()):
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                side_effect=anthropic.APIConnectionError(request=_request())
            )
            mock_cls.return_value = mock_client

            with pytest.raises(anthropic.APIConnectionError):
                await LLMClient(max_retries=2).generate("prompt")

        assert mock_client.messages.create.await_count == 2

    async def test_auth_errors_not_retried(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic") as mock_cls:
            error = anthropic.AuthenticationError(
                "invalid x-api-key", response=httpx.Response(401, request=_request()), body=None
            )
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(side_effect=error)
            mock_cls.return_value = mock_client

            with pytest.raises(anthropic.AuthenticationError):
                await LLMClient().generate("prompt")

        assert mock_client.messages.create.await_count == 1


class TestLLMClientTokenSummary:
    def test_token_summary_returns_totals_and_clears(self):
        with patch("job_tracker.clients.llm_client.anthropic.AsyncAnthropic"):
            llm = LLMClient()
        llm.usage = [
            TokenUsage("claude-haiku-4-5-20251001", 100, 50),
            TokenUsage("claude-haiku-4-5-20251001", 200, 80),
        ]

        assert llm.token_summary() == {"calls": 2, "input": 300, "output": 130}
        assert llm.token_summary() == {"calls": 0, "input": 0, "output": 0}
