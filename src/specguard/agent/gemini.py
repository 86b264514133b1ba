"""Gemini backend — one verification prompt per call via the Google GenAI SDK."""

from __future__ import annotations

import asyncio
import logging
import os

from google import genai
from google.genai import types as genai_types

from specguard.agent.base import AgentResult, AgentTask
from specguard.config.providers import model_cost

logger = logging.getLogger(__name__)

_UNREGISTERED_COST = (1.25, 10.00)

_RATE_LIMIT_ATTEMPTS = 5
_RATE_LIMIT_BASE_WAIT = 15  # seconds, multiplied by the attempt number

_RATE_LIMIT_MARKERS = ("429", "resource exhausted", "rate")


def _is_rate_limit(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


def _reply_text(response: genai_types.GenerateContentResponse) -> str:
    if not response.candidates:
        return ""
    content = response.candidates[0].content
    if not content or not content.parts:
        return ""
    return "".join(part.text for part in content.parts if part.text)


class GeminiAgentBackend:
    """AgentBackend for Google Gemini models."""

    def __init__(self, api_key: str | None = None) -> None:
        self._client = genai.Client(api_key=api_key or os.environ.get("GEMINI_API_KEY", ""))

    @property
    def name(self) -> str:
        return "gemini"

    async def execute(self, task: AgentTask) -> AgentResult:
        response = await self._generate(task)

        usage = response.usage_metadata
        input_tokens = (usage.prompt_token_count or 0) if usage else 0
        output_tokens = (usage.candidates_token_count or 0) if usage else 0
        cost = model_cost(task.model, input_tokens, output_tokens, default=_UNREGISTERED_COST)

        logger.info(
            "[%s] %s replied: %d in / %d out tokens ($%.4f)",
            task.role, task.model, input_tokens, output_tokens, cost,
        )
        return AgentResult(
            output=_reply_text(response),
            model=task.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost,
        )

    async def _generate(self, task: AgentTask) -> genai_types.GenerateContentResponse:
        """Call the API, waiting out rate limits; other errors propagate."""
        config = genai_types.GenerateContentConfig(
            system_instruction=task.system_prompt,
            max_output_tokens=task.max_tokens,
            temperature=0.0,
        )
        attempt = 1
        while True:
            try:
                return await self._client.aio.models.generate_content(
                    model=task.model,
                    contents=task.user_prompt,
                    config=config,
                )
            except Exception as e:
                if attempt >= _RATE_LIMIT_ATTEMPTS or not _is_rate_limit(e):
                    raise
                wait = _RATE_LIMIT_BASE_WAIT * attempt
                logger.warning("[%s] Gemini rate limited, retrying in %ds: %s", task.role, wait, e)
                await asyncio.sleep(wait)
                attempt += 1
