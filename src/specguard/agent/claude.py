"""Claude backend — one verification prompt per call via the Anthropic SDK."""

from __future__ import annotations

import asyncio
import logging
import os

import anthropic

from specguard.agent.base import AgentResult, AgentTask
from specguard.config.providers import model_cost

logger = logging.getLogger(__name__)

_RATE_LIMIT_ATTEMPTS = 5
_RATE_LIMIT_BASE_WAIT = 20  # seconds, multiplied by the attempt number


class ClaudeAgentBackend:
    """AgentBackend for Anthropic models via the Messages API."""

    def __init__(self, api_key: str | None = None) -> None:
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or os.environ.get("ANTHROPIC_API_KEY", ""),
        )

    @property
    def name(self) -> str:
        return "anthropic"

    async def execute(self, task: AgentTask) -> AgentResult:
        response = await self._create(task)

        text = "".join(block.text for block in response.content if block.type == "text")
        usage = response.usage
        cost = model_cost(task.model, usage.input_tokens, usage.output_tokens)

        logger.info(
            "[%s] %s replied: %d in / %d out tokens ($%.4f)",
            task.role, task.model, usage.input_tokens, usage.output_tokens, cost,
        )
        return AgentResult(
            output=text,
            model=task.model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            cost_usd=cost,
        )

    async def _create(self, task: AgentTask) -> anthropic.types.Message:
        """Send the message, waiting out rate limits; other errors propagate."""
        attempt = 1
        while True:
            try:
                return await self._client.messages.create(
                    model=task.model,
                    max_tokens=task.max_tokens,
                    system=task.system_prompt,
                    messages=[{"role": "user", "content": task.user_prompt}],
                )
            except anthropic.RateLimitError as e:
                if attempt >= _RATE_LIMIT_ATTEMPTS:
                    raise
                wait = _RATE_LIMIT_BASE_WAIT * attempt
                logger.warning("[%s] Claude rate limited, retrying in %ds: %s", task.role, wait, e)
                await asyncio.sleep(wait)
                attempt += 1
