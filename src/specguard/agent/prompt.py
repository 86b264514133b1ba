"""Prompt composer — system prompts from versioned markdown templates."""

from __future__ import annotations

from pathlib import Path

_PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts" / "v1"
_MAX_PAYLOAD_CHARS = 48_000  # ~12k tokens


class PromptComposer:
    """Builds the two halves of a model prompt.

    The system prompt is the role's template (``<role>.md``), read once per
    composer. The user prompt is the task payload, cut at a fixed size.
    """

    def __init__(self, prompts_dir: Path = _PROMPTS_DIR) -> None:
        self._prompts_dir = prompts_dir
        self._templates: dict[str, str] = {}

    def compose_system_prompt(self, role: str) -> str:
        if role not in self._templates:
            path = self._prompts_dir / f"{role}.md"
            try:
                self._templates[role] = path.read_text()
            except FileNotFoundError as e:
                raise FileNotFoundError(f"No prompt template for role {role!r}: {path}") from e
        return self._templates[role]

    def compose_user_prompt(self, task_payload: str) -> str:
        if len(task_payload) <= _MAX_PAYLOAD_CHARS:
            return task_payload
        return task_payload[:_MAX_PAYLOAD_CHARS] + "\n... (truncated)"
