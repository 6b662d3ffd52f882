import logging
import time
from collections.abc import Iterable

from openai import AsyncOpenAI

from log_sentinel import config, models, prompts

logger = logging.getLogger(__name__)


def map_role(role: str) -> str:
    return "model" if role == "model" else "user"


def transform_history(messages: Iterable[models.Message | models.HistoryTurn]) -> list[models.HistoryTurn]:
    return [
        models.HistoryTurn(role=map_role(m.role), text=m.text)
        for m in messages
        if m.role != "system"
    ]


def _to_chat_messages(system_instruction: str, turns: list[models.HistoryTurn]) -> list[dict]:
    messages = [{"role": "system", "content": system_instruction}]
    for turn in turns:
        role = "assistant" if turn.role == "model" else "user"
        messages.append({"role": role, "content": turn.text})
    return messages


class AnalysisClient:
    """Sends one diagnosis turn to the model and always resolves to text.

    Failures are reported in-band as the reply text so the conversation can
    show them like any other model message.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        model: str,
        temperature: float = 0.2,
        thinking_budget: int = 4096,
        timeout: float = 120.0,
        max_file_chars: int = 20_000,
    ):
        self.model = model
        self.temperature = temperature
        self.thinking_budget = thinking_budget
        self.timeout = timeout
        self.max_file_chars = max_file_chars
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    @classmethod
    def from_config(cls, cfg: config.Config) -> "AnalysisClient":
        return cls(
            api_key=cfg.credentials.api_key,
            base_url=cfg.llm.base_url,
            model=cfg.llm.model_name,
            temperature=cfg.llm.temperature,
            thinking_budget=cfg.llm.thinking_budget,
            timeout=cfg.llm.timeout,
            max_file_chars=cfg.context.max_file_chars,
        )

    def build_messages(
        self,
        current_message: str,
        history: Iterable[models.Message | models.HistoryTurn],
        files: list[models.LogFile],
        repo_context: models.RepoContext,
    ) -> list[dict]:
        prompt = prompts.build_prompt(current_message, files, repo_context, self.max_file_chars)
        turns = transform_history(history)
        turns.append(models.HistoryTurn(role="user", text=prompt))
        return _to_chat_messages(prompts.SYSTEM_INSTRUCTION, turns)

    async def analyze(
        self,
        current_message: str,
        history: Iterable[models.Message | models.HistoryTurn],
        files: list[models.LogFile],
        repo_context: models.RepoContext,
    ) -> str:
        try:
            messages = self.build_messages(current_message, history, files, repo_context)
            logger.info(f"Sending {len(messages) - 1} turns, prompt={len(messages[-1]['content'])} chars")

            t0 = time.monotonic()
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                timeout=self.timeout,
                extra_body={
                    "extra_body": {
                        "google": {"thinking_config": {"thinking_budget": self.thinking_budget}},
                    },
                },
            )
            logger.info(f"Analysis completed in {time.monotonic() - t0:.1f}s")
        except Exception as exc:
            logger.error(f"LLM analysis request failed: {exc!r}")
            return f"Error analyzing logs: {str(exc) or 'Unknown error'}"

        text = response.choices[0].message.content if response.choices else None
        if not text:
            logger.warning("LLM returned empty response")
            return prompts.EMPTY_RESPONSE_FALLBACK
        return text

    async def close(self) -> None:
        await self._client.close()
