from typing import Any

import httpx

from ai.providers.base import AIProvider
from services.errors import RemoteServiceFailure


class OpenAIProvider(AIProvider):
    """OpenAI / GPT AI provider."""

    BASE_URL = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_MAX_COMPLETION_TOKENS = 2048

    def __init__(self, api_key: str, model: str | None = None, timeout_seconds: float = 30.0):
        super().__init__(api_key, model, timeout_seconds)
        self._headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat(
        self,
        messages: list[dict],
        model: str | None = None,
        system: str = "",
        json_output: bool = False,
    ) -> dict:
        # Prepend system message if provided
        full_messages = list(messages)
        if system:
            full_messages.insert(0, {"role": "system", "content": system})

        model = model or self.get_model()
        payload: dict[str, Any] = {
            "model": model,
            "messages": full_messages,
        }
        payload.update(self._token_limit_field(model, self.DEFAULT_MAX_COMPLETION_TOKENS))
        if json_output:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                resp = await client.post(self.BASE_URL, headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            raise RemoteServiceFailure(f"OpenAI request failed: {e}") from e
        if resp.status_code != 200:
            raise RemoteServiceFailure(f"OpenAI API error {resp.status_code}: {resp.text}")
        data = resp.json()

        choice = data.get("choices", [{}])[0]
        content = choice.get("message", {}).get("content", "") or ""
        usage = data.get("usage", {})
        return {
            "content": content,
            "tokens_in": usage.get("prompt_tokens", 0),
            "tokens_out": usage.get("completion_tokens", 0),
            "model": data.get("model", model),
        }

    def _token_limit_field(self, model: str, limit: int) -> dict[str, int]:
        m = (model or "").strip().lower()
        if m.startswith("o") or m.startswith("gpt-5") or m.startswith("gpt-4.1"):
            return {"max_completion_tokens": limit}
        return {"max_tokens": limit}
