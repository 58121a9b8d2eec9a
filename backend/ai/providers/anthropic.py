import httpx

from ai.providers.base import AIProvider
from services.errors import RemoteServiceFailure


class AnthropicProvider(AIProvider):
    """Anthropic / Claude AI provider."""

    BASE_URL = "https://api.anthropic.com/v1/messages"
    DEFAULT_MODEL = "claude-haiku-4-5-20251001"

    def __init__(self, api_key: str, model: str | None = None, timeout_seconds: float = 30.0):
        super().__init__(api_key, model, timeout_seconds)
        self._headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

    async def chat(
        self,
        messages: list[dict],
        model: str | None = None,
        system: str = "",
        json_output: bool = False,
    ) -> dict:
        payload: dict = {
            "model": model or self.get_model(),
            "max_tokens": 2048,
            "messages": messages,
        }
        if system:
            payload["system"] = system

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                resp = await client.post(self.BASE_URL, headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            raise RemoteServiceFailure(f"Anthropic request failed: {e}") from e
        if resp.status_code != 200:
            raise RemoteServiceFailure(f"Anthropic API error {resp.status_code}: {resp.text}")
        data = resp.json()

        content = ""
        for block in data.get("content", []):
            if block.get("type") == "text":
                content += block["text"]

        usage = data.get("usage", {})
        return {
            "content": content,
            "tokens_in": usage.get("input_tokens", 0),
            "tokens_out": usage.get("output_tokens", 0),
            "model": data.get("model", payload["model"]),
        }
