import httpx

from ai.providers.base import AIProvider
from services.errors import RemoteServiceFailure


class GoogleProvider(AIProvider):
    """Google Gemini AI provider."""

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    DEFAULT_MODEL = "gemini-2.0-flash"

    def _endpoint(self, model: str) -> str:
        return f"{self.BASE_URL}/{model}:generateContent"

    @staticmethod
    def _convert_messages(messages: list[dict]) -> list[dict]:
        """Convert OpenAI-style messages to Gemini format."""
        contents = []
        for msg in messages:
            role = msg["role"]
            # Gemini uses "user" and "model" roles
            if role == "assistant":
                role = "model"
            contents.append({
                "role": role,
                "parts": [{"text": str(msg.get("content", ""))}],
            })
        return contents

    async def chat(
        self,
        messages: list[dict],
        model: str | None = None,
        system: str = "",
        json_output: bool = False,
    ) -> dict:
        model = model or self.get_model()
        payload: dict = {"contents": self._convert_messages(messages)}
        if system:
            payload["system_instruction"] = {"parts": [{"text": system}]}
        if json_output:
            payload["generationConfig"] = {"responseMimeType": "application/json"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                resp = await client.post(
                    self._endpoint(model),
                    headers={"Content-Type": "application/json", "x-goog-api-key": self.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            raise RemoteServiceFailure(f"Google request failed: {e}") from e
        if resp.status_code != 200:
            raise RemoteServiceFailure(f"Google API error {resp.status_code}: {resp.text}")
        data = resp.json()

        content = ""
        candidates = data.get("candidates", [])
        if candidates:
            for part in candidates[0].get("content", {}).get("parts", []):
                content += part.get("text", "")

        usage = data.get("usageMetadata", {})
        return {
            "content": content,
            "tokens_in": usage.get("promptTokenCount", 0),
            "tokens_out": usage.get("candidatesTokenCount", 0),
            "model": model,
        }
