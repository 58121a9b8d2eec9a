from abc import ABC, abstractmethod


class AIProvider(ABC):
    """Abstract base class for all AI providers."""

    DEFAULT_MODEL: str = ""

    def __init__(self, api_key: str, model: str | None = None, timeout_seconds: float = 30.0):
        self.api_key = api_key
        self._model = model
        self.timeout_seconds = float(timeout_seconds)

    @abstractmethod
    async def chat(
        self,
        messages: list[dict],
        model: str | None = None,
        system: str = "",
        json_output: bool = False,
    ) -> dict:
        """Send a non-streaming chat request to the provider.

        Args:
            messages: List of message dicts with role and content.
            model: Model identifier; falls back to the configured model.
            system: Optional system prompt.
            json_output: Ask the provider for a JSON-only response when it
                supports a response format switch.

        Returns:
            dict with content, tokens_in, tokens_out, model.

        Raises:
            RemoteServiceFailure on transport errors or non-200 responses.
        """
        ...

    def get_model(self) -> str:
        """Return the model identifier used when the caller does not pick one."""
        return self._model or self.DEFAULT_MODEL
