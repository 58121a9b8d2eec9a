from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import app  # noqa: E402
from ai.providers import AnthropicProvider, GoogleProvider, OpenAIProvider, get_provider  # noqa: E402
from ai.providers.base import AIProvider  # noqa: E402
from ai.reminder_suggester import parse_reminders  # noqa: E402
from services import reminder_service  # noqa: E402
from services.errors import RemoteServiceFailure  # noqa: E402


class FakeProvider(AIProvider):
    DEFAULT_MODEL = "fake-model"

    def __init__(self, content: str = "", error: Exception | None = None, delay: float = 0.0):
        super().__init__(api_key="test-key")
        self.content = content
        self.error = error
        self.delay = delay
        self.prompts: list[str] = []

    async def chat(self, messages, model=None, system="", json_output=False):
        self.prompts.append(messages[-1]["content"])
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return {"content": self.content, "tokens_in": 10, "tokens_out": 5, "model": self.get_model()}


def _logs(count: int) -> list[dict]:
    return [
        {
            "id": f"gl_{i}",
            "timestamp": f"2026-03-01T{i % 24:02d}:00:00.000Z",
            "meal_type": "Lunch",
            "glycemia": 1.0 + i / 100,
            "dosage": 2.0,
            "notes": None,
        }
        for i in range(count)
    ]


def test_zero_logs_returns_info_without_calling_provider():
    provider = FakeProvider(content='{"reminders": []}')
    reminders = asyncio.run(reminder_service.get_suggested_reminders([], provider=provider))
    assert len(reminders) == 1
    assert reminders[0]["time"] == "Info"
    assert provider.prompts == []


def test_remote_failure_returns_error_pair():
    provider = FakeProvider(error=RemoteServiceFailure("boom"))
    reminders = asyncio.run(reminder_service.get_suggested_reminders(_logs(3), provider=provider))
    assert len(reminders) == 1
    assert reminders[0]["time"] == "Error"


def test_unparsable_output_returns_error_pair():
    provider = FakeProvider(content="Sure! Check at 8am.")
    reminders = asyncio.run(reminder_service.get_suggested_reminders(_logs(3), provider=provider))
    assert reminders == [reminder_service.GENERATION_FAILED]


def test_timeout_returns_error_pair():
    provider = FakeProvider(content='{"reminders": []}', delay=1.0)
    reminders = asyncio.run(
        reminder_service.get_suggested_reminders(_logs(2), provider=provider, timeout_seconds=0.05)
    )
    assert [r["time"] for r in reminders] == ["Error"]


def test_missing_api_key_returns_error_pair():
    reminders = asyncio.run(reminder_service.get_suggested_reminders(_logs(2)))
    assert [r["time"] for r in reminders] == ["Error"]


def test_successful_suggestions_and_fifty_log_cap():
    provider = FakeProvider(
        content='```json\n{"reminders": [{"time": "07:30", "message": "Check before breakfast."},'
        ' {"time": "21:00", "message": "Check before bed."}]}\n```'
    )
    reminders = asyncio.run(reminder_service.get_suggested_reminders(_logs(80), provider=provider))
    assert reminders == [
        {"time": "07:30", "message": "Check before breakfast."},
        {"time": "21:00", "message": "Check before bed."},
    ]
    prompt = provider.prompts[0]
    assert prompt.count("- Timestamp:") == 50
    assert "Glycemia: 1.0 g/L" in prompt
    assert "Glycemia: 1.5 g/L" not in prompt


def test_parse_reminders_accepts_bare_list():
    reminders = parse_reminders('[{"time": "12:00", "message": "Lunch check."}]')
    assert reminders[0].time == "12:00"


def test_get_provider_selects_class_and_filters_foreign_models():
    assert isinstance(get_provider("google", "k"), GoogleProvider)
    assert isinstance(get_provider("OpenAI", "k"), OpenAIProvider)
    anthropic = get_provider("anthropic", "k", model="gpt-4o")
    assert isinstance(anthropic, AnthropicProvider)
    assert anthropic.get_model() == AnthropicProvider.DEFAULT_MODEL


def test_reminders_endpoint_uses_callers_logs(monkeypatch, unique_email):
    provider = FakeProvider(content='{"reminders": [{"time": "08:00", "message": "Morning check."}]}')
    monkeypatch.setattr(reminder_service, "default_provider", lambda: provider)

    client = TestClient(app)
    client.post("/api/auth/signup", json={"email": unique_email, "password": "Gluco!Pass123", "name": "Rem User"})

    empty = client.post("/api/reminders")
    assert empty.status_code == 200
    assert empty.json()["reminders"][0]["time"] == "Info"

    client.post("/api/glucose-logs", json={"meal_type": "Fasting", "glycemia": 1.3, "dosage": 0})
    resp = client.post("/api/reminders")
    assert resp.json() == {"reminders": [{"time": "08:00", "message": "Morning check."}]}
    assert "Meal Type: Fasting" in provider.prompts[0]
