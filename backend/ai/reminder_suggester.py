import json
import logging

from pydantic import BaseModel, ValidationError

from ai.providers.base import AIProvider
from services.errors import RemoteServiceFailure

logger = logging.getLogger(__name__)

SUGGEST_REMINDERS_SYSTEM = (
    "You are an AI assistant specializing in diabetes management. "
    "Return only valid JSON, no explanation."
)

SUGGEST_REMINDERS_PROMPT = """Analyze the user's historical glucose logs and suggest personalized reminders for checking blood sugar levels. The reminders should be based on patterns in the user's glucose levels related to meal times, dosages, and glycemia levels. Suggest times to check glucose that will help them stabilize their glucose levels.

Glucose Logs:
{log_lines}

Based on this data, suggest personalized reminders including the time and reminder message.

Return ONLY valid JSON with this structure:
{{
    "reminders": [{{"time": "HH:MM", "message": "personalized reminder message"}}]
}}"""


class ReminderLogInput(BaseModel):
    timestamp: str
    meal_type: str
    glycemia: float
    dosage: float


class Reminder(BaseModel):
    time: str
    message: str


class ReminderSuggestions(BaseModel):
    reminders: list[Reminder]


def build_prompt(logs: list[ReminderLogInput]) -> str:
    lines = [
        f"- Timestamp: {log.timestamp}, Meal Type: {log.meal_type}, "
        f"Glycemia: {log.glycemia} g/L, Dosage: {log.dosage} units"
        for log in logs
    ]
    return SUGGEST_REMINDERS_PROMPT.format(log_lines="\n".join(lines))


def parse_reminders(content: str) -> list[Reminder]:
    text = (content or "").strip()
    # Handle markdown code blocks
    if "```" in text:
        text = text.split("```")[1]
        if text.startswith("json"):
            text = text[4:]
        text = text.strip()
    try:
        parsed = json.loads(text)
        if isinstance(parsed, list):
            parsed = {"reminders": parsed}
        return ReminderSuggestions.model_validate(parsed).reminders
    except (json.JSONDecodeError, ValidationError) as e:
        raise RemoteServiceFailure(f"Unreadable reminder suggestions: {e}") from e


async def suggest_personalized_reminders(
    provider: AIProvider,
    logs: list[ReminderLogInput],
) -> list[Reminder]:
    result = await provider.chat(
        messages=[{"role": "user", "content": build_prompt(logs)}],
        system=SUGGEST_REMINDERS_SYSTEM,
        json_output=True,
    )
    reminders = parse_reminders(result.get("content", ""))
    logger.info(
        "Generated %s reminders from %s logs (model=%s, tokens_in=%s, tokens_out=%s)",
        len(reminders),
        len(logs),
        result.get("model"),
        result.get("tokens_in"),
        result.get("tokens_out"),
    )
    return reminders
