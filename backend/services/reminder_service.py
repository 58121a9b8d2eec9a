import asyncio
import logging
from typing import Any

from ai.providers import AIProvider, get_provider
from ai.reminder_suggester import ReminderLogInput, suggest_personalized_reminders
from config import settings
from services.errors import RemoteServiceFailure

logger = logging.getLogger(__name__)

NOT_ENOUGH_DATA = {
    "time": "Info",
    "message": "Not enough data to generate reminders. Please add more glucose logs.",
}
GENERATION_FAILED = {
    "time": "Error",
    "message": "Could not generate reminders at this time. Please try again later.",
}


def default_provider() -> AIProvider:
    api_key = (settings.REMINDER_AI_API_KEY or "").strip()
    if not api_key:
        raise RemoteServiceFailure("REMINDER_AI_API_KEY is not configured")
    return get_provider(
        settings.REMINDER_AI_PROVIDER,
        api_key,
        model=settings.REMINDER_AI_MODEL,
        timeout_seconds=settings.REMINDER_AI_TIMEOUT_SECONDS,
    )


async def get_suggested_reminders(
    glucose_logs: list[dict[str, Any]],
    provider: AIProvider | None = None,
    timeout_seconds: float | None = None,
) -> list[dict[str, str]]:
    """Suggest reminder times from the most recent glucose logs.

    ``glucose_logs`` must be most-recent-first. Never raises: an empty history
    yields the Info pair and any failure yields the Error pair.
    """
    try:
        formatted = [
            ReminderLogInput(
                timestamp=log["timestamp"],
                meal_type=log["meal_type"],
                glycemia=log["glycemia"],
                dosage=log["dosage"],
            )
            for log in glucose_logs
        ]
        if not formatted:
            return [dict(NOT_ENOUGH_DATA)]

        limited = formatted[: settings.REMINDER_MAX_LOGS]
        provider = provider or default_provider()
        timeout = timeout_seconds if timeout_seconds is not None else settings.REMINDER_AI_TIMEOUT_SECONDS
        reminders = await asyncio.wait_for(suggest_personalized_reminders(provider, limited), timeout=timeout)
        if not reminders:
            return [dict(NOT_ENOUGH_DATA)]
        return [r.model_dump() for r in reminders]
    except asyncio.TimeoutError:
        logger.error("Reminder generation timed out")
        return [dict(GENERATION_FAILED)]
    except Exception as e:
        logger.error(f"Error fetching reminders: {e}")
        return [dict(GENERATION_FAILED)]
