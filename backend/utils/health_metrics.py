"""Body metrics derived from the stored profile and weight history."""

from datetime import date, datetime

CM_PER_M = 100.0


def calculate_bmi(height_cm: float | None, weight_kg: float | None) -> float | None:
    if height_cm is None or weight_kg is None:
        return None
    if height_cm <= 0 or weight_kg <= 0:
        return None
    height_m = height_cm / CM_PER_M
    return round(weight_kg / (height_m * height_m), 1)


def calculate_age(birthdate: date | datetime | None, today: date | None = None) -> int | None:
    if birthdate is None:
        return None
    if isinstance(birthdate, datetime):
        birthdate = birthdate.date()
    today = today or date.today()
    age = today.year - birthdate.year
    if (today.month, today.day) < (birthdate.month, birthdate.day):
        age -= 1
    return age
