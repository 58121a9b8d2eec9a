from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from main import app  # noqa: E402
from client.api_client import GlucoTrackClient  # noqa: E402
from client.store import AppStore  # noqa: E402
from services import reminder_service  # noqa: E402
from services.errors import (  # noqa: E402
    DuplicateEmail,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
    RemoteServiceFailure,
    ValidationFailure,
)

PASSWORD = "Store!Pass123"


def _store() -> AppStore:
    return AppStore(GlucoTrackClient(TestClient(app)))


def _signed_in_store(email: str) -> AppStore:
    store = _store()
    store.signup(email, PASSWORD, "Store User")
    return store


def _log(timestamp: str, glycemia: float = 1.1) -> dict:
    return {"timestamp": timestamp, "meal_type": "Breakfast", "glycemia": glycemia, "dosage": 2}


def test_bootstrap_without_session_is_logged_out():
    store = _store()
    assert store.auth_state == "loading"
    assert store.bootstrap() == "loggedOut"
    assert store.user is None


def test_signup_loads_profile_and_empty_caches(unique_email):
    store = _signed_in_store(unique_email)
    assert store.auth_state == "loggedIn"
    assert store.user["email"] == unique_email
    assert store.profile["name"] == "Store User"
    assert store.glucose_logs == []
    assert store.weight_history == []


def test_bootstrap_resumes_existing_session(unique_email):
    http = TestClient(app)
    AppStore(GlucoTrackClient(http)).signup(unique_email, PASSWORD, "Store User")

    resumed = AppStore(GlucoTrackClient(http))
    assert resumed.bootstrap() == "loggedIn"
    assert resumed.profile["email"] == unique_email


def test_failed_login_and_duplicate_signup_end_logged_out(unique_email):
    _signed_in_store(unique_email)

    store = _store()
    with pytest.raises(InvalidCredentials):
        store.login(unique_email, "wrong-password")
    assert store.auth_state == "loggedOut"

    with pytest.raises(DuplicateEmail):
        store.signup(unique_email, PASSWORD, "Again")
    assert store.auth_state == "loggedOut"

    store.login(unique_email, PASSWORD)
    assert store.auth_state == "loggedIn"


def test_glucose_cache_stays_most_recent_first(unique_email):
    store = _signed_in_store(unique_email)
    middle = store.add_glucose_log(_log("2026-03-02T08:00:00Z"))
    newest = store.add_glucose_log(_log("2026-03-03T08:00:00Z"))
    oldest = store.add_glucose_log(_log("2026-03-01T08:00:00Z"))
    assert [g["id"] for g in store.glucose_logs] == [newest["id"], middle["id"], oldest["id"]]

    moved = store.update_glucose_log({**oldest, "timestamp": "2026-03-04T08:00:00Z", "glycemia": 1.9})
    assert store.glucose_logs[0] == moved
    assert moved["glycemia"] == 1.9

    store.delete_multiple_glucose_logs([middle["id"], newest["id"]])
    assert [g["id"] for g in store.glucose_logs] == [oldest["id"]]
    store.delete_glucose_log(oldest["id"])
    assert store.glucose_logs == []


def test_add_glucose_log_defaults_timestamp_to_now(unique_email):
    store = _signed_in_store(unique_email)
    saved = store.add_glucose_log({"meal_type": "Snack", "glycemia": 1.4, "dosage": 0, "notes": "apple"})
    assert saved["timestamp"].endswith("Z")
    assert saved["notes"] == "apple"


def test_weight_cache_and_profile_updates(unique_email):
    store = _signed_in_store(unique_email)
    first = store.add_weight_entry(82.0, "2026-02-01T07:00:00Z")
    second = store.add_weight_entry(81.0, "2026-02-08T07:00:00Z")
    assert [e["id"] for e in store.weight_history] == [second["id"], first["id"]]

    store.update_weight_entry({**first, "date": "2026-02-15T07:00:00Z"})
    assert store.weight_history[0]["id"] == first["id"]

    store.delete_multiple_weight_entries([])
    assert len(store.weight_history) == 2
    store.delete_weight_entry(second["id"])
    assert [e["id"] for e in store.weight_history] == [first["id"]]

    store.update_profile({"height": 181, "birthdate": "1988-07-02"})
    assert store.profile["height"] == 181
    assert store.profile["birthdate"].startswith("1988-07-02")


def test_failed_mutations_leave_cache_untouched(unique_email):
    store = _signed_in_store(unique_email)
    log = store.add_glucose_log(_log("2026-03-01T08:00:00Z"))
    before = [dict(g) for g in store.glucose_logs]

    with pytest.raises(NotFound):
        store.update_glucose_log({**log, "id": "gl_missing", "glycemia": 2.0})
    with pytest.raises(ValidationFailure):
        store.add_glucose_log(_log("2026-03-05T08:00:00Z", glycemia=-1))
    with pytest.raises(ValidationFailure):
        store.add_weight_entry(-4)
    assert store.glucose_logs == before
    assert store.weight_history == []


def test_mutations_require_a_user():
    store = _store()
    with pytest.raises(NotAuthenticated):
        store.add_glucose_log(_log("2026-03-01T08:00:00Z"))
    with pytest.raises(NotAuthenticated):
        store.delete_multiple_weight_entries(["weight_x"])
    with pytest.raises(NotAuthenticated):
        store.update_profile({"name": "Nobody"})


def test_load_failure_forces_logout(monkeypatch, unique_email):
    store = _store()

    def _broken():
        raise RemoteServiceFailure("database unavailable")

    monkeypatch.setattr(store.backend, "get_glucose_logs", _broken)
    store.signup(unique_email, PASSWORD, "Store User")
    assert store.auth_state == "loggedOut"
    assert store.user is None
    assert store.backend.check_session() is None


def test_logout_clears_everything(unique_email):
    store = _signed_in_store(unique_email)
    store.add_glucose_log(_log("2026-03-01T08:00:00Z"))
    store.logout()
    assert store.auth_state == "loggedOut"
    assert store.profile is None
    assert store.glucose_logs == []
    assert store.bootstrap() == "loggedOut"


def test_listeners_see_every_state_change(unique_email):
    store = _store()
    seen: list[str] = []
    unsubscribe = store.subscribe(lambda s: seen.append(s.auth_state))
    store.signup(unique_email, PASSWORD, "Store User")
    assert seen[0] == "loading"
    assert seen[-1] == "loggedIn"

    count = len(seen)
    unsubscribe()
    store.add_weight_entry(70)
    assert len(seen) == count


def test_suggest_reminders_tracks_pending_state(unique_email):
    store = _signed_in_store(unique_email)
    pending: list[bool] = []
    store.subscribe(lambda s: pending.append(s.reminders_pending))

    reminders = store.suggest_reminders()
    assert reminders == [reminder_service.NOT_ENOUGH_DATA]
    assert pending == [True, False]
    assert store.reminders_pending is False


def test_add_health_data_writes_log_and_optional_weight(unique_email):
    store = _signed_in_store(unique_email)
    saved = store.add_health_data(_log("2026-03-01T08:00:00Z"), weight=72.5)
    assert saved["weight_entry"]["weight"] == 72.5
    assert saved["weight_entry"]["date"] == saved["glucose_log"]["timestamp"]
    assert store.glucose_logs == [saved["glucose_log"]]
    assert store.weight_history == [saved["weight_entry"]]

    only_log = store.add_health_data(_log("2026-03-02T08:00:00Z"))
    assert only_log["weight_entry"] is None
    assert len(store.weight_history) == 1

    with pytest.raises(ValidationFailure):
        store.add_health_data(_log("2026-03-03T08:00:00Z"), weight=-1)
    assert len(store.glucose_logs) == 3
    assert len(store.weight_history) == 1
