"""Client-held state for the signed-in user.

``AppStore`` is the single source of truth that UI bindings hold by reference.
It caches the profile, glucose logs and weight history, and after every
successful mutation merges the server's copy of the row back into the cache,
keeping both lists most-recent-first.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Literal

from client.api_client import GlucoTrackClient
from services.errors import GlucoTrackError, NotAuthenticated
from services.reminder_service import GENERATION_FAILED
from utils.datetime_utils import parse_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

AuthState = Literal["loading", "loggedIn", "loggedOut"]
Listener = Callable[["AppStore"], None]


def _sorted_desc(rows: list[dict[str, Any]], field: str) -> list[dict[str, Any]]:
    return sorted(rows, key=lambda r: parse_iso(r[field]), reverse=True)


class AppStore:
    def __init__(self, backend: GlucoTrackClient):
        self.backend = backend
        self.auth_state: AuthState = "loading"
        self.user: dict[str, Any] | None = None
        self.profile: dict[str, Any] | None = None
        self.glucose_logs: list[dict[str, Any]] = []
        self.weight_history: list[dict[str, Any]] = []
        self.reminders: list[dict[str, str]] = []
        self.reminders_pending = False
        self._listeners: list[Listener] = []

    # --- subscriptions -----------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _require_user(self) -> dict[str, Any]:
        if not self.user:
            raise NotAuthenticated()
        return self.user

    # --- auth transitions --------------------------------------------------

    def bootstrap(self) -> AuthState:
        """Resolve an existing session cookie into a loaded store."""
        self.auth_state = "loading"
        self._notify()
        try:
            session_user = self.backend.check_session()
        except Exception as e:
            logger.error(f"Session check failed: {e}")
            session_user = None
        if session_user:
            self._load_initial_data(session_user)
        else:
            self._reset("loggedOut")
        return self.auth_state

    def signup(self, email: str, password: str, name: str) -> None:
        self.auth_state = "loading"
        self._notify()
        try:
            new_user = self.backend.signup(email, password, name)
        except Exception:
            self._reset("loggedOut")
            raise
        self._load_initial_data(new_user)

    def login(self, email: str, password: str) -> None:
        self.auth_state = "loading"
        self._notify()
        try:
            user = self.backend.login(email, password)
        except Exception:
            self._reset("loggedOut")
            raise
        self._load_initial_data(user)

    def logout(self) -> None:
        try:
            self.backend.logout()
        except Exception as e:
            logger.error(f"Logout failed: {e}")
        finally:
            self._reset("loggedOut")

    def _reset(self, state: AuthState) -> None:
        self.user = None
        self.profile = None
        self.glucose_logs = []
        self.weight_history = []
        self.reminders = []
        self.reminders_pending = False
        self.auth_state = state
        self._notify()

    def _load_initial_data(self, user: dict[str, Any]) -> None:
        self.user = user
        try:
            profile = self.backend.get_user_profile()
            weight_history = self.backend.get_weight_history()
            glucose_logs = self.backend.get_glucose_logs()
        except Exception as e:
            logger.error(f"Failed to load user data: {e}")
            self.logout()
            return
        if not profile:
            self.logout()
            return
        self.profile = profile
        self.weight_history = _sorted_desc(weight_history, "date")
        self.glucose_logs = _sorted_desc(glucose_logs, "timestamp")
        self.auth_state = "loggedIn"
        self._notify()

    # --- profile -----------------------------------------------------------

    def update_profile(self, data: dict[str, Any]) -> None:
        self._require_user()
        updated = self.backend.update_user_profile(data)
        if updated:
            self.profile = updated
            self._notify()

    # --- weight history ----------------------------------------------------

    def add_weight_entry(self, weight: float, date: datetime | str | None = None) -> dict[str, Any]:
        self._require_user()
        when = date if isinstance(date, str) else to_iso(date or utcnow())
        entry = self.backend.add_weight_entry({"weight": weight, "date": when})
        self.weight_history = _sorted_desc([entry, *self.weight_history], "date")
        self._notify()
        return entry

    def update_weight_entry(self, entry: dict[str, Any]) -> dict[str, Any]:
        self._require_user()
        saved = self.backend.update_weight_entry(entry)
        self.weight_history = _sorted_desc(
            [saved if e["id"] == saved["id"] else e for e in self.weight_history],
            "date",
        )
        self._notify()
        return saved

    def delete_weight_entry(self, entry_id: str) -> None:
        self._require_user()
        self.backend.delete_weight_entry(entry_id)
        self.weight_history = [e for e in self.weight_history if e["id"] != entry_id]
        self._notify()

    def delete_multiple_weight_entries(self, ids: list[str]) -> None:
        self._require_user()
        self.backend.delete_weight_entries(ids)
        id_set = set(ids)
        if not id_set:
            return
        self.weight_history = [e for e in self.weight_history if e["id"] not in id_set]
        self._notify()

    # --- glucose logs ------------------------------------------------------

    def add_glucose_log(self, log: dict[str, Any]) -> dict[str, Any]:
        self._require_user()
        data = dict(log)
        data["timestamp"] = data.get("timestamp") or to_iso(utcnow())
        saved = self.backend.add_glucose_log(data)
        self.glucose_logs = _sorted_desc([saved, *self.glucose_logs], "timestamp")
        self._notify()
        return saved

    def update_glucose_log(self, log: dict[str, Any]) -> dict[str, Any]:
        self._require_user()
        saved = self.backend.update_glucose_log(log)
        self.glucose_logs = _sorted_desc(
            [saved if g["id"] == saved["id"] else g for g in self.glucose_logs],
            "timestamp",
        )
        self._notify()
        return saved

    def delete_glucose_log(self, log_id: str) -> None:
        self._require_user()
        self.backend.delete_glucose_log(log_id)
        self.glucose_logs = [g for g in self.glucose_logs if g["id"] != log_id]
        self._notify()

    def delete_multiple_glucose_logs(self, ids: list[str]) -> None:
        self._require_user()
        self.backend.delete_glucose_logs(ids)
        id_set = set(ids)
        if not id_set:
            return
        self.glucose_logs = [g for g in self.glucose_logs if g["id"] not in id_set]
        self._notify()

    def add_health_data(self, log: dict[str, Any], weight: float | None = None) -> dict[str, Any]:
        """Quick-add form: a glucose log plus an optional weight at the same time.

        The two writes are independent; if the weight write fails the saved log stays.
        """
        saved_log = self.add_glucose_log(log)
        saved_weight = None
        if weight is not None:
            saved_weight = self.add_weight_entry(weight, saved_log["timestamp"])
        return {"glucose_log": saved_log, "weight_entry": saved_weight}

    # --- reminders ---------------------------------------------------------

    def suggest_reminders(self) -> list[dict[str, str]]:
        self._require_user()
        self.reminders_pending = True
        self._notify()
        try:
            self.reminders = self.backend.get_suggested_reminders()
        except NotAuthenticated:
            raise
        except GlucoTrackError as e:
            logger.error(f"Reminder request failed: {e}")
            self.reminders = [dict(GENERATION_FAILED)]
        finally:
            self.reminders_pending = False
            self._notify()
        return self.reminders
