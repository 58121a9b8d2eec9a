"""Synchronous HTTP client for the GlucoTrack API.

Wraps any ``httpx.Client`` (including FastAPI's ``TestClient``) that points at
the service and keeps the session cookie between calls. HTTP failures are
turned back into the domain errors from ``services.errors``.
"""

from typing import Any

import httpx

from services.errors import (
    DuplicateEmail,
    GlucoTrackError,
    InvalidCredentials,
    NotAuthenticated,
    NotFound,
    RemoteServiceFailure,
    ValidationFailure,
)


def _detail(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        # pydantic validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail if isinstance(item, dict)) or None
    return str(detail) if detail else None


class GlucoTrackClient:
    def __init__(self, http: httpx.Client, base_path: str = "/api"):
        self.http = http
        self.base_path = base_path.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_path}{path}"

    def _raise_for_status(self, resp: httpx.Response, *, credentials_call: bool = False) -> None:
        if resp.status_code < 400:
            return
        message = _detail(resp)
        if resp.status_code == 409:
            raise DuplicateEmail(message)
        if resp.status_code == 401:
            if credentials_call:
                raise InvalidCredentials(message)
            raise NotAuthenticated(message)
        if resp.status_code == 404:
            raise NotFound(message)
        if resp.status_code in (400, 422):
            raise ValidationFailure(message)
        if resp.status_code >= 500:
            raise RemoteServiceFailure(message or f"Server error {resp.status_code}")
        raise GlucoTrackError(message)

    def _request(self, method: str, path: str, *, credentials_call: bool = False, **kwargs) -> Any:
        try:
            resp = self.http.request(method, self._url(path), **kwargs)
        except httpx.HTTPError as e:
            raise RemoteServiceFailure(f"Request to {path} failed: {e}") from e
        self._raise_for_status(resp, credentials_call=credentials_call)
        if not resp.content:
            return None
        return resp.json()

    # --- session -----------------------------------------------------------

    def check_session(self) -> dict | None:
        return self._request("GET", "/auth/session")

    def signup(self, email: str, password: str, name: str) -> dict:
        return self._request("POST", "/auth/signup", json={"email": email, "password": password, "name": name})

    def login(self, email: str, password: str) -> dict:
        return self._request(
            "POST",
            "/auth/login",
            credentials_call=True,
            json={"email": email, "password": password},
        )

    def logout(self) -> None:
        self._request("POST", "/auth/logout")

    # --- profile -----------------------------------------------------------

    def get_user_profile(self) -> dict | None:
        try:
            return self._request("GET", "/profile")
        except NotFound:
            return None

    def update_user_profile(self, data: dict[str, Any]) -> dict | None:
        try:
            return self._request("PUT", "/profile", json=data)
        except NotFound:
            return None

    # --- glucose logs ------------------------------------------------------

    def get_glucose_logs(self) -> list[dict]:
        return self._request("GET", "/glucose-logs")

    def add_glucose_log(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/glucose-logs", json=data)

    def update_glucose_log(self, log: dict[str, Any]) -> dict:
        payload = {k: v for k, v in log.items() if k != "id"}
        return self._request("PUT", f"/glucose-logs/{log['id']}", json=payload)

    def delete_glucose_log(self, log_id: str) -> None:
        self._request("DELETE", f"/glucose-logs/{log_id}")

    def delete_glucose_logs(self, ids: list[str]) -> None:
        if not ids:
            return
        self._request("POST", "/glucose-logs/delete", json={"ids": list(ids)})

    # --- weight history ----------------------------------------------------

    def get_weight_history(self) -> list[dict]:
        return self._request("GET", "/weight-history")

    def add_weight_entry(self, data: dict[str, Any]) -> dict:
        return self._request("POST", "/weight-history", json=data)

    def update_weight_entry(self, entry: dict[str, Any]) -> dict:
        payload = {k: v for k, v in entry.items() if k != "id"}
        return self._request("PUT", f"/weight-history/{entry['id']}", json=payload)

    def delete_weight_entry(self, entry_id: str) -> None:
        self._request("DELETE", f"/weight-history/{entry_id}")

    def delete_weight_entries(self, ids: list[str]) -> None:
        if not ids:
            return
        self._request("POST", "/weight-history/delete", json={"ids": list(ids)})

    # --- derived views -----------------------------------------------------

    def get_report(self, days: int = 7) -> dict:
        return self._request("GET", "/reports", params={"days": days})

    def get_dashboard(self) -> dict:
        return self._request("GET", "/dashboard")

    def get_suggested_reminders(self) -> list[dict]:
        body = self._request("POST", "/reminders")
        return body["reminders"]
