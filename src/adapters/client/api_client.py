"""
adapters.client.api_client - Synchronous HTTP client for the marketplace API.

Thin wrapper over ``requests``. Responses are returned as the decoded JSON
(camelCase keys, as on the wire); chat messages are converted back into
ChatMessage entities so the chat feed can work with them directly.
Error responses are raised again as the domain exception they came from.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from domain.entities import ChatMessage
from domain.exceptions import (
    DomainError,
    ValidationError,
    InvalidStateTransition,
    NotFound,
    Forbidden,
    UpstreamFailure,
    AuthenticationError,
    DuplicateLoginError,
)

logger = logging.getLogger(__name__)

_ERROR_BY_CODE: dict[str, type[DomainError]] = {
    cls.__name__: cls
    for cls in (
        ValidationError,
        InvalidStateTransition,
        NotFound,
        Forbidden,
        UpstreamFailure,
        AuthenticationError,
        DuplicateLoginError,
    )
}

_ERROR_BY_STATUS: dict[int, type[DomainError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: Forbidden,
    404: NotFound,
    409: DuplicateLoginError,
    422: ValidationError,
}


def message_from_wire(data: dict[str, Any]) -> ChatMessage:
    return ChatMessage(
        id=data["id"],
        sender_id=data["senderId"],
        receiver_id=data["receiverId"],
        text=data["text"],
        timestamp=data["timestamp"],
    )


def error_for(status_code: int, body: Any) -> DomainError:
    """Rebuild the domain exception behind an error response."""
    detail: Any = None
    code = None
    if isinstance(body, dict):
        detail = body.get("detail")
        code = body.get("code")
    if not isinstance(detail, str):
        detail = str(detail) if detail else f"HTTP {status_code}"

    if status_code >= 500:
        return UpstreamFailure(detail)
    error_type = _ERROR_BY_CODE.get(code) or _ERROR_BY_STATUS.get(status_code, DomainError)
    return error_type(detail)


class ApiClient:
    """Blocking client; one instance per logged-in user."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()
        self.token = token

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def register(self, email: str, password: str, name: str = "", role: str = "client") -> dict:
        result = self._request("POST", "/register", json={
            "email": email, "password": password, "name": name, "role": role,
        })
        self.token = result["accessToken"]
        return result

    def login(self, email: str, password: str) -> dict:
        result = self._request("POST", "/login", json={"email": email, "password": password})
        self.token = result["accessToken"]
        return result

    def me(self) -> dict:
        return self._request("GET", "/me")

    def update_profile(self, **changes: Any) -> dict:
        """Keys in camelCase, e.g. ``imageUrl=...``."""
        return self._request("POST", "/users/profile", json=changes)

    # ------------------------------------------------------------------
    # Trainers & hiring
    # ------------------------------------------------------------------

    def list_trainers(self, search: str = "", specialty: str = "", location: str = "") -> list[dict]:
        params = {k: v for k, v in
                  (("search", search), ("specialty", specialty), ("location", location)) if v}
        return self._request("GET", "/trainers", params=params)

    def request_hire(self, client_id: str, trainer_id: str) -> dict:
        return self._request("POST", "/trainers/request-hire", json={
            "clientId": client_id, "trainerId": trainer_id,
        })

    def list_requests(self, trainer_id: str) -> list[dict]:
        return self._request("GET", f"/trainers/requests/{trainer_id}")

    def respond(self, request_id: str, status: str) -> dict:
        return self._request("POST", "/trainers/respond-request", json={
            "requestId": request_id, "status": status,
        })

    def list_clients(self, trainer_id: str) -> list[dict]:
        return self._request("GET", f"/trainers/clients/{trainer_id}")

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    def history(self, user_id: str, other_id: str) -> list[ChatMessage]:
        data = self._request("GET", f"/chat/{user_id}/{other_id}")
        return [message_from_wire(m) for m in data]

    def send(self, sender_id: str, receiver_id: str, text: str) -> ChatMessage:
        data = self._request("POST", "/chat", json={
            "senderId": sender_id, "receiverId": receiver_id, "text": text,
        })
        return message_from_wire(data)

    # ------------------------------------------------------------------
    # Profiles & plans
    # ------------------------------------------------------------------

    def save_client_profile(self, user_id: str, **fields: Any) -> dict:
        return self._request("POST", "/clients/profile", json={"userId": user_id, **fields})

    def get_client_profile(self, user_id: str) -> Optional[dict]:
        return self._request("GET", f"/clients/profile/{user_id}")

    def get_plans(self, client_id: str) -> dict:
        return self._request("GET", f"/plans/{client_id}")

    def health(self) -> dict:
        return self._request("GET", "/health")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = self._base_url + path
        try:
            response = self._http.request(
                method, url, headers=headers, timeout=self._timeout, **kwargs,
            )
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise UpstreamFailure(f"Cannot reach {self._base_url}: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            raise error_for(response.status_code, body)
        if not response.content:
            return None
        return response.json()
