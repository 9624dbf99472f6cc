"""Home Assistant persistent notifications as the household notification platform."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from homehub.config import get_settings
from homehub.notifications.capability import NotificationOptions, PermissionStatus

logger = logging.getLogger(__name__)


class HomeAssistantNotifier:
    """Notification capability backed by the Home Assistant HTTP API.

    The notification tag is sent as ``notification_id`` so a repeated reminder replaces
    the previous one instead of stacking up.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.home_assistant_base_url or "").rstrip("/")
        self._token = token or settings.home_assistant_token
        self._timeout = timeout
        self._denied = False

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _call_service(self, service: str, payload: Dict[str, Any]) -> bool:
        endpoint = f"{self._base_url}/api/services/persistent_notification/{service}"
        try:
            with httpx.Client() as client:
                response = client.post(
                    endpoint, headers=self._headers(), json=payload, timeout=self._timeout
                )
        except httpx.HTTPError as exc:
            logger.warning("Home Assistant %s call failed: %s", service, exc)
            return False
        if response.status_code >= 400:
            logger.warning(
                "Home Assistant %s call answered status=%s", service, response.status_code
            )
            return False
        return True

    def supported(self) -> bool:
        return bool(self._base_url)

    def permission_status(self) -> PermissionStatus:
        if not self.supported():
            return "unsupported"
        if self._denied or not self._token:
            return "denied"
        return "granted"

    def request(self) -> PermissionStatus:
        """Verify the access token against the API root."""

        if not self.supported():
            return "unsupported"
        if not self._token:
            return "denied"
        try:
            with httpx.Client() as client:
                response = client.get(
                    f"{self._base_url}/api/", headers=self._headers(), timeout=self._timeout
                )
        except httpx.HTTPError as exc:
            logger.warning("Home Assistant permission check failed: %s", exc)
            return "default"
        self._denied = response.status_code in (401, 403)
        return self.permission_status()

    def show(self, title: str, options: NotificationOptions) -> bool:
        payload = {"title": title, "message": options.body, "notification_id": options.tag}
        return self._call_service("create", payload)

    def dismiss(self, tag: str) -> None:
        self._call_service("dismiss", {"notification_id": tag})


__all__ = ["HomeAssistantNotifier"]
