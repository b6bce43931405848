"""
slack_client.py

Responsibility: Isolate all direct Slack Web API interaction.

This module must be the only place that:
- Constructs Slack Web API endpoints
- Sends HTTP requests to slack.com
- Interprets Slack API responses / error payloads

The bot manager command only uses it to check a bot token before saving it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from appbuilder import AppBuilderError


class SlackError(AppBuilderError):
    pass


@dataclass(frozen=True)
class BotIdentity:
    team: str
    user: str
    user_id: str
    bot_id: str | None = None


class SlackClient:
    def __init__(self, token: str, api_base: str = "https://slack.com/api") -> None:
        if not token or not token.strip():
            raise SlackError("Slack bot token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/x-www-form-urlencoded",
            "User-Agent": "appbuilder-setup",
        }

    def _request(self, method: str, path: str) -> dict[str, Any]:
        url = f"{self._api_base}/{path.lstrip('/')}"
        try:
            r = requests.request(method, url, headers=self._headers(), timeout=30)
        except requests.RequestException as e:
            raise SlackError(f"Slack API unreachable {method} {path}: {e}") from e
        if r.status_code >= 400:
            raise SlackError(f"Slack API error {r.status_code} {method} {path}: {r.text}")
        try:
            payload = r.json()
        except ValueError as e:
            raise SlackError(f"Slack API returned non-JSON for {path}") from e
        # Slack reports failures in the body with HTTP 200.
        if not payload.get("ok"):
            raise SlackError(f"Slack API error {method} {path}: {payload.get('error', 'unknown_error')}")
        return payload

    def auth_test(self) -> BotIdentity:
        """
        Return the identity the token authenticates as; raises SlackError for a bad token.
        """
        data = self._request("POST", "auth.test")
        return BotIdentity(
            team=str(data.get("team") or ""),
            user=str(data.get("user") or ""),
            user_id=str(data.get("user_id") or ""),
            bot_id=data.get("bot_id"),
        )
