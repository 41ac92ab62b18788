from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .constants import SLACK_API_BASE_URL
from .errors import SlackAPIError

logger = logging.getLogger(__name__)


class SlackWebClient:
    """Thin async client for the Slack Web API methods the middleware uses.

    Calls are made once; failures surface as :class:`SlackAPIError` and are
    never retried here.
    """

    def __init__(
        self,
        *,
        bot_token: str,
        timeout_seconds: float = 10.0,
        base_url: str = SLACK_API_BASE_URL,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout_seconds)
        self._authorization_header = f"Bearer {bot_token}"

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SlackWebClient":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.close()

    async def _request(
        self,
        api_method: str,
        *,
        params: Optional[dict[str, Any]] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        path = f"/{api_method}"
        try:
            if payload is None:
                response = await self._client.get(
                    path,
                    params=params,
                    headers={"Authorization": self._authorization_header},
                )
            else:
                response = await self._client.post(
                    path,
                    json=payload,
                    headers={
                        "Authorization": self._authorization_header,
                        "Content-Type": "application/json; charset=utf-8",
                    },
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body_preview = (exc.response.text or "").strip().replace("\n", " ")[:200]
            raise SlackAPIError(
                f"Slack API {api_method} failed with status "
                f"{exc.response.status_code}: {body_preview}",
                method=api_method,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise SlackAPIError(
                f"Slack API {api_method} request failed: {exc}", method=api_method
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise SlackAPIError(
                f"Slack API {api_method} returned a non-JSON body",
                method=api_method,
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise SlackAPIError(
                f"Slack API {api_method} returned an unexpected body",
                method=api_method,
                status_code=response.status_code,
            )
        if not data.get("ok", False):
            error_code = str(data.get("error") or "unknown_error")
            raise SlackAPIError(
                f"Slack API {api_method} returned error: {error_code}",
                method=api_method,
                error_code=error_code,
                status_code=response.status_code,
            )
        logger.debug("Slack API %s ok", api_method)
        return data

    async def users_info(self, *, user: str) -> dict[str, Any]:
        return await self._request("users.info", params={"user": user})

    async def conversations_info(self, *, channel: str) -> dict[str, Any]:
        return await self._request("conversations.info", params={"channel": channel})

    async def chat_post_message(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("chat.postMessage", payload=payload)

    async def views_open(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("views.open", payload=payload)

    async def views_update(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("views.update", payload=payload)
