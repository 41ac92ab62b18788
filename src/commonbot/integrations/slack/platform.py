"""Slack implementation of the :class:`PlatformClient` contract."""

from __future__ import annotations

from typing import Any, Optional

from ..chat.models import ChannelInfo, UserProfile
from .errors import SlackAPIError
from .rest import SlackWebClient


class SlackPlatformClient:
    def __init__(self, web_client: SlackWebClient) -> None:
        self._web = web_client

    @property
    def web_client(self) -> SlackWebClient:
        return self._web

    async def fetch_user_profile(self, user_id: str) -> UserProfile:
        data = await self._web.users_info(user=user_id)
        user = data.get("user")
        if not isinstance(user, dict):
            raise SlackAPIError(
                f"users.info returned no user for {user_id}", method="users.info"
            )
        profile = user.get("profile")
        profile = profile if isinstance(profile, dict) else {}
        return UserProfile(
            id=str(user.get("id") or user_id),
            display_name=str(user.get("real_name") or profile.get("real_name") or ""),
            email=str(profile.get("email") or ""),
        )

    async def fetch_channel_info(self, channel_id: str) -> ChannelInfo:
        data = await self._web.conversations_info(channel=channel_id)
        channel = data.get("channel")
        if not isinstance(channel, dict):
            raise SlackAPIError(
                f"conversations.info returned no channel for {channel_id}",
                method="conversations.info",
            )
        return ChannelInfo(
            id=channel_id,
            name=str(channel.get("name") or ""),
            is_channel=channel.get("is_channel") is True,
            is_group=channel.get("is_group") is True,
            is_im=channel.get("is_im") is True,
            is_mpim=channel.get("is_mpim") is True,
        )

    async def post_message(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        return await self._web.chat_post_message(payload)

    async def open_view(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        return await self._web.views_open(payload)

    async def update_view(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        return await self._web.views_update(payload)
