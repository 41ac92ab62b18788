"""Process-lifetime caches for platform users and channels.

Entries are filled on first reference and never evicted. Concurrent
resolutions of the same uncached id share a single in-flight fetch; if that
fetch fails every waiter sees the error and nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, TypeVar

from ...core.logging_utils import log_event
from ..chat.models import Channel, ChannelInfo, ChattingType, User
from ..chat.platform import ChannelFetcher, PlatformClient, UserFetcher

T = TypeVar("T")


def classify_chatting_type(info: ChannelInfo) -> ChattingType:
    """Derive the chatting type from conversation kind flags, first match wins."""

    if info.is_channel and not info.is_mpim:
        return ChattingType.PUBLIC_CHANNEL
    if info.is_group:
        return ChattingType.PRIVATE_CHANNEL
    if info.is_im:
        return ChattingType.PERSONAL
    if info.is_mpim:
        return ChattingType.GROUP
    return ChattingType.UNKNOWN


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class IdentityCache:
    def __init__(
        self,
        client: Optional[PlatformClient] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger(__name__)
        self._users: dict[str, User] = {}
        self._channels: dict[str, Channel] = {}
        self._inflight_users: dict[str, "asyncio.Task[User]"] = {}
        self._inflight_channels: dict[str, "asyncio.Task[Channel]"] = {}
        self._bot_name: Optional[str] = None

    @property
    def bot_name(self) -> Optional[str]:
        return self._bot_name

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def add_user(self, user_id: str, user: User) -> bool:
        if _is_blank(user_id):
            return False
        self._users[user_id] = user
        return True

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        return self._channels.get(channel_id)

    def add_channel(self, channel_id: str, channel: Channel) -> bool:
        if _is_blank(channel_id):
            return False
        self._channels[channel_id] = channel
        return True

    async def resolve_user(
        self, user_id: str, fetch: Optional[UserFetcher] = None
    ) -> User:
        cached = self._users.get(user_id)
        if cached is not None:
            return cached
        fetcher = fetch or self._require_client().fetch_user_profile

        async def _load() -> User:
            profile = await fetcher(user_id)
            user = User(id=profile.id, name=profile.display_name, email=profile.email)
            if self.add_user(user_id, user):
                log_event(
                    self._logger,
                    logging.DEBUG,
                    "slack.identity.user.cached",
                    user_id=user_id,
                )
            else:
                log_event(
                    self._logger,
                    logging.WARNING,
                    "slack.identity.user.uncacheable",
                    user_id=user_id,
                )
            return user

        return await self._shared_fetch(self._inflight_users, user_id, _load)

    async def resolve_channel(
        self, channel_id: str, fetch: Optional[ChannelFetcher] = None
    ) -> Channel:
        cached = self._channels.get(channel_id)
        if cached is not None:
            return cached
        fetcher = fetch or self._require_client().fetch_channel_info

        async def _load() -> Channel:
            info = await fetcher(channel_id)
            channel = Channel(
                id=channel_id,
                name=info.name,
                chatting_type=classify_chatting_type(info),
            )
            self.add_channel(channel_id, channel)
            log_event(
                self._logger,
                logging.DEBUG,
                "slack.identity.channel.cached",
                channel_id=channel_id,
                chatting_type=channel.chatting_type.value,
            )
            return channel

        return await self._shared_fetch(self._inflight_channels, channel_id, _load)

    async def resolve_bot_name(
        self, bot_user_id: str, fetch: Optional[UserFetcher] = None
    ) -> str:
        """Resolve and memoise the bot's display name (the name users @-mention)."""

        if self._bot_name and self._bot_name.strip():
            return self._bot_name
        bot_user = await self.resolve_user(bot_user_id, fetch)
        self._bot_name = bot_user.name
        return self._bot_name

    async def _shared_fetch(
        self,
        inflight: dict[str, "asyncio.Task[T]"],
        key: str,
        load: Callable[[], Coroutine[Any, Any, T]],
    ) -> T:
        pending = inflight.get(key)
        if pending is None or pending.done():
            # Cancelling a waiter leaves the shared fetch running.
            pending = asyncio.create_task(load())
            inflight[key] = pending
            pending.add_done_callback(
                lambda done: _forget_inflight(inflight, key, done)
            )
        return await asyncio.shield(pending)

    def _require_client(self) -> PlatformClient:
        if self._client is None:
            raise RuntimeError("IdentityCache has no platform client to fetch with")
        return self._client


def _forget_inflight(
    inflight: dict[str, "asyncio.Task[Any]"], key: str, done: "asyncio.Task[Any]"
) -> None:
    if inflight.get(key) is done:
        del inflight[key]
    if not done.cancelled():
        # Mark retrieved so a failure nobody awaited does not warn at GC.
        done.exception()
