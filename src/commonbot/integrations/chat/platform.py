"""Platform client contract consumed by the adapter layer.

Protocol-only; platform packages provide the implementation.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from .models import ChannelInfo, UserProfile

AckCallback = Callable[..., Awaitable[None]]
UserFetcher = Callable[[str], Awaitable[UserProfile]]
ChannelFetcher = Callable[[str], Awaitable[ChannelInfo]]


@runtime_checkable
class PlatformClient(Protocol):
    """Network capabilities the middleware needs from a chat platform."""

    async def fetch_user_profile(self, user_id: str) -> UserProfile:
        """Look up a user's display name and email."""

    async def fetch_channel_info(self, channel_id: str) -> ChannelInfo:
        """Look up a conversation's name and kind flags."""

    async def post_message(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Post a message payload to a conversation."""

    async def open_view(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Open a modal view."""

    async def update_view(self, payload: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Replace the contents of an open modal view."""
