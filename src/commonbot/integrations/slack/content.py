from __future__ import annotations

from typing import Any, Iterable, Optional

from ..chat.models import ChattingType
from .constants import (
    BLOCK_RICH_TEXT,
    BLOCK_RICH_TEXT_SECTION,
    ELEMENT_LINK,
    ELEMENT_TEXT,
    ELEMENT_USER,
)


def bot_mention_token(bot_id: str) -> str:
    return f"<@{bot_id}>"


def substitute_bot_mention(text: str, bot_id: str, bot_name: str) -> str:
    """Replace every ``<@BOT_ID>`` token in ``text`` with ``@bot_name``."""

    if not text or not bot_id:
        return text or ""
    return text.replace(bot_mention_token(bot_id), f"@{bot_name}")


def _first_section(block: dict[str, Any]) -> Optional[list[Any]]:
    elements = block.get("elements")
    if not isinstance(elements, list):
        return None
    for element in elements:
        if (
            isinstance(element, dict)
            and element.get("type") == BLOCK_RICH_TEXT_SECTION
            and isinstance(element.get("elements"), list)
        ):
            return element["elements"]
    return None


def _render_section(section: Iterable[Any], bot_id: str, bot_name: str) -> str:
    parts: list[str] = []
    for element in section:
        if not isinstance(element, dict):
            continue
        kind = element.get("type")
        if kind == ELEMENT_USER and element.get("user_id") == bot_id:
            parts.append(f"@{bot_name}")
        elif kind == ELEMENT_TEXT:
            parts.append(str(element.get("text") or ""))
        elif kind == ELEMENT_LINK:
            parts.append(str(element.get("url") or ""))
    return "".join(parts)


def extract_structured_text(
    blocks: Optional[Iterable[Any]], bot_id: str, bot_name: str
) -> str:
    """Rebuild the literal text of a message from its ``rich_text`` blocks.

    Only the first ``rich_text_section`` of a ``rich_text`` block is read, and
    scanning stops at the first block that yields any text. Mentions of users
    other than the bot, emoji and other element kinds are skipped. Returns an
    empty string when nothing usable is found.
    """

    if not blocks:
        return ""
    for block in blocks:
        if not isinstance(block, dict) or block.get("type") != BLOCK_RICH_TEXT:
            continue
        section = _first_section(block)
        if section is None:
            continue
        text = _render_section(section, bot_id, bot_name)
        if text:
            return text
    return ""


def select_message_text(
    *,
    text: Optional[str],
    blocks: Optional[Iterable[Any]],
    bot_id: str,
    bot_name: str,
) -> str:
    structured = extract_structured_text(blocks, bot_id, bot_name)
    if structured:
        return structured
    return substitute_bot_mention(text or "", bot_id, bot_name)


def personalize_message(text: str, chatting_type: ChattingType, bot_name: str) -> str:
    """Address direct messages to the bot so listeners match them uniformly."""

    if chatting_type is not ChattingType.PERSONAL:
        return text
    mention = f"@{bot_name}"
    if mention in text:
        return text
    return f"{mention} {text}"
