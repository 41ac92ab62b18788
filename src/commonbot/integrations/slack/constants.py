from __future__ import annotations

SLACK_API_BASE_URL = "https://slack.com/api"

# Text posted when a block payload carries no fallback text of its own.
DEFAULT_NOTIFICATION_TEXT = "New message from Common bot"

# Button action ids with this prefix open a dialog instead of acting directly.
DIALOG_OPEN_PREFIX = "DIALOG_OPEN_"

ACTION_ID_SEPARATOR = ":"
ACTION_ID_MIN_SEGMENTS = 3

BLOCK_RICH_TEXT = "rich_text"
BLOCK_RICH_TEXT_SECTION = "rich_text_section"
ELEMENT_USER = "user"
ELEMENT_TEXT = "text"
ELEMENT_LINK = "link"

COMPONENT_BUTTON = "button"
COMPONENT_STATIC_SELECT = "static_select"

BODY_BLOCK_ACTIONS = "block_actions"
BODY_VIEW_SUBMISSION = "view_submission"

# Message subtypes that carry no human author; these never reach listeners.
SKIPPED_MESSAGE_SUBTYPES = frozenset(
    {"bot_message", "message_changed", "message_deleted", "message_replied"}
)
