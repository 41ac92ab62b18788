"""Slack integration."""

from .actions import (
    ActionIdParts,
    ViewSubmission,
    classify_action,
    classify_view_submission,
    decode_action_id,
)
from .adapter import SlackMiddleware, TaskOutcome
from .constants import DEFAULT_NOTIFICATION_TEXT, DIALOG_OPEN_PREFIX, SLACK_API_BASE_URL
from .content import (
    extract_structured_text,
    personalize_message,
    select_message_text,
    substitute_bot_mention,
)
from .context import build_chat_context
from .errors import SlackAPIError
from .events import (
    SlackActionEvent,
    SlackInboundEvent,
    SlackMessageEvent,
    SlackViewSubmissionEvent,
    decode_action_event,
    decode_message_event,
    decode_view_submission_event,
)
from .identity import IdentityCache, classify_chatting_type
from .platform import SlackPlatformClient
from .rest import SlackWebClient
from .sender import SendReport, SlackOutboundSender

__all__ = [
    "ActionIdParts",
    "DEFAULT_NOTIFICATION_TEXT",
    "DIALOG_OPEN_PREFIX",
    "IdentityCache",
    "SLACK_API_BASE_URL",
    "SendReport",
    "SlackAPIError",
    "SlackActionEvent",
    "SlackInboundEvent",
    "SlackMessageEvent",
    "SlackMiddleware",
    "SlackOutboundSender",
    "SlackPlatformClient",
    "SlackViewSubmissionEvent",
    "SlackWebClient",
    "TaskOutcome",
    "ViewSubmission",
    "build_chat_context",
    "classify_action",
    "classify_chatting_type",
    "classify_view_submission",
    "decode_action_event",
    "decode_action_id",
    "decode_message_event",
    "decode_view_submission_event",
    "extract_structured_text",
    "personalize_message",
    "select_message_text",
    "substitute_bot_mention",
]
