"""Slack integration for the mention relay.

This module covers:
- Parsing ``app_mention`` webhook payloads
- Reading thread history with conversations.replies
- Posting replies through an incoming webhook
"""

from mention_relay.slack.client import SlackAPIError, SlackClient
from mention_relay.slack.handler import parse_mention_event
from mention_relay.slack.models import APP_MENTION, MentionEvent, OutgoingPayload

__all__ = [
    "APP_MENTION",
    "MentionEvent",
    "OutgoingPayload",
    "SlackAPIError",
    "SlackClient",
    "parse_mention_event",
]
