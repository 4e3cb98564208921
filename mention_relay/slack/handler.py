"""Slack mention webhook parsing.

Slack Events API payload structure (app_mention):
{
  "type": "event_callback",
  "event": {
    "type": "app_mention",
    "user": "U123",
    "text": "<@U053> hello",
    "ts": "1700000000.000100",
    "channel": "C123",
    "thread_ts": "1700000000.000001"
  }
}

Signature validation is out of scope; any payload whose ``event.type`` is
``app_mention`` is accepted.
"""

from typing import Any, Optional

import structlog

from mention_relay.slack.models import APP_MENTION, MentionEvent

logger = structlog.get_logger()


def parse_mention_event(payload: Any) -> Optional[MentionEvent]:
    """Extract the app mention event from a webhook payload.

    Args:
        payload: The decoded webhook body.

    Returns:
        MentionEvent for ``app_mention`` events, None otherwise. Returns None for:
        - Non-object payloads
        - Missing or non-object ``event``
        - Any other event type

        Fields other than ``type`` are not validated.
    """
    if not isinstance(payload, dict):
        logger.warning("Invalid payload type", payload_type=type(payload).__name__)
        return None

    event_data = payload.get("event")
    if not isinstance(event_data, dict):
        logger.warning("Missing or invalid 'event' field in payload")
        return None

    event_type = event_data.get("type")
    if event_type != APP_MENTION:
        logger.debug("Ignoring unsupported event type", event_type=event_type)
        return None

    event = MentionEvent.model_validate(event_data)

    logger.info(
        "Parsed mention event",
        channel=event.channel,
        ts=event.ts,
        thread_ts=event.thread_ts,
    )
    return event
