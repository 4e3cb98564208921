"""Slack event and reply models for the mention relay.

The mention event is treated as an opaque record: only ``type`` is checked.
Every other field keeps whatever JSON value Slack sent, so the whole event
can be handed to the model as JSON.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

APP_MENTION = "app_mention"


class MentionEvent(BaseModel):
    """Slack ``app_mention`` event.

    Attributes:
        type: The Slack event type, ``app_mention`` for accepted events.
        channel: The channel the mention was posted in.
        ts: Timestamp of the mention message.
        thread_ts: Timestamp of the thread root when the mention is a reply.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="The Slack event type")

    channel: Any = Field(
        default=None,
        description="Channel identifier the mention was posted in",
    )

    ts: Any = Field(
        default=None,
        description="Timestamp of the mention message",
    )

    thread_ts: Any = Field(
        default=None,
        description="Timestamp of the thread root, present for threaded mentions",
    )

    @property
    def is_threaded(self) -> bool:
        """True when the mention was posted as a reply in a thread."""
        return bool(self.thread_ts)

    def to_json(self) -> str:
        """Serialize the event with exactly the fields Slack sent."""
        return self.model_dump_json(exclude_unset=True)


class OutgoingPayload(BaseModel):
    """Body posted to the Slack incoming webhook."""

    channel: Any = None
    text: str
    thread_ts: Any = None

    def to_body(self) -> dict:
        """Render the webhook JSON body, leaving out unset thread and channel."""
        return self.model_dump(exclude_none=True)
