"""Chat completion access for the mention relay."""

from mention_relay.llm.completion import (
    ActionRequestReply,
    CompletionClient,
    CompletionReply,
    TextReply,
)

__all__ = [
    "ActionRequestReply",
    "CompletionClient",
    "CompletionReply",
    "TextReply",
]
