"""Mention processor connecting Slack, the completion API and GitHub.

Drives one mention through:
received → thread history (threaded mentions only) → first completion →
optional remote action → second completion (only after an action) → relay.

At most one action is serviced per run. The reply is posted as a background
task, so ``process`` returns once the reply has been scheduled. Every failure
ends the run and is logged; nothing is reported back to Slack.

Source:
- mention_relay/slack/client.py (SlackClient)
- mention_relay/llm/completion.py (CompletionClient)
- mention_relay/github/actions.py (DeploymentActions)
- mention_relay/tasks.py (BackgroundTasks)
"""

import json
from typing import List, Optional

import structlog
from langchain_core.messages import BaseMessage, FunctionMessage, HumanMessage, SystemMessage

from mention_relay.config import ReplyThreadPolicy
from mention_relay.github.actions import ACTION_DESCRIPTORS, DeploymentActions
from mention_relay.llm.completion import ActionRequestReply, CompletionClient
from mention_relay.metrics import metrics
from mention_relay.prompts import DEFAULT_PERSONA_PROMPT, build_mention_prompt
from mention_relay.slack.client import SlackAPIError, SlackClient
from mention_relay.slack.models import MentionEvent, OutgoingPayload
from mention_relay.tasks import BackgroundTasks

logger = structlog.get_logger()


class MentionProcessor:
    """Turns a Slack mention into a model reply posted back to Slack.

    Attributes:
        slack_client: Reads thread history and posts replies.
        completion_client: Chat completion API client.
        actions: Deployment PR actions; None disables function calling.
        background: Registry the reply task is spawned on.
        persona_prompt: System prompt opening every conversation.
        reply_thread_policy: Where replies are threaded.
    """

    def __init__(
        self,
        slack_client: SlackClient,
        completion_client: CompletionClient,
        actions: Optional[DeploymentActions] = None,
        background: Optional[BackgroundTasks] = None,
        persona_prompt: str = DEFAULT_PERSONA_PROMPT,
        reply_thread_policy: ReplyThreadPolicy = ReplyThreadPolicy.PRESERVE,
    ):
        self.slack_client = slack_client
        self.completion_client = completion_client
        self.actions = actions
        self.background = background if background is not None else BackgroundTasks()
        self.persona_prompt = persona_prompt
        self.reply_thread_policy = reply_thread_policy

    async def process(self, event: MentionEvent) -> None:
        """Process a mention end to end.

        Never raises: any failure is logged and ends the run.

        Args:
            event: The parsed app mention event.
        """
        logger.info(
            "Processing mention",
            channel=event.channel,
            ts=event.ts,
            thread_ts=event.thread_ts,
        )
        try:
            await self._run(event)
        except Exception:
            logger.exception(
                "Mention processing failed",
                channel=event.channel,
                ts=event.ts,
            )

    async def _run(self, event: MentionEvent) -> None:
        conversation = await self.build_conversation(event)
        descriptors = ACTION_DESCRIPTORS if self.actions is not None else None

        reply = await self.completion_client.complete(conversation, actions=descriptors)

        if isinstance(reply, ActionRequestReply):
            invocation = reply.invocation
            result = await self.actions.dispatch(invocation)
            logger.info(
                "Remote action completed",
                action=invocation.action.value,
                result=result,
            )
            conversation.append(reply.message)
            conversation.append(
                FunctionMessage(name=invocation.action.value, content=result)
            )
            reply = await self.completion_client.complete(
                conversation,
                actions=descriptors,
                allow_actions=False,
            )

        payload = self.build_payload(event, reply.content)
        self.background.spawn(self._relay(payload), name=f"relay-{event.ts}")

    async def build_conversation(self, event: MentionEvent) -> List[BaseMessage]:
        """Build the system and user messages for a mention.

        Threaded mentions include the thread history; an unavailable history
        is serialized as an empty list.
        """
        thread_json = None
        if event.is_threaded:
            replies = await self.slack_client.get_thread_replies(
                event.channel,
                event.thread_ts,
            )
            thread_json = json.dumps(replies)

        return [
            SystemMessage(content=self.persona_prompt),
            HumanMessage(content=build_mention_prompt(event.to_json(), thread_json)),
        ]

    def build_payload(self, event: MentionEvent, text: str) -> OutgoingPayload:
        if self.reply_thread_policy is ReplyThreadPolicy.EVENT_TS:
            thread_ts = event.ts
        else:
            thread_ts = event.thread_ts
        return OutgoingPayload(channel=event.channel, text=text, thread_ts=thread_ts)

    async def _relay(self, payload: OutgoingPayload) -> None:
        try:
            await self.slack_client.post_reply(payload)
        except SlackAPIError as e:
            metrics.record_relay(success=False)
            logger.error(
                "Failed to post reply",
                channel=payload.channel,
                status_code=e.status_code,
                error=e.message,
            )
            return
        metrics.record_relay(success=True)
