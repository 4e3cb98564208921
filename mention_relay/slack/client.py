"""Slack Web API and incoming webhook client.

This module provides an async wrapper around the two Slack calls the relay
needs:
- conversations.replies, to read the thread a mention was posted in
- the incoming webhook, to post the generated reply

Thread lookup degrades to an empty history on any failure. Posting a reply
raises SlackAPIError so the caller decides how to record the failure.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from mention_relay.slack.models import OutgoingPayload

logger = structlog.get_logger()


class SlackAPIError(Exception):
    """Raised when a Slack request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response, if one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SlackClient:
    """Async Slack client for thread history and webhook replies.

    Attributes:
        token: Slack user token for Web API calls.
        webhook_url: Incoming webhook URL replies are posted to.
        api_base_url: Base URL of the Slack Web API.
        timeout: Request timeout in seconds.

    Example:
        >>> client = SlackClient(token="xoxp-...", webhook_url="https://hooks.slack.com/...")
        >>> replies = await client.get_thread_replies("C123", "1700000000.000001")
        >>> await client.close()
    """

    def __init__(
        self,
        token: str,
        webhook_url: str,
        api_base_url: str = "https://slack.com/api",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Slack client.

        Args:
            token: Slack user token sent as a bearer token.
            webhook_url: Incoming webhook URL.
            api_base_url: Slack Web API base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the network.
        """
        self.token = token
        self.webhook_url = webhook_url
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SlackClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def get_thread_replies(
        self,
        channel: Any,
        thread_ts: Any,
    ) -> List[Dict[str, Any]]:
        """Fetch the messages of a thread.

        Args:
            channel: Channel identifier containing the thread.
            thread_ts: Timestamp of the thread root message.

        Returns:
            The thread messages in Slack's order, or an empty list when Slack
            reports an error or the request cannot be completed.
        """
        url = f"{self.api_base_url}/conversations.replies"

        try:
            response = await self.client.get(
                url,
                params={"channel": channel, "ts": thread_ts},
                headers={"Authorization": f"Bearer {self.token}"},
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "Error fetching thread replies",
                channel=channel,
                thread_ts=thread_ts,
                error=str(e),
            )
            return []

        if not isinstance(data, dict) or not data.get("ok"):
            error = data.get("error") if isinstance(data, dict) else None
            logger.error(
                "Error fetching thread replies",
                channel=channel,
                thread_ts=thread_ts,
                error=error,
            )
            return []

        messages = data.get("messages") or []
        logger.debug(
            "Fetched thread replies",
            channel=channel,
            thread_ts=thread_ts,
            message_count=len(messages),
        )
        return messages

    async def post_reply(self, payload: OutgoingPayload) -> str:
        """Post a reply through the incoming webhook.

        Args:
            payload: The reply to send.

        Returns:
            The webhook response body (Slack answers ``ok``).

        Raises:
            SlackAPIError: If the request fails or Slack rejects it.
        """
        try:
            response = await self.client.post(self.webhook_url, json=payload.to_body())
        except httpx.HTTPError as e:
            raise SlackAPIError(f"Webhook request failed: {e}") from e

        if response.status_code >= 400:
            raise SlackAPIError(
                f"Webhook rejected reply: {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.info(
            "Reply posted",
            channel=payload.channel,
            thread_ts=payload.thread_ts,
            response=response.text,
        )
        return response.text
