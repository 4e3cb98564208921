"""Unit tests for the Slack client.

Thread history must degrade to an empty list on any failure; posting a reply
must raise SlackAPIError so the processor can log it.
"""

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

from http_stubs import RecordingTransport, json_response, refuse_connection, request_json
from mention_relay.slack import OutgoingPayload, SlackAPIError, SlackClient


WEBHOOK_URL = "https://hooks.slack.test/services/T/B/X"


def run_async(coro):
    return asyncio.run(coro)


def _client(handler) -> tuple:
    transport = RecordingTransport(handler)
    client = SlackClient(
        token="xoxp-test",
        webhook_url=WEBHOOK_URL,
        api_base_url="https://slack.test/api/",
        transport=transport,
    )
    return client, transport


class TestGetThreadReplies:
    def test_returns_messages_when_ok(self):
        messages = [{"ts": "1.0", "text": "root"}, {"ts": "2.0", "text": "reply"}]
        client, transport = _client(json_response({"ok": True, "messages": messages}))

        result = run_async(client.get_thread_replies("C123", "1.0"))

        assert result == messages
        request = transport.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/conversations.replies"
        assert request.url.params["channel"] == "C123"
        assert request.url.params["ts"] == "1.0"
        assert request.headers["Authorization"] == "Bearer xoxp-test"

    def test_api_error_returns_empty_and_logs(self):
        client, _ = _client(json_response({"ok": False, "error": "x"}))

        with capture_logs() as logs:
            result = run_async(client.get_thread_replies("C123", "1.0"))

        assert result == []
        assert any(
            entry["log_level"] == "error" and entry.get("error") == "x"
            for entry in logs
        )

    def test_transport_failure_returns_empty(self):
        client, _ = _client(refuse_connection)

        with capture_logs() as logs:
            result = run_async(client.get_thread_replies("C123", "1.0"))

        assert result == []
        assert any(entry["log_level"] == "error" for entry in logs)

    def test_non_json_response_returns_empty(self):
        client, _ = _client(lambda request: httpx.Response(200, text="<html>"))

        assert run_async(client.get_thread_replies("C123", "1.0")) == []

    def test_ok_without_messages_returns_empty(self):
        client, _ = _client(json_response({"ok": True}))

        assert run_async(client.get_thread_replies("C123", "1.0")) == []


class TestPostReply:
    def test_posts_payload_to_webhook(self):
        client, transport = _client(lambda request: httpx.Response(200, text="ok"))
        payload = OutgoingPayload(channel="C123", text="hi", thread_ts="1.0")

        assert run_async(client.post_reply(payload)) == "ok"

        request = transport.requests[0]
        assert str(request.url) == WEBHOOK_URL
        assert request.method == "POST"
        assert request_json(request) == {
            "channel": "C123",
            "text": "hi",
            "thread_ts": "1.0",
        }

    def test_thread_ts_omitted_when_absent(self):
        client, transport = _client(lambda request: httpx.Response(200, text="ok"))

        run_async(client.post_reply(OutgoingPayload(channel="C123", text="hi")))

        assert request_json(transport.requests[0]) == {"channel": "C123", "text": "hi"}

    def test_event_values_are_sent_as_received(self):
        client, transport = _client(lambda request: httpx.Response(200, text="ok"))

        run_async(client.post_reply(OutgoingPayload(channel=123, text="hi", thread_ts=17)))

        assert request_json(transport.requests[0]) == {
            "channel": 123,
            "text": "hi",
            "thread_ts": 17,
        }

    def test_rejected_reply_raises(self):
        client, _ = _client(lambda request: httpx.Response(404, text="no_service"))

        with pytest.raises(SlackAPIError) as exc_info:
            run_async(client.post_reply(OutgoingPayload(channel="C1", text="hi")))

        assert exc_info.value.status_code == 404

    def test_transport_failure_raises(self):
        client, _ = _client(refuse_connection)

        with pytest.raises(SlackAPIError):
            run_async(client.post_reply(OutgoingPayload(channel="C1", text="hi")))
