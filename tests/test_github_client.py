"""Basic unit tests for GitHubClient pull request calls."""

import asyncio

import httpx
import pytest

from http_stubs import RecordingTransport, json_response, refuse_connection, request_json
from mention_relay.github import GitHubAPIError, GitHubClient, PullRequestInfo


def run_async(coro):
    return asyncio.run(coro)


def _client(handler) -> tuple:
    transport = RecordingTransport(handler)
    client = GitHubClient(
        token="ghp_test",
        base_url="https://github.test/api/",
        transport=transport,
    )
    return client, transport


def _pull(number: int) -> dict:
    return {
        "number": number,
        "html_url": f"https://github.test/acme/storefront/pull/{number}",
        "state": "open",
    }


def test_default_headers_carry_token():
    client, transport = _client(json_response([]))

    run_async(client.list_pull_requests("acme", "storefront", head="staging", base="main"))

    headers = transport.requests[0].headers
    assert headers["Authorization"] == "Bearer ghp_test"
    assert headers["Accept"] == "application/vnd.github+json"


def test_list_pull_requests_filters_by_branches():
    client, transport = _client(json_response([_pull(7), _pull(3)]))

    pulls = run_async(
        client.list_pull_requests("acme", "storefront", head="staging", base="main")
    )

    assert pulls == [
        PullRequestInfo(pr_number=7, pr_url="https://github.test/acme/storefront/pull/7"),
        PullRequestInfo(pr_number=3, pr_url="https://github.test/acme/storefront/pull/3"),
    ]
    request = transport.requests[0]
    assert request.method == "GET"
    assert request.url.path == "/api/repos/acme/storefront/pulls"
    assert request.url.params["state"] == "open"
    assert request.url.params["head"] == "acme:staging"
    assert request.url.params["base"] == "main"


def test_create_pull_request_posts_branches_and_title():
    client, transport = _client(json_response(_pull(12), status_code=201))

    pr = run_async(
        client.create_pull_request(
            "acme", "storefront", title="Deploy", head="staging", base="main"
        )
    )

    assert pr.pr_number == 12
    request = transport.requests[0]
    assert request.method == "POST"
    assert request_json(request) == {
        "title": "Deploy",
        "head": "staging",
        "base": "main",
        "body": "",
    }


def test_merge_pull_request_puts_to_merge_endpoint():
    merge_result = {"sha": "abc123", "merged": True, "message": "Pull Request successfully merged"}
    client, transport = _client(json_response(merge_result))

    result = run_async(client.merge_pull_request("acme", "storefront", "42"))

    assert result == merge_result
    request = transport.requests[0]
    assert request.method == "PUT"
    assert request.url.path == "/api/repos/acme/storefront/pulls/42/merge"


def test_error_status_raises_with_details():
    client, _ = _client(json_response({"message": "Validation Failed"}, status_code=422))

    with pytest.raises(GitHubAPIError) as exc_info:
        run_async(
            client.create_pull_request(
                "acme", "storefront", title="Deploy", head="staging", base="main"
            )
        )

    assert exc_info.value.status_code == 422
    assert "Validation Failed" in exc_info.value.response_body


def test_transport_failure_is_wrapped():
    client, _ = _client(refuse_connection)

    with pytest.raises(GitHubAPIError) as exc_info:
        run_async(client.merge_pull_request("acme", "storefront", "42"))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_request_is_made_once():
    client, transport = _client(json_response({"message": "boom"}, status_code=503))

    with pytest.raises(GitHubAPIError):
        run_async(client.merge_pull_request("acme", "storefront", "42"))

    assert len(transport.requests) == 1


@pytest.mark.parametrize(
    "body",
    [{"message": "odd"}, [{"html_url": "https://github.test/pull/1"}], ["7"]],
)
def test_list_with_unexpected_shape_raises(body):
    client, _ = _client(json_response(body))

    with pytest.raises(GitHubAPIError) as exc_info:
        run_async(
            client.list_pull_requests("acme", "storefront", head="staging", base="main")
        )

    assert exc_info.value.status_code == 200


def test_create_with_list_body_raises():
    client, _ = _client(json_response([], status_code=201))

    with pytest.raises(GitHubAPIError):
        run_async(
            client.create_pull_request(
                "acme", "storefront", title="Deploy", head="staging", base="main"
            )
        )
