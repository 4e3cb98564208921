"""GitHub API client for deployment pull requests.

This module provides an async wrapper around the GitHub pull request API:
- Listing pull requests filtered by head and base branch
- Creating pull requests
- Merging pull requests

Requests are made once; there is no retry or rate limit handling. Transport
errors, error responses and response bodies of an unexpected shape are all
raised as GitHubAPIError.
"""

from typing import Any, Dict, List, Optional

import httpx
import structlog

from mention_relay.github.models import PullRequestInfo

logger = structlog.get_logger()


class GitHubAPIError(Exception):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code from the response.
        response_body: Response body from GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)


class GitHubClient:
    """Async GitHub API client for pull request operations.

    Attributes:
        token: GitHub API token (PAT or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitHubClient(token="ghp_xxx")
        >>> async with client:
        ...     await client.merge_pull_request("owner", "repo", 42)
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. Use this to support
                      GitHub Enterprise Server endpoints.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to stub the network.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary.

        Returns:
            The httpx AsyncClient instance.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "MentionRelay/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: Any,
        exc_val: Any,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - close the client."""
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request.

        Args:
            method: HTTP method (GET, POST, PUT).
            path: API path (e.g., /repos/owner/repo/pulls).
            json_data: Optional JSON body for the request.
            params: Optional query parameters.

        Returns:
            The HTTP response from GitHub.

        Raises:
            GitHubAPIError: If the request fails or GitHub returns an error status.
        """
        try:
            response = await self.client.request(
                method=method,
                url=path,
                json=json_data,
                params=params,
            )
        except httpx.HTTPError as e:
            logger.error(
                "GitHub API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise GitHubAPIError(
                message=f"Request failed: {e}",
                request_url=f"{self.base_url}{path}",
            ) from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                status_code=response.status_code,
                path=path,
                method=method,
                response_body=error_body[:500],
            )
            raise GitHubAPIError(
                message=f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
            )

        return response

    def _parse_body(self, response: httpx.Response, expected: type) -> Any:
        """Decode a JSON response body of the expected top-level type.

        Raises:
            GitHubAPIError: If the body is not JSON or has another shape.
        """
        try:
            data = response.json()
        except ValueError as e:
            raise GitHubAPIError(
                message=f"Invalid JSON from GitHub: {e}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            ) from e

        if not isinstance(data, expected):
            raise GitHubAPIError(
                message=f"Unexpected GitHub response: expected {expected.__name__}, "
                f"got {type(data).__name__}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            )
        return data

    def _parse_pull(self, response: httpx.Response, item: Any) -> PullRequestInfo:
        try:
            return PullRequestInfo.from_github_response(item)
        except (KeyError, TypeError, ValueError) as e:
            raise GitHubAPIError(
                message=f"Unexpected pull request object: {e}",
                status_code=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
            ) from e

    async def list_pull_requests(
        self,
        owner: str,
        repo: str,
        head: str,
        base: str,
        state: str = "open",
    ) -> List[PullRequestInfo]:
        """List pull requests from a head branch into a base branch.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            head: Head branch name; qualified with the owner for the query.
            base: Base branch name.
            state: Pull request state filter.

        Returns:
            The matching pull requests, newest first as GitHub returns them.

        Raises:
            GitHubAPIError: If the request fails or the response has an
                unexpected shape.
        """
        response = await self._request(
            method="GET",
            path=f"/repos/{owner}/{repo}/pulls",
            params={"state": state, "head": f"{owner}:{head}", "base": base},
        )
        data = self._parse_body(response, list)
        logger.info(
            "Listed pull requests",
            owner=owner,
            repo=repo,
            head=head,
            base=base,
            response=data,
        )
        return [self._parse_pull(response, item) for item in data]

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str = "",
    ) -> PullRequestInfo:
        """Create a pull request.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            title: Pull request title.
            head: Branch containing the changes.
            base: Branch to merge into.
            body: Pull request description.

        Returns:
            PullRequestInfo with the created PR number and URL.

        Raises:
            GitHubAPIError: If the request fails or the response has an
                unexpected shape.
        """
        logger.info(
            "Creating pull request",
            owner=owner,
            repo=repo,
            title=title,
            head=head,
            base=base,
        )

        response = await self._request(
            method="POST",
            path=f"/repos/{owner}/{repo}/pulls",
            json_data={"title": title, "head": head, "base": base, "body": body},
        )
        data = self._parse_body(response, dict)
        logger.info("Pull request created", owner=owner, repo=repo, response=data)
        return self._parse_pull(response, data)

    async def merge_pull_request(
        self,
        owner: str,
        repo: str,
        pull_number: str,
    ) -> Dict[str, Any]:
        """Merge a pull request.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.
            pull_number: Number of the pull request to merge.

        Returns:
            The merge result from GitHub (sha, merged, message).

        Raises:
            GitHubAPIError: If the request fails or the response has an
                unexpected shape.
        """
        logger.info(
            "Merging pull request",
            owner=owner,
            repo=repo,
            pull_number=pull_number,
        )

        response = await self._request(
            method="PUT",
            path=f"/repos/{owner}/{repo}/pulls/{pull_number}/merge",
        )
        data = self._parse_body(response, dict)
        logger.info(
            "Pull request merge response",
            owner=owner,
            repo=repo,
            pull_number=pull_number,
            response=data,
        )
        return data
