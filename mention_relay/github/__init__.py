"""GitHub integration for deployment pull request actions."""

from mention_relay.github.actions import (
    ACTION_DESCRIPTORS,
    ActionDescriptor,
    ActionInvocation,
    DeploymentActions,
    RemoteAction,
    UnknownActionError,
)
from mention_relay.github.client import GitHubAPIError, GitHubClient
from mention_relay.github.models import PullRequestInfo

__all__ = [
    "ACTION_DESCRIPTORS",
    "ActionDescriptor",
    "ActionInvocation",
    "DeploymentActions",
    "GitHubAPIError",
    "GitHubClient",
    "PullRequestInfo",
    "RemoteAction",
    "UnknownActionError",
]
