"""Deployment pull request actions the model can call.

Three actions are advertised to the completion API as functions:
- getOpenDeploymentPR: find the open staging → main pull request
- createDeploymentPR: open the staging → main pull request
- mergeDeploymentPR: merge a pull request by number

Every action returns a short string for the model. GitHub failures are logged
and turned into a fixed failure string; they never leave the adapter.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from mention_relay.github.client import GitHubAPIError, GitHubClient
from mention_relay.metrics import metrics

logger = structlog.get_logger()


NO_OPEN_PR = "No open deployment PR found."
FETCH_FAILED = "Failed to fetch open deployment PR."
CREATE_FAILED = "Failed to create deployment PR."
MERGE_FAILED = "Failed to merge deployment PR."

FAILURE_RESULTS = frozenset({FETCH_FAILED, CREATE_FAILED, MERGE_FAILED})


class RemoteAction(str, Enum):
    """The closed set of actions the model may request."""

    GET_OPEN_DEPLOYMENT_PR = "getOpenDeploymentPR"
    CREATE_DEPLOYMENT_PR = "createDeploymentPR"
    MERGE_DEPLOYMENT_PR = "mergeDeploymentPR"


class UnknownActionError(Exception):
    """Raised when the model names a function that was never advertised."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown action requested by model: {name!r}")


class ActionParameter(BaseModel):
    """One parameter of an action's JSON schema."""

    name: str
    type: str = "string"
    description: str = ""
    required: bool = False


class ActionDescriptor(BaseModel):
    """An action as advertised to the completion API."""

    model_config = ConfigDict(frozen=True)

    action: RemoteAction
    description: str
    parameters: List[ActionParameter] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.action.value

    def to_openai_function(self) -> Dict[str, Any]:
        """Render as an OpenAI ``functions`` entry."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": {
                    p.name: {"type": p.type, "description": p.description}
                    for p in self.parameters
                },
                "required": [p.name for p in self.parameters if p.required],
            },
        }


ACTION_DESCRIPTORS: List[ActionDescriptor] = [
    ActionDescriptor(
        action=RemoteAction.GET_OPEN_DEPLOYMENT_PR,
        description=(
            "Get the open deployment pull request from staging to main, "
            "if there is one. Returns its number and URL."
        ),
    ),
    ActionDescriptor(
        action=RemoteAction.CREATE_DEPLOYMENT_PR,
        description=(
            "Create a deployment pull request from staging to main. "
            "Returns the new pull request's number and URL."
        ),
    ),
    ActionDescriptor(
        action=RemoteAction.MERGE_DEPLOYMENT_PR,
        description="Merge the deployment pull request with the given number.",
        parameters=[
            ActionParameter(
                name="pullNumber",
                type="string",
                description="The number of the pull request to merge",
                required=True,
            ),
        ],
    ),
]


class MergeDeploymentArgs(BaseModel):
    """Arguments of mergeDeploymentPR."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    pull_number: str = Field(..., alias="pullNumber")


class ActionInvocation(BaseModel):
    """An action requested by the model, with its decoded arguments."""

    action: RemoteAction
    arguments: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_function_call(cls, name: str, arguments: Optional[str]) -> "ActionInvocation":
        """Build from an OpenAI ``function_call`` object.

        Args:
            name: The function name chosen by the model.
            arguments: The JSON-encoded arguments string.

        Raises:
            UnknownActionError: If ``name`` is not a RemoteAction.
            json.JSONDecodeError: If ``arguments`` is not valid JSON.
        """
        try:
            action = RemoteAction(name)
        except ValueError:
            raise UnknownActionError(name)

        decoded = json.loads(arguments) if arguments else {}
        return cls(action=action, arguments=decoded)


class DeploymentActions:
    """GitHub-backed implementations of the remote actions.

    Attributes:
        github_client: Authenticated GitHub API client.
        owner: Repository owner.
        repo: Repository name.
        head_branch: Branch deployments are made from.
        base_branch: Branch deployments are merged into.
        pr_title: Title used for new deployment pull requests.
    """

    def __init__(
        self,
        github_client: GitHubClient,
        owner: str,
        repo: str,
        head_branch: str = "staging",
        base_branch: str = "main",
        pr_title: str = "Deploy staging to main",
    ):
        self.github_client = github_client
        self.owner = owner
        self.repo = repo
        self.head_branch = head_branch
        self.base_branch = base_branch
        self.pr_title = pr_title

    async def dispatch(self, invocation: ActionInvocation) -> str:
        """Run the requested action and return its result for the model.

        Raises:
            pydantic.ValidationError: If the arguments do not match the
                action's parameters.
        """
        action = invocation.action
        logger.info("Dispatching remote action", action=action.value)

        if action is RemoteAction.GET_OPEN_DEPLOYMENT_PR:
            result = await self.get_open_deployment_pr()
        elif action is RemoteAction.CREATE_DEPLOYMENT_PR:
            result = await self.create_deployment_pr()
        elif action is RemoteAction.MERGE_DEPLOYMENT_PR:
            args = MergeDeploymentArgs.model_validate(invocation.arguments)
            result = await self.merge_deployment_pr(args.pull_number)
        else:
            raise UnknownActionError(action.value)

        metrics.record_action(action.value, success=result not in FAILURE_RESULTS)
        return result

    async def get_open_deployment_pr(self) -> str:
        try:
            pulls = await self.github_client.list_pull_requests(
                self.owner,
                self.repo,
                head=self.head_branch,
                base=self.base_branch,
            )
        except GitHubAPIError as e:
            logger.error("Error fetching open deployment PR", error=str(e))
            return FETCH_FAILED

        if not pulls:
            return NO_OPEN_PR
        return pulls[0].summary()

    async def create_deployment_pr(self) -> str:
        try:
            pr = await self.github_client.create_pull_request(
                self.owner,
                self.repo,
                title=self.pr_title,
                head=self.head_branch,
                base=self.base_branch,
            )
        except GitHubAPIError as e:
            logger.error("Error creating deployment PR", error=str(e))
            return CREATE_FAILED

        return f"Created PR {pr.summary()}"

    async def merge_deployment_pr(self, pull_number: str) -> str:
        try:
            result = await self.github_client.merge_pull_request(
                self.owner,
                self.repo,
                pull_number,
            )
        except GitHubAPIError as e:
            logger.error(
                "Error merging deployment PR",
                pull_number=pull_number,
                error=str(e),
            )
            return MERGE_FAILED

        return json.dumps(result)
