"""GitHub pull request models."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class PullRequestInfo(BaseModel):
    """Number and URL of a pull request.

    Attributes:
        pr_number: The pull request number within the repository.
        pr_url: The browser URL of the pull request.
    """

    pr_number: int = Field(..., gt=0)
    pr_url: str

    @classmethod
    def from_github_response(cls, data: Dict[str, Any]) -> "PullRequestInfo":
        """Build from a GitHub pull request object.

        Raises:
            KeyError: If ``number`` or ``html_url`` is missing.
        """
        return cls(pr_number=data["number"], pr_url=data["html_url"])

    def summary(self) -> str:
        return f"#{self.pr_number} {self.pr_url}"
