from pydantic import BaseModel, Field

from release_contributors.models.release import PullRequest


class ContributorSearchResult(BaseModel):
    """One handle's activity aggregated across cached releases."""

    github_user: str
    name: str
    avatar_url: str
    total_prs: int
    release_count: int


class ContributorHistory(BaseModel):
    github_user: str
    name: str
    avatar_url: str
    total_prs: int = 0
    release_count: int = 0
    first_release: str
    latest_release: str
    prs_by_release: dict[str, list[PullRequest]] = Field(default_factory=dict)
