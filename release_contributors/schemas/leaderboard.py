from enum import Enum

from pydantic import BaseModel


class LeaderboardTab(str, Enum):
    PRS = "prs"
    RELEASES = "releases"

    @classmethod
    def parse(cls, value: "str | LeaderboardTab | None") -> "LeaderboardTab":
        """Unknown or missing tabs fall back to the PR ranking."""
        if isinstance(value, cls):
            return value
        if value == cls.RELEASES.value:
            return cls.RELEASES
        return cls.PRS


class LeaderboardEntry(BaseModel):
    rank: int
    github_user: str
    name: str
    avatar_url: str
    pr_count: int
    releases: int
