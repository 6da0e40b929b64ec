from release_contributors.schemas.contributor import (
    ContributorHistory,
    ContributorSearchResult,
)
from release_contributors.schemas.leaderboard import LeaderboardEntry, LeaderboardTab

__all__ = [
    "ContributorHistory",
    "ContributorSearchResult",
    "LeaderboardEntry",
    "LeaderboardTab",
]
