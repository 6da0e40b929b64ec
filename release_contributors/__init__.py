"""Contributor credits scraped from VS Code release notes."""

from release_contributors.services import (
    ContributorService,
    LeaderboardService,
    ReleaseCache,
)
from release_contributors.workers import BackgroundRefresher

__version__ = "1.0.0"

__all__ = [
    "BackgroundRefresher",
    "ContributorService",
    "LeaderboardService",
    "ReleaseCache",
]
