from release_contributors.services.contributor_service import ContributorService
from release_contributors.services.leaderboard_service import LeaderboardService
from release_contributors.services.release_cache import CacheSnapshot, ReleaseCache
from release_contributors.services.release_notes_source import ReleaseNotesSource
from release_contributors.services.version_catalog import VersionCatalog

__all__ = [
    "CacheSnapshot",
    "ContributorService",
    "LeaderboardService",
    "ReleaseCache",
    "ReleaseNotesSource",
    "VersionCatalog",
]
