from dataclasses import dataclass, field

import structlog

from release_contributors.core.config import settings
from release_contributors.schemas.leaderboard import LeaderboardEntry, LeaderboardTab
from release_contributors.services.release_cache import ReleaseCache

logger = structlog.get_logger()


@dataclass
class _UserStats:
    github_user: str
    name: str
    avatar_url: str
    pr_count: int = 0
    releases: set[str] = field(default_factory=set)


class LeaderboardService:
    """Ranks contributors across every cached release."""

    def __init__(self, cache: ReleaseCache) -> None:
        self.cache = cache

    def get_leaderboard(
        self,
        tab: LeaderboardTab | str | None = LeaderboardTab.PRS,
        limit: int | None = None,
    ) -> list[LeaderboardEntry]:
        """Top contributors ranked by PR count or by number of releases."""
        tab = LeaderboardTab.parse(tab)
        limit = settings.leaderboard_default_limit if limit is None else limit

        stats: dict[str, _UserStats] = {}
        with self.cache.snapshot() as snapshot:
            for release in snapshot.in_catalog_order():
                for contributor in release.contributors:
                    key = contributor.handle_key
                    entry = stats.get(key)
                    if entry is None:
                        entry = stats[key] = _UserStats(
                            github_user=contributor.github_user,
                            name=contributor.name,
                            avatar_url=contributor.avatar_url,
                        )
                    entry.pr_count += len(contributor.prs)
                    entry.releases.add(release.version)
                    # Keep the last seen name/avatar
                    if contributor.name:
                        entry.name = contributor.name
                    if contributor.avatar_url:
                        entry.avatar_url = contributor.avatar_url

        ranked = sorted(stats.values(), key=self._sort_key(tab))[: max(limit, 0)]

        logger.debug("Leaderboard computed", tab=tab.value, contributors=len(stats))
        return [
            LeaderboardEntry(
                rank=rank,
                github_user=s.github_user,
                name=s.name,
                avatar_url=s.avatar_url,
                pr_count=s.pr_count,
                releases=len(s.releases),
            )
            for rank, s in enumerate(ranked, start=1)
        ]

    @staticmethod
    def _sort_key(tab: LeaderboardTab):
        if tab is LeaderboardTab.RELEASES:
            return lambda s: (-len(s.releases), -s.pr_count, s.github_user.lower())
        return lambda s: (-s.pr_count, -len(s.releases), s.github_user.lower())
