import structlog

from release_contributors.models.release import version_key
from release_contributors.schemas.contributor import ContributorHistory, ContributorSearchResult
from release_contributors.services.release_cache import ReleaseCache

logger = structlog.get_logger()

# PR counts worth celebrating
MILESTONES = (5, 10, 25, 50, 100, 250, 500, 1000)


def is_milestone(pr_count: int) -> bool:
    return pr_count in MILESTONES


def milestone_for(pr_count: int) -> int:
    """Highest milestone reached by a PR count, 0 if none."""
    reached = [m for m in MILESTONES if pr_count >= m]
    return reached[-1] if reached else 0


class ContributorService:
    """Per-contributor queries over whatever releases are currently cached.

    Handles are matched case-insensitively and an entry repeated within one
    release is merged rather than counted as a second release.
    """

    def __init__(self, cache: ReleaseCache) -> None:
        self.cache = cache

    def search_contributors(self, query: str) -> list[ContributorSearchResult]:
        """Contributors whose handle contains ``query``, most PRs first."""
        query = query.lower()
        if not query:
            return []

        by_user: dict[str, ContributorSearchResult] = {}
        with self.cache.snapshot() as snapshot:
            # Newest first so the representative name is the most recent one
            for release in reversed(snapshot.in_version_order()):
                seen_in_release: set[str] = set()
                for contributor in release.contributors:
                    key = contributor.handle_key
                    if query not in key:
                        continue

                    result = by_user.get(key)
                    if result is None:
                        result = by_user[key] = ContributorSearchResult(
                            github_user=contributor.github_user,
                            name=contributor.name,
                            avatar_url=contributor.avatar_url,
                            total_prs=0,
                            release_count=0,
                        )
                    result.total_prs += len(contributor.prs)
                    if key not in seen_in_release:
                        seen_in_release.add(key)
                        result.release_count += 1

        return sorted(by_user.values(), key=lambda r: (-r.total_prs, r.github_user.lower()))

    def get_contributor_history(self, handle: str) -> ContributorHistory | None:
        """Everything one contributor shipped across cached releases, or None."""
        history: ContributorHistory | None = None

        with self.cache.snapshot() as snapshot:
            for release in snapshot.in_version_order():
                matches = release.find_contributors(handle)
                if not matches:
                    continue

                latest = matches[0]
                if history is None:
                    history = ContributorHistory(
                        github_user=latest.github_user,
                        name=latest.name,
                        avatar_url=latest.avatar_url,
                        first_release=release.version,
                        latest_release=release.version,
                    )
                else:
                    history.github_user = latest.github_user
                    history.name = latest.name
                    history.avatar_url = latest.avatar_url
                    history.latest_release = release.version

                prs = [pr for contributor in matches for pr in contributor.prs]
                if prs:
                    history.prs_by_release[release.version] = prs
                    history.total_prs += len(prs)
                history.release_count += 1

        if history is None:
            logger.debug("Contributor not found in cached releases", handle=handle)
        return history

    def is_first_time_contributor(self, handle: str, version: str) -> bool:
        """True unless a cached release older than ``version`` credits ``handle``.

        Only cached releases are considered, so the answer is as good as the
        cache's coverage of older versions.
        """
        target = version_key(version)
        with self.cache.snapshot() as snapshot:
            for release in snapshot.releases.values():
                if release.sort_key >= target:
                    continue
                if release.find_contributors(handle):
                    return False
        return True

    def total_pr_counts(self) -> dict[str, int]:
        """Total PRs per lower-cased handle across cached releases."""
        totals: dict[str, int] = {}
        with self.cache.snapshot() as snapshot:
            for release in snapshot.in_catalog_order():
                for contributor in release.contributors:
                    key = contributor.handle_key
                    totals[key] = totals.get(key, 0) + len(contributor.prs)
        return totals
