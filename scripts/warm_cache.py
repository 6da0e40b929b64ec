#!/usr/bin/env python
"""Run one cache refresh against the live release notes and print a summary."""
import sys
sys.path.insert(0, ".")

from release_contributors.core.logging import setup_logging
from release_contributors.services import ContributorService, LeaderboardService, ReleaseCache
from release_contributors.schemas.leaderboard import LeaderboardTab

TOP_N = 10


def main() -> None:
    setup_logging()
    cache = ReleaseCache()
    releases = cache.refresh()

    versions = cache.get_versions()
    print(f"Known versions: {len(versions)}")
    if versions:
        print(f"Newest: {versions[0].display_name}, oldest: {versions[-1].display_name}")

    print(f"\nCached releases: {len(releases)}")
    for release in releases:
        pr_total = sum(len(c.prs) for c in release.contributors)
        print(f"  {release.display_name:>8}  {len(release.contributors):4} contributors  {pr_total:4} PRs")

    leaderboard = LeaderboardService(cache)
    contributors = ContributorService(cache)
    for tab in LeaderboardTab:
        print(f"\nTop {TOP_N} by {tab.value}:")
        for entry in leaderboard.get_leaderboard(tab, TOP_N):
            newcomer = ""
            if releases and contributors.is_first_time_contributor(entry.github_user, releases[0].version):
                newcomer = "  (first time)"
            print(
                f"  {entry.rank:3}. {entry.github_user:<24} "
                f"{entry.pr_count:4} PRs in {entry.releases} releases{newcomer}"
            )


if __name__ == "__main__":
    main()
