from release_contributors.workers.refresher import BackgroundRefresher

__all__ = ["BackgroundRefresher"]
