"""In-memory cache of parsed release notes.

Two pieces of shared state, each behind its own reader/writer lock:

- the version catalog, swapped wholesale by ``refresh()``
- the release map (version id -> Release), filled on demand or by prefetch

Network I/O never happens while either lock is held. Concurrent misses for
the same version may each fetch it; the last one to finish wins.
"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType

import structlog

from release_contributors.core.config import settings
from release_contributors.core.exceptions import DiscoveryError, FetchError
from release_contributors.core.locks import ReadWriteLock
from release_contributors.models.release import Release, VersionDescriptor
from release_contributors.parsing.release_notes_parser import ReleaseNotesParser
from release_contributors.services.release_notes_source import (
    ReleaseNotesSource,
    ReleaseNotesSourceProtocol,
)
from release_contributors.services.version_catalog import VersionCatalog, seed_catalog

logger = structlog.get_logger()


@dataclass(frozen=True)
class CacheSnapshot:
    """Catalog and release map as observed by one aggregation query."""

    versions: tuple[VersionDescriptor, ...]
    releases: Mapping[str, Release]

    def in_catalog_order(self) -> list[Release]:
        """Cached releases in catalog order, then any cached outside it, newest first."""
        ordered = [self.releases[v.id] for v in self.versions if v.id in self.releases]
        catalog_ids = {v.id for v in self.versions}
        extra = [r for version, r in self.releases.items() if version not in catalog_ids]
        extra.sort(key=lambda r: r.sort_key, reverse=True)
        return ordered + extra

    def in_version_order(self) -> list[Release]:
        """Every cached release, oldest first."""
        return sorted(self.releases.values(), key=lambda r: r.sort_key)


class ReleaseCache:
    """Concurrency-safe store of releases keyed by version id."""

    def __init__(
        self,
        source: ReleaseNotesSourceProtocol | None = None,
        parser: ReleaseNotesParser | None = None,
        prefetch_count: int | None = None,
        fallback_versions: list[str] | None = None,
    ) -> None:
        self.source = source or ReleaseNotesSource()
        self.parser = parser or ReleaseNotesParser()
        self.catalog = VersionCatalog(self.source)
        self.prefetch_count = settings.prefetch_count if prefetch_count is None else prefetch_count
        self.fallback_versions = (
            settings.fallback_versions if fallback_versions is None else fallback_versions
        )

        self._versions: tuple[VersionDescriptor, ...] = ()
        self._versions_lock = ReadWriteLock()
        self._releases: dict[str, Release] = {}
        self._releases_lock = ReadWriteLock()

    def get_versions(self) -> list[VersionDescriptor]:
        """Current catalog, newest first. Never touches the network."""
        with self._versions_lock.read_locked():
            return list(self._versions)

    def has_versions(self) -> bool:
        with self._versions_lock.read_locked():
            return bool(self._versions)

    def get_release(self, version: str) -> tuple[Release | None, bool]:
        """Return a cached release, fetching and caching it on a miss.

        A failed fetch is logged and reported as not found; nothing is stored,
        so the next call tries again.
        """
        with self._releases_lock.read_locked():
            release = self._releases.get(version)
        if release is not None:
            return release, True

        try:
            release = self._fetch_release(version)
        except FetchError as exc:
            logger.warning("Failed to fetch release on demand", version=version, error=str(exc))
            return None, False

        with self._releases_lock.write_locked():
            self._releases[version] = release
        return release, True

    def get_cached_releases(self) -> list[Release]:
        """Cached, non-empty releases for catalog entries, in catalog order."""
        versions = self.get_versions()
        with self._releases_lock.read_locked():
            cached = [self._releases.get(v.id) for v in versions]
        return [r for r in cached if r is not None and not r.is_empty()]

    def refresh(self) -> list[Release]:
        """Rediscover the catalog and prefetch the most recent releases."""
        try:
            versions = self.catalog.discover()
        except DiscoveryError as exc:
            logger.warning("Version discovery failed", error=str(exc))
            versions = self.get_versions()
            if not versions:
                logger.info("Using fallback version list", versions=self.fallback_versions)
                versions = seed_catalog(self.fallback_versions)

        with self._versions_lock.write_locked():
            self._versions = tuple(versions)

        to_prefetch = versions[: self.prefetch_count]
        prefetched = 0
        for descriptor in to_prefetch:
            try:
                release = self._fetch_release(descriptor.id)
            except FetchError as exc:
                logger.warning("Failed to prefetch release", version=descriptor.id, error=str(exc))
                continue
            with self._releases_lock.write_locked():
                self._releases[descriptor.id] = release
            prefetched += 1

        logger.info(
            "Release cache refreshed",
            versions=len(versions),
            prefetched=prefetched,
            failed=len(to_prefetch) - prefetched,
        )
        return self.get_cached_releases()

    @contextmanager
    def snapshot(self) -> Iterator[CacheSnapshot]:
        """Hold the release map read lock while the caller aggregates over it.

        Reads from the same thread are safe inside the block: ``get_versions``,
        ``get_cached_releases`` and cache hits of ``get_release`` re-enter the
        read lock even while a refresh is waiting to write. Anything that
        stores a release (``refresh`` or a ``get_release`` miss) must run
        outside the block; inside it the write raises ``RuntimeError``.
        """
        versions = tuple(self.get_versions())
        with self._releases_lock.read_locked():
            yield CacheSnapshot(versions=versions, releases=MappingProxyType(self._releases))

    def _fetch_release(self, version: str) -> Release:
        content = self.source.fetch_document(version)
        release = self.parser.parse(version, content)
        logger.debug(
            "Fetched release notes",
            version=version,
            contributors=len(release.contributors),
        )
        return release
