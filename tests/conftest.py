"""Test configuration and fixtures.

Unit tests never touch the network: caches are built on top of
``FakeReleaseNotesSource``, which serves documents from a dict and records
every call so tests can assert on fetch counts.
"""

from collections.abc import Callable

import pytest

from release_contributors.services.release_cache import ReleaseCache
from tests.factories import FakeReleaseNotesSource


@pytest.fixture
def make_cache() -> Callable[..., ReleaseCache]:
    """Cache over a fake source; ``refresh=True`` discovers and prefetches."""

    def _make(
        documents: dict[str, str] | None = None,
        refresh: bool = True,
        prefetch_count: int = 5,
    ) -> ReleaseCache:
        documents = documents or {}
        source = FakeReleaseNotesSource(documents, [f"{v}.md" for v in documents])
        cache = ReleaseCache(
            source=source,
            prefetch_count=prefetch_count,
            fallback_versions=["v1_109", "v1_108"],
        )
        if refresh:
            cache.refresh()
        return cache

    return _make
