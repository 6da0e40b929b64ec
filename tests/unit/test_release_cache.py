import threading

import pytest

from release_contributors.core.exceptions import FetchError
from release_contributors.services.release_cache import ReleaseCache
from tests.factories import FakeReleaseNotesSource, simple_notes


def _documents(*versions: str) -> dict[str, str]:
    return {version: simple_notes({f"dev-{version}": 1}) for version in versions}


class TestGetRelease:
    """Tests for the on-demand fetch path."""

    def test_miss_fetches_once_then_serves_from_cache(self) -> None:
        source = FakeReleaseNotesSource(_documents("v1_100"), ["v1_100.md"])
        cache = ReleaseCache(source=source, prefetch_count=0)
        cache.refresh()
        assert [v.id for v in cache.get_versions()] == ["v1_100"]
        assert source.fetch_calls == []

        first, found = cache.get_release("v1_100")
        assert found is True
        assert first is not None
        assert first.version == "v1_100"

        second, found_again = cache.get_release("v1_100")
        assert found_again is True
        assert second is first
        assert source.fetch_calls == ["v1_100"]

    def test_failed_fetch_is_not_cached(self) -> None:
        source = FakeReleaseNotesSource({}, [])
        cache = ReleaseCache(source=source)

        assert cache.get_release("v1_100") == (None, False)

        source.documents["v1_100"] = simple_notes({"alice": 1})
        release, found = cache.get_release("v1_100")
        assert found is True
        assert release is not None
        assert source.fetch_calls == ["v1_100", "v1_100"]

    def test_version_outside_catalog_can_be_fetched(self) -> None:
        source = FakeReleaseNotesSource(_documents("v1_50"), [])
        cache = ReleaseCache(source=source)
        cache.refresh()

        release, found = cache.get_release("v1_50")
        assert found is True
        assert release is not None
        # Not in the catalog, so not part of the aggregation list
        assert cache.get_cached_releases() == []


class TestRefresh:
    """Tests for discovery plus prefetch."""

    def test_refresh_replaces_catalog_and_prefetches_newest(self) -> None:
        versions = [f"v1_{minor}" for minor in range(100, 108)]
        source = FakeReleaseNotesSource(_documents(*versions), [f"{v}.md" for v in versions])
        cache = ReleaseCache(source=source, prefetch_count=5)

        releases = cache.refresh()

        assert [v.id for v in cache.get_versions()] == [f"v1_{m}" for m in range(107, 99, -1)]
        assert source.fetch_calls == ["v1_107", "v1_106", "v1_105", "v1_104", "v1_103"]
        assert [r.version for r in releases] == ["v1_107", "v1_106", "v1_105", "v1_104", "v1_103"]

    def test_refresh_skips_failed_versions(self) -> None:
        versions = ["v1_103", "v1_102", "v1_101"]
        source = FakeReleaseNotesSource(_documents(*versions), [f"{v}.md" for v in versions])
        source.failing_versions.add("v1_102")
        cache = ReleaseCache(source=source)

        releases = cache.refresh()

        assert [r.version for r in releases] == ["v1_103", "v1_101"]
        assert len(cache.get_versions()) == 3

    def test_discovery_failure_without_catalog_uses_fallback(self) -> None:
        source = FakeReleaseNotesSource(_documents("v1_109", "v1_108"), files=None)
        cache = ReleaseCache(source=source, fallback_versions=["v1_108", "v1_109", "v1_107"])

        releases = cache.refresh()

        assert [v.id for v in cache.get_versions()] == ["v1_109", "v1_108", "v1_107"]
        assert [r.version for r in releases] == ["v1_109", "v1_108"]

    def test_discovery_failure_keeps_previous_catalog(self) -> None:
        source = FakeReleaseNotesSource(_documents("v1_90", "v1_91"), ["v1_90.md", "v1_91.md"])
        cache = ReleaseCache(source=source, fallback_versions=["v1_109"])
        cache.refresh()
        before = cache.get_versions()

        source.files = None
        cache.refresh()

        assert cache.get_versions() == before
        assert [v.id for v in before] == ["v1_91", "v1_90"]

    def test_refetch_replaces_release_wholesale(self) -> None:
        source = FakeReleaseNotesSource({"v1_100": simple_notes({"alice": 1})}, ["v1_100.md"])
        cache = ReleaseCache(source=source)
        cache.refresh()

        source.documents["v1_100"] = simple_notes({"bob": 2})
        cache.refresh()

        release, _ = cache.get_release("v1_100")
        assert release is not None
        assert [c.github_user for c in release.contributors] == ["bob"]

    def test_empty_releases_are_not_aggregated(self) -> None:
        source = FakeReleaseNotesSource(
            {"v1_101": "# nothing to see", "v1_100": simple_notes({"alice": 1})},
            ["v1_101.md", "v1_100.md"],
        )
        cache = ReleaseCache(source=source)

        releases = cache.refresh()

        assert [r.version for r in releases] == ["v1_100"]
        assert cache.get_release("v1_101")[1] is True

    def test_has_versions(self) -> None:
        cache = ReleaseCache(source=FakeReleaseNotesSource(_documents("v1_1"), ["v1_1.md"]))
        assert cache.has_versions() is False
        assert cache.get_versions() == []
        cache.refresh()
        assert cache.has_versions() is True


class BlockingSource(FakeReleaseNotesSource):
    """Blocks fetches of one version until the test lets it through."""

    def __init__(self, documents: dict[str, str], blocked_version: str) -> None:
        super().__init__(documents, [])
        self.blocked_version = blocked_version
        self.fetch_started = threading.Event()
        self.proceed = threading.Event()

    def fetch_document(self, version: str) -> str:
        if version == self.blocked_version:
            self.fetch_started.set()
            if not self.proceed.wait(timeout=5):
                raise FetchError(version, "timed out")
        return super().fetch_document(version)


class TestConcurrency:
    """The fetch path must not hold locks while waiting on the network."""

    def test_slow_fetch_does_not_block_other_readers(self) -> None:
        source = BlockingSource(_documents("v1_1", "v1_2"), blocked_version="v1_2")
        cache = ReleaseCache(source=source)
        cache.get_release("v1_1")

        results: dict[str, bool] = {}
        worker = threading.Thread(
            target=lambda: results.update(v1_2=cache.get_release("v1_2")[1])
        )
        worker.start()
        assert source.fetch_started.wait(timeout=5)

        # v1_2 is mid-fetch; reads of other data must still go through
        release, found = cache.get_release("v1_1")
        assert found is True
        assert release is not None
        with cache.snapshot() as snapshot:
            assert list(snapshot.releases) == ["v1_1"]

        source.proceed.set()
        worker.join(timeout=5)
        assert results == {"v1_2": True}

    def test_parallel_readers_and_refresh(self) -> None:
        versions = [f"v1_{minor}" for minor in range(1, 11)]
        source = FakeReleaseNotesSource(_documents(*versions), [f"{v}.md" for v in versions])
        cache = ReleaseCache(source=source)
        errors: list[BaseException] = []

        def read_all() -> None:
            try:
                for version in versions:
                    release, found = cache.get_release(version)
                    assert found and release is not None and release.version == version
                    cache.get_cached_releases()
            except BaseException as exc:  # noqa: BLE001
                errors.append(exc)

        threads = [threading.Thread(target=read_all) for _ in range(8)]
        threads.append(threading.Thread(target=cache.refresh))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert len(cache.get_versions()) == 10

    def test_reads_inside_snapshot_pass_a_waiting_refresh(self) -> None:
        versions = ["v1_101", "v1_100"]
        source = FakeReleaseNotesSource(_documents(*versions), [f"{v}.md" for v in versions])
        cache = ReleaseCache(source=source, prefetch_count=2)
        cache.refresh()

        refresh_done = threading.Event()
        reads_done = threading.Event()
        seen: dict[str, object] = {}

        def refresh() -> None:
            cache.refresh()
            refresh_done.set()

        def query() -> None:
            with cache.snapshot():
                refresher = threading.Thread(target=refresh)
                refresher.start()
                # The refresh is now queued on the release map write lock
                seen["refresh_blocked"] = not refresh_done.wait(timeout=0.2)
                seen["cached"] = [r.version for r in cache.get_cached_releases()]
                seen["hit"] = cache.get_release("v1_101")[1]
            reads_done.set()

        worker = threading.Thread(target=query)
        worker.start()

        assert reads_done.wait(timeout=5)
        assert refresh_done.wait(timeout=5)
        worker.join(timeout=5)
        assert seen == {"refresh_blocked": True, "cached": ["v1_101", "v1_100"], "hit": True}

    def test_storing_inside_snapshot_raises(self) -> None:
        source = FakeReleaseNotesSource(_documents("v1_100"), ["v1_100.md"])
        cache = ReleaseCache(source=source, prefetch_count=0)

        with cache.snapshot():
            with pytest.raises(RuntimeError):
                cache.get_release("v1_100")

        assert cache.get_release("v1_100")[1] is True
