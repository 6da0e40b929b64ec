import re

import structlog

from release_contributors.models.release import VersionDescriptor, version_key
from release_contributors.services.release_notes_source import ReleaseNotesSourceProtocol

logger = structlog.get_logger()

# v1_109.md
VERSION_FILE_PATTERN = re.compile(r"^(v\d+_\d+)\.md$")


def sort_newest_first(versions: list[VersionDescriptor]) -> list[VersionDescriptor]:
    return sorted(versions, key=lambda v: version_key(v.id), reverse=True)


def seed_catalog(version_ids: list[str]) -> list[VersionDescriptor]:
    """Catalog built from a static list of ids, used before any discovery succeeds."""
    return sort_newest_first([VersionDescriptor.from_id(v) for v in version_ids])


class VersionCatalog:
    """Discovers which releases have notes published upstream."""

    def __init__(self, source: ReleaseNotesSourceProtocol) -> None:
        self.source = source

    def discover(self) -> list[VersionDescriptor]:
        """List known releases, newest first.

        Raises DiscoveryError when the listing cannot be fetched or decoded.
        """
        seen: set[str] = set()
        versions = []
        for name in self.source.list_version_files():
            match = VERSION_FILE_PATTERN.match(name)
            if not match or match.group(1) in seen:
                continue
            seen.add(match.group(1))
            versions.append(VersionDescriptor.from_id(match.group(1)))

        logger.info("Discovered release versions", count=len(versions))
        return sort_newest_first(versions)
