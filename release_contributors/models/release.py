import re
from dataclasses import dataclass, field

VERSION_ID_PATTERN = re.compile(r"^v(\d+)_(\d+)$")

AVATAR_URL_TEMPLATE = "https://github.com/{handle}.png?size=80"


def version_key(version: str) -> tuple[int, int]:
    """Numeric ordering key for a version id: "v1_109" -> (1, 109).

    Ids that do not look like ``v<major>_<minor>`` sort as (0, 0).
    """
    match = VERSION_ID_PATTERN.match(version)
    if not match:
        return (0, 0)
    return int(match.group(1)), int(match.group(2))


def display_name_for(version: str) -> str:
    """Human form of a version id: "v1_109" -> "1.109"."""
    return version.removeprefix("v").replace("_", ".", 1)


def avatar_url_for(handle: str) -> str:
    return AVATAR_URL_TEMPLATE.format(handle=handle)


@dataclass(frozen=True)
class VersionDescriptor:
    """A known release, whether or not its notes have been fetched."""

    id: str
    display_name: str

    @classmethod
    def from_id(cls, version: str) -> "VersionDescriptor":
        return cls(id=version, display_name=display_name_for(version))


@dataclass(frozen=True)
class PullRequest:
    title: str
    url: str
    repo: str
    number: str


@dataclass(frozen=True)
class Contributor:
    name: str
    github_user: str
    avatar_url: str
    prs: tuple[PullRequest, ...] = ()

    @property
    def handle_key(self) -> str:
        return self.github_user.lower()

    def matches(self, handle: str) -> bool:
        return self.handle_key == handle.lower()


@dataclass(frozen=True)
class Release:
    """Contributors credited in one release notes document, in document order."""

    version: str
    display_name: str
    contributors: tuple[Contributor, ...] = field(default_factory=tuple)

    @property
    def sort_key(self) -> tuple[int, int]:
        return version_key(self.version)

    def is_empty(self) -> bool:
        return not self.contributors

    def find_contributors(self, handle: str) -> list[Contributor]:
        """All entries for a handle; the notes occasionally list someone twice."""
        return [c for c in self.contributors if c.matches(handle)]
