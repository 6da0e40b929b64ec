from release_contributors.models.release import (
    Contributor,
    PullRequest,
    Release,
    VersionDescriptor,
    avatar_url_for,
    display_name_for,
    version_key,
)

__all__ = [
    "Contributor",
    "PullRequest",
    "Release",
    "VersionDescriptor",
    "avatar_url_for",
    "display_name_for",
    "version_key",
]
