class ReleaseNotesError(Exception):
    """Base class for failures talking to the release notes source."""


class DiscoveryError(ReleaseNotesError):
    """The version listing could not be fetched or decoded."""


class FetchError(ReleaseNotesError):
    """A release notes document could not be fetched or decoded."""

    def __init__(self, version: str, message: str) -> None:
        super().__init__(f"{version}: {message}")
        self.version = version
