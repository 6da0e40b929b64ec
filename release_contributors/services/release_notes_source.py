from typing import Protocol

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from release_contributors.core.config import settings
from release_contributors.core.exceptions import DiscoveryError, FetchError

logger = structlog.get_logger()


class ReleaseNotesSourceProtocol(Protocol):
    """What the cache needs from the upstream release notes repository."""

    def list_version_files(self) -> list[str]:
        """File names in the release notes directory. Raises DiscoveryError."""
        ...

    def fetch_document(self, version: str) -> str:
        """Raw markdown for one version. Raises FetchError."""
        ...


class ReleaseNotesSource:
    """Reads the release notes directory of the docs repository on GitHub."""

    def __init__(self, transport: httpx.BaseTransport | None = None) -> None:
        self.listing_url = settings.listing_url
        self.headers = {"Accept": "application/vnd.github.v3+json"}
        if settings.github_token:
            self.headers["Authorization"] = f"token {settings.github_token}"
        self.timeout = httpx.Timeout(settings.fetch_timeout_seconds)
        self.transport = transport

    @retry(
        stop=stop_after_attempt(settings.fetch_max_attempts),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((httpx.ConnectError, httpx.RemoteProtocolError)),
        reraise=True,
    )
    def _get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        with httpx.Client(
            timeout=self.timeout, transport=self.transport, follow_redirects=True
        ) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response

    def list_version_files(self) -> list[str]:
        try:
            response = self._get(self.listing_url, headers=self.headers)
            entries = response.json()
        except httpx.HTTPError as exc:
            raise DiscoveryError(f"listing request failed: {exc}") from exc
        except ValueError as exc:
            raise DiscoveryError(f"listing body is not JSON: {exc}") from exc

        if not isinstance(entries, list):
            raise DiscoveryError("listing body is not a JSON array")

        names = [
            entry["name"]
            for entry in entries
            if isinstance(entry, dict) and isinstance(entry.get("name"), str)
        ]
        logger.debug("Listed release notes directory", entries=len(entries), files=len(names))
        return names

    def fetch_document(self, version: str) -> str:
        url = settings.document_url(version)
        try:
            response = self._get(url)
            return response.content.decode("utf-8")
        except httpx.HTTPError as exc:
            raise FetchError(version, f"request to {url} failed: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise FetchError(version, f"body is not UTF-8: {exc}") from exc
