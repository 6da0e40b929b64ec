from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # GitHub API
    github_token: str | None = None
    github_api_base_url: str = "https://api.github.com"
    raw_content_base_url: str = "https://raw.githubusercontent.com"

    # Release notes source
    release_notes_repo: str = "microsoft/vscode-docs"
    release_notes_branch: str = "main"
    release_notes_path: str = "release-notes"
    fallback_versions: list[str] = ["v1_109", "v1_108", "v1_107", "v1_106", "v1_105"]

    # Fetching
    fetch_timeout_seconds: float = 30.0
    fetch_max_attempts: int = 3

    # Cache refresh
    refresh_interval_seconds: float = 3600.0  # 1 hour
    prefetch_count: int = 5

    # Queries
    leaderboard_default_limit: int = 50

    @field_validator("refresh_interval_seconds")
    @classmethod
    def check_refresh_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("refresh_interval_seconds must be positive")
        return v

    @property
    def listing_url(self) -> str:
        return (
            f"{self.github_api_base_url}/repos/{self.release_notes_repo}"
            f"/contents/{self.release_notes_path}"
        )

    def document_url(self, version: str) -> str:
        return (
            f"{self.raw_content_base_url}/{self.release_notes_repo}"
            f"/{self.release_notes_branch}/{self.release_notes_path}/{version}.md"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
