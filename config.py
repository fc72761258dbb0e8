"""Configuration management via pydantic-settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Etuovi requests. The site answers 403 to clients without a browser User-Agent.
    etuovi_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    etuovi_accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    etuovi_accept_language: str = "fi-FI,fi;q=0.9,en;q=0.8"
    etuovi_timeout_seconds: float = 15.0
    etuovi_proxy: str | None = None

    # Logging
    log_level: str = "INFO"
    log_dir: Path = Field(default=Path("./logs"))

    @property
    def request_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.etuovi_user_agent,
            "Accept": self.etuovi_accept,
            "Accept-Language": self.etuovi_accept_language,
        }


settings = Settings()
