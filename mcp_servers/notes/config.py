"""Settings shared by the notes MCP server, REST API and HTTP bridge."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Storage
    notes_dir: Path = Path("./notes-data")
    log_level: str = "INFO"

    # REST API + dashboard backend
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origins: list[str] = ["*"]

    # HTTP/MCP bridge
    bridge_host: str = "0.0.0.0"
    bridge_port: int = 3001
    notes_api_url: str = "http://localhost:3000"
    notes_api_timeout: float = 15.0
    # Public HTTPS origin of the bridge; widget links are only attached
    # when this is set and not a localhost address.
    public_base_url: str | None = None

    @property
    def widgets_enabled(self) -> bool:
        """Whether tool results may link to hosted widgets."""
        url = self.public_base_url or ""
        return url.startswith("https://") and "localhost" not in url


settings = Settings()
