from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TEAM_PALETTE = (
    "#F15B98",
    "#2563EB",
    "#16A34A",
    "#F59E0B",
    "#7C3AED",
    "#DC2626",
    "#0891B2",
    "#65A30D",
)
DEFAULT_FALLBACK_NAME = "Unknown player"
DEFAULT_DASHBOARD_LIMIT = 2
DEFAULT_PODIUM_SIZE = 3


class Settings(BaseSettings):
    store_base_url: str = "http://localhost:54321"
    store_api_key: str = ""
    http_timeout_seconds: float = 20.0
    dashboard_competition_limit: int = Field(default=DEFAULT_DASHBOARD_LIMIT, ge=1)
    podium_size: int = Field(default=DEFAULT_PODIUM_SIZE, ge=1)
    fallback_display_name: str = DEFAULT_FALLBACK_NAME
    team_palette: list[str] = Field(default_factory=lambda: list(DEFAULT_TEAM_PALETTE))
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CLUBSCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
