"""Application configuration."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment."""

    # Application
    app_env: str = "development"
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Developer profile defaults (used when a profile value is missing)
    default_daily_hours: float = 8.0
    default_load_pct: float = 90.0

    # One man-day, independent of a developer's own daily hours
    man_day_hours: float = 8.0

    # Sprint calendar
    ip_sprint_marker: str = "IP"
    sprints_per_pi: int = 6
    weekday_locale: str = "de-CH"

    # Stories counted as finished for feature progress
    done_statuses: List[str] = ["Done", "Closed"]

    # Historical team-name synonyms: long form -> short code
    team_aliases: dict[str, str] = {"Hydrogen 1": "H1"}

    # Cross-team defect ratio is divided by the team count at the time the
    # dashboard was defined, not by the live number of teams.
    defect_ratio_team_divisor: int = 4

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
