"""
Runtime settings for the roster status package.

Settings are plain pydantic models with defaults. Settings.from_env() reads
the ROSTER_* environment variables; the CLI scripts load a .env file first.

    ROSTER_PAGE_CACHE_MINUTES     Raw page cache lifetime (default: 10)
    ROSTER_VERDICT_CACHE_MINUTES  Verdict cache lifetime (default: 5)
    ROSTER_HTTP_TIMEOUT           Request timeout in seconds (default: 10)
    ROSTER_RETRY_COUNT            Retries after the first attempt (default: 2)
    ROSTER_USER_AGENT             User-Agent header sent with every fetch
    ROSTER_INJURY_MARKERS         Comma separated section marker terms
    ROSTER_REDUCE_MARKUP          Drop scripts/styles/comments from the parsed page
    ROSTER_LOG_LEVEL              Logging level name (default: INFO)
"""

import logging
import os
from datetime import timedelta
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36"
)

# Section headings on the roster page that mean the players listed below
# will not play: injured, doubtful, suspended, "missing".
DEFAULT_INJURY_MARKERS = ["Verletzt", "Angeschlagen", "Gesperrt", "fehlen"]

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Tunable values shared by the caches, fetcher and classifier."""
    page_cache_minutes: float = Field(default=10, gt=0)
    verdict_cache_minutes: float = Field(default=5, gt=0)
    http_timeout: float = Field(default=10.0, gt=0)
    retry_count: int = Field(default=2, ge=0)
    user_agent: str = DEFAULT_USER_AGENT
    injury_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_INJURY_MARKERS))
    reduce_markup: bool = False
    log_level: str = "INFO"

    @field_validator("injury_markers")
    @classmethod
    def _drop_blank_markers(cls, markers: list[str]) -> list[str]:
        cleaned = [m.strip() for m in markers if m and m.strip()]
        if not cleaned:
            raise ValueError("at least one injury marker is required")
        return cleaned

    @property
    def page_cache_duration(self) -> timedelta:
        return timedelta(minutes=self.page_cache_minutes)

    @property
    def verdict_cache_duration(self) -> timedelta:
        return timedelta(minutes=self.verdict_cache_minutes)

    @property
    def log_level_value(self) -> int:
        # getLevelName returns "Level X" for unknown names
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from ROSTER_* environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with every unset variable left at its default
        """
        env = os.environ if environ is None else environ
        values: dict = {}

        if "ROSTER_PAGE_CACHE_MINUTES" in env:
            values["page_cache_minutes"] = float(env["ROSTER_PAGE_CACHE_MINUTES"])
        if "ROSTER_VERDICT_CACHE_MINUTES" in env:
            values["verdict_cache_minutes"] = float(env["ROSTER_VERDICT_CACHE_MINUTES"])
        if "ROSTER_HTTP_TIMEOUT" in env:
            values["http_timeout"] = float(env["ROSTER_HTTP_TIMEOUT"])
        if "ROSTER_RETRY_COUNT" in env:
            values["retry_count"] = int(env["ROSTER_RETRY_COUNT"])
        if env.get("ROSTER_USER_AGENT"):
            values["user_agent"] = env["ROSTER_USER_AGENT"]
        if env.get("ROSTER_INJURY_MARKERS"):
            values["injury_markers"] = env["ROSTER_INJURY_MARKERS"].split(",")
        if "ROSTER_REDUCE_MARKUP" in env:
            values["reduce_markup"] = env["ROSTER_REDUCE_MARKUP"].strip().lower() in _TRUE_VALUES
        if env.get("ROSTER_LOG_LEVEL"):
            values["log_level"] = env["ROSTER_LOG_LEVEL"]

        return cls(**values)
