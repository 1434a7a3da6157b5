"""
Pydantic schemas shared by the caches, parser and service.

AvailabilityVerdict: what every lookup returns (immutable)
CachedPage:          PageCache row
VerdictKey:          composite VerdictCache key (url, canonical name, filter)
VerdictCacheEntry:   VerdictCache row

Field names follow Python style; the transport aliases (isLikelyToPlay,
lastChecked) are produced by AvailabilityVerdict.to_response().
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# --- Fixed reason strings ---
# Displayed verbatim by the consuming app.

INJURED_OR_SUSPENDED = "Verletzung oder Sperre"
NOT_IN_SQUAD = "Nicht im Kader"
NOT_PRECACHED = "Information not pre-cached or player not found for filter"

NO_FILTER = "none"


class AvailabilityVerdict(BaseModel):
    """Availability classification for one athlete."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    is_likely_to_play: bool = Field(alias="isLikelyToPlay")
    reason: Optional[str] = None
    last_checked: datetime = Field(alias="lastChecked")

    @classmethod
    def available(cls, checked_at: datetime) -> "AvailabilityVerdict":
        return cls(is_likely_to_play=True, reason=None, last_checked=checked_at)

    @classmethod
    def unavailable(cls, reason: str, checked_at: datetime) -> "AvailabilityVerdict":
        return cls(is_likely_to_play=False, reason=reason, last_checked=checked_at)

    @classmethod
    def failed(cls, error: BaseException, checked_at: datetime) -> "AvailabilityVerdict":
        """Degraded verdict used when parsing a page blew up."""
        return cls.unavailable(f"Error: {error}", checked_at)

    def to_response(self) -> dict:
        """JSON-ready dict: isLikelyToPlay, reason (omitted when None), lastChecked."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CachedPage(BaseModel):
    """Raw roster page content as last fetched."""
    model_config = ConfigDict(frozen=True)

    url: str
    content: str
    fetched_at: datetime


class VerdictKey(BaseModel):
    """
    Composite VerdictCache key.

    canonical_name is always the lower-cased NameMapper result, so two
    spellings of the same athlete resolve to the same key.
    """
    model_config = ConfigDict(frozen=True)

    url: str
    canonical_name: str
    filter_type: str = NO_FILTER

    def __str__(self) -> str:
        return f"{self.url}|{self.canonical_name}|{self.filter_type}"


class VerdictCacheEntry(BaseModel):
    """One cached verdict plus the time it was computed."""
    model_config = ConfigDict(frozen=True)

    key: VerdictKey
    verdict: AvailabilityVerdict
    computed_at: datetime


# --- Batch check models ---

class RosterQuery(BaseModel):
    """One player to check: caller-side id, display name and roster page URL."""
    player_id: str
    name: str
    url: str


class AvailabilityReport(BaseModel):
    """Result of RosterStatusService.check_squad()."""
    availability: dict[str, AvailabilityVerdict] = Field(default_factory=dict)
    unavailable_players: list[str] = Field(default_factory=list)

    def to_response(self) -> dict:
        return {
            "availabilityMap": {
                player_id: verdict.to_response()
                for player_id, verdict in self.availability.items()
            },
            "unavailablePlayers": list(self.unavailable_players),
        }
