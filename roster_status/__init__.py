"""
Roster Status

Fetches team roster pages, decides whether a named athlete is likely to play,
and caches both the raw page and the derived verdict.
- PageCache / VerdictCache: time-boxed in-memory stores
- PageFetcher: PageCache-backed network retrieval
- RosterParser: single lookup and bulk preparse over a page
- RosterStatusService: facade used by the routing layer

Public API surface:
  Service          - RosterStatusService, classify_player
  Components       - PageCache, VerdictCache, PageFetcher, HttpRetriever,
                     RosterParser, StatusClassifier, NameMapper, Preprocessor
  Filters          - MarkupFilter, FilterType, STARTELF_FILTER, GESETZT_FILTER,
                     FILTER_MAP, resolve_filter
  Data models      - AvailabilityVerdict, RosterQuery, AvailabilityReport
  Configuration    - Settings
  Error types      - RosterStatusError, FetchError, MarkupParseError, UnknownFilterError
"""

# --- Facade ---
from .main import RosterStatusService, classify_player

# --- Components (injectable) ---
from .cache import PageCache, VerdictCache
from .fetcher import HttpRetriever, PageFetcher
from .parser import RosterParser
from .classifier import StatusClassifier
from .name_mapping import NameMapper
from .preprocessor import Preprocessor

# --- Filters ---
from .filters import (
    FILTER_MAP,
    GESETZT_FILTER,
    STARTELF_FILTER,
    FilterType,
    MarkupFilter,
    resolve_filter,
)

# --- Data models ---
from .schemas import (
    INJURED_OR_SUSPENDED,
    NOT_IN_SQUAD,
    NOT_PRECACHED,
    AvailabilityReport,
    AvailabilityVerdict,
    RosterQuery,
)

from .config import Settings

# --- Exceptions ---
from .exceptions import FetchError, MarkupParseError, RosterStatusError, UnknownFilterError

__version__ = "0.1.0"
__all__ = [
    "RosterStatusService",
    "classify_player",
    "PageCache",
    "VerdictCache",
    "HttpRetriever",
    "PageFetcher",
    "RosterParser",
    "StatusClassifier",
    "NameMapper",
    "Preprocessor",
    "FILTER_MAP",
    "GESETZT_FILTER",
    "STARTELF_FILTER",
    "FilterType",
    "MarkupFilter",
    "resolve_filter",
    "INJURED_OR_SUSPENDED",
    "NOT_IN_SQUAD",
    "NOT_PRECACHED",
    "AvailabilityReport",
    "AvailabilityVerdict",
    "RosterQuery",
    "Settings",
    "FetchError",
    "MarkupParseError",
    "RosterStatusError",
    "UnknownFilterError",
]
