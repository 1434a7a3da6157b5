"""
In-memory, time-boxed caches for roster pages and player verdicts.

PageCache:    url -> raw page content
VerdictCache: (url, canonical name, filter type) -> AvailabilityVerdict

Both are plain objects constructed once and passed to whatever needs them,
so tests can build isolated instances. Expired rows are never purged; they
are superseded by the next put() for the same key. Each cache guards its
dict with a lock and every write is a single upsert (last writer wins).
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .filters import MarkupFilter, filter_key
from .logger import get_module_logger
from .name_mapping import NameMapper
from .schemas import AvailabilityVerdict, CachedPage, VerdictCacheEntry, VerdictKey

logger = get_module_logger("cache")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PageCache:
    """Raw HTML keyed by URL, valid for a fixed duration after fetching."""

    def __init__(self, duration: timedelta = timedelta(minutes=10), clock: Clock = utc_now):
        self.duration = duration
        self._clock = clock
        self._pages: dict[str, CachedPage] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> Optional[str]:
        """
        Return cached content for url, or None if missing or expired.

        An entry is expired once its age reaches the configured duration.
        """
        now = self._clock()
        with self._lock:
            page = self._pages.get(url)
            size = len(self._pages)

        if page is None:
            logger.info(f"Page cache miss for {url} (not cached, cache size: {size})")
            return None

        age = now - page.fetched_at
        if age < self.duration:
            expires_in = self.duration - age
            logger.info(
                f"Page cache hit for {url} (age: {age.total_seconds():.0f}s, "
                f"expires in: {expires_in.total_seconds():.0f}s)"
            )
            return page.content

        logger.info(
            f"Page cache expired for {url} (age: {age.total_seconds():.0f}s, "
            f"expired {(age - self.duration).total_seconds():.0f}s ago)"
        )
        return None

    def put(self, url: str, content: str) -> CachedPage:
        page = CachedPage(url=url, content=content, fetched_at=self._clock())
        with self._lock:
            self._pages[url] = page
            size = len(self._pages)
        logger.info(f"Cached raw page for {url} (cache size now: {size})")
        return page

    def size(self) -> int:
        with self._lock:
            return len(self._pages)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._pages)

    def clear(self) -> int:
        """Drop every page. Returns the number of pages removed."""
        with self._lock:
            count = len(self._pages)
            self._pages.clear()
        logger.info(f"Cleared {count} cached pages")
        return count

    def __len__(self) -> int:
        return self.size()


class VerdictCache:
    """
    Derived availability verdicts keyed by page, canonical athlete and filter.

    Names are resolved through the NameMapper before building a key, so the
    caller's spelling and the roster page's spelling share one slot.
    """

    def __init__(
        self,
        duration: timedelta = timedelta(minutes=5),
        name_mapper: Optional[NameMapper] = None,
        clock: Clock = utc_now
    ):
        self.duration = duration
        self.name_mapper = name_mapper if name_mapper is not None else NameMapper()
        self._clock = clock
        self._entries: dict[VerdictKey, VerdictCacheEntry] = {}
        self._lock = threading.Lock()

    def build_key(
        self,
        url: str,
        player_name: str,
        markup_filter: Optional[MarkupFilter] = None
    ) -> VerdictKey:
        return VerdictKey(
            url=url,
            canonical_name=self.name_mapper.canonical_key(player_name),
            filter_type=filter_key(markup_filter)
        )

    def get_entry(self, key: VerdictKey) -> Optional[VerdictCacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def get(
        self,
        url: str,
        player_name: str,
        markup_filter: Optional[MarkupFilter] = None,
        allow_stale: bool = False
    ) -> Optional[AvailabilityVerdict]:
        """
        Look up a verdict.

        Args:
            url: Roster page URL
            player_name: Any spelling of the athlete's name
            markup_filter: Filter variant, or None
            allow_stale: Return an expired verdict instead of None

        Returns:
            The verdict, or None on a miss (or on an expired entry when
            allow_stale is False)
        """
        key = self.build_key(url, player_name, markup_filter)
        entry = self.get_entry(key)
        filter_name = key.filter_type

        if entry is None:
            canonical = self.name_mapper.canonicalize(player_name)
            mapped = f" (mapped to: {canonical})" if canonical != player_name else ""
            logger.warning(
                f"Verdict cache MISS for {player_name}{mapped} "
                f"(filter: {filter_name}, key: {key})"
            )
            return None

        age = self._clock() - entry.computed_at
        if age >= self.duration:
            logger.warning(
                f"Verdict cache expired for {player_name} "
                f"(filter: {filter_name}, age: {age.total_seconds():.0f}s, "
                f"returning stale: {allow_stale})"
            )
            return entry.verdict if allow_stale else None

        logger.info(
            f"Verdict cache hit for {player_name} "
            f"(filter: {filter_name}, age: {age.total_seconds():.0f}s)"
        )
        return entry.verdict

    def put(
        self,
        url: str,
        player_name: str,
        verdict: AvailabilityVerdict,
        markup_filter: Optional[MarkupFilter] = None,
        computed_at: Optional[datetime] = None
    ) -> Optional[VerdictKey]:
        """
        Store a verdict, replacing any previous one under the same key.

        Returns:
            The key written, or None if player_name is blank
        """
        if not player_name or not player_name.strip():
            logger.warning("Attempted to cache a verdict for an empty player name, skipping")
            return None

        key = self.build_key(url, player_name, markup_filter)
        entry = VerdictCacheEntry(
            key=key,
            verdict=verdict,
            computed_at=computed_at or self._clock()
        )
        with self._lock:
            self._entries[key] = entry

        reason = f", reason={verdict.reason}" if verdict.reason else ""
        logger.debug(
            f"Caching verdict for {player_name} [{key.filter_type}]: "
            f"is_likely_to_play={verdict.is_likely_to_play}{reason} (key: {key})"
        )
        return key

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[VerdictKey]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> int:
        """Drop every verdict. Returns the number of entries removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cached verdicts")
        return count

    def __len__(self) -> int:
        return self.size()
