"""
Service facade for the roster status package.

Wires PageCache, VerdictCache, PageFetcher and RosterParser together and
exposes the operations the routing layer calls:

    fetch_and_classify()  - cached verdict for one athlete (never fetches)
    preparse_roster()     - bulk-populate verdicts from page HTML
    refresh_roster()      - fetch (PageCache-backed) then preparse
    check_squad()         - fetch_and_classify() for a batch of players
    cache introspection   - page_cache_size/keys, verdict_cache_size, cache_status

Miss policy: a verdict cache miss answers with a fixed "not pre-cached"
verdict. Verdicts are only ever produced by preparse_roster() and
refresh_roster(); a lookup never triggers a fetch or a parse.
"""

from typing import Iterable, Mapping, Optional

from .cache import Clock, PageCache, VerdictCache, utc_now
from .classifier import StatusClassifier
from .config import Settings
from .fetcher import HttpRetriever, PageFetcher
from .filters import FILTER_MAP, MarkupFilter, filter_key, resolve_filter
from .logger import get_module_logger, setup_logger
from .name_mapping import NameMapper
from .parser import RosterParser
from .schemas import AvailabilityReport, AvailabilityVerdict, NOT_PRECACHED, RosterQuery

logger = get_module_logger("main")


class RosterStatusService:
    """
    Facade over the two-level roster cache.

    Construct once per process and share the instance; every collaborator
    can be injected for tests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        page_cache: Optional[PageCache] = None,
        verdict_cache: Optional[VerdictCache] = None,
        fetcher: Optional[PageFetcher] = None,
        parser: Optional[RosterParser] = None,
        name_aliases: Optional[Mapping[str, str]] = None,
        clock: Clock = utc_now,
        log_level: Optional[int] = None
    ):
        if log_level is not None:
            setup_logger(level=log_level)

        self.settings = settings or Settings()
        self._clock = clock

        # Caches are empty (and so falsy) when injected; compare against None.
        # An injected fetcher or parser brings its own cache along.
        if page_cache is None:
            page_cache = fetcher.page_cache if fetcher is not None else PageCache(
                self.settings.page_cache_duration, clock=clock
            )
        if verdict_cache is None:
            verdict_cache = parser.verdict_cache if parser is not None else VerdictCache(
                self.settings.verdict_cache_duration,
                name_mapper=NameMapper(name_aliases),
                clock=clock
            )
        self.page_cache = page_cache
        self.verdict_cache = verdict_cache

        if fetcher is None:
            fetcher = PageFetcher(
                self.page_cache,
                HttpRetriever(
                    user_agent=self.settings.user_agent,
                    timeout=self.settings.http_timeout,
                    retry_count=self.settings.retry_count,
                ),
            )
        if parser is None:
            parser = RosterParser(
                self.verdict_cache,
                classifier=StatusClassifier(self.settings.injury_markers),
                reduce_markup=self.settings.reduce_markup,
                clock=clock,
            )
        self.fetcher = fetcher
        self.parser = parser

        logger.info(
            f"RosterStatusService initialized (page cache: {self.settings.page_cache_minutes}min, "
            f"verdict cache: {self.settings.verdict_cache_minutes}min)"
        )

    # --- Single lookups ---

    def fetch_and_classify(
        self,
        url: str,
        player_name: str,
        markup_filter: Optional[MarkupFilter] = None
    ) -> AvailabilityVerdict:
        """
        Cached verdict for one athlete.

        Fresh and stale verdicts are both returned as-is. A miss returns the
        fixed "not pre-cached" verdict; population is the job of
        preparse_roster() / refresh_roster().
        """
        verdict = self.verdict_cache.get(url, player_name, markup_filter, allow_stale=True)
        if verdict is not None:
            return verdict

        logger.warning(
            f"No verdict for {player_name} (filter: {filter_key(markup_filter)}); "
            f"player might not exist, not match the filter, or preloading failed"
        )
        return AvailabilityVerdict.unavailable(NOT_PRECACHED, self._clock())

    def check_squad(
        self,
        queries: Iterable[RosterQuery],
        markup_filter: Optional[MarkupFilter] = None
    ) -> AvailabilityReport:
        """
        fetch_and_classify() for several players at once.

        Returns:
            Report mapping player_id to verdict, plus the names of everyone
            not likely to play
        """
        report = AvailabilityReport()
        for query in queries:
            verdict = self.fetch_and_classify(query.url, query.name, markup_filter)
            report.availability[query.player_id] = verdict
            if not verdict.is_likely_to_play:
                report.unavailable_players.append(query.name)
                logger.warning(f"Player {query.name} unavailable: {verdict.reason}")

        logger.info(
            f"Checked {len(report.availability)} players, "
            f"{len(report.unavailable_players)} unavailable"
        )
        return report

    # --- Population ---

    def preparse_roster(
        self,
        url: str,
        html: str,
        markup_filters: Optional[Iterable[MarkupFilter]] = None
    ) -> int:
        """
        Bulk-populate verdicts for every athlete on a roster page.

        Args:
            url: Roster page URL
            html: The page's HTML
            markup_filters: Filter variants to populate besides "no filter"
                (defaults to every known filter)

        Returns:
            Number of verdicts written
        """
        if markup_filters is None:
            markup_filters = FILTER_MAP.values()
        return self.parser.parse_all(url, html, markup_filters)

    def refresh_roster(
        self,
        url: str,
        markup_filters: Optional[Iterable[MarkupFilter]] = None
    ) -> int:
        """
        Fetch a roster page (PageCache-backed) and preparse it.

        Returns:
            Number of verdicts written, 0 if the page could not be fetched
        """
        html = self.fetcher.fetch(url)
        if html is None:
            logger.error(f"Could not fetch roster page {url}; verdicts left unchanged")
            return 0
        return self.preparse_roster(url, html, markup_filters)

    # --- Direct access to the lower layers ---

    def fetch_page(self, url: str) -> Optional[str]:
        return self.fetcher.fetch(url)

    def parse_player(
        self,
        html: str,
        player_name: str,
        markup_filter: Optional[MarkupFilter] = None
    ) -> AvailabilityVerdict:
        return self.parser.parse_one(html, player_name, markup_filter)

    # --- Monitoring ---

    def page_cache_size(self) -> int:
        return self.page_cache.size()

    def verdict_cache_size(self) -> int:
        return self.verdict_cache.size()

    def page_cache_keys(self) -> list[str]:
        return self.page_cache.keys()

    def cache_status(self) -> dict:
        """Snapshot for monitoring endpoints."""
        return {
            "pageCache": {
                "size": self.page_cache_size(),
                "keys": self.page_cache_keys(),
            },
            "verdictCache": {
                "size": self.verdict_cache_size(),
            },
            "timestamp": self._clock().isoformat(),
        }

    def close(self) -> None:
        """Release the HTTP client."""
        self.fetcher.retriever.close()


def classify_player(
    html: str,
    player_name: str,
    filter_name: Optional[str] = None
) -> AvailabilityVerdict:
    """Convenience function: classify one player on a page without any caching service."""
    parser = RosterParser(VerdictCache())
    return parser.parse_one(html, player_name, resolve_filter(filter_name))
