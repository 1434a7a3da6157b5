"""
Roster page parser: turns a team page into availability verdicts.

Two entry points:
  parse_one()  - verdict for one requested athlete and one filter variant
  parse_all()  - bulk preparse: every in-container roster node x every
                 requested filter variant (plus "no filter"), written to
                 VerdictCache with one shared timestamp

Both share the same node selection (div.player_name inside the lineup
container), the same filter semantics and the same classifier, so a
preparsed verdict always equals what parse_one() would return for that
node's own name.
"""

import time
from datetime import datetime
from typing import Iterable, Optional

from bs4 import BeautifulSoup, Tag

from .cache import Clock, VerdictCache, utc_now
from .classifier import ROSTER_NAME_SELECTOR, StatusClassifier
from .filters import MarkupFilter, filter_key, matches, text_content
from .logger import get_module_logger
from .name_mapping import NameMapper
from .preprocessor import Preprocessor
from .schemas import AvailabilityVerdict, NOT_IN_SQUAD

logger = get_module_logger("parser")


class RosterParser:
    """Parses roster pages with StatusClassifier and markup filters."""

    def __init__(
        self,
        verdict_cache: VerdictCache,
        classifier: Optional[StatusClassifier] = None,
        name_mapper: Optional[NameMapper] = None,
        preprocessor: Optional[Preprocessor] = None,
        reduce_markup: bool = False,
        clock: Clock = utc_now
    ):
        """
        Args:
            verdict_cache: Where parse_all() writes its verdicts
            classifier: Status classifier (default marker terms if omitted)
            name_mapper: Alias table; defaults to the verdict cache's mapper
                so keys and markup matching agree
            preprocessor: Tree builder / page reducer
            reduce_markup: Drop scripts, styles and comments from the parsed tree
            clock: Source of verdict timestamps
        """
        self.verdict_cache = verdict_cache
        self.classifier = classifier or StatusClassifier()
        self.name_mapper = name_mapper or verdict_cache.name_mapper
        self.preprocessor = preprocessor or Preprocessor()
        self.reduce_markup = reduce_markup
        self._clock = clock

    def _load(self, html: str) -> BeautifulSoup:
        soup = self.preprocessor.make_soup(html)
        if self.reduce_markup:
            self.preprocessor.reduce(soup)
        return soup

    def _lineup_nodes(self, soup: BeautifulSoup) -> list[Tag]:
        """Roster-name nodes inside the lineup container, in document order."""
        nodes = []
        for node in soup.select(ROSTER_NAME_SELECTOR):
            if self.classifier.in_lineup_container(node):
                nodes.append(node)
            else:
                logger.debug(f"Skipping {text_content(node).strip()!r}: outside lineup container")
        return nodes

    def parse_one(
        self,
        html: str,
        player_name: str,
        markup_filter: Optional[MarkupFilter] = None
    ) -> AvailabilityVerdict:
        """
        Determine one athlete's availability from a roster page.

        The first in-container, filter-matching node whose text contains (or
        is contained in) the raw or canonical name decides the verdict.

        Args:
            html: Roster page HTML
            player_name: Caller's spelling of the athlete's name
            markup_filter: Filter variant, or None

        Returns:
            Available, injured/suspended, not in squad, or an "Error: ..."
            verdict if the page could not be parsed
        """
        started = time.perf_counter()
        now = self._clock()
        filter_name = filter_key(markup_filter)

        try:
            canonical = self.name_mapper.canonicalize(player_name)
            if canonical != player_name:
                logger.info(f"Parsing roster page for {player_name} (mapped to: {canonical})")
            else:
                logger.info(f"Parsing roster page for {player_name}")

            search_names = self.name_mapper.search_names(player_name)
            html_lower = html.lower()
            if not search_names or not any(name in html_lower for name in search_names):
                logger.warning(f"Player {player_name} not found in page (quick check)")
                return AvailabilityVerdict.unavailable(NOT_IN_SQUAD, now)

            soup = self._load(html)
            candidates = [
                node for node in self._lineup_nodes(soup)
                if matches(node, markup_filter)
            ]
            logger.info(f"Found {len(candidates)} roster nodes (filter: {filter_name})")

            for node in candidates:
                node_name = text_content(node).strip().lower()
                if not node_name:
                    continue
                if not any(name in node_name or node_name in name for name in search_names):
                    continue

                verdict = self.classifier.classify(node, now)
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info(f"Parsing completed in {elapsed_ms:.2f}ms")
                return verdict

            logger.warning(f"Player {player_name} not found in roster (filter: {filter_name})")
            return AvailabilityVerdict.unavailable(NOT_IN_SQUAD, now)

        except Exception as e:
            logger.error(f"Error parsing status for {player_name}: {e}")
            return AvailabilityVerdict.failed(e, now)

    def parse_all(
        self,
        url: str,
        html: str,
        markup_filters: Iterable[MarkupFilter] = ()
    ) -> int:
        """
        Preparse a whole roster page into VerdictCache.

        Every in-container roster node is classified once per filter variant
        in markup_filters plus "no filter"; variants the node does not match
        are skipped. All entries from one call share the same timestamp.

        Args:
            url: Roster page URL (first component of every key written)
            html: Roster page HTML
            markup_filters: Filter variants to populate besides "no filter"

        Returns:
            Number of (node x filter) entries written
        """
        if not html:
            logger.error(f"Cannot preparse empty page content from {url}")
            return 0

        variants: list[Optional[MarkupFilter]] = []
        for markup_filter in markup_filters:
            if markup_filter not in variants:
                variants.append(markup_filter)
        variants.append(None)

        now: datetime = self._clock()
        logger.info(f"Preparsing roster from {url}")

        try:
            soup = self._load(html)
        except Exception as e:
            logger.error(f"Error preparsing roster from {url}: {e}")
            return 0

        nodes = soup.select(ROSTER_NAME_SELECTOR)
        logger.info(f"Found {len(nodes)} roster names on page")

        written = 0
        for node in nodes:
            try:
                written += self._preparse_node(url, node, variants, now)
            except Exception as e:
                # Name or container lookup failed, so there is no key to degrade
                logger.error(f"Error preparsing roster node from {url}: {e}")

        logger.info(
            f"Preparsed and cached {written} verdicts (incl. filter variants) from {url}"
        )
        return written

    def _preparse_node(
        self,
        url: str,
        node: Tag,
        variants: list[Optional[MarkupFilter]],
        now: datetime
    ) -> int:
        """
        Classify one node and cache it under every variant it is in scope for.

        If filter evaluation or classification raises, the node gets a
        degraded "Error: ..." verdict instead: under the variants it was
        found to match, or under "no filter" alone if matching itself failed.
        Nothing is written before the verdict is settled.

        Returns:
            Number of cache entries written
        """
        player_name = text_content(node).strip()
        if not self.classifier.in_lineup_container(node):
            logger.debug(f"Skipping {player_name!r}: outside lineup container")
            return 0
        if not player_name:
            return 0

        in_scope: list[Optional[MarkupFilter]] = [None]
        try:
            in_scope = [variant for variant in variants if matches(node, variant)]
            verdict = self.classifier.classify(node, now)
        except Exception as e:
            logger.error(f"Error preparsing {player_name!r} from {url}: {e}")
            verdict = AvailabilityVerdict.failed(e, now)

        written = 0
        for variant in in_scope:
            if self.verdict_cache.put(url, player_name, verdict, variant, now) is not None:
                written += 1
        return written
