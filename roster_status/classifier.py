"""
Status classification for a single roster-name node.

A node is classified by the nearest enclosing <section>: roster pages group
injured, doubtful and suspended players under headed sections, so marker
terms anywhere in that section's text mean the player is out.

Only nodes inside the lineup container (div.stadium_container_bg) belong to
the matchday roster; bench and reserve listings elsewhere on the page are
ignored by both single lookups and bulk preparse.
"""

import re
from datetime import datetime
from typing import Iterable, Optional

from bs4 import Tag

from .config import DEFAULT_INJURY_MARKERS
from .filters import closest, text_content
from .schemas import AvailabilityVerdict, INJURED_OR_SUSPENDED

ROSTER_NAME_SELECTOR = "div.player_name"
LINEUP_CONTAINER_SELECTOR = "div.stadium_container_bg"
SECTION_SELECTOR = "section"


class StatusClassifier:
    """Classifies roster-name nodes as available or injured/suspended."""

    def __init__(self, injury_markers: Optional[Iterable[str]] = None):
        markers = [m.strip() for m in (injury_markers or DEFAULT_INJURY_MARKERS) if m.strip()]
        if not markers:
            raise ValueError("StatusClassifier needs at least one marker term")
        self.injury_markers = markers
        self._marker_pattern = re.compile(
            "|".join(re.escape(m) for m in markers),
            re.IGNORECASE
        )

    def in_lineup_container(self, element: Tag) -> bool:
        return closest(element, LINEUP_CONTAINER_SELECTOR) is not None

    def is_injured_or_suspended(self, element: Tag) -> bool:
        section = closest(element, SECTION_SELECTOR)
        if section is None:
            return False
        return self._marker_pattern.search(text_content(section)) is not None

    def classify(self, element: Tag, checked_at: datetime) -> AvailabilityVerdict:
        """
        Classify one roster-name node.

        Args:
            element: The roster-name node (already known to be in the lineup container)
            checked_at: Timestamp stamped onto the verdict

        Returns:
            Unavailable with the injury/suspension reason, or available
        """
        if self.is_injured_or_suspended(element):
            return AvailabilityVerdict.unavailable(INJURED_OR_SUSPENDED, checked_at)
        return AvailabilityVerdict.available(checked_at)
