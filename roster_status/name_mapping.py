"""
Athlete name aliasing between the caller's data source and the roster site.

The caller (fantasy platform) and the roster pages sometimes spell the same
athlete differently. Every cache key and every in-markup match goes through
NameMapper.canonicalize() so both spellings land on the same cache slot.
"""

from typing import Mapping, Optional

# Caller spelling -> roster site spelling
DEFAULT_NAME_ALIASES: dict[str, str] = {
    "T. Horn": "Horn",
    "Simons": "Xavi",
}


class NameMapper:
    """Case-insensitive, whitespace-tolerant alias lookup."""

    def __init__(self, aliases: Optional[Mapping[str, str]] = None):
        """
        Args:
            aliases: Extra source -> target aliases, merged over the defaults
        """
        table = dict(DEFAULT_NAME_ALIASES)
        if aliases:
            table.update(aliases)
        self._aliases = {
            source.strip().lower(): target.strip()
            for source, target in table.items()
        }

    @property
    def aliases(self) -> dict[str, str]:
        return dict(self._aliases)

    def canonicalize(self, name: str) -> str:
        """Return the roster site spelling for name, or name unchanged."""
        return self._aliases.get(name.strip().lower(), name)

    def canonical_key(self, name: str) -> str:
        """Lower-cased canonical name, as used inside VerdictKey."""
        return self.canonicalize(name).strip().lower()

    def same_athlete(self, name_a: str, name_b: str) -> bool:
        return self.canonical_key(name_a) == self.canonical_key(name_b)

    def search_names(self, name: str) -> list[str]:
        """
        Lower-cased spellings to look for in markup: the raw name first,
        then the canonical name when it differs.
        """
        raw = name.strip().lower()
        canonical = self.canonical_key(name)
        names = [raw] if raw else []
        if canonical and canonical != raw:
            names.append(canonical)
        return names
