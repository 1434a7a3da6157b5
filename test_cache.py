"""
Tests for the time-boxed caches, name aliasing and settings.
"""

from datetime import timedelta

import pytest

from roster_status.cache import PageCache, VerdictCache
from roster_status.config import DEFAULT_INJURY_MARKERS, Settings
from roster_status.filters import GESETZT_FILTER, STARTELF_FILTER
from roster_status.name_mapping import NameMapper
from roster_status.schemas import AvailabilityVerdict, INJURED_OR_SUSPENDED, VerdictKey

URL = "https://www.example.org/fc-beispiel/42/"


# ---------- PageCache ----------


def test_page_cache_returns_fresh_content(clock):
    cache = PageCache(timedelta(minutes=10), clock=clock)
    cache.put(URL, "<html>v1</html>")

    clock.advance(minutes=9, seconds=59)
    assert cache.get(URL) == "<html>v1</html>"


def test_page_cache_expires_once_age_reaches_duration(clock):
    cache = PageCache(timedelta(minutes=10), clock=clock)
    cache.put(URL, "<html>v1</html>")

    clock.advance(minutes=10)
    assert cache.get(URL) is None
    # Expired pages are not purged, only superseded
    assert cache.size() == 1


def test_page_cache_put_supersedes_expired_entry(clock):
    cache = PageCache(timedelta(minutes=10), clock=clock)
    cache.put(URL, "<html>v1</html>")
    clock.advance(minutes=30)

    cache.put(URL, "<html>v2</html>")
    assert cache.get(URL) == "<html>v2</html>"
    assert cache.keys() == [URL]


def test_page_cache_miss_and_clear(clock):
    cache = PageCache(clock=clock)
    assert cache.get(URL) is None

    cache.put(URL, "a")
    cache.put(URL + "other", "b")
    assert len(cache) == 2
    assert cache.clear() == 2
    assert cache.size() == 0


# ---------- VerdictCache ----------


def test_alias_spellings_share_one_cache_slot(clock):
    """Caller spelling "T. Horn" and page spelling "Horn" resolve to the same entry."""
    cache = VerdictCache(name_mapper=NameMapper(), clock=clock)
    verdict = AvailabilityVerdict.available(clock())

    cache.put(URL, "Horn", verdict)

    assert cache.get(URL, "T. Horn") == verdict
    assert cache.get(URL, "  t. horn ") == verdict
    assert cache.get(URL, "HORN") == verdict
    assert cache.build_key(URL, "T. Horn") == cache.build_key(URL, "horn")
    assert cache.size() == 1


def test_stale_entries_follow_allow_stale(clock):
    cache = VerdictCache(timedelta(minutes=5), clock=clock)
    verdict = AvailabilityVerdict.unavailable(INJURED_OR_SUSPENDED, clock())
    cache.put(URL, "Mueller", verdict)

    clock.advance(minutes=4)
    assert cache.get(URL, "Mueller", allow_stale=False) == verdict

    clock.advance(minutes=1)
    assert cache.get(URL, "Mueller", allow_stale=False) is None
    assert cache.get(URL, "Mueller", allow_stale=True) == verdict


def test_missing_entry_is_none_even_when_stale_allowed(clock):
    cache = VerdictCache(clock=clock)
    assert cache.get(URL, "Niemand", allow_stale=True) is None


def test_filter_variants_are_separate_keys(clock):
    cache = VerdictCache(clock=clock)
    available = AvailabilityVerdict.available(clock())
    cache.put(URL, "Horn", available)
    cache.put(URL, "Horn", available, STARTELF_FILTER)

    assert cache.get(URL, "Horn", GESETZT_FILTER) is None
    assert {key.filter_type for key in cache.keys()} == {"none", "STARTELF"}
    assert str(cache.build_key(URL, "Horn", STARTELF_FILTER)) == f"{URL}|horn|STARTELF"


def test_put_replaces_previous_verdict(clock):
    cache = VerdictCache(clock=clock)
    cache.put(URL, "Horn", AvailabilityVerdict.available(clock()))
    clock.advance(minutes=1)
    injured = AvailabilityVerdict.unavailable(INJURED_OR_SUSPENDED, clock())

    key = cache.put(URL, "Horn", injured)

    assert cache.get(URL, "Horn") == injured
    assert cache.get_entry(key).computed_at == clock()
    assert cache.size() == 1


def test_blank_names_are_not_cached(clock):
    cache = VerdictCache(clock=clock)
    assert cache.put(URL, "   ", AvailabilityVerdict.available(clock())) is None
    assert cache.size() == 0


def test_explicit_computed_at_is_kept(clock):
    cache = VerdictCache(timedelta(minutes=5), clock=clock)
    earlier = clock() - timedelta(minutes=10)
    key = cache.put(URL, "Xavi", AvailabilityVerdict.available(earlier), computed_at=earlier)

    assert cache.get_entry(key).computed_at == earlier
    assert cache.get(URL, "Xavi") is None


# ---------- NameMapper ----------


def test_canonicalize_is_case_insensitive_and_trimmed():
    mapper = NameMapper()
    assert mapper.canonicalize("T. Horn") == "Horn"
    assert mapper.canonicalize("  t. HORN  ") == "Horn"
    assert mapper.canonicalize("simons") == "Xavi"


def test_unknown_names_pass_through_unchanged():
    mapper = NameMapper()
    assert mapper.canonicalize("Mueller ") == "Mueller "
    assert mapper.canonical_key("Mueller ") == "mueller"


def test_same_athlete():
    mapper = NameMapper()
    assert mapper.same_athlete("Simons", "xavi")
    assert mapper.same_athlete("Horn", "T. HORN")
    assert not mapper.same_athlete("Horn", "Mueller")


def test_extra_aliases_extend_defaults():
    mapper = NameMapper({"J. Kimmich": "Kimmich"})
    assert mapper.canonicalize("j. kimmich") == "Kimmich"
    assert mapper.canonicalize("T. Horn") == "Horn"
    assert mapper.search_names("J. Kimmich") == ["j. kimmich", "kimmich"]
    assert mapper.search_names("Kimmich") == ["kimmich"]


def test_verdict_key_is_hashable_and_comparable():
    a = VerdictKey(url=URL, canonical_name="horn")
    b = VerdictKey(url=URL, canonical_name="horn", filter_type="none")
    assert a == b
    assert len({a, b}) == 1


# ---------- Settings ----------


def test_settings_defaults():
    settings = Settings()
    assert settings.page_cache_duration == timedelta(minutes=10)
    assert settings.verdict_cache_duration == timedelta(minutes=5)
    assert settings.injury_markers == DEFAULT_INJURY_MARKERS
    assert settings.reduce_markup is False


def test_settings_from_env():
    settings = Settings.from_env({
        "ROSTER_PAGE_CACHE_MINUTES": "60",
        "ROSTER_VERDICT_CACHE_MINUTES": "15",
        "ROSTER_RETRY_COUNT": "0",
        "ROSTER_INJURY_MARKERS": "Verletzt, Reha ,,Gelbsperre",
        "ROSTER_REDUCE_MARKUP": "yes",
        "ROSTER_LOG_LEVEL": "debug",
    })
    assert settings.page_cache_duration == timedelta(minutes=60)
    assert settings.verdict_cache_duration == timedelta(minutes=15)
    assert settings.retry_count == 0
    assert settings.injury_markers == ["Verletzt", "Reha", "Gelbsperre"]
    assert settings.reduce_markup is True
    assert settings.log_level_value == 10


def test_settings_reject_empty_marker_list():
    with pytest.raises(ValueError):
        Settings(injury_markers=[" ", ""])
