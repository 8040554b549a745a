"""Tests for LinkRegistry."""
from vinime_bot.links import LinkRegistry

URL = "https://otakudesu.cloud/anime/a-very-long-anime-title-that-would-never-fit-in-callback-data-sub-indo/"


def test_key_is_short_and_stable() -> None:
    registry = LinkRegistry()
    key = registry.key_for(URL)

    assert len(key) == 12
    assert key == LinkRegistry.make_key(URL)
    assert registry.key_for(URL) == key
    assert registry.value_for(key) == URL
    assert len(registry) == 1


def test_unknown_key() -> None:
    assert LinkRegistry().value_for("deadbeef") is None


def test_least_recently_used_is_evicted() -> None:
    registry = LinkRegistry(max_size=2)
    first = registry.key_for("a")
    second = registry.key_for("b")
    registry.value_for(first)

    registry.key_for("c")

    assert registry.value_for(first) == "a"
    assert registry.value_for(second) is None
    assert len(registry) == 2
