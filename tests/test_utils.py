"""Tests for vinime_bot.utils."""
import pytest

from vinime_bot.utils import (
    collation_key,
    escape_html,
    format_size,
    genre_slug,
    origin_of,
    paginate,
    safe_filename,
    slug_from_url,
    to_abs_url,
    truncate,
)

ORIGIN = "https://otakudesu.cloud"


class TestToAbsUrl:
    @pytest.mark.parametrize(
        "href, expected",
        [
            ("", ""),
            ("https://cdn.example.com/a.jpg", "https://cdn.example.com/a.jpg"),
            ("http://example.com/x", "http://example.com/x"),
            ("/anime/naruto/", ORIGIN + "/anime/naruto/"),
            ("anime/naruto/", ORIGIN + "/anime/naruto/"),
            ("  /episode/x/  ", ORIGIN + "/episode/x/"),
        ],
    )
    def test_normalizes(self, href, expected) -> None:
        assert to_abs_url(href, ORIGIN) == expected

    def test_none_is_empty(self) -> None:
        assert to_abs_url(None, ORIGIN) == ""


def test_origin_and_slug() -> None:
    assert origin_of("https://otakudesu.cloud/anime/naruto/?x=1") == ORIGIN
    assert slug_from_url("https://otakudesu.cloud/anime/naruto-sub-indo/") == "naruto-sub-indo"


def test_genre_slug() -> None:
    assert genre_slug("https://otakudesu.cloud/genres/slice-of-life/") == "slice-of-life"
    assert genre_slug("/genres/action") == "action"
    assert genre_slug("/anime/naruto/") == ""
    assert genre_slug(None) == ""


class TestCollationKey:
    def test_case_and_accents_ignored(self) -> None:
        assert collation_key("Ángel Beats") == collation_key("angel beats")

    def test_orders_like_a_human(self) -> None:
        titles = ["Zetsuen", "Ángel Beats", "another", "Akame ga Kill"]
        assert sorted(titles, key=collation_key) == ["Akame ga Kill", "Ángel Beats", "another", "Zetsuen"]


class TestPaginate:
    def test_slices_and_counts(self) -> None:
        items, page, total = paginate(list(range(12)), 1, 5)
        assert items == [5, 6, 7, 8, 9]
        assert page == 1
        assert total == 3

    def test_clamps_page(self) -> None:
        items, page, total = paginate(list(range(12)), 99, 5)
        assert items == [10, 11]
        assert page == 2
        assert total == 3

    def test_empty(self) -> None:
        assert paginate([], 0, 5) == ([], 0, 1)


def test_text_helpers() -> None:
    assert escape_html('<b>"Tom & Jerry"</b>') == "&lt;b&gt;&quot;Tom &amp; Jerry&quot;&lt;/b&gt;"
    assert escape_html("") == ""
    assert truncate("abcdef", 3) == "abc..."
    assert truncate("abc", 3) == "abc"
    assert safe_filename("Naruto: Ep 1/2.mp4") == "Naruto__Ep_1_2.mp4"


@pytest.mark.parametrize(
    "size, expected",
    [(512, "512 B"), (2048, "2.0 KB"), (5 * 1024 * 1024, "5.0 MB"), (3 * 1024 ** 3, "3.00 GB")],
)
def test_format_size(size, expected) -> None:
    assert format_size(size) == expected
