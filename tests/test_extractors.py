"""Tests for the otakudesu HTML extractors."""
import base64
import json

import pytest

from vinime_bot.errors import DecodeError
from vinime_bot.extractors import (
    Extraction,
    decode_embed_payload,
    extractor,
    parse_anime_index,
    parse_detail,
    parse_genre_list,
    parse_genre_page,
    parse_latest,
    parse_movies,
    parse_recommended,
    parse_search_results,
    parse_video,
)

ORIGIN = "https://otakudesu.cloud"


def b64json(obj) -> str:
    return base64.b64encode(json.dumps(obj).encode()).decode()


HOME_HTML = """
<div class="venz"><ul>
  <li>
    <div class="epz"> Episode 12 </div>
    <div class="thumb"><a href="/anime/one-piece-sub-indo/">
      <img src="https://cdn.example.com/op.jpg"><h2 class="jdlflm">One Piece</h2>
    </a></div>
  </li>
  <li>
    <div class="epz">Episode 3</div>
    <div class="thumb"><a href="https://otakudesu.cloud/anime/frieren-sub-indo/">
      <img data-src="https://cdn.example.com/frieren.jpg"><h2 class="jdlflm">Sousou no Frieren</h2>
    </a></div>
  </li>
  <li><div class="thumb"><a href="/anime/untitled/"></a></div></li>
</ul></div>
"""

DETPOST_HTML = """
<div class="detpost">
  <a href="/anime/bocchi-sub-indo/"><img src="/img/bocchi.jpg"></a>
  <h2 class="jdlflm">Bocchi the Rock!</h2><div class="epz">Episode 12</div>
</div>
"""

SEARCH_HTML = """
<ul class="chivsrc">
  <li>
    <img src="https://cdn.example.com/naruto.jpg">
    <h2><a href="https://otakudesu.cloud/anime/naruto-sub-indo/">Naruto (Episode 1 – 220) Subtitle Indonesia</a></h2>
    <div class="set"><b>Genres</b> : Action, Adventure</div>
    <div class="set"><b>Status</b> : Completed</div>
  </li>
  <li>
    <h2><a href="/anime/naruto-shippuden-sub-indo/">Naruto Shippuden</a></h2>
    <div class="set"><b>Status</b> : Completed</div>
  </li>
</ul>
"""

MOVIES_HTML = """
<div class="venser"><div class="col"><ul>
  <li>
    <img src="https://cdn.example.com/kimi.jpg">
    <h2><a href="/anime/kimi-no-na-wa-movie/">Kimi no Na wa</a></h2>
    <div class="set">Movie</div>
  </li>
</ul></div></div>
"""

ANIME_INDEX_HTML = """
<div class="daftarkartun">
  <a class="hodebgst" href="/anime/akame-sub-indo/">Akame ga Kill</a>
  <a class="hodebgst" href="/anime/bleach-sub-indo/">Bleach</a>
  <a class="hodebgst" href="/anime/empty/"></a>
</div>
"""

DETAIL_HTML = """
<div class="venser">
  <div class="fotoanime"><img src="https://cdn.example.com/naruto-cover.jpg"></div>
  <div class="jdlrx"><h1>Naruto Subtitle Indonesia</h1></div>
  <div class="infozingle">
    <p><span><b>Judul</b>: Naruto</span></p>
    <p><span><b>Skor</b>: 7.99</span></p>
    <p><span><b>Tipe</b>: TV</span></p>
    <p><span><b>Status</b>: Completed</span></p>
    <p><span><b>Total Episode</b>: 220</span></p>
    <p><span><b>Durasi</b>: 23 min. per ep.</span></p>
    <p><span><b>Tanggal Rilis</b>: Oct 03, 2002</span></p>
    <p><span><b>Studio</b>: Studio Pierrot</span></p>
    <p><span><b>Genre</b>: <a href="/genres/action/">Action</a>, <a href="/genres/adventure/">Adventure</a></span></p>
  </div>
  <div class="sinopc"><p>Sinopsis: Naruto Uzumaki wants to be Hokage.</p></div>
  <div class="episodelist"><ul>
    <li><a href="/batch/naruto-batch/">Naruto Batch</a></li>
  </ul></div>
  <div class="episodelist"><ul>
    <li><a href="/episode/naruto-episode-220/">Naruto Episode 220</a></li>
    <li><a href="/episode/naruto-episode-219/">Naruto Episode 219</a></li>
    <li><a href="https://otakudesu.cloud/episode/naruto-episode-220/">Naruto Episode 220</a></li>
  </ul></div>
</div>
"""

DETAIL_EN_HTML = """
<h1 class="entry-title">Frieren</h1>
<div class="infozingle">
  <p>Score: 9.1</p>
  <p>Published: Sep 29, 2023</p>
  <p>Type: TV</p>
  <p>Episodes: 28</p>
  <p>Genres: Adventure, Drama, Fantasy</p>
</div>
"""

VIDEO_DIRECT_HTML = """
<div class="download"><ul>
  <li><strong>Mp4 360p</strong>
    <a href="https://pixeldrain.com/u/abc123">Pdrain</a>
    <a href="/relative/ignored">Local</a>
  </li>
  <li><strong>Mp4 720p</strong><a href="https://mega.nz/file/xyz">Mega</a></li>
  <li><strong>MKV</strong><a href="https://example.com/no-resolution">Nope</a></li>
</ul></div>
<div class="mirrorstream"><ul class="m480p">
  <li><a data-content="{payload}">desustream</a></li>
</ul></div>
"""

VIDEO_MIRROR_HTML = """
<div class="mirrorstream">
  <ul class="m360p">
    <li><a data-content="{good}">ondesu</a></li>
    <li><a data-content="%%%not-base64%%%">broken</a></li>
    <li><a data-content="{array}">array</a></li>
  </ul>
  <ul class="m720p"><li><a data-content="{good}">desudrive</a></li></ul>
</div>
"""

GENRE_LIST_HTML = """
<ul class="genres">
  <li><a href="/genres/romance/">Romance</a></li>
  <li><a href="/genres/action/">Action</a></li>
  <li><a href="https://otakudesu.cloud/genres/action/">Action</a></li>
  <li><a href="/genres/slice-of-life/">Slice of Life</a></li>
  <li><a href="/anime/not-a-genre/">Ignored</a></li>
</ul>
"""

GENRE_PAGE_HTML = """
<div class="col-anime-con">
  <div class="col-anime-title"><a href="/anime/akame-sub-indo/">Akame ga Kill</a></div>
  <div class="col-anime-rating">7.5</div>
  <div class="col-anime-eps">24 Eps</div>
  <div class="col-anime-cover"><img src="https://cdn.example.com/akame.jpg"></div>
</div>
<div class="col-anime-con">
  <div class="col-anime-title"><a href="/anime/bleach-sub-indo/">Bleach</a></div>
</div>
<div class="pagenavix">
  <span class="page-numbers current">1</span>
  <a class="page-numbers" href="/genres/action/page/2/">2</a>
  <span class="page-numbers dots">…</span>
  <a class="page-numbers" href="/genres/action/page/4/">4</a>
  <a class="next page-numbers" href="/genres/action/page/2/">Berikutnya »</a>
</div>
"""


class TestExtractorDecorator:
    def test_exception_becomes_empty(self) -> None:
        @extractor("boom")
        def boom(markup):
            raise ValueError("bad markup")

        result = boom("<html>")
        assert result.is_empty
        assert isinstance(result.error, ValueError)
        assert "bad markup" in result.reason

    def test_empty_list_is_empty(self) -> None:
        @extractor("nothing")
        def nothing(markup):
            return []

        assert nothing("").is_empty
        assert nothing("").unwrap_or(["default"]) == ["default"]

    def test_ok(self) -> None:
        assert Extraction.ok([1]).unwrap_or([]) == [1]


class TestListings:
    def test_latest_venz(self) -> None:
        items = parse_latest(HOME_HTML, ORIGIN).value
        assert [i.title for i in items] == ["One Piece", "Sousou no Frieren"]
        assert items[0].url == ORIGIN + "/anime/one-piece-sub-indo/"
        assert items[0].last_episode_label == "Episode 12"
        assert items[0].cover_url == "https://cdn.example.com/op.jpg"
        assert items[1].cover_url == "https://cdn.example.com/frieren.jpg"

    def test_latest_falls_back_to_detpost(self) -> None:
        items = parse_latest(DETPOST_HTML, ORIGIN).value
        assert len(items) == 1
        assert items[0].title == "Bocchi the Rock!"
        assert items[0].url == ORIGIN + "/anime/bocchi-sub-indo/"

    def test_recommended_uses_same_templates(self) -> None:
        assert len(parse_recommended(HOME_HTML, ORIGIN).value) == 2

    def test_no_records_is_empty(self) -> None:
        assert parse_latest("<html><body>maintenance</body></html>", ORIGIN).is_empty

    def test_search_results_carry_status(self) -> None:
        items = parse_search_results(SEARCH_HTML, ORIGIN).value
        assert len(items) == 2
        assert items[0].last_episode_label == "Completed"
        assert items[1].url == ORIGIN + "/anime/naruto-shippuden-sub-indo/"

    def test_search_falls_back_to_venz(self) -> None:
        assert len(parse_search_results(HOME_HTML, ORIGIN).value) == 2

    def test_movies(self) -> None:
        items = parse_movies(MOVIES_HTML, ORIGIN).value
        assert items[0].title == "Kimi no Na wa"
        assert items[0].last_episode_label == "Movie"

    def test_anime_index(self) -> None:
        entries = parse_anime_index(ANIME_INDEX_HTML, ORIGIN).value
        assert [e.title for e in entries] == ["Akame ga Kill", "Bleach"]
        assert entries[1].url == ORIGIN + "/anime/bleach-sub-indo/"


class TestDetail:
    def test_indonesian_labels(self) -> None:
        detail = parse_detail(DETAIL_HTML, ORIGIN).value
        assert detail.title == "Naruto Subtitle Indonesia"
        assert detail.rating == "7.99"
        assert detail.status == "Completed"
        assert detail.type == "TV"
        assert detail.studio == "Studio Pierrot"
        assert detail.release_date == "Oct 03, 2002"
        assert detail.duration_label == "23 min. per ep."
        assert detail.total_episode_label == "220"
        assert detail.genres == ["Action", "Adventure"]
        assert detail.synopsis == "Naruto Uzumaki wants to be Hokage."
        assert detail.cover_url == "https://cdn.example.com/naruto-cover.jpg"

    def test_episodes_skip_batch_and_duplicates(self) -> None:
        episodes = parse_detail(DETAIL_HTML, ORIGIN).value.episodes
        assert [e.label for e in episodes] == ["Naruto Episode 220", "Naruto Episode 219"]
        assert episodes[0].url == ORIGIN + "/episode/naruto-episode-220/"

    def test_english_labels(self) -> None:
        detail = parse_detail(DETAIL_EN_HTML, ORIGIN).value
        assert detail.title == "Frieren"
        assert detail.rating == "9.1"
        assert detail.release_date == "Sep 29, 2023"
        assert detail.total_episode_label == "28"
        assert detail.genres == ["Adventure", "Drama", "Fantasy"]
        assert detail.episodes == []

    def test_page_without_detail_is_empty(self) -> None:
        result = parse_detail("<html><p>404 not found</p></html>", ORIGIN)
        assert result.is_empty
        assert result.error is not None


class TestEmbedPayload:
    def test_decodes_object(self) -> None:
        assert decode_embed_payload(b64json({"id": 1, "i": 0, "q": "360p"})) == {"id": 1, "i": 0, "q": "360p"}

    def test_missing_padding(self) -> None:
        encoded = b64json({"id": 12}).rstrip("=")
        assert decode_embed_payload(encoded) == {"id": 12}

    @pytest.mark.parametrize("data", ["%%%", "", b64json([1, 2]), base64.b64encode(b"not json").decode()])
    def test_rejects_garbage(self, data) -> None:
        with pytest.raises(DecodeError):
            decode_embed_payload(data)


class TestVideo:
    def test_direct_links_win_over_mirrors(self) -> None:
        markup = VIDEO_DIRECT_HTML.replace("{payload}", b64json({"id": 1}))
        video = parse_video(markup).value
        assert [(s.resolution, s.direct_link) for s in video.streams] == [
            ("360p", "https://pixeldrain.com/u/abc123"),
            ("720p", "https://mega.nz/file/xyz"),
        ]
        assert not any(s.is_embedded_mirror for s in video.streams)
        assert video.available_resolutions == ["360p", "720p"]

    def test_mirrors_when_no_direct_links(self) -> None:
        markup = VIDEO_MIRROR_HTML.replace("{good}", b64json({"id": 7, "i": 0, "q": "360p"}))
        markup = markup.replace("{array}", b64json(["x"]))
        video = parse_video(markup).value
        assert [(s.resolution, s.provider_label) for s in video.streams] == [
            ("360p", "ondesu"),
            ("720p", "desudrive"),
        ]
        assert all(s.is_embedded_mirror and s.direct_link is None for s in video.streams)
        assert video.streams[0].embed_payload == {"id": 7, "i": 0, "q": "360p"}

    def test_page_without_streams_is_present_but_empty(self) -> None:
        result = parse_video("<div class='venser'>Segera hadir</div>")
        assert not result.is_empty
        assert result.value.streams == []
        assert result.value.available_resolutions == []


class TestGenres:
    def test_genre_list_sorted_and_deduplicated(self) -> None:
        genres = parse_genre_list(GENRE_LIST_HTML).value
        assert [(g.name, g.slug) for g in genres] == [
            ("Action", "action"),
            ("Romance", "romance"),
            ("Slice of Life", "slice-of-life"),
        ]

    def test_genre_page_total_pages(self) -> None:
        page = parse_genre_page(GENRE_PAGE_HTML, ORIGIN, page=2).value
        assert page.current_page == 2
        assert page.total_pages == 4
        assert page.items[0].rating == "7.5"
        assert page.items[0].status == "24 Eps"
        assert page.items[1].rating == "-"
        assert page.items[1].url == ORIGIN + "/anime/bleach-sub-indo/"

    def test_genre_page_without_pager(self) -> None:
        markup = GENRE_PAGE_HTML.split('<div class="pagenavix">')[0]
        assert parse_genre_page(markup, ORIGIN).value.total_pages == 1

    def test_genre_page_venz_fallback(self) -> None:
        page = parse_genre_page(HOME_HTML, ORIGIN).value
        assert [i.title for i in page.items] == ["One Piece", "Sousou no Frieren"]
        assert page.items[0].status == "Episode 12"
