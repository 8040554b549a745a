"""Tests for EpisodeDeliveryTask."""
from unittest.mock import AsyncMock

import pytest

from vinime_bot.media import DownloadResult
from vinime_bot.models import StreamEntry, VideoInfo
from vinime_bot.tasks import EpisodeDeliveryTask

DIRECT = VideoInfo(streams=[StreamEntry(resolution="720p", direct_link="https://pixeldrain.com/u/ep1", provider_label="Pdrain")])


def make_task(video, relay=None, uploader=None, **kwargs) -> EpisodeDeliveryTask:
    relay = relay or AsyncMock()
    uploader = uploader or AsyncMock()
    return EpisodeDeliveryTask(relay, uploader, 42, video, title="Naruto Ep 1", file_stem="naruto_1", **kwargs)


class StatusLog:
    """Status callback that records every message."""

    def __init__(self) -> None:
        self.messages = []

    async def __call__(self, text: str) -> None:
        self.messages.append(text)


@pytest.mark.asyncio()
async def test_downloads_and_uploads(tmp_path) -> None:
    path = tmp_path / "naruto_1_720p.mp4"
    path.write_bytes(b"video")
    relay = AsyncMock()
    relay.probe_size.return_value = 5
    relay.download.return_value = DownloadResult(str(path), 5, "video/mp4", success=True)
    task = make_task(DIRECT, relay=relay)
    status = StatusLog()

    assert await task.run(status) is True

    relay.download.assert_awaited_once_with("https://pixeldrain.com/api/file/ep1", "naruto_1_720p.mp4", 2000 * 1024 * 1024)
    task.uploader.upload_media.assert_awaited_once()
    assert task.uploader.upload_media.await_args.args[:2] == (42, str(path))
    assert status.messages[0].startswith("⏳ Mendownload Naruto Ep 1 (720p")
    assert not path.exists()


@pytest.mark.asyncio()
async def test_too_large_sends_link_without_downloading() -> None:
    relay = AsyncMock()
    relay.probe_size.return_value = 60 * 1024 * 1024
    task = make_task(DIRECT, relay=relay, max_upload_mb=50)
    status = StatusLog()

    assert await task.run(status) is False

    relay.download.assert_not_awaited()
    assert "terlalu besar" in status.messages[-1]
    assert "https://pixeldrain.com/api/file/ep1" in status.messages[-1]


@pytest.mark.asyncio()
async def test_failed_download_offers_link() -> None:
    relay = AsyncMock()
    relay.probe_size.return_value = 0
    relay.download.return_value = DownloadResult(None, 0, reason="HTTP 403")
    status = StatusLog()

    assert await make_task(DIRECT, relay=relay).run(status) is False

    assert "Gagal mendownload" in status.messages[-1]


@pytest.mark.asyncio()
async def test_upload_failure_keeps_link_and_cleans_up(tmp_path) -> None:
    path = tmp_path / "f.mp4"
    path.write_bytes(b"v")
    relay = AsyncMock()
    relay.probe_size.return_value = 1
    relay.download.return_value = DownloadResult(str(path), 1, success=True)
    uploader = AsyncMock()
    uploader.upload_media.side_effect = RuntimeError("flood wait")
    status = StatusLog()

    assert await make_task(DIRECT, relay=relay, uploader=uploader).run(status) is False

    assert "Gagal upload" in status.messages[-1]
    assert not path.exists()


@pytest.mark.asyncio()
async def test_landing_pages_are_listed_as_links() -> None:
    video = VideoInfo(streams=[
        StreamEntry(resolution="480p", direct_link="https://mega.nz/file/a", provider_label="Mega"),
        StreamEntry(resolution="720p", direct_link="https://gofile.io/d/b", provider_label="Gofile"),
    ])
    status = StatusLog()

    assert await make_task(video).run(status) is False

    assert "Link Download" in status.messages[-1]
    assert "Mega (480p)" in status.messages[-1]
    assert "Gofile (720p)" in status.messages[-1]


@pytest.mark.asyncio()
async def test_embedded_mirrors_are_resolved() -> None:
    video = VideoInfo(streams=[
        StreamEntry(resolution="480p", provider_label="ondesu", is_embedded_mirror=True, embed_payload={"id": 1}),
        StreamEntry(resolution="720p", provider_label="broken", is_embedded_mirror=True, embed_payload={"id": 2}),
    ])
    resolver = AsyncMock(side_effect=["https://desustream.info/embed/1", None])
    status = StatusLog()

    assert await make_task(video, mirror_resolver=resolver).run(status) is False

    assert "Link Streaming" in status.messages[-1]
    assert "https://desustream.info/embed/1" in status.messages[-1]
    assert "broken" not in status.messages[-1]


@pytest.mark.asyncio()
async def test_nothing_to_offer() -> None:
    video = VideoInfo(streams=[StreamEntry(resolution="480p", is_embedded_mirror=True, embed_payload={"id": 1})])
    status = StatusLog()

    assert await make_task(video).run(status) is False

    assert "Tidak ada link video" in status.messages[-1]


@pytest.mark.asyncio()
async def test_falsy_callback_still_receives_status() -> None:
    class EmptyLog(list):
        async def __call__(self, text: str) -> None:
            self.append(text)

    status = EmptyLog()
    assert not status

    await make_task(VideoInfo()).run(status)

    assert status == ["😔 Tidak ada link video untuk Naruto Ep 1."]
