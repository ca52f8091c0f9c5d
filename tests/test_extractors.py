"""Extractor tests.

Tests cover track selection, error classification and the per-platform
URL building of the yt-dlp backed extractors. All tests use mocked yt-dlp.
"""

from unittest.mock import MagicMock, patch

import pytest
import yt_dlp

from subtitle_service import extractors
from subtitle_service.config import Settings
from subtitle_service.extractors import SubtitleExtractor, classify_download_error, select_subtitle_track
from subtitle_service.outcomes import ExtractorResult
from subtitle_service.params import (
    Dispatcher,
    LoomParams,
    RutubeParams,
    TiktokParams,
    TwitterParams,
    VimeoParams,
    VkParams,
    YoutubeParams,
)

INFO = {
    "id": "dQw4w9WgXcQ",
    "title": "Never <b>Gonna</b> Give You Up",
    "uploader": "Rick Astley",
    "duration": 213,
    "subtitles": {
        "en": [
            {"ext": "json3", "url": "https://subs/en.json3"},
            {"ext": "vtt", "url": "https://subs/en.vtt"},
        ],
    },
    "automatic_captions": {
        "es-419": [{"ext": "vtt", "url": "https://auto/es-419.vtt"}],
        "de": [{"ext": "srv3", "url": "https://auto/de.srv3"}],
    },
}


class TestSelectSubtitleTrack:
    """Tests for picking a track out of a yt-dlp info dict."""

    def test_manual_exact_match_prefers_vtt(self):
        code, track, automatic = select_subtitle_track(INFO, "en")
        assert code == "en"
        assert track["url"] == "https://subs/en.vtt"
        assert automatic is False

    def test_base_language_match_in_automatic_captions(self):
        code, track, automatic = select_subtitle_track(INFO, "es")
        assert code == "es-419"
        assert automatic is True

    def test_falls_back_to_first_format(self):
        _, track, _ = select_subtitle_track(INFO, "de")
        assert track["url"] == "https://auto/de.srv3"

    def test_no_match(self):
        assert select_subtitle_track(INFO, "ja") is None
        assert select_subtitle_track({}, "en") is None


class TestClassifyDownloadError:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("HTTP Error 429: Too Many Requests", ("fetch.rate", False)),
            ("Unsupported URL: https://x", ("link.unsupported", False)),
            ("Video unavailable. This video has been removed", ("content.video.unavailable", False)),
            ("Private video. Sign in if you've been granted access", ("content.video.unavailable", False)),
            ("Sign in to confirm you're not a bot", ("fetch.critical", True)),
            ("Connection refused", ("fetch.fail", False)),
        ],
    )
    def test_codes(self, message, expected):
        assert classify_download_error(yt_dlp.utils.DownloadError(message)) == expected


class TestLocate:
    """Tests for SubtitleExtractor.locate with mocked yt-dlp."""

    def test_found(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(return_value=INFO)
        result = SubtitleExtractor(Settings()).locate("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "en")

        assert result.subtitles == "https://subs/en.vtt"
        assert result.error is None
        assert result.file_metadata["sublanguage"] == "en"
        assert result.file_metadata["title"] == "Never Gonna Give You Up"
        assert result.file_metadata["author"] == "Rick Astley"
        mock_ydl.extract_info.assert_called_once_with("https://www.youtube.com/watch?v=dQw4w9WgXcQ", download=False)

    def test_not_found(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(return_value=INFO)
        result = SubtitleExtractor(Settings()).locate("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "ja")

        assert result == ExtractorResult()

    def test_too_long(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(return_value={**INFO, "duration": 7200})
        result = SubtitleExtractor(Settings(duration_limit=3600)).locate("https://x.com/i/status/1", "en")

        assert result.error == "content.too_long"
        assert result.critical is False

    def test_rate_limit(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(
            side_effect=yt_dlp.utils.DownloadError("HTTP Error 429: Too Many Requests")
        )
        result = SubtitleExtractor(Settings()).locate("https://vimeo.com/1", "en")

        assert result == ExtractorResult(error="fetch.rate")

    def test_misconfiguration_is_critical(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(
            side_effect=yt_dlp.utils.YoutubeDLError('Impersonate target "chrome" is not available')
        )
        result = SubtitleExtractor(Settings()).locate("https://x.com/i/status/1", "en")

        assert result == ExtractorResult(error="fetch.critical", critical=True)

    def test_playlist_takes_first_entry(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(return_value={"_type": "playlist", "entries": [None, INFO]})
        result = SubtitleExtractor(Settings()).locate("https://x.com/i/status/1", "en")

        assert result.subtitles == "https://subs/en.vtt"

    def test_empty_playlist(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(return_value={"_type": "playlist", "entries": []})
        result = SubtitleExtractor(Settings()).locate("https://x.com/i/status/1", "en")

        assert result.error == "content.video.unavailable"

    def test_unexpected_errors_propagate(self, mock_ydl):
        mock_ydl.extract_info = MagicMock(side_effect=RuntimeError("boom"))
        with pytest.raises(RuntimeError):
            SubtitleExtractor(Settings()).locate("https://vimeo.com/1", "en")


class TestBuildOptions:
    def test_metadata_only(self):
        options = SubtitleExtractor(Settings(request_timeout=12))._build_ydl_options(None)
        assert options["skip_download"] is True
        assert options["socket_timeout"] == 12
        assert "proxy" not in options

    def test_dispatcher_transport(self):
        dispatcher = Dispatcher(proxy="http://proxy:8080", source_address="10.0.0.1", timeout=5)
        options = SubtitleExtractor(Settings())._build_ydl_options(dispatcher, {"videopassword": "pw"})
        assert options["proxy"] == "http://proxy:8080"
        assert options["source_address"] == "10.0.0.1"
        assert options["socket_timeout"] == 5
        assert options["videopassword"] == "pw"


class TestPlatformExtractors:
    """Each platform extractor builds its canonical URL and options."""

    @pytest.fixture
    def locate(self):
        with patch.object(SubtitleExtractor, "locate", return_value=ExtractorResult()) as mock_locate:
            yield mock_locate

    @pytest.mark.asyncio
    async def test_youtube(self, locate):
        dispatcher = Dispatcher(proxy="http://proxy:8080")
        await extractors.youtube(YoutubeParams(id="dQw4w9WgXcQ", subtitle_lang="en", dispatcher=dispatcher))
        locate.assert_called_once_with("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "en", dispatcher, None)

    @pytest.mark.asyncio
    async def test_vimeo_password(self, locate):
        await extractors.vimeo(VimeoParams(id="76979871", password="pw", subtitle_lang="en"))
        locate.assert_called_once_with("https://vimeo.com/76979871", "en", None, {"videopassword": "pw"})

    @pytest.mark.asyncio
    async def test_vk_access_key(self, locate):
        await extractors.vk(VkParams(owner_id="-1", video_id="2", access_key="ff", subtitle_lang="en"))
        locate.assert_called_once_with("https://vk.com/video-1_2?list=ff", "en", None, None)

    @pytest.mark.asyncio
    async def test_tiktok_short_link(self, locate):
        await extractors.tiktok(TiktokParams(post_id=None, short_link="ZMabc", subtitle_lang="en"))
        locate.assert_called_once_with("https://vt.tiktok.com/ZMabc/", "en", None, None)

    @pytest.mark.asyncio
    async def test_twitter_index(self, locate):
        await extractors.twitter(TwitterParams(id="123", index=1, subtitle_lang="en"))
        locate.assert_called_once_with(
            "https://x.com/i/status/123", "en", None, {"noplaylist": False, "playlist_items": "2"}
        )

    @pytest.mark.asyncio
    async def test_rutube_key(self, locate):
        await extractors.rutube(RutubeParams(id="abc", key="secret", subtitle_lang="en"))
        locate.assert_called_once_with("https://rutube.ru/video/abc/?p=secret", "en", None, None)

    @pytest.mark.asyncio
    async def test_loom(self, locate):
        await extractors.loom(LoomParams(id="abc", subtitle_lang="en"))
        locate.assert_called_once_with("https://www.loom.com/share/abc", "en", None, None)

    @pytest.mark.asyncio
    async def test_missing_id_is_unsupported_link(self, locate):
        result = await extractors.loom(LoomParams(id=None, subtitle_lang="en"))
        assert result == ExtractorResult(error="link.unsupported")
        locate.assert_not_called()

    @pytest.mark.asyncio
    async def test_twitter_negative_index(self, locate):
        result = await extractors.twitter(TwitterParams(id="123", index=-1, subtitle_lang="en"))
        assert result.error == "link.unsupported"
        locate.assert_not_called()
