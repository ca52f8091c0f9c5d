"""Tests for extractor result normalization."""

import pytest

from subtitle_service.normalizer import normalize, subtitle_filename
from subtitle_service.outcomes import (
    ExtractionError,
    ExtractorResult,
    NoSubtitlesFound,
    SubtitleFound,
)
from subtitle_service.params import RutubeParams, TiktokParams, VkParams, YoutubeParams
from subtitle_service.platforms import Platform

YOUTUBE_PARAMS = YoutubeParams(id="dQw4w9WgXcQ", subtitle_lang="es")


class TestErrors:
    """Tests for error results."""

    def test_critical_is_fatal(self, settings):
        outcome = normalize(Platform.youtube, "es", ExtractorResult(error="fetch.fail", critical=True), settings=settings)
        assert outcome == ExtractionError(code="fetch.fail", fatal=True)

    def test_critical_without_code_falls_back(self, settings):
        outcome = normalize(Platform.youtube, "es", ExtractorResult(critical=True), settings=settings)
        assert outcome == ExtractionError(code="fetch.critical", fatal=True)
        assert outcome.to_response() == ("critical", {"code": "error.api.fetch.critical"})

    @pytest.mark.parametrize("code", ["content.too_long", "fetch.rate", "link.unsupported", "youtube.login"])
    def test_critical_ignores_context_table(self, settings, code):
        outcome = normalize(Platform.youtube, "es", ExtractorResult(error=code, critical=True), settings=settings)
        assert outcome.fatal
        assert outcome.context is None
        assert outcome.to_response() == ("critical", {"code": f"error.api.{code}"})

    def test_too_long_reports_limit_in_minutes(self, settings):
        outcome = normalize(Platform.youtube, "es", ExtractorResult(error="content.too_long"), settings=settings)
        assert outcome == ExtractionError(code="content.too_long", context={"limit": 60.0})

    def test_limit_rounded_to_two_decimals(self):
        from subtitle_service.config import Settings

        outcome = normalize(
            Platform.youtube, "es", ExtractorResult(error="content.too_long"), settings=Settings(duration_limit=100)
        )
        assert outcome.context == {"limit": 1.67}

    @pytest.mark.parametrize(
        "code",
        ["fetch.fail", "fetch.rate", "fetch.critical", "link.unsupported", "content.video.unavailable"],
    )
    def test_service_context_codes(self, settings, code):
        outcome = normalize(Platform.vimeo, "es", ExtractorResult(error=code), settings=settings)
        assert outcome == ExtractionError(code=code, context={"service": "Vimeo"})
        assert outcome.to_response() == ("error", {"code": f"error.api.{code}", "context": {"service": "Vimeo"}})

    def test_other_codes_have_no_context(self, settings):
        outcome = normalize(Platform.vimeo, "es", ExtractorResult(error="content.video.private"), settings=settings)
        assert outcome == ExtractionError(code="content.video.private")
        assert outcome.to_response() == ("error", {"code": "error.api.content.video.private"})


class TestNoSubtitles:
    def test_no_pointer_is_not_found(self, settings):
        outcome = normalize(Platform.loom, "fr", ExtractorResult(), settings=settings)
        assert outcome == NoSubtitlesFound(service="Loom", language="fr")

    def test_metadata_without_pointer_is_not_found(self, settings):
        result = ExtractorResult(file_metadata={"sublanguage": "fr"})
        assert isinstance(normalize(Platform.loom, "fr", result, settings=settings), NoSubtitlesFound)


class TestSubtitleFound:
    """Tests for successful results."""

    def test_youtube_scenario(self, settings):
        outcome = normalize(
            Platform.youtube, "es", ExtractorResult(subtitles="http://x/y.vtt"), YOUTUBE_PARAMS, settings
        )
        assert outcome == SubtitleFound(
            url="http://x/y.vtt",
            language="es",
            service="youtube",
            filename="subtitles_youtube_dQw4w9WgXcQ.vtt",
            file_metadata={},
        )

    def test_reported_language_wins(self, settings):
        result = ExtractorResult(subtitles="http://x/y.vtt", file_metadata={"sublanguage": "es-419"})
        outcome = normalize(Platform.youtube, "es", result, YOUTUBE_PARAMS, settings)
        assert outcome.language == "es-419"
        assert outcome.file_metadata == {"sublanguage": "es-419"}

    def test_payload_shape(self, settings):
        result = ExtractorResult(subtitles="http://x/y.vtt", file_metadata={"title": "Clip"})
        kind, payload = normalize(Platform.youtube, "es", result, YOUTUBE_PARAMS, settings).to_response()
        assert kind == "subtitle"
        assert payload == {
            "url": "http://x/y.vtt",
            "language": "es",
            "service": "youtube",
            "filename": "subtitles_youtube_dQw4w9WgXcQ.vtt",
            "fileMetadata": {"title": "Clip"},
        }


class TestFilename:
    """Identifying fields are explicit per platform."""

    def test_tiktok_prefers_post_id(self):
        params = TiktokParams(post_id="7100", short_link="ZMabc", subtitle_lang="en")
        assert subtitle_filename(Platform.tiktok, params) == "subtitles_tiktok_7100.vtt"

    def test_tiktok_falls_back_to_short_link(self):
        params = TiktokParams(post_id=None, short_link="ZMabc", subtitle_lang="en")
        assert subtitle_filename(Platform.tiktok, params) == "subtitles_tiktok_ZMabc.vtt"

    def test_vk_uses_video_id(self):
        params = VkParams(owner_id="-1", video_id="456", subtitle_lang="en")
        assert subtitle_filename(Platform.vk, params) == "subtitles_vk_456.vtt"

    def test_rutube_yappy(self):
        params = RutubeParams(id=None, yappy_id="abc", subtitle_lang="en")
        assert subtitle_filename(Platform.rutube, params) == "subtitles_rutube_abc.vtt"

    def test_unknown_when_no_fields(self):
        params = YoutubeParams(id=None, subtitle_lang="en")
        assert subtitle_filename(Platform.youtube, params) == "subtitles_youtube_unknown.vtt"
