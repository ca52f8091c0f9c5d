"""Shared pytest fixtures for subtitle service tests."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from subtitle_service import adapters
from subtitle_service.config import Settings
from subtitle_service.outcomes import ExtractorResult
from subtitle_service.platforms import Platform
from subtitle_service.registry import Capability, CapabilityRegistry

ADAPTERS = {
    Platform.youtube: adapters.adapt_youtube,
    Platform.vimeo: adapters.adapt_vimeo,
    Platform.vk: adapters.adapt_vk,
    Platform.tiktok: adapters.adapt_tiktok,
    Platform.twitter: adapters.adapt_twitter,
    Platform.rutube: adapters.adapt_rutube,
    Platform.loom: adapters.adapt_loom,
}


def build_registry(extract) -> CapabilityRegistry:
    """Registry with the real adapters and one fake extractor for every platform."""
    return CapabilityRegistry(Capability(platform, adapt, extract) for platform, adapt in ADAPTERS.items())


@pytest.fixture
def settings():
    """Settings with a one hour duration limit."""
    return Settings(duration_limit=3600)


@pytest.fixture
def found_extractor():
    """Extractor that always returns a subtitle pointer."""
    return AsyncMock(return_value=ExtractorResult(subtitles="http://x/y.vtt"))


@pytest.fixture
def registry(found_extractor):
    return build_registry(found_extractor)


@pytest.fixture
def client():
    """FastAPI TestClient with rate limiting switched off."""
    from subtitle_service.main import app, limiter

    original = limiter.enabled
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = original


@pytest.fixture
def fake_extractor():
    """Replace every extractor behind the default registry with one AsyncMock."""
    extract = AsyncMock(return_value=ExtractorResult())
    with patch("subtitle_service.registry.capabilities", build_registry(extract)):
        yield extract


@pytest.fixture
def mock_ydl():
    """Mock yt_dlp.YoutubeDL; set .extract_info on the yielded instance."""
    with patch("subtitle_service.extractors.yt_dlp.YoutubeDL") as mock_cls:
        mock_instance = MagicMock()
        mock_instance.__enter__ = MagicMock(return_value=mock_instance)
        mock_instance.__exit__ = MagicMock(return_value=False)
        mock_cls.return_value = mock_instance
        yield mock_instance
