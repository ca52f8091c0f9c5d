"""
Request and per-platform parameter types.

A PlatformRequest is what the router hands over: the platform it identified,
the route fields it parsed out of the URL and the requested subtitle
language. The dispatch layer turns it into exactly one of the params
variants below, each of which is the precise shape one extractor expects.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from subtitle_service.platforms import Platform

# Baseline media options. Extractors skip media processing when these are
# left at baseline and a subtitle language is requested.
BASELINE_QUALITY = "1080"
BASELINE_CODEC = "h264"
BASELINE_CONTAINER = "mp4"


@dataclass(frozen=True)
class Dispatcher:
    """
    Shared outbound transport settings.

    Attributes:
        proxy: Proxy URL for outbound requests
        source_address: Local address to bind outbound connections to
        impersonate: Browser target for TLS fingerprint impersonation
        timeout: Socket timeout in seconds
    """

    proxy: str | None = None
    source_address: str | None = None
    impersonate: str | None = None
    timeout: int | None = None


@dataclass(frozen=True)
class RequestContext:
    """Per-request shared context handed down from the HTTP layer."""

    dispatcher: Dispatcher | None = None


@dataclass(frozen=True)
class PlatformRequest:
    """
    A routed subtitle-only request.

    Attributes:
        platform: Platform identified by the router
        pattern_match: Route fields parsed from the URL (ids, keys, indices)
        subtitle_lang: Requested subtitle language, "none" or None
        context: Shared transport context
    """

    platform: Platform | str
    pattern_match: Mapping[str, str] = field(default_factory=dict)
    subtitle_lang: str | None = None
    context: RequestContext = field(default_factory=RequestContext)


@dataclass(frozen=True)
class ExtractorParams:
    """
    Base for the per-platform params variants.

    id_fields lists the identifying route fields in the order used to name
    the output file.
    """

    id_fields: ClassVar[tuple[str, ...]] = ("id",)

    def primary_id(self) -> str | None:
        """Return the first identifying field that is present."""
        for name in self.id_fields:
            value = getattr(self, name, None)
            if value not in (None, ""):
                return str(value)
        return None


@dataclass(frozen=True)
class YoutubeParams(ExtractorParams):
    id: str | None
    subtitle_lang: str
    dispatcher: Dispatcher | None = None
    quality: str = BASELINE_QUALITY
    codec: str = BASELINE_CODEC
    container: str = BASELINE_CONTAINER
    is_audio_only: bool = False
    is_audio_muted: bool = False
    dub_lang: str | None = None
    youtube_hls: bool = False


@dataclass(frozen=True)
class VimeoParams(ExtractorParams):
    id: str | None
    subtitle_lang: str
    password: str | None = None
    quality: str = BASELINE_QUALITY
    is_audio_only: bool = False


@dataclass(frozen=True)
class VkParams(ExtractorParams):
    id_fields: ClassVar[tuple[str, ...]] = ("video_id",)

    owner_id: str | None
    video_id: str | None
    subtitle_lang: str
    access_key: str | None = None
    quality: str = BASELINE_QUALITY


@dataclass(frozen=True)
class TiktokParams(ExtractorParams):
    id_fields: ClassVar[tuple[str, ...]] = ("post_id", "short_link")

    post_id: str | None
    subtitle_lang: str
    short_link: str | None = None
    full_audio: bool = False
    is_audio_only: bool = False
    h265: bool = False
    always_proxy: bool = False


@dataclass(frozen=True)
class TwitterParams(ExtractorParams):
    id: str | None
    subtitle_lang: str
    # 0-based media index inside the post
    index: int | None = None
    dispatcher: Dispatcher | None = None
    to_gif: bool = False
    always_proxy: bool = False


@dataclass(frozen=True)
class RutubeParams(ExtractorParams):
    id_fields: ClassVar[tuple[str, ...]] = ("id", "yappy_id")

    id: str | None
    subtitle_lang: str
    yappy_id: str | None = None
    key: str | None = None
    quality: str = BASELINE_QUALITY
    is_audio_only: bool = False


@dataclass(frozen=True)
class LoomParams(ExtractorParams):
    id: str | None
    subtitle_lang: str
