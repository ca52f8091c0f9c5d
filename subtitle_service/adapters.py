"""
Parameter adapters: one per subtitle-capable platform.

Each adapter copies the route fields it needs from the request verbatim,
pins media options to baseline and switches every media-only toggle off,
so the extractor does only the work needed to locate a subtitle track.
Missing route fields are passed on as None; the extractor reports the
resulting failure and the normalizer turns it into an outcome.
"""

from subtitle_service.params import (
    LoomParams,
    PlatformRequest,
    RutubeParams,
    TiktokParams,
    TwitterParams,
    VimeoParams,
    VkParams,
    YoutubeParams,
)

# YouTube and Vimeo route ids are truncated to the canonical id length
CANONICAL_ID_LENGTH = 11


def _route(request: PlatformRequest, name: str) -> str | None:
    value = request.pattern_match.get(name)
    return value if value not in (None, "") else None


def _canonical_id(request: PlatformRequest) -> str | None:
    value = _route(request, "id")
    return value[:CANONICAL_ID_LENGTH] if value is not None else None


def _zero_based(value: str | int | None) -> int | None:
    """Convert a 1-based route index to 0-based, keeping None and junk as None."""
    if value is None:
        return None
    try:
        return int(value) - 1
    except (TypeError, ValueError):
        return None


def adapt_youtube(request: PlatformRequest) -> YoutubeParams:
    return YoutubeParams(
        id=_canonical_id(request),
        subtitle_lang=request.subtitle_lang,
        dispatcher=request.context.dispatcher,
    )


def adapt_vimeo(request: PlatformRequest) -> VimeoParams:
    return VimeoParams(
        id=_canonical_id(request),
        password=_route(request, "password"),
        subtitle_lang=request.subtitle_lang,
    )


def adapt_vk(request: PlatformRequest) -> VkParams:
    return VkParams(
        owner_id=_route(request, "owner_id"),
        video_id=_route(request, "video_id"),
        access_key=_route(request, "access_key"),
        subtitle_lang=request.subtitle_lang,
    )


def adapt_tiktok(request: PlatformRequest) -> TiktokParams:
    return TiktokParams(
        post_id=_route(request, "post_id"),
        short_link=_route(request, "short_link"),
        subtitle_lang=request.subtitle_lang,
    )


def adapt_twitter(request: PlatformRequest) -> TwitterParams:
    return TwitterParams(
        id=_route(request, "id"),
        index=_zero_based(request.pattern_match.get("index")),
        dispatcher=request.context.dispatcher,
        subtitle_lang=request.subtitle_lang,
    )


def adapt_rutube(request: PlatformRequest) -> RutubeParams:
    return RutubeParams(
        id=_route(request, "id"),
        yappy_id=_route(request, "yappy_id"),
        key=_route(request, "key"),
        subtitle_lang=request.subtitle_lang,
    )


def adapt_loom(request: PlatformRequest) -> LoomParams:
    return LoomParams(
        id=_route(request, "id"),
        subtitle_lang=request.subtitle_lang,
    )
