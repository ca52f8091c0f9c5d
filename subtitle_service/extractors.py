"""
Per-platform subtitle extractors backed by yt-dlp.

Each extractor takes its platform's params, builds the canonical content
URL, asks yt-dlp for metadata only (nothing is downloaded) and picks the
subtitle track for the requested language. Failures are reported as
ExtractorResult error codes; anything unexpected is left to propagate to
the dispatch layer.

Track selection order:
    1. Manual subtitles, exact language code
    2. Manual subtitles, same base language (e.g. "en" matches "en-US")
    3. Automatic captions, same two steps
Within a track, the vtt format is preferred.
"""

import logging
from typing import Any
from urllib.parse import urlencode

import nh3
import yt_dlp
from starlette.concurrency import run_in_threadpool
from yt_dlp.networking.impersonate import ImpersonateTarget

from subtitle_service.config import Settings
from subtitle_service.outcomes import (
    CONTENT_TOO_LONG,
    CONTENT_VIDEO_UNAVAILABLE,
    FETCH_CRITICAL,
    FETCH_FAIL,
    FETCH_RATE,
    LINK_UNSUPPORTED,
    SUBTITLE_LANGUAGE_KEY,
    ExtractorResult,
)
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

logger = logging.getLogger(__name__)

PREFERRED_FORMATS = ("vtt", "srt", "ttml")

# (message fragment, error code, critical). First match wins.
DOWNLOAD_ERROR_CODES: tuple[tuple[str, str, bool], ...] = (
    ("confirm you're not a bot", FETCH_CRITICAL, True),
    ("signature extraction failed", FETCH_CRITICAL, True),
    ("http error 429", FETCH_RATE, False),
    ("too many requests", FETCH_RATE, False),
    ("unsupported url", LINK_UNSUPPORTED, False),
    ("video unavailable", CONTENT_VIDEO_UNAVAILABLE, False),
    ("private video", CONTENT_VIDEO_UNAVAILABLE, False),
    ("has been removed", CONTENT_VIDEO_UNAVAILABLE, False),
    ("this video is not available", CONTENT_VIDEO_UNAVAILABLE, False),
    ("http error 404", CONTENT_VIDEO_UNAVAILABLE, False),
)


def classify_download_error(error: Exception) -> tuple[str, bool]:
    """
    Map a yt-dlp error to an error code and a critical flag.

    Examples:
        >>> classify_download_error(Exception("HTTP Error 429: Too Many Requests"))
        ('fetch.rate', False)
        >>> classify_download_error(Exception("connection reset"))
        ('fetch.fail', False)
    """
    message = str(error).lower()
    for fragment, code, critical in DOWNLOAD_ERROR_CODES:
        if fragment in message:
            return code, critical
    return FETCH_FAIL, False


def _pick_format(tracks: list[dict[str, Any]]) -> dict[str, Any] | None:
    candidates = [track for track in tracks if track.get("url")]
    for ext in PREFERRED_FORMATS:
        for track in candidates:
            if track.get("ext") == ext:
                return track
    return candidates[0] if candidates else None


def _match_language(tracks_by_lang: dict[str, Any], lang: str) -> str | None:
    if lang in tracks_by_lang:
        return lang
    base = lang.split("-")[0].lower()
    for code in tracks_by_lang:
        if code.split("-")[0].lower() == base:
            return code
    return None


def select_subtitle_track(info: dict[str, Any], lang: str) -> tuple[str, dict[str, Any], bool] | None:
    """
    Find the subtitle track for a language in a yt-dlp info dict.

    Returns:
        (language code, track dict, automatic) or None if nothing matches
    """
    for key, automatic in (("subtitles", False), ("automatic_captions", True)):
        tracks_by_lang = info.get(key) or {}
        code = _match_language(tracks_by_lang, lang)
        if code is None:
            continue
        track = _pick_format(tracks_by_lang[code] or [])
        if track is not None:
            return code, track, automatic
    return None


def _clean_text(value: Any) -> str | None:
    if not value:
        return None
    return nh3.clean(str(value), tags=set())


class SubtitleExtractor:
    """
    Locates subtitle tracks with yt-dlp without downloading any media.
    """

    def __init__(self, config: Settings | None = None):
        """
        Initialize the extractor with configuration.

        Args:
            config: Settings instance. Uses global defaults if None.
        """
        self.config = config or Settings()

    def _build_ydl_options(self, dispatcher: Dispatcher | None, extra: dict[str, Any] | None = None) -> dict:
        """
        Build yt-dlp options for a metadata-only subtitle lookup.

        Transport options come from the dispatcher when one was passed;
        extractors without a dispatcher use direct connections.
        """
        options: dict[str, Any] = {
            "skip_download": True,
            "noplaylist": True,
            # Subtitle lookups must not fail on format selection
            "ignore_no_formats_error": True,
            "quiet": True,
            "no_warnings": True,
            "logger": logger,
            "socket_timeout": self.config.request_timeout,
        }
        if dispatcher is not None:
            if dispatcher.proxy:
                options["proxy"] = dispatcher.proxy
            if dispatcher.source_address:
                options["source_address"] = dispatcher.source_address
            if dispatcher.impersonate:
                options["impersonate"] = ImpersonateTarget.from_str(dispatcher.impersonate)
            if dispatcher.timeout:
                options["socket_timeout"] = dispatcher.timeout
        if extra:
            options.update(extra)
        return options

    def _extract_info(self, url: str, options: dict) -> dict[str, Any]:
        with yt_dlp.YoutubeDL(options) as ydl:
            info = ydl.extract_info(url, download=False)
        return info or {}

    def locate(
        self,
        url: str,
        lang: str,
        dispatcher: Dispatcher | None = None,
        extra: dict[str, Any] | None = None,
    ) -> ExtractorResult:
        """
        Look up the subtitle track for a content URL.

        Args:
            url: Canonical content URL
            lang: Requested subtitle language
            dispatcher: Shared transport settings, if the platform takes them
            extra: Extra yt-dlp options (passwords, playlist items)

        Returns:
            ExtractorResult with the track URL, an error code, or neither
            when the content has no track in that language
        """
        options = self._build_ydl_options(dispatcher, extra)
        logger.info(f"Looking up '{lang}' subtitles at {url}")

        try:
            info = self._extract_info(url, options)
        except yt_dlp.utils.DownloadError as e:
            code, critical = classify_download_error(e)
            logger.warning(f"yt-dlp failed for {url}: {e} -> {code}")
            return ExtractorResult.failure(code, critical=critical)
        except yt_dlp.utils.YoutubeDLError as e:
            # Raised before any request is made, e.g. an unavailable impersonate target
            logger.error(f"yt-dlp is misconfigured: {e}")
            return ExtractorResult.failure(FETCH_CRITICAL, critical=True)

        if not info:
            return ExtractorResult.failure(FETCH_FAIL)

        # Multi-item posts come back as playlists; take the selected entry
        if info.get("_type") == "playlist":
            entries = [entry for entry in info.get("entries") or [] if entry]
            if not entries:
                return ExtractorResult.failure(CONTENT_VIDEO_UNAVAILABLE)
            info = entries[0]

        duration = info.get("duration")
        if duration and duration > self.config.duration_limit:
            return ExtractorResult.failure(CONTENT_TOO_LONG)

        selected = select_subtitle_track(info, lang)
        if selected is None:
            logger.info(f"No '{lang}' subtitles for {url}")
            return ExtractorResult()

        code, track, automatic = selected
        metadata = {
            SUBTITLE_LANGUAGE_KEY: code,
            "automatic": automatic,
            "format": track.get("ext"),
        }
        title = _clean_text(info.get("title"))
        if title:
            metadata["title"] = title
        author = _clean_text(info.get("uploader") or info.get("channel"))
        if author:
            metadata["author"] = author
        if duration:
            metadata["duration"] = duration

        return ExtractorResult(subtitles=track["url"], file_metadata=metadata)


def get_extractor() -> SubtitleExtractor:
    """Get a SubtitleExtractor configured from the global settings."""
    from subtitle_service.config import settings

    return SubtitleExtractor(settings)


async def _locate(url: str, lang: str, dispatcher: Dispatcher | None = None, extra: dict | None = None) -> ExtractorResult:
    # yt-dlp is blocking; keep it off the event loop
    return await run_in_threadpool(get_extractor().locate, url, lang, dispatcher, extra)


# ============================================================================
# Platform extractors
# ============================================================================


async def youtube(params: YoutubeParams) -> ExtractorResult:
    if not params.id:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    return await _locate(
        f"https://www.youtube.com/watch?v={params.id}",
        params.subtitle_lang,
        params.dispatcher,
    )


async def vimeo(params: VimeoParams) -> ExtractorResult:
    if not params.id:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    extra = {"videopassword": params.password} if params.password else None
    return await _locate(f"https://vimeo.com/{params.id}", params.subtitle_lang, extra=extra)


async def vk(params: VkParams) -> ExtractorResult:
    if not params.owner_id or not params.video_id:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    url = f"https://vk.com/video{params.owner_id}_{params.video_id}"
    if params.access_key:
        url = f"{url}?{urlencode({'list': params.access_key})}"
    return await _locate(url, params.subtitle_lang)


async def tiktok(params: TiktokParams) -> ExtractorResult:
    if params.post_id:
        url = f"https://www.tiktok.com/@i/video/{params.post_id}"
    elif params.short_link:
        url = f"https://vt.tiktok.com/{params.short_link}/"
    else:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    return await _locate(url, params.subtitle_lang)


async def twitter(params: TwitterParams) -> ExtractorResult:
    if not params.id:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    extra = None
    if params.index is not None:
        if params.index < 0:
            return ExtractorResult.failure(LINK_UNSUPPORTED)
        extra = {"noplaylist": False, "playlist_items": str(params.index + 1)}
    return await _locate(
        f"https://x.com/i/status/{params.id}",
        params.subtitle_lang,
        params.dispatcher,
        extra,
    )


async def rutube(params: RutubeParams) -> ExtractorResult:
    if params.yappy_id:
        url = f"https://rutube.ru/yappy/{params.yappy_id}/"
    elif params.id:
        url = f"https://rutube.ru/video/{params.id}/"
        if params.key:
            url = f"{url}?{urlencode({'p': params.key})}"
    else:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    return await _locate(url, params.subtitle_lang)


async def loom(params: LoomParams) -> ExtractorResult:
    if not params.id:
        return ExtractorResult.failure(LINK_UNSUPPORTED)
    return await _locate(f"https://www.loom.com/share/{params.id}", params.subtitle_lang)
