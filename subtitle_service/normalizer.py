"""
Result normalization.

Turns whatever an extractor returned into a single Outcome. The decision
order is fixed: critical errors, then recoverable errors (with context
looked up in ERROR_CONTEXT), then a missing subtitle pointer, then success.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from subtitle_service.config import Settings
from subtitle_service.outcomes import (
    CONTENT_TOO_LONG,
    CONTENT_VIDEO_UNAVAILABLE,
    FETCH_CRITICAL,
    FETCH_FAIL,
    FETCH_RATE,
    LINK_UNSUPPORTED,
    SUBTITLE_LANGUAGE_KEY,
    ExtractionError,
    ExtractorResult,
    NoSubtitlesFound,
    Outcome,
    SubtitleFound,
)
from subtitle_service.params import ExtractorParams
from subtitle_service.platforms import Platform, friendly_service_name, platform_id

# Filename fragment used when a request carries no identifying route field
UNKNOWN_ID = "unknown"


@dataclass(frozen=True)
class ErrorScope:
    """Inputs available to error context builders."""

    platform: Platform | str
    settings: Settings


def _limit_context(scope: ErrorScope) -> dict[str, Any]:
    return {"limit": scope.settings.duration_limit_minutes}


def _service_context(scope: ErrorScope) -> dict[str, Any]:
    return {"service": friendly_service_name(scope.platform)}


# Error code -> context builder. Codes not listed carry no context.
ERROR_CONTEXT: dict[str, Callable[[ErrorScope], dict[str, Any]]] = {
    CONTENT_TOO_LONG: _limit_context,
    FETCH_FAIL: _service_context,
    FETCH_RATE: _service_context,
    FETCH_CRITICAL: _service_context,
    LINK_UNSUPPORTED: _service_context,
    CONTENT_VIDEO_UNAVAILABLE: _service_context,
}


def subtitle_filename(platform: Platform | str, params: ExtractorParams | None) -> str:
    """
    Synthesize the output filename.

    Examples:
        >>> from subtitle_service.params import LoomParams
        >>> subtitle_filename("loom", LoomParams(id="abc", subtitle_lang="en"))
        'subtitles_loom_abc.vtt'
        >>> subtitle_filename("loom", None)
        'subtitles_loom_unknown.vtt'
    """
    primary = params.primary_id() if params is not None else None
    return f"subtitles_{platform_id(platform)}_{primary or UNKNOWN_ID}.vtt"


def normalize(
    platform: Platform | str,
    language: str,
    result: ExtractorResult,
    params: ExtractorParams | None = None,
    settings: Settings | None = None,
) -> Outcome:
    """
    Map an extractor result to an Outcome.

    Args:
        platform: Platform the result came from
        language: Language the client requested
        result: What the extractor returned
        params: Params the extractor was called with (used for the filename)
        settings: Settings instance. Uses global defaults if None.

    Returns:
        ExtractionError, NoSubtitlesFound or SubtitleFound
    """
    if settings is None:
        from subtitle_service.config import settings as default_settings

        settings = default_settings

    if result.critical:
        return ExtractionError(code=result.error or FETCH_CRITICAL, fatal=True)

    if result.error:
        builder = ERROR_CONTEXT.get(result.error)
        context = builder(ErrorScope(platform, settings)) if builder else None
        return ExtractionError(code=result.error, context=context)

    if not result.subtitles:
        return NoSubtitlesFound(service=friendly_service_name(platform), language=language)

    metadata = dict(result.file_metadata or {})
    return SubtitleFound(
        url=result.subtitles,
        # The delivered language may differ from the request (fallback, auto-translation)
        language=metadata.get(SUBTITLE_LANGUAGE_KEY) or language,
        service=platform_id(platform),
        filename=subtitle_filename(platform, params),
        file_metadata=metadata,
    )
