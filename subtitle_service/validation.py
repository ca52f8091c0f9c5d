"""
Request validation for subtitle-only extraction.

Runs before any extractor work and has no side effects.
"""

from subtitle_service.outcomes import LanguageRequired, Proceed, ServiceUnsupported
from subtitle_service.params import PlatformRequest
from subtitle_service.platforms import friendly_service_name
from subtitle_service.registry import CapabilityRegistry

# Language value clients send to mean "no subtitles"
NO_LANGUAGE = "none"


def language_missing(subtitle_lang: str | None) -> bool:
    return not subtitle_lang or subtitle_lang == NO_LANGUAGE


def validate(
    request: PlatformRequest, registry: CapabilityRegistry
) -> Proceed | ServiceUnsupported | LanguageRequired:
    """
    Decide whether a request may proceed to its extractor.

    Rules, in order:
    1. Platform without a subtitle capability -> ServiceUnsupported
    2. Language absent, empty or "none" -> LanguageRequired
    3. Otherwise -> Proceed
    """
    if not registry.supports_subtitles(request.platform):
        return ServiceUnsupported(service=friendly_service_name(request.platform))

    if language_missing(request.subtitle_lang):
        return LanguageRequired()

    return Proceed()
