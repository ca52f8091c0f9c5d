"""
Subtitle-only dispatch.

Validator -> parameter adapter -> one extractor call -> result normalizer.
Every request resolves to exactly one Outcome; faults raised by the
extractor are caught here and never reach the caller.
"""

import logging

from subtitle_service.config import Settings
from subtitle_service.normalizer import normalize
from subtitle_service.outcomes import ExtractorResult, Outcome, Proceed, UnexpectedFailure
from subtitle_service.params import PlatformRequest
from subtitle_service.platforms import friendly_service_name, platform_id
from subtitle_service.registry import CapabilityRegistry
from subtitle_service.responses import ApiResponse, response_for
from subtitle_service.validation import validate

logger = logging.getLogger(__name__)


async def handle_subtitle_request(
    request: PlatformRequest,
    *,
    registry: CapabilityRegistry | None = None,
    settings: Settings | None = None,
) -> Outcome:
    """
    Run a subtitle-only request through the pipeline.

    Args:
        request: Routed request (platform, route fields, language, context)
        registry: Capability registry. Uses the default registry if None.
        settings: Settings instance. Uses global defaults if None.

    Returns:
        The normalized Outcome for this request
    """
    if registry is None:
        from subtitle_service.registry import capabilities as registry

    verdict = validate(request, registry)
    if not isinstance(verdict, Proceed):
        logger.info(f"Rejected subtitle request for {platform_id(request.platform)}: {type(verdict).__name__}")
        return verdict

    capability = registry.get(request.platform)

    # Params building and the extractor call share one fault boundary
    try:
        params = capability.adapt(request)
        result = await capability.extract(params)
        if not isinstance(result, ExtractorResult):
            raise TypeError(f"Extractor returned {type(result).__name__}, expected ExtractorResult")
    except Exception:
        logger.exception(f"Subtitle lookup for {platform_id(request.platform)} failed unexpectedly")
        return UnexpectedFailure(service=friendly_service_name(request.platform))

    outcome = normalize(request.platform, request.subtitle_lang, result, params, settings)
    logger.info(f"Subtitle request for {platform_id(request.platform)} resolved to {type(outcome).__name__}")
    return outcome


async def run_subtitle_request(
    request: PlatformRequest,
    *,
    registry: CapabilityRegistry | None = None,
    settings: Settings | None = None,
) -> ApiResponse:
    """Run a request and build its transport-level response."""
    outcome = await handle_subtitle_request(request, registry=registry, settings=settings)
    return response_for(outcome)
