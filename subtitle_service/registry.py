"""
Service capability registry.

Maps a platform to the adapter that builds its extractor params and the
extractor that consumes them. A platform is subtitle-capable only when its
record is present, flagged as supporting subtitles and carries both
functions; anything else is treated as unsupported.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from subtitle_service import adapters, extractors
from subtitle_service.outcomes import ExtractorResult
from subtitle_service.params import ExtractorParams, PlatformRequest
from subtitle_service.platforms import Platform, platform_id

AdapterFn = Callable[[PlatformRequest], ExtractorParams]
ExtractorFn = Callable[[Any], Awaitable[ExtractorResult]]


@dataclass(frozen=True)
class Capability:
    """What the dispatch layer needs to know about one platform."""

    platform: Platform
    adapt: AdapterFn | None
    extract: ExtractorFn | None
    supports_subtitles: bool = True

    @property
    def usable(self) -> bool:
        return self.supports_subtitles and self.adapt is not None and self.extract is not None


class CapabilityRegistry:
    """Read-only lookup from platform identifier to capability record."""

    def __init__(self, capabilities: Iterable[Capability]):
        self._capabilities = {platform_id(cap.platform): cap for cap in capabilities}

    def get(self, platform: Platform | str) -> Capability | None:
        """Return the usable capability record for a platform, if any."""
        capability = self._capabilities.get(platform_id(platform))
        if capability is None or not capability.usable:
            return None
        return capability

    def supports_subtitles(self, platform: Platform | str) -> bool:
        return self.get(platform) is not None

    def adapter_for(self, platform: Platform | str) -> AdapterFn | None:
        capability = self.get(platform)
        return capability.adapt if capability else None

    def extractor_for(self, platform: Platform | str) -> ExtractorFn | None:
        capability = self.get(platform)
        return capability.extract if capability else None

    def adapt(self, platform: Platform | str, request: PlatformRequest) -> ExtractorParams | None:
        """Build the extractor params for a request, or None when unsupported."""
        adapter = self.adapter_for(platform)
        return adapter(request) if adapter else None

    def platforms(self) -> list[Platform]:
        """Subtitle-capable platforms in registration order."""
        return [cap.platform for cap in self._capabilities.values() if cap.usable]


def build_default_registry() -> CapabilityRegistry:
    """Registry of every platform with a subtitle-capable adapter."""
    return CapabilityRegistry(
        [
            Capability(Platform.youtube, adapters.adapt_youtube, extractors.youtube),
            Capability(Platform.vimeo, adapters.adapt_vimeo, extractors.vimeo),
            Capability(Platform.vk, adapters.adapt_vk, extractors.vk),
            Capability(Platform.tiktok, adapters.adapt_tiktok, extractors.tiktok),
            Capability(Platform.twitter, adapters.adapt_twitter, extractors.twitter),
            Capability(Platform.rutube, adapters.adapt_rutube, extractors.rutube),
            Capability(Platform.loom, adapters.adapt_loom, extractors.loom),
        ]
    )


# Populated once at import; never mutated afterwards
capabilities = build_default_registry()
