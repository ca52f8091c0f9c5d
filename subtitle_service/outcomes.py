"""
Extractor results and normalized outcomes.

Extractors return an ExtractorResult; the dispatch layer turns every
request into exactly one Outcome, and each Outcome knows which response
kind and payload it becomes.
"""

from dataclasses import dataclass, field
from typing import Any

# Response kinds understood by the response builder
KIND_ERROR = "error"
KIND_CRITICAL = "critical"
KIND_SUBTITLE = "subtitle"

ERROR_PREFIX = "error.api."

# Error vocabulary shared with extractors
CONTENT_TOO_LONG = "content.too_long"
CONTENT_VIDEO_UNAVAILABLE = "content.video.unavailable"
FETCH_CRITICAL = "fetch.critical"
FETCH_FAIL = "fetch.fail"
FETCH_RATE = "fetch.rate"
LINK_INVALID = "link.invalid"
LINK_UNSUPPORTED = "link.unsupported"
SERVICE_SUBTITLES_NOT_SUPPORTED = "service.subtitles_not_supported"
SUBTITLE_LANG_REQUIRED = "subtitle_lang_required"
SUBTITLES_NOT_FOUND = "subtitles.not_found"

# Key under which extractors report the language they actually delivered
SUBTITLE_LANGUAGE_KEY = "sublanguage"


def api_code(code: str) -> str:
    """Qualify a short error code, e.g. 'fetch.fail' -> 'error.api.fetch.fail'."""
    return code if code.startswith(ERROR_PREFIX) else f"{ERROR_PREFIX}{code}"


@dataclass
class ExtractorResult:
    """
    What an extractor hands back.

    Exactly one of success, recoverable error or critical error holds.
    A success without a subtitle pointer means no track was found.

    Attributes:
        subtitles: Direct URL of the subtitle track
        file_metadata: Metadata about the delivered file
        error: Short error code (e.g. "fetch.fail")
        critical: Whether the error is a service-level failure
    """

    subtitles: str | None = None
    file_metadata: dict[str, Any] | None = None
    error: str | None = None
    critical: bool = False

    @classmethod
    def failure(cls, code: str, critical: bool = False) -> "ExtractorResult":
        return cls(error=code, critical=critical)


class Outcome:
    """Base for normalized outcomes."""

    def to_response(self) -> tuple[str, dict[str, Any]]:
        """Return the (kind, payload) pair for the response builder."""
        raise NotImplementedError


@dataclass
class Proceed:
    """Validation passed; the request may reach its extractor."""


@dataclass
class SubtitleFound(Outcome):
    url: str
    language: str
    service: str
    filename: str
    file_metadata: dict[str, Any] = field(default_factory=dict)

    def to_response(self) -> tuple[str, dict[str, Any]]:
        return KIND_SUBTITLE, {
            "url": self.url,
            "language": self.language,
            "service": self.service,
            "filename": self.filename,
            "fileMetadata": self.file_metadata,
        }


@dataclass
class ServiceUnsupported(Outcome):
    service: str

    def to_response(self) -> tuple[str, dict[str, Any]]:
        return KIND_ERROR, {
            "code": api_code(SERVICE_SUBTITLES_NOT_SUPPORTED),
            "context": {"service": self.service},
        }


@dataclass
class LanguageRequired(Outcome):
    def to_response(self) -> tuple[str, dict[str, Any]]:
        return KIND_ERROR, {"code": api_code(SUBTITLE_LANG_REQUIRED)}


@dataclass
class ExtractionError(Outcome):
    """
    An extractor-reported failure.

    Fatal errors become "critical" responses without context; the rest
    become "error" responses carrying whatever context the code calls for.
    """

    code: str
    context: dict[str, Any] | None = None
    fatal: bool = False

    def to_response(self) -> tuple[str, dict[str, Any]]:
        if self.fatal:
            return KIND_CRITICAL, {"code": api_code(self.code)}
        payload: dict[str, Any] = {"code": api_code(self.code)}
        if self.context is not None:
            payload["context"] = self.context
        return KIND_ERROR, payload


class UnexpectedFailure(ExtractionError):
    """Building params or calling the extractor raised instead of returning a result."""

    def __init__(self, service: str):
        super().__init__(code=FETCH_CRITICAL, context={"service": service})


@dataclass
class NoSubtitlesFound(Outcome):
    service: str
    language: str

    def to_response(self) -> tuple[str, dict[str, Any]]:
        return KIND_ERROR, {
            "code": api_code(SUBTITLES_NOT_FOUND),
            "context": {"service": self.service, "language": self.language},
        }
