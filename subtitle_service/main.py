"""
FastAPI application for subtitle-only extraction.

Routes a content URL to its platform, runs the subtitle-only dispatch and
serializes the resulting response.
"""

import logging
import time
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from subtitle_service import __version__
from subtitle_service.config import settings
from subtitle_service.dispatch import run_subtitle_request
from subtitle_service.middleware import RequestIdMiddleware, SecurityHeadersMiddleware
from subtitle_service.outcomes import LINK_INVALID, LINK_UNSUPPORTED, KIND_ERROR
from subtitle_service.params import Dispatcher, PlatformRequest, RequestContext
from subtitle_service.platforms import friendly_service_name
from subtitle_service.registry import capabilities
from subtitle_service.responses import ApiResponse, build_response
from subtitle_service.routing import is_http_url, match_url

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)
logger = structlog.get_logger()

SERVICE_NAME = "subtitle-service"


def get_remote_address_proxied(request: Request) -> str:
    """Get client address, considering X-Forwarded-For header."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


limiter = Limiter(
    key_func=get_remote_address_proxied,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
    enabled=settings.rate_limit_enabled,
)

# Track app startup time for uptime calculation
_app_start_time = time.time()


# ============================================================================
# Utility Functions
# ============================================================================


def sanitize_for_log(input_str: str) -> str:
    """
    Sanitize user input for logging to prevent log injection attacks.

    Args:
        input_str: User input string to sanitize

    Returns:
        Sanitized string safe for logging
    """
    return input_str.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")


def shared_context() -> RequestContext:
    """Build the shared transport context from settings."""
    return RequestContext(
        dispatcher=Dispatcher(
            proxy=settings.api_proxy,
            source_address=settings.api_source_address,
            impersonate=settings.impersonate_target,
            timeout=settings.request_timeout,
        )
    )


def to_json_response(response: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=response.status_code, content=response.body)


# ============================================================================
# Lifespan Context Manager
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup."""
    logger.info("=" * 60)
    logger.info("Subtitle Service Starting")
    logger.info("=" * 60)
    logger.info(f"Subtitle services: {', '.join(p.value for p in capabilities.platforms())}")
    logger.info(f"Duration limit: {settings.duration_limit}s")
    logger.info(f"Proxy: {'configured' if settings.api_proxy else 'none'}")
    logger.info(f"Impersonate: {settings.impersonate_target or 'disabled'}")
    logger.info(f"Rate Limiting: {'enabled' if settings.rate_limit_enabled else 'disabled'}")
    logger.info(f"Security Headers: {'enabled' if settings.enable_security_headers else 'disabled'}")
    logger.info("=" * 60)

    yield


app = FastAPI(
    title="Subtitle Service",
    description="Extract subtitle tracks from supported content platforms",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ============================================================================
# Middleware Configuration
# ============================================================================


def configure_middleware():
    """Configure middleware based on settings."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestIdMiddleware)

    if settings.enable_security_headers:
        app.add_middleware(SecurityHeadersMiddleware)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)


configure_middleware()


# ============================================================================
# Pydantic Models
# ============================================================================


class SubtitleRequestBody(BaseModel):
    """Request body for subtitle-only extraction."""

    url: str = Field(..., min_length=1, max_length=2048, description="Content URL")
    subtitle_lang: str | None = Field(
        None,
        alias="subtitleLang",
        max_length=16,
        description="Subtitle language code (e.g., en, es, pt-BR)",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "subtitleLang": "en"}
        },
    )


class ServiceInfo(BaseModel):
    """A subtitle-capable service."""

    id: str = Field(..., description="Service identifier")
    name: str = Field(..., description="Display name")


class ServicesResponse(BaseModel):
    services: list[ServiceInfo]


class HealthResponse(BaseModel):
    """Response model for enhanced health check."""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    timestamp: float = Field(..., description="Current Unix timestamp")
    uptime_seconds: float = Field(..., description="Service uptime in seconds")
    subtitle_services: list[str] = Field(default_factory=list, description="Subtitle-capable services")
    rate_limiting: dict = Field(default_factory=dict, description="Rate limiting status")


# ============================================================================
# Exception Handlers
# ============================================================================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed requests with the API's error envelope."""
    errors = exc.errors()
    logger.warning(f"Validation error: {errors}")

    details = [f"{' -> '.join(str(x) for x in error['loc'])}: {error['msg']}" for error in errors]
    response = build_response(KIND_ERROR, {"code": "invalid_body", "context": {"detail": "; ".join(details)}})
    return to_json_response(response)


# ============================================================================
# API Endpoints
# ============================================================================


async def process_subtitle_request(url: str, subtitle_lang: str | None) -> JSONResponse:
    """Route a URL and run it through subtitle-only dispatch."""
    if not is_http_url(url):
        logger.warning(f"Invalid URL provided: {sanitize_for_log(url)}")
        return to_json_response(build_response(KIND_ERROR, {"code": LINK_INVALID}))

    route = match_url(url)
    if route is None:
        logger.info(f"Unrecognized URL: {sanitize_for_log(url)}")
        return to_json_response(build_response(KIND_ERROR, {"code": LINK_UNSUPPORTED}))

    request = PlatformRequest(
        platform=route.platform,
        pattern_match=route.pattern_match,
        subtitle_lang=subtitle_lang,
        context=shared_context(),
    )
    response = await run_subtitle_request(request)

    logger.info(
        f"Subtitle request for {route.platform.value} "
        f"({sanitize_for_log(subtitle_lang or 'none')}) -> {response.status_code}"
    )
    return to_json_response(response)


@app.post(
    "/api/v1/subtitles",
    summary="Extract a subtitle track",
    responses={
        200: {"description": "Subtitle track found"},
        400: {"description": "Unsupported service, missing language or extraction error"},
        429: {"description": "Too many requests"},
        500: {"description": "Critical extraction error"},
    },
)
async def post_subtitles(request: Request, body: SubtitleRequestBody) -> JSONResponse:
    """
    Extract only the subtitle track of a piece of content.

    **Example:**
    ```bash
    curl -X POST "http://localhost:9000/api/v1/subtitles" \\
      -H "Content-Type: application/json" \\
      -d '{"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "subtitleLang": "en"}'
    ```
    """
    return await process_subtitle_request(body.url, body.subtitle_lang)


@app.get("/api/v1/subtitles", summary="Extract a subtitle track (query parameters)")
async def get_subtitles(
    request: Request,
    url: str = Query(..., min_length=1, max_length=2048, description="Content URL"),
    subtitle_lang: str | None = Query(
        None, alias="subtitleLang", max_length=16, description="Subtitle language code"
    ),
) -> JSONResponse:
    """Same as the POST endpoint, for clients that can only issue GET requests."""
    return await process_subtitle_request(url, subtitle_lang)


@app.get(
    "/api/v1/subtitles/services",
    response_model=ServicesResponse,
    summary="List services that support subtitle extraction",
)
async def list_services(request: Request) -> ServicesResponse:
    return ServicesResponse(
        services=[
            ServiceInfo(id=platform.value, name=friendly_service_name(platform))
            for platform in capabilities.platforms()
        ]
    )


@app.get("/", summary="Simple health check")
@limiter.exempt
async def root(request: Request) -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}


@app.get("/health", response_model=HealthResponse, summary="Enhanced health check")
@limiter.exempt
async def health(request: Request) -> HealthResponse:
    """Health check with uptime and configuration summary."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=__version__,
        timestamp=time.time(),
        uptime_seconds=time.time() - _app_start_time,
        subtitle_services=[platform.value for platform in capabilities.platforms()],
        rate_limiting={
            "enabled": settings.rate_limit_enabled,
            "per_minute": settings.rate_limit_per_minute,
        },
    )
