"""
Response builder.

Produces the transport-level response for an outcome: an HTTP status code
and a JSON body. Error codes are always fully qualified ("error.api....").
"""

from dataclasses import dataclass
from typing import Any

from subtitle_service.outcomes import (
    FETCH_CRITICAL,
    KIND_CRITICAL,
    KIND_ERROR,
    KIND_SUBTITLE,
    Outcome,
    api_code,
)


@dataclass
class ApiResponse:
    """A built response: HTTP status code plus JSON body."""

    status_code: int
    body: dict[str, Any]


def _critical(code: str | None = None) -> ApiResponse:
    return ApiResponse(
        status_code=500,
        body={
            "status": "error",
            "error": {"code": api_code(code or FETCH_CRITICAL)},
            "critical": True,
        },
    )


def build_response(kind: str, payload: dict[str, Any] | None = None) -> ApiResponse:
    """
    Build the response for a kind and payload.

    Args:
        kind: One of "error", "critical" or "subtitle"
        payload: Kind-specific payload

    Returns:
        ApiResponse; unknown kinds fall back to the generic critical error
    """
    payload = payload or {}

    if kind == KIND_ERROR:
        error: dict[str, Any] = {"code": api_code(payload.get("code") or FETCH_CRITICAL)}
        if payload.get("context") is not None:
            error["context"] = payload["context"]
        return ApiResponse(status_code=400, body={"status": "error", "error": error})

    if kind == KIND_CRITICAL:
        return _critical(payload.get("code"))

    if kind == KIND_SUBTITLE:
        return ApiResponse(
            status_code=200,
            body={
                "status": "subtitle",
                "url": payload.get("url"),
                "language": payload.get("language"),
                "service": payload.get("service"),
                "filename": payload.get("filename"),
                "fileMetadata": payload.get("fileMetadata") or {},
            },
        )

    return _critical()


def response_for(outcome: Outcome) -> ApiResponse:
    """Build the response for a normalized outcome."""
    kind, payload = outcome.to_response()
    return build_response(kind, payload)
