"""
Entry point for the subtitle service.

Run this file directly to start the FastAPI server:
    python main.py

Or use uvicorn directly:
    uvicorn subtitle_service.main:app --reload --host 0.0.0.0 --port 9000
"""

import uvicorn

from subtitle_service.config import settings


def main() -> None:
    """
    Start the uvicorn server.

    Server configuration can be overridden via environment variables:
    - HOST: Server host (default: 0.0.0.0)
    - PORT: Server port (default: 9000)
    - LOG_LEVEL: Log level (default: info)
    - DURATION_LIMIT: Longest accepted content in seconds
    """
    print("=" * 60)
    print("Subtitle Service")
    print("=" * 60)
    print(f"Starting server on http://{settings.host}:{settings.port}")
    print(f"Duration limit: {settings.duration_limit}s")
    print("=" * 60)

    uvicorn.run(
        "subtitle_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
