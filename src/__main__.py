"""Run the Calculator API with uvicorn.

uvicorn stops accepting connections on SIGTERM/SIGINT and lets in-flight
requests drain before the lifespan closes the database pool. Requests still
running after SHUTDOWN_TIMEOUT_SECONDS are cancelled.
"""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=False,
        timeout_graceful_shutdown=settings.SHUTDOWN_TIMEOUT_SECONDS,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
