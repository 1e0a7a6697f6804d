"""Command-line entrypoint that serves the API with uvicorn."""

import uvicorn

from dreamcatcher.config import Settings


def main(settings: Settings | None = None) -> None:
    """Serve the API from a single worker process.

    The capture session and its transcript consumer live in process memory,
    so every request must reach the same worker and event loop.
    """
    resolved_settings = settings or Settings()
    uvicorn.run(
        "dreamcatcher.api.asgi:app",
        host=resolved_settings.host,
        port=resolved_settings.port,
        workers=1,
        log_level=resolved_settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
