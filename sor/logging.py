"""structlog setup for the API server and scripts."""

import logging

import structlog


def configure_logging(level: int | str = logging.INFO, json: bool = False) -> None:
    """Configure structlog processors.

    Args:
        level: Minimum level, as a logging constant or name ("DEBUG", "info")
        json: Render JSON lines instead of the console renderer
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
