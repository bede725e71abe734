"""
common.logging_setup

Set up standard logging for the project.
"""
import logging

def setup_logging(level: int | str = logging.INFO):
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    # uvicorn access lines are noisy next to the per-route logs
    logging.getLogger("uvicorn.access").setLevel(max(level, logging.WARNING))


def log_with_context(logger: logging.Logger, level: int, message: str, **context):
    """Log message followed by key=value pairs."""
    if context:
        message = message + " " + " ".join(f"{k}={v}" for k, v in context.items())
    logger.log(level, message)
