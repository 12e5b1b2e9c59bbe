"""
Loguru sink configuration.

Every line carries the request id bound by the HTTP layer through
``logger.contextualize(request_id=...)``; lines logged outside a request
show ``-``.
"""

import sys

from loguru import logger

from container_gateway.settings import Settings

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss!UTC} UTC [{extra[request_id]:<36}] "
    "{level: >7} {name} - {message}"
)


def setup_logging(settings: Settings) -> None:
    """Replace loguru's default sink with stderr and an optional rolling file."""
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT)

    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            format=LOG_FORMAT,
            rotation="10 MB",
            retention=20,
            compression="gz",
            enqueue=True,
        )

    logger.info(f"Logging configured at {settings.log_level}")
