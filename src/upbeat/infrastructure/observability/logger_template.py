"""Shared logging helpers for timing multi-step operations.

USAGE:
    from upbeat.infrastructure.observability.logger_template import log_operation

    async with log_operation(logger, "playlist_generation", provider="itunes"):
        await generate()
"""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


# Yo, this logs {operation}.started / .completed / .failed with duration_ms. The **context kwargs
# become extra fields on every line. On failure it logs and RE-RAISES, it never swallows. Don't
# pass "message" or other LogRecord attribute names as context keys, logging rejects them.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    **context: Any,
) -> AsyncIterator[None]:
    """Context manager for logging operation start/end with automatic timing.

    Args:
        logger: Logger of the calling module
        operation: Operation name (e.g., "playlist_generation", "spotify_export")
        **context: Additional fields to include in logs (e.g., playlist_id="abc")
    """
    start = time.time()
    logger.info(f"{operation}.started", extra=context)

    try:
        yield
    except Exception as e:
        duration_ms = int((time.time() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise

    duration_ms = int((time.time() - start) * 1000)
    logger.info(
        f"{operation}.completed",
        extra={**context, "duration_ms": duration_ms},
    )
