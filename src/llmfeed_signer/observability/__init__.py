"""Observability for the feed signer: structlog-based structured logging.

Example:
    >>> from llmfeed_signer.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("feed.signed", signed_blocks=["feed_type", "metadata"])
"""

from llmfeed_signer.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    is_debug_mode,
    sanitize_for_logging,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "is_debug_mode",
    "sanitize_for_logging",
]
