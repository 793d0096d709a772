"""Console handler factory."""

import logging
import sys
from typing import Optional, TextIO


def create_console_handler(
    level: int,
    formatter: logging.Formatter,
    stream: Optional[TextIO] = None,
) -> logging.StreamHandler:
    """
    Create console handler.

    Args:
        level: Log level (e.g. logging.INFO)
        formatter: Formatter instance
        stream: Output stream, stdout by default

    Returns:
        StreamHandler configured for console

    Example:
        >>> from .formatters import ColoredFormatter
        >>> handler = create_console_handler(logging.INFO, ColoredFormatter())
        >>> logging.getLogger("http_call_logger").addHandler(handler)
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler
