"""
Log sinks for the usage stats client.

The client never logs on its own; it hands every message to the `log`
callable from its configuration. These are ready-made sinks for hosts that
don't bring their own.
"""

import logging
import sys
from typing import Any, Callable, Optional


def stderr_log(*args: Any):
    """
    Print a warning line to stderr.

    Args:
        *args: Values to log, joined with spaces like print()
    """
    print("Warning: usage stats:", *args, file=sys.stderr)


def logger_log(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG
) -> Callable[..., None]:
    """
    Build a log sink that forwards to a standard library logger.

    Exceptions among the arguments are attached as exc_info so the
    traceback shows up in the host's handlers.

    Args:
        logger: Logger to forward to (default: "usage_stats")
        level: Level to log at

    Returns:
        Callable usable as UsageStatsClientConfig.log
    """
    logger = logger or logging.getLogger("usage_stats")

    def log(*args: Any):
        exc = next((a for a in args if isinstance(a, BaseException)), None)
        exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
        logger.log(level, " ".join("%s" for _ in args), *args, exc_info=exc_info)

    return log
