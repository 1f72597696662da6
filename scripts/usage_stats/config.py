"""
Client configuration for usage stats.

Holds the app metadata attached to every event and the host callbacks the
client uses to look up and persist user ids, log, and decide whether metrics
may be sent. The configuration is frozen once built.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from .logs import stderr_log

DEFAULT_ENDPOINT = "https://usage-stats.anime-skip.com/events"
DEFAULT_TIMEOUT_SECONDS = 5.0
STATS_SOURCES = ("api", "browser")

GetUserId = Callable[[], Union[Optional[str], Awaitable[Optional[str]]]]
PersistGuestUserId = Callable[[str], Union[None, Awaitable[None]]]
CanSendMetrics = Union[None, bool, Callable[[], Union[bool, Awaitable[bool]]]]


@dataclass(frozen=True)
class UsageStatsClientConfig:
    """
    Immutable configuration for a UsageStatsClient.

    Attributes:
        app: Name of the app stats are collected for
        app_version: Version of the app stats are collected for
        source: Where events come from, "api" or "browser"
        get_user_id: Returns the logged in user's id, or None when there
            isn't one. May be a coroutine function.
        persist_guest_user_id: Saves a freshly minted guest id to wherever
            get_user_id reads from, so later lookups return it. May be a
            coroutine function.
        browser: Browser identifier, if any
        log: Sink for every message the client produces
        can_send_metrics: Permission to send. A bool, or a callable (sync or
            async) asked once per event. None means events are only logged.
        endpoint: URL events are POSTed to
        timeout: HTTP request timeout in seconds
        uuid_factory: Source of randomness for guest ids
    """
    app: str
    app_version: str
    source: str
    get_user_id: GetUserId
    persist_guest_user_id: PersistGuestUserId
    browser: Optional[str] = None
    log: Callable[..., None] = stderr_log
    can_send_metrics: CanSendMetrics = None
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    uuid_factory: Callable[[], uuid.UUID] = field(default=uuid.uuid4, repr=False)

    def __post_init__(self):
        """Validate configuration."""
        if not self.app:
            raise ValueError("app is required")
        if not self.app_version:
            raise ValueError("app_version is required")
        if self.source not in STATS_SOURCES:
            raise ValueError(
                f"source must be one of {', '.join(STATS_SOURCES)}, got {self.source!r}"
            )
        if not self.endpoint:
            raise ValueError("endpoint is required")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

        for name in ("get_user_id", "persist_guest_user_id", "log", "uuid_factory"):
            if not callable(getattr(self, name)):
                raise TypeError(f"{name} must be callable")

        gate = self.can_send_metrics
        if gate is not None and not isinstance(gate, bool) and not callable(gate):
            raise TypeError("can_send_metrics must be a bool, a callable, or None")

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary, leaving out the callbacks.

        Returns:
            Loggable view of the configuration
        """
        return {
            "app": self.app,
            "appVersion": self.app_version,
            "source": self.source,
            "browser": self.browser,
            "endpoint": self.endpoint,
            "timeout": self.timeout,
            "canSendMetrics": (
                self.can_send_metrics
                if self.can_send_metrics is None or isinstance(self.can_send_metrics, bool)
                else "dynamic"
            ),
        }
