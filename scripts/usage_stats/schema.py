"""
Payload schema for usage stats events.

Defines the event payload sent to the collection endpoint and the timestamp
format it uses.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import UsageStatsClientConfig


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """
    Format a time as an ISO-8601 UTC timestamp with millisecond precision.

    Args:
        now: Time to format (default: current time)

    Returns:
        Timestamp like "2024-01-01T12:00:00.000Z"
    """
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class EventPayload:
    """Single usage stats event, as reported."""
    event: str
    timestamp: str
    user_id: str
    app: str
    app_version: str
    source: str  # "api" or "browser"
    browser: Optional[str] = None
    additional_details: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the wire format.

        browser and additionalDetails are left out when absent. Details are
        sent as given, whatever their shape.

        Returns:
            Dictionary with camelCase keys
        """
        data = {
            "event": self.event,
            "timestamp": self.timestamp,
            "userId": self.user_id,
            "app": self.app,
            "appVersion": self.app_version,
            "source": self.source,
        }
        if self.browser is not None:
            data["browser"] = self.browser
        if self.additional_details is not None:
            data["additionalDetails"] = self.additional_details
        return data

    @classmethod
    def create(
        cls,
        config: UsageStatsClientConfig,
        event: str,
        user_id: str,
        timestamp: str,
        additional_details: Any = None
    ) -> "EventPayload":
        """Create a payload from the client configuration."""
        return cls(
            event=event,
            timestamp=timestamp,
            user_id=user_id,
            app=config.app,
            app_version=config.app_version,
            source=config.source,
            browser=config.browser,
            additional_details=additional_details,
        )
