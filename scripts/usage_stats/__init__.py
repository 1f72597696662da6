"""
Usage stats client package.

Reports anonymous or identified usage events to the usage stats collection
endpoint, with guest id minting, opt-out gating, and failures that never
reach the host application.
"""

from .config import (
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_SECONDS,
    STATS_SOURCES,
    UsageStatsClientConfig
)

from .events import (
    EVENT_DETAILS,
    EVENTS_WITH_DETAILS,
    EVENTS_WITHOUT_DETAILS,
    EpisodeFinishedDetails,
    EpisodeStartedDetails,
    EventWithDetails,
    EventWithoutDetails,
    ExtensionUpdatedDetails,
    ForcedLogoutDetails,
    KeyboardShortcutDetails,
    PlaybackDetails,
    SkippedTimestampDetails,
    event_has_details
)

from .schema import EventPayload, utc_timestamp
from .identity import generate_guest_id, resolve_identity
from .transport import can_send_metrics, post_event
from .client import UsageStatsClient, create_usage_stats_client
from .logs import logger_log, stderr_log

__all__ = [
    # Config
    'DEFAULT_ENDPOINT',
    'DEFAULT_TIMEOUT_SECONDS',
    'STATS_SOURCES',
    'UsageStatsClientConfig',
    # Event catalog
    'EVENT_DETAILS',
    'EVENTS_WITH_DETAILS',
    'EVENTS_WITHOUT_DETAILS',
    'EpisodeFinishedDetails',
    'EpisodeStartedDetails',
    'EventWithDetails',
    'EventWithoutDetails',
    'ExtensionUpdatedDetails',
    'ForcedLogoutDetails',
    'KeyboardShortcutDetails',
    'PlaybackDetails',
    'SkippedTimestampDetails',
    'event_has_details',
    # Schema
    'EventPayload',
    'utc_timestamp',
    # Pipeline
    'generate_guest_id',
    'resolve_identity',
    'can_send_metrics',
    'post_event',
    # Client
    'UsageStatsClient',
    'create_usage_stats_client',
    # Log sinks
    'logger_log',
    'stderr_log',
]

__version__ = '1.0.0'
