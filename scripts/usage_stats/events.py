"""
Event catalog for usage stats.

Declares the closed set of events a client can report and the shape of the
additional details each one carries. Detail shapes are TypedDicts keyed by
their wire names, so a details dict is sent exactly as written.

The catalog is informational at runtime: save_event() does not validate
details against it. Type checkers enforce it through the overloads on
UsageStatsClient.save_event().
"""

from types import MappingProxyType
from typing import FrozenSet, Literal, Mapping, Optional, Type, TypedDict


# Detail shapes

ExtensionUpdatedDetails = TypedDict(
    "ExtensionUpdatedDetails",
    {"fromVersion": str, "toVersion": str},
)

ForcedLogoutDetails = TypedDict(
    "ForcedLogoutDetails",
    {"tokenExpiredAt": float, "refreshTokenExpiredAt": float, "apiError": str},
    total=False,
)

EpisodeStartedDetails = TypedDict(
    "EpisodeStartedDetails",
    {"episodeDuration": float, "service": str},
)

EpisodeFinishedDetails = TypedDict(
    "EpisodeFinishedDetails",
    {"episodeDuration": float},
)

PlaybackDetails = TypedDict(
    "PlaybackDetails",
    {"atTime": float},
)

SkippedTimestampDetails = TypedDict(
    "SkippedTimestampDetails",
    {"typeId": str, "fromTime": float, "toTime": float, "skippedDuration": float},
)

KeyboardShortcutDetails = TypedDict(
    "KeyboardShortcutDetails",
    {"keyCombo": str, "operation": str},
)


# Event names

EventWithoutDetails = Literal[
    "extension_installed",
    "extension_uninstalled",
    "login",
    "login_refresh",
    "logout",
    "player_injected",
    "opened_popup",
    "opened_all_settings",
    "prompt_store_review",
    "prompt_store_review_rate",
    "prompt_store_review_dont_ask_again",
]

EventWithDetails = Literal[
    "extension_updated",
    "forced_logout",
    "episode_started",
    "episode_finished",
    "play",
    "pause",
    "skipped_timestamp",
    "used_keyboard_shortcut",
    "started_creating_timestamp",
]


# Event name -> detail shape (None when the event takes no details)
EVENT_DETAILS: Mapping[str, Optional[Type[dict]]] = MappingProxyType({
    "extension_installed": None,
    "extension_updated": ExtensionUpdatedDetails,
    "extension_uninstalled": None,
    "login": None,
    "login_refresh": None,
    "logout": None,
    "forced_logout": ForcedLogoutDetails,
    "player_injected": None,
    "episode_started": EpisodeStartedDetails,
    "episode_finished": EpisodeFinishedDetails,
    "play": PlaybackDetails,
    "pause": PlaybackDetails,
    "skipped_timestamp": SkippedTimestampDetails,
    "opened_popup": None,
    "opened_all_settings": None,
    "used_keyboard_shortcut": KeyboardShortcutDetails,
    "started_creating_timestamp": PlaybackDetails,
    "prompt_store_review": None,
    "prompt_store_review_rate": None,
    "prompt_store_review_dont_ask_again": None,
})

EVENTS_WITHOUT_DETAILS: FrozenSet[str] = frozenset(
    name for name, shape in EVENT_DETAILS.items() if shape is None
)

EVENTS_WITH_DETAILS: FrozenSet[str] = frozenset(
    name for name, shape in EVENT_DETAILS.items() if shape is not None
)


def event_has_details(event: str) -> bool:
    """
    Check whether a catalog event carries additional details.

    Args:
        event: Event name

    Returns:
        True if the event declares a detail shape

    Raises:
        KeyError: If the event is not in the catalog
    """
    return EVENT_DETAILS[event] is not None
