"""
Usage stats client.

Reports usage events to the collection endpoint under the current user's id,
or a guest id when nobody is logged in. Reporting never raises: every
failure is handed to the configured log sink instead.

Usage:
    from usage_stats import UsageStatsClientConfig, create_usage_stats_client

    client = create_usage_stats_client(UsageStatsClientConfig(
        app="my-app",
        app_version="1.2.0",
        source="api",
        get_user_id=lambda: store.get("user_id"),
        persist_guest_user_id=lambda user_id: store.set("user_id", user_id),
        can_send_metrics=True,
    ))

    await client.save_event("login")
    await client.save_event("play", {"atTime": 12.5})
"""

import asyncio
from typing import Any, Literal, Optional, Set, overload

import httpx

from .config import UsageStatsClientConfig
from .events import (
    EpisodeFinishedDetails,
    EpisodeStartedDetails,
    EventWithoutDetails,
    ExtensionUpdatedDetails,
    ForcedLogoutDetails,
    KeyboardShortcutDetails,
    PlaybackDetails,
    SkippedTimestampDetails,
)
from .identity import resolve_identity
from .schema import EventPayload, utc_timestamp
from .transport import post_event


class UsageStatsClient:
    """
    Client for reporting usage events.

    Holds no state between calls besides its configuration and the tasks
    save_event_sync() schedules, so concurrent save_event() calls are
    independent of each other.
    """

    def __init__(
        self,
        config: UsageStatsClientConfig,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize client.

        Args:
            config: Client configuration
            http_client: Shared HTTP client (default: one per request)
        """
        self.config = config
        self.http_client = http_client
        self._pending: Set["asyncio.Task[None]"] = set()

    @overload
    async def save_event(self, event: EventWithoutDetails) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["extension_updated"], additional_details: ExtensionUpdatedDetails
    ) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["forced_logout"], additional_details: ForcedLogoutDetails
    ) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["episode_started"], additional_details: EpisodeStartedDetails
    ) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["episode_finished"], additional_details: EpisodeFinishedDetails
    ) -> None: ...

    @overload
    async def save_event(
        self,
        event: Literal["play", "pause", "started_creating_timestamp"],
        additional_details: PlaybackDetails,
    ) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["skipped_timestamp"], additional_details: SkippedTimestampDetails
    ) -> None: ...

    @overload
    async def save_event(
        self, event: Literal["used_keyboard_shortcut"], additional_details: KeyboardShortcutDetails
    ) -> None: ...

    async def save_event(
        self,
        event: str,
        additional_details: Any = None
    ) -> None:
        """
        Report a usage event.

        Never raises. Details are not checked against the event catalog at
        runtime.

        Args:
            event: Event name
            additional_details: Details for events that declare them
        """
        try:
            timestamp = utc_timestamp()
            user_id = await resolve_identity(
                self.config.get_user_id,
                self.config.persist_guest_user_id,
                self.config.uuid_factory,
            )
            payload = EventPayload.create(
                self.config,
                event=event,
                user_id=user_id,
                timestamp=timestamp,
                additional_details=additional_details,
            )
            await post_event(payload, self.config, self.http_client)
        except Exception as e:
            self.config.log("Failed to send event:", e)

    def save_event_sync(
        self,
        event: str,
        additional_details: Any = None
    ) -> Optional["asyncio.Task[None]"]:
        """
        Report a usage event from synchronous code.

        Without a running event loop, runs save_event() to completion on a
        new one. Inside a running loop, schedules save_event() as a task on
        it and returns the task; the client holds a reference until it
        finishes. Don't combine the no-loop path with a shared http_client,
        which is bound to the loop it was used on.

        Args:
            event: Event name
            additional_details: Details for events that declare them

        Returns:
            The scheduled task inside a running loop, otherwise None
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.save_event(event, additional_details))
            return None

        task = loop.create_task(self.save_event(event, additional_details))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task


def create_usage_stats_client(
    config: UsageStatsClientConfig,
    http_client: Optional[httpx.AsyncClient] = None
) -> UsageStatsClient:
    """
    Create a usage stats client.

    Args:
        config: Client configuration
        http_client: Shared HTTP client (default: one per request)

    Returns:
        UsageStatsClient instance
    """
    return UsageStatsClient(config, http_client=http_client)
