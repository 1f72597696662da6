"""
Identity resolution for usage stats.

Picks the user id an event is reported under: the host's logged in user when
there is one, otherwise a new guest id that is handed to the host to persist.
"""

import inspect
import uuid
from typing import Any, Callable

from .config import GetUserId, PersistGuestUserId

GUEST_ID_PREFIX = "guest-"


async def maybe_await(value: Any) -> Any:
    """
    Await a value if it is awaitable, otherwise return it as is.

    Host callbacks may be plain functions or coroutine functions.

    Args:
        value: Return value of a host callback

    Returns:
        The resolved value
    """
    if inspect.isawaitable(value):
        return await value
    return value


def generate_guest_id(uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4) -> str:
    """
    Mint a guest user id.

    Args:
        uuid_factory: UUID source (default: uuid4)

    Returns:
        Guest id of the form "guest-<uuid>"
    """
    return f"{GUEST_ID_PREFIX}{uuid_factory()}"


async def resolve_identity(
    get_user_id: GetUserId,
    persist_guest_user_id: PersistGuestUserId,
    uuid_factory: Callable[[], uuid.UUID] = uuid.uuid4
) -> str:
    """
    Resolve the user id to report an event under.

    A new guest id is minted on every call where get_user_id comes back
    empty. Calls only converge on one guest id once the host has persisted
    it and get_user_id starts returning it. Errors from either callback
    propagate.

    Args:
        get_user_id: Host lookup for the current user id
        persist_guest_user_id: Host hook that stores a minted guest id
        uuid_factory: UUID source for guest ids

    Returns:
        The user id, or the newly minted guest id
    """
    user_id = await maybe_await(get_user_id())
    if user_id:
        return user_id

    guest_id = generate_guest_id(uuid_factory)
    await maybe_await(persist_guest_user_id(guest_id))
    return guest_id
