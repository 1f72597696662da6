"""
Transport gate for usage stats events.

Asks the host whether metrics may be sent, logs the decision along with the
event, and POSTs the event to the collection endpoint when allowed. Network
failures are logged and never raised.
"""

import json
from typing import Optional

import httpx

from .config import UsageStatsClientConfig
from .identity import maybe_await
from .schema import EventPayload


async def can_send_metrics(config: UsageStatsClientConfig) -> bool:
    """
    Decide whether an event may be sent.

    Args:
        config: Client configuration

    Returns:
        True if the event should be POSTed, False to only log it
    """
    gate = config.can_send_metrics
    if gate is None or isinstance(gate, bool):
        return bool(gate)
    return bool(await maybe_await(gate()))


async def post_event(
    payload: EventPayload,
    config: UsageStatsClientConfig,
    http_client: Optional[httpx.AsyncClient] = None
):
    """
    Report an event, sending it over the network if permitted.

    Errors from the permission callback and from serializing the payload
    propagate. HTTP errors, including non-2xx responses, are logged only.

    Args:
        payload: Event to report
        config: Client configuration
        http_client: Client to send with (default: a new one per request)
    """
    event = payload.to_dict()
    allowed = await can_send_metrics(config)
    config.log("Reported event:", {"event": event, "canSendMetrics": allowed})
    if not allowed:
        return

    body = json.dumps(event)
    headers = {"Content-Type": "application/json"}

    try:
        if http_client is not None:
            response = await http_client.post(
                config.endpoint, content=body, headers=headers, timeout=config.timeout
            )
        else:
            async with httpx.AsyncClient(timeout=config.timeout) as client:
                response = await client.post(config.endpoint, content=body, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as e:
        config.log("Fetch failed:", e)
