#!/usr/bin/env python3
"""
Tests for the usage stats client.

Tests payload assembly, identity handling, gating, and that failures at any
stage are logged instead of raised.
"""

import sys
import re
import json
import asyncio
from pathlib import Path
from datetime import datetime, timezone, timedelta

import httpx

# Add parent to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from usage_stats.client import UsageStatsClient, create_usage_stats_client
from usage_stats.config import DEFAULT_ENDPOINT, UsageStatsClientConfig

GUEST_ID_PATTERN = re.compile(r"^guest-[0-9a-f-]{36}$")


class Recorder:
    """Mock host: records log calls, persisted ids, and HTTP requests."""

    def __init__(self, user_id=None, status=200):
        self.user_id = user_id
        self.status = status
        self.log_calls = []
        self.persisted = []
        self.requests = []

    def get_user_id(self):
        return self.user_id

    def persist_guest_user_id(self, user_id):
        self.persisted.append(user_id)

    def log(self, *args):
        self.log_calls.append(args)

    def handler(self, request):
        self.requests.append(request)
        return httpx.Response(self.status)

    def config(self, **overrides):
        options = {
            "app": "demo",
            "app_version": "1.0",
            "source": "api",
            "get_user_id": self.get_user_id,
            "persist_guest_user_id": self.persist_guest_user_id,
            "log": self.log,
            "can_send_metrics": True,
        }
        options.update(overrides)
        return UsageStatsClientConfig(**options)

    def save(self, config, event, *details):
        """Run save_event against the mock transport and return its result."""
        async def save():
            async with httpx.AsyncClient(transport=httpx.MockTransport(self.handler)) as http_client:
                client = create_usage_stats_client(config, http_client=http_client)
                return await client.save_event(event, *details)

        return asyncio.run(save())

    def reported(self):
        """Payloads passed to the log sink as reported events."""
        return [args[1]["event"] for args in self.log_calls if args[0] == "Reported event:"]

    def failures(self, message="Failed to send event:"):
        return [args for args in self.log_calls if args[0] == message]


def test_event_without_details():
    """Test payload for an event with no details."""
    print("Testing event without details...")

    host = Recorder(user_id="user-42")
    result = host.save(host.config(), "login")

    assert result is None
    assert len(host.requests) == 1
    body = json.loads(host.requests[0].content)

    assert body["event"] == "login"
    assert body["userId"] == "user-42"
    assert body["app"] == "demo"
    assert body["appVersion"] == "1.0"
    assert body["source"] == "api"
    assert "browser" not in body, "Absent browser should be left out"
    assert "additionalDetails" not in body, "No details should be sent"
    assert host.persisted == []

    print("✓ Event without details test passed")


def test_event_with_details():
    """Test that details are sent as given."""
    print("Testing event with details...")

    host = Recorder(user_id="user-42")
    details = {"typeId": "intro", "fromTime": 10.0, "toTime": 95.5, "skippedDuration": 85.5}
    host.save(host.config(source="browser", browser="firefox"), "skipped_timestamp", details)

    body = json.loads(host.requests[0].content)
    assert body["additionalDetails"] == details
    assert body["source"] == "browser"
    assert body["browser"] == "firefox"

    print("✓ Event with details test passed")


def test_non_mapping_details_sent_unchanged():
    """Test that details of any shape are sent as given."""
    print("Testing non-mapping details...")

    for details in ([1, 2], [["atTime", 3.0]], "intro", 42):
        host = Recorder(user_id="user-42")
        host.save(host.config(), "play", details)

        assert len(host.requests) == 1, f"Details {details!r} should be sent"
        body = json.loads(host.requests[0].content)
        assert body["additionalDetails"] == details
        assert host.failures() == []

    print("✓ Non-mapping details test passed")


def test_guest_identity():
    """Test that a guest id is minted, persisted, and reported."""
    print("Testing guest identity...")

    host = Recorder(user_id=None)
    host.save(host.config(), "extension_installed")

    body = json.loads(host.requests[0].content)
    assert GUEST_ID_PATTERN.match(body["userId"]), f"Unexpected user id: {body['userId']}"
    assert host.persisted == [body["userId"]]

    print("✓ Guest identity test passed")


def test_timestamp_within_call():
    """Test that the timestamp is ISO-8601 UTC and taken during the call."""
    print("Testing timestamp...")

    host = Recorder(user_id="user-42")
    before = datetime.now(timezone.utc) - timedelta(milliseconds=1)
    host.save(host.config(), "logout")
    after = datetime.now(timezone.utc)

    timestamp = json.loads(host.requests[0].content)["timestamp"]
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$", timestamp), timestamp

    parsed = datetime.fromisoformat(timestamp.replace('Z', '+00:00'))
    assert before <= parsed <= after, f"{timestamp} outside call window"

    print("✓ Timestamp test passed")


def test_gate_off():
    """Test that denied events are only logged."""
    print("Testing gate off...")

    for gate in (False, None, lambda: False):
        host = Recorder(user_id="user-42")
        host.save(host.config(can_send_metrics=gate), "login")

        assert host.requests == [], f"No request expected for gate {gate!r}"
        reported = host.reported()
        assert len(reported) == 1
        assert reported[0]["event"] == "login"
        assert reported[0]["userId"] == "user-42"

    print("✓ Gate off test passed")


def test_async_gate_on():
    """Test an async permission predicate."""
    print("Testing async gate...")

    async def allowed():
        return True

    host = Recorder(user_id="user-42")
    host.save(host.config(can_send_metrics=allowed), "opened_popup")

    assert len(host.requests) == 1
    assert str(host.requests[0].url) == DEFAULT_ENDPOINT

    print("✓ Async gate test passed")


def test_lookup_failure_swallowed():
    """Test that a failing user lookup is logged, not raised."""
    print("Testing lookup failure...")

    host = Recorder()
    error = RuntimeError("session store unavailable")

    def get_user_id():
        raise error

    result = host.save(host.config(get_user_id=get_user_id), "login")

    assert result is None
    assert host.requests == []
    assert host.failures() == [("Failed to send event:", error)]

    print("✓ Lookup failure test passed")


def test_async_persist_failure_swallowed():
    """Test that a failing async persistence hook is logged, not raised."""
    print("Testing persistence failure...")

    host = Recorder(user_id=None)

    async def persist_guest_user_id(user_id):
        raise OSError("storage full")

    host.save(host.config(persist_guest_user_id=persist_guest_user_id), "login")

    assert host.requests == []
    failures = host.failures()
    assert len(failures) == 1
    assert isinstance(failures[0][1], OSError)

    print("✓ Persistence failure test passed")


def test_gate_failure_swallowed():
    """Test that a failing permission predicate is logged, not raised."""
    print("Testing gate failure...")

    host = Recorder(user_id="user-42")

    def can_send_metrics():
        raise ValueError("settings not loaded")

    host.save(host.config(can_send_metrics=can_send_metrics), "login")

    assert host.requests == []
    assert len(host.failures()) == 1

    print("✓ Gate failure test passed")


def test_network_failure_swallowed():
    """Test that network and status failures are logged, not raised."""
    print("Testing network failure...")

    host = Recorder(user_id="user-42", status=500)
    result = host.save(host.config(), "login")

    assert result is None
    assert len(host.requests) == 1
    fetch_failures = host.failures("Fetch failed:")
    assert len(fetch_failures) == 1
    assert isinstance(fetch_failures[0][1], httpx.HTTPStatusError)
    assert host.failures() == [], "Transport failures are handled by the gate"

    print("✓ Network failure test passed")


def test_serialization_failure_swallowed():
    """Test that unserializable details are logged, not raised."""
    print("Testing serialization failure...")

    host = Recorder(user_id="user-42")
    host.save(host.config(), "play", {"atTime": {1, 2}})

    assert host.requests == []
    failures = host.failures()
    assert len(failures) == 1
    assert isinstance(failures[0][1], TypeError)

    print("✓ Serialization failure test passed")


def test_concurrent_events():
    """Test concurrent calls are independent and each mint a guest id."""
    print("Testing concurrent events...")

    host = Recorder(user_id=None)
    config = host.config()

    async def save_many():
        async with httpx.AsyncClient(transport=httpx.MockTransport(host.handler)) as http_client:
            client = UsageStatsClient(config, http_client=http_client)
            await asyncio.gather(
                client.save_event("login"),
                client.save_event("play", {"atTime": 1.0}),
                client.save_event("logout"),
            )

    asyncio.run(save_many())

    assert len(host.requests) == 3
    user_ids = {json.loads(r.content)["userId"] for r in host.requests}
    assert len(user_ids) == 3, "Host never persisted, so each call mints its own id"
    assert set(host.persisted) == user_ids

    print("✓ Concurrent events test passed")


def test_save_event_sync():
    """Test reporting from synchronous code."""
    print("Testing save_event_sync...")

    host = Recorder(user_id="user-42")
    client = create_usage_stats_client(host.config(can_send_metrics=False))

    assert client.save_event_sync("login") is None
    assert [e["event"] for e in host.reported()] == ["login"]

    async def inside_loop():
        task = client.save_event_sync("logout")
        assert isinstance(task, asyncio.Task), "Should schedule on the running loop"
        assert task in client._pending
        await task
        await asyncio.sleep(0)
        assert task not in client._pending

    asyncio.run(inside_loop())

    assert host.failures() == []
    assert [e["event"] for e in host.reported()] == ["login", "logout"]

    print("✓ save_event_sync test passed")


def run_all_tests():
    """Run all client tests."""
    print("=" * 60)
    print("Running Usage Stats Client Tests")
    print("=" * 60 + "\n")

    tests = [
        test_event_without_details,
        test_event_with_details,
        test_non_mapping_details_sent_unchanged,
        test_guest_identity,
        test_timestamp_within_call,
        test_gate_off,
        test_async_gate_on,
        test_lookup_failure_swallowed,
        test_async_persist_failure_swallowed,
        test_gate_failure_swallowed,
        test_network_failure_swallowed,
        test_serialization_failure_swallowed,
        test_concurrent_events,
        test_save_event_sync
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
            print()
        except AssertionError as e:
            print(f"✗ Test failed: {e}")
            failed += 1
            print()
        except Exception as e:
            print(f"✗ Test error: {e}")
            failed += 1
            print()

    print("=" * 60)
    print(f"Tests: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
