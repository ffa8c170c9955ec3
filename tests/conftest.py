"""
Module: conftest.py
Description: Shared pytest fixtures for webhook relay tests.

Provides test settings that ignore the environment, a recording sleep
primitive, a recording delivery observer, a scripted fake endpoint
built on httpx.MockTransport and payload/notification factories.
"""

import asyncio
from typing import Any, Dict, List

import httpx
import pytest

from sheethook.config.settings import Settings
from sheethook.models.payload import Payload

WEBHOOK_URL = "https://hooks.example.com/sheet-changes"
WEBHOOK_SECRET = "test-secret-0123456789"
FIXED_TIMESTAMP = "2024-01-15T10:30:00.000Z"


class FakeSleep:
    """Async sleep that records requested delays and only yields."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


class RecordingObserver:
    """Delivery observer that keeps every observation."""

    def __init__(self):
        self.successes: List[Dict[str, Any]] = []
        self.failures: List[Dict[str, Any]] = []

    def on_success(self, payload, attempts, status_code, response_body):
        self.successes.append({
            "payload": payload,
            "attempts": attempts,
            "status_code": status_code,
            "response_body": response_body,
        })

    def on_failure(self, payload, attempts, error):
        self.failures.append({
            "payload": payload,
            "attempts": attempts,
            "error": error,
        })


class ScriptedEndpoint:
    """
    Fake webhook endpoint.

    Each request consumes the next step of the script; the last step
    repeats once the script runs out. A step is an HTTP status code or
    an httpx exception class to raise.
    """

    def __init__(self, script):
        self._script = list(script) or [200]
        self.requests: List[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Yield so an overlapping request would be observable
            await asyncio.sleep(0)
            self.requests.append(request)
            step = self._script[min(len(self.requests), len(self._script)) - 1]
            if isinstance(step, type) and issubclass(step, Exception):
                raise step("scripted failure", request=request)
            text = "ok" if step == 200 else f"scripted status {step}"
            return httpx.Response(step, text=text)
        finally:
            self.in_flight -= 1

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))

    @property
    def bodies(self) -> List[bytes]:
        return [request.content for request in self.requests]


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Disables .env loading and fixes endpoint, secret and delays so
    tests do not depend on the environment.
    """
    return Settings(
        _env_file=None,
        webhook_endpoint=WEBHOOK_URL,
        webhook_secret=WEBHOOK_SECRET,
        max_attempts=3,
        base_delay_ms=1000,
        pacing_interval_ms=5000,
        log_level="DEBUG"
    )


@pytest.fixture
def fake_sleep():
    """Provide a sleep primitive that records delays without waiting."""
    return FakeSleep()


@pytest.fixture
def recording_observer():
    """Provide an observer that records delivery outcomes."""
    return RecordingObserver()


@pytest.fixture
def scripted_endpoint():
    """Provide a factory for scripted fake endpoints."""
    return ScriptedEndpoint


@pytest.fixture
def make_payload():
    """
    Provide a payload factory.

    Builds edit payloads by default with a fixed timestamp so encoded
    bytes are reproducible.
    """
    def _make(row_number: int = 2, change_type: str = "EDIT", **domain_fields) -> Payload:
        data: Dict[str, Any] = {
            "row_number": row_number,
            "timestamp": FIXED_TIMESTAMP,
            "change_type": change_type,
        }
        if change_type == "EDIT":
            data["edited_column"] = "Status"
            data["old_value"] = "Pending"
            data["new_value"] = "Approved"
        data.update(domain_fields or {"Name": "Ada", "Status": "Approved"})
        return Payload(data=data)

    return _make


@pytest.fixture
def sample_edit_notification():
    """
    Provide a typical edit notification on the last column.

    The sheet has five columns; column 5 (Status) changed on row 7.
    """
    return {
        "kind": "EDIT",
        "row": 7,
        "column": 5,
        "headers": ["Name", "Email", "Team", "Notes", "Status"],
        "values": ["Ada", "ada@example.com", "Core", "", "Approved"],
        "old_value": "Pending",
        "new_value": "Approved",
        "sheet_name": "Requests"
    }
