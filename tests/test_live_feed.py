# tests/test_live_feed.py
"""Live feed listener: frame handling, storage, reconnect backoff and failover."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
from unittest.mock import AsyncMock, patch
import pytest

from app.models import Alert, Zone, City
from app.services.live_feed import ConnectionState, LiveFeedClient, RECENT_ALERTS_LIMIT


class FakeSocket:
    """Async context manager + async iterator over prepared frames."""

    def __init__(self, frames):
        self.frames = list(frames)
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.frames:
            raise StopAsyncIteration
        return self.frames.pop(0)

    async def close(self):
        self.closed = True


class FakeConnector:
    """Each call consumes one scripted outcome: a frame list or an exception."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        outcome = self.outcomes.pop(0) if self.outcomes else ConnectionRefusedError("refused")
        if isinstance(outcome, Exception):
            raise outcome
        return FakeSocket(outcome)


def _alert_frame(**data):
    payload = {"types": ["intrusion"], "severity": "high", "location": "North Perimeter"}
    payload.update(data)
    return json.dumps({"type": "alert", "data": payload})


def _client(connector=None, **kwargs):
    kwargs.setdefault("store_alerts", False)
    return LiveFeedClient(
        "ws://primary/feed",
        connector=connector or FakeConnector([]),
        sleep=AsyncMock(),
        **kwargs,
    )


class TestFrames:
    @pytest.mark.asyncio
    async def test_alert_frame_buffered(self):
        feed = _client()
        event = await feed.handle_message(_alert_frame())

        assert event.types == ["INTRUSION"]
        assert event.severity == "HIGH"
        assert list(feed.recent_alerts) == [event]

    @pytest.mark.asyncio
    async def test_bytes_frame(self):
        feed = _client()
        assert await feed.handle_message(_alert_frame().encode()) is not None

    @pytest.mark.asyncio
    async def test_incomplete_alert_ignored(self):
        feed = _client()
        for data in [{"types": []}, {"severity": ""}, {"location": None}]:
            assert await feed.handle_message(_alert_frame(**data)) is None
        assert len(feed.recent_alerts) == 0

    @pytest.mark.asyncio
    async def test_non_alert_frames(self):
        feed = _client()
        assert await feed.handle_message(json.dumps({"type": "connection_established", "message": "hi"})) is None
        assert await feed.handle_message(json.dumps({"type": "error", "error": "upstream down"})) is None
        assert await feed.handle_message(json.dumps({"type": "heartbeat"})) is None
        assert await feed.handle_message("not json at all") is None
        assert await feed.handle_message(json.dumps(["a", "list"])) is None
        assert len(feed.recent_alerts) == 0

    @pytest.mark.asyncio
    async def test_buffer_is_bounded_newest_first(self):
        feed = _client()
        for i in range(RECENT_ALERTS_LIMIT + 5):
            await feed.handle_message(_alert_frame(description=f"#{i}"))

        assert len(feed.recent_alerts) == RECENT_ALERTS_LIMIT
        assert feed.recent_alerts[0].description == f"#{RECENT_ALERTS_LIMIT + 4}"

    def test_snapshot(self):
        feed = _client()
        snap = feed.snapshot()
        assert snap["state"] == "DISCONNECTED"
        assert snap["url"] == "ws://primary/feed"
        assert snap["recentAlerts"] == []


class TestStorage:
    @pytest.mark.asyncio
    async def test_alerts_stored_in_default_zone(self, db, session_factory):
        db.add(City(id="feed-city", name="Feedville"))
        db.commit()

        feed = _client(city_id="feed-city", store_alerts=True, session_factory=session_factory)
        await feed.handle_message(_alert_frame())
        await feed.handle_message(_alert_frame(types=["fire"]))

        zones = db.query(Zone).filter(Zone.city_id == "feed-city").all()
        assert [z.name for z in zones] == ["Default Zone"]
        alerts = db.query(Alert).all()
        assert len(alerts) == 2
        assert {a.zone_id for a in alerts} == {zones[0].id}
        assert feed.zone_id == zones[0].id

    def test_storage_disabled_without_city(self):
        feed = _client(store_alerts=True)
        assert feed.store_alerts is False

    def test_storage_errors_are_contained(self, db, seeded, session_factory):
        feed = _client(city_id="c1", store_alerts=True, session_factory=session_factory)
        with patch("app.services.live_feed.ingest_alert", side_effect=RuntimeError("db down")):
            assert feed.store_alert({"types": ["fire"], "severity": "low", "location": "Depot"}) is None
        assert db.query(Alert).count() == 0


class TestReconnect:
    def test_backoff_within_jitter_bounds(self):
        feed = _client(min_backoff=1, max_backoff=60)
        for attempt, cap in [(1, 1), (2, 2), (3, 4), (6, 32), (7, 60), (12, 60)]:
            for _ in range(20):
                delay = feed.backoff_delay(attempt)
                assert cap / 2 <= delay <= cap

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        connector = FakeConnector([])
        feed = _client(connector, max_attempts=4)
        await feed.run()

        assert feed.state == ConnectionState.FAILED
        assert len(connector.urls) == 4
        assert feed._sleep.await_count == 3
        assert feed.last_error == "refused"

    @pytest.mark.asyncio
    async def test_switches_to_backup(self):
        connector = FakeConnector([])
        feed = _client(connector, backup_url="ws://backup/feed", max_attempts=5, backup_after=2)
        await feed.run()

        assert connector.urls == [
            "ws://primary/feed", "ws://primary/feed",
            "ws://backup/feed", "ws://backup/feed", "ws://backup/feed",
        ]

    @pytest.mark.asyncio
    async def test_successful_connection_resets_attempts(self):
        connector = FakeConnector([
            ConnectionRefusedError("refused"),
            [json.dumps({"type": "connection_established"}), _alert_frame()],
        ])
        feed = _client(connector, max_attempts=3)
        await feed.run()

        # one failure, one session that processed frames, then two more failures
        assert len(connector.urls) == 4
        assert feed.state == ConnectionState.FAILED
        assert len(feed.recent_alerts) == 1

    @pytest.mark.asyncio
    async def test_stop_before_start(self):
        feed = _client()
        await feed.stop()
        assert feed.state == ConnectionState.DISCONNECTED


class TestListenerResilience:
    @pytest.mark.asyncio
    async def test_failing_frame_does_not_drop_connection(self):
        connector = FakeConnector([[_alert_frame(description="first"), _alert_frame(description="second")]])
        feed = _client(connector, max_attempts=1)
        real_handler = feed._handle_alert
        calls = []

        def flaky(data):
            calls.append(data["description"])
            if len(calls) == 1:
                raise RuntimeError("handler blew up")
            return real_handler(data)

        feed._handle_alert = flaky
        await feed.run()

        assert calls == ["first", "second"]
        assert [a.description for a in feed.recent_alerts] == ["second"]
        assert len(connector.urls) == 1

    @pytest.mark.asyncio
    async def test_out_of_range_timestamp_frame_is_processed(self):
        connector = FakeConnector([[_alert_frame(timestamp="0001-01-01T00:00:00+05:00"), _alert_frame()]])
        feed = _client(connector, max_attempts=1)
        await feed.run()

        assert len(feed.recent_alerts) == 2
        assert feed.state == ConnectionState.FAILED

    @pytest.mark.asyncio
    async def test_unexpected_connector_error_goes_through_backoff(self):
        connector = FakeConnector([ValueError("bad handshake"), ValueError("bad handshake")])
        feed = _client(connector, max_attempts=3)
        await feed.run()

        assert len(connector.urls) == 3
        assert feed._sleep.await_count == 2
        assert feed.state == ConnectionState.FAILED
        assert feed.last_error == "refused"

    @pytest.mark.asyncio
    async def test_unexpected_error_recorded(self):
        connector = FakeConnector([KeyError("boom")])
        feed = _client(connector, max_attempts=1)
        await feed.run()

        assert feed.state == ConnectionState.FAILED
        assert "boom" in feed.last_error
