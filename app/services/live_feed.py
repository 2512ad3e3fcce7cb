# app/services/live_feed.py
"""
Live alert feed listener — keeps a WebSocket connection to the external alert
producer and ingests every alert it pushes.

Frames are JSON objects with a `type` discriminator:
  {"type": "connection_established", "message": "..."}
  {"type": "alert", "data": {<raw alert, see alert_normalizer>}}
  {"type": "error", "error": "..."}

Frames are handled one at a time, in arrival order. Valid alerts go into a
bounded in-memory buffer (served by GET /api/live-feed) and, when a city is
configured, are stored in that city's default zone with a fresh DB session.

Reconnects use exponential backoff with jitter, capped at max_backoff, giving
up (state FAILED) after max_attempts consecutive failures. After
backup_after failures the backup URL, if any, is tried instead.
"""

import asyncio
import enum
import random
from collections import deque
from typing import Any, Callable, Optional

import websockets
from websockets.exceptions import WebSocketException

from app.config import settings
from app.database import SessionLocal
from app.services.alert_normalizer import NormalizedAlert, normalize_alert, has_category
from app.services.alert_service import ingest_alert
from app.services.zone_service import get_or_create_default_zone
from app.utils.json_parser import safe_parse_json, as_dict
from app.utils.time_utils import to_iso_z
from app.utils.logger import get_logger

logger = get_logger(__name__)

RECENT_ALERTS_LIMIT = 50


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    FAILED = "FAILED"


class LiveFeedClient:
    def __init__(
        self,
        url: str,
        backup_url: Optional[str] = None,
        city_id: Optional[str] = None,
        store_alerts: bool = True,
        min_backoff: float = 1.0,
        max_backoff: float = 60.0,
        max_attempts: int = 20,
        backup_after: int = 3,
        connector: Callable = websockets.connect,
        session_factory: Callable = SessionLocal,
        sleep: Callable = asyncio.sleep,
    ):
        self.primary_url = url
        self.backup_url = backup_url
        self.current_url = url
        self.city_id = city_id
        self.store_alerts = store_alerts and bool(city_id)
        self.min_backoff = min_backoff
        self.max_backoff = max_backoff
        self.max_attempts = max_attempts
        self.backup_after = backup_after

        self.state = ConnectionState.DISCONNECTED
        self.attempts = 0
        self.zone_id: Optional[str] = None
        self.recent_alerts: deque = deque(maxlen=RECENT_ALERTS_LIMIT)
        self.last_error: Optional[str] = None

        self._connector = connector
        self._session_factory = session_factory
        self._sleep = sleep
        self._ws = None
        self._task: Optional[asyncio.Task] = None
        self._stopping = False

        if store_alerts and not city_id:
            logger.warning("[FEED] No city configured — feed alerts will not be stored")

    @classmethod
    def from_settings(cls) -> "LiveFeedClient":
        return cls(
            url=settings.LIVE_FEED_URL,
            backup_url=settings.LIVE_FEED_BACKUP_URL,
            city_id=settings.LIVE_FEED_CITY_ID,
            store_alerts=settings.LIVE_FEED_STORE_ALERTS,
            min_backoff=settings.LIVE_FEED_MIN_BACKOFF,
            max_backoff=settings.LIVE_FEED_MAX_BACKOFF,
            max_attempts=settings.LIVE_FEED_MAX_ATTEMPTS,
            backup_after=settings.LIVE_FEED_BACKUP_AFTER,
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def start(self) -> asyncio.Task:
        self._stopping = False
        self._task = asyncio.create_task(self.run(), name="live-feed")
        return self._task

    async def stop(self):
        self._stopping = True
        if self._ws is not None:
            await self._ws.close()
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self.state = ConnectionState.DISCONNECTED
        logger.info("[FEED] Listener stopped")

    # ── Connection loop ───────────────────────────────────────────────────

    def backoff_delay(self, attempt: int) -> float:
        """Delay before reconnect attempt n (1-based): jittered within [cap/2, cap]."""
        cap = min(self.max_backoff, self.min_backoff * (2 ** max(attempt - 1, 0)))
        return cap / 2 + random.uniform(0, cap / 2)

    async def run(self):
        while not self._stopping:
            self.state = ConnectionState.CONNECTING
            logger.info(f"[FEED] Connecting to {self.current_url} (attempt {self.attempts + 1})")
            try:
                async with self._connector(self.current_url) as ws:
                    self._ws = ws
                    self.state = ConnectionState.CONNECTED
                    self.attempts = 0
                    self.last_error = None
                    logger.info(f"[FEED] Connected to {self.current_url}")
                    async for frame in ws:
                        await self._handle_safely(frame)
                logger.warning(f"[FEED] Connection to {self.current_url} closed")
            except asyncio.CancelledError:
                raise
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                self.last_error = str(e) or e.__class__.__name__
                logger.warning(f"[FEED] Connection error on {self.current_url}: {self.last_error}")
            except Exception as e:
                self.last_error = str(e) or e.__class__.__name__
                logger.error(f"[FEED] Listener error on {self.current_url}: {self.last_error}", exc_info=True)
            finally:
                self._ws = None

            if self._stopping:
                break

            self.attempts += 1
            if self.attempts >= self.max_attempts:
                self.state = ConnectionState.FAILED
                logger.error(f"[FEED] Giving up after {self.attempts} failed attempts")
                return

            if self.backup_url and self.attempts >= self.backup_after and self.current_url != self.backup_url:
                logger.info(f"[FEED] Switching to backup URL {self.backup_url}")
                self.current_url = self.backup_url

            self.state = ConnectionState.DISCONNECTED
            delay = self.backoff_delay(self.attempts)
            logger.info(f"[FEED] Reconnecting in {delay:.1f}s")
            await self._sleep(delay)

    # ── Frames ────────────────────────────────────────────────────────────

    async def _handle_safely(self, frame: Any):
        """A frame that fails to process is dropped; the connection stays up."""
        try:
            await self.handle_message(frame)
        except Exception as e:
            logger.error(f"[FEED] Dropping frame that failed to process: {e}", exc_info=True)

    async def handle_message(self, frame: Any) -> Optional[NormalizedAlert]:
        """Handle one frame. Returns the normalized alert for alert frames that were accepted."""
        message = safe_parse_json(frame)
        if not isinstance(message, dict):
            logger.warning(f"[FEED] Ignoring non-JSON frame: {str(frame)[:200]}")
            return None

        kind = message.get("type")
        if kind == "connection_established":
            logger.info(f"[FEED] {message.get('message') or 'Connection established'}")
        elif kind == "alert":
            return self._handle_alert(as_dict(message.get("data")))
        elif kind == "error":
            logger.warning(f"[FEED] Producer error: {message.get('error') or 'Unknown error'}")
        else:
            logger.debug(f"[FEED] Ignoring frame type {kind!r}")
        return None

    def _handle_alert(self, data: dict) -> Optional[NormalizedAlert]:
        if not (has_category(data) and data.get("severity") and data.get("location")):
            logger.debug(f"[FEED] Ignoring incomplete alert frame: {data}")
            return None

        event = normalize_alert(data)
        self.recent_alerts.appendleft(event)

        level = "warning" if event.severity in ("CRITICAL", "HIGH") else "info"
        getattr(logger, level)(f"[FEED] {'/'.join(event.types)} ({event.severity}) at {event.location}")

        if self.store_alerts:
            self.store_alert(data)
        return event

    def store_alert(self, data: dict) -> Optional[str]:
        """Persist one raw feed alert. Errors are logged, never raised into the loop."""
        db = self._session_factory()
        try:
            if self.zone_id is None:
                zone, is_new = get_or_create_default_zone(db, self.city_id)
                self.zone_id = zone.id
                logger.info(f"[FEED] {'Created' if is_new else 'Using'} zone '{zone.name}' for feed alerts")
            alert = ingest_alert(db, data, self.zone_id, self.city_id)
            return alert.id
        except Exception as e:
            logger.error(f"[FEED] Failed to store alert: {e}", exc_info=True)
            return None
        finally:
            db.close()

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "url": self.current_url,
            "attempts": self.attempts,
            "lastError": self.last_error,
            "storing": self.store_alerts,
            "cityId": self.city_id,
            "zoneId": self.zone_id,
            "recentAlerts": [
                {
                    "types": a.types,
                    "severity": a.severity,
                    "status": a.status,
                    "timestamp": to_iso_z(a.timestamp),
                    "location": a.location,
                    "description": a.description,
                }
                for a in self.recent_alerts
            ],
        }
