"""Rotating QR tokens for active sessions and scan freshness checks."""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Dict, Optional

from classlog.services.qr_service import QRService, DEFAULT_SEPARATOR

logger = logging.getLogger(__name__)

ROTATION_INTERVAL_SECONDS = 10
GRACE_PERIOD_MS = 1000

class ScanError:
    """Scan outcome codes."""
    UNKNOWN_SESSION = 'UNKNOWN_SESSION'
    SESSION_INACTIVE = 'SESSION_INACTIVE'
    EXPIRED = 'EXPIRED'
    ALREADY_MARKED = 'ALREADY_MARKED'
    MALFORMED_PAYLOAD = 'MALFORMED_PAYLOAD'

SCAN_MESSAGES = {
    ScanError.UNKNOWN_SESSION: 'Invalid or expired QR code session.',
    ScanError.SESSION_INACTIVE: 'Invalid or expired QR code session.',
    ScanError.EXPIRED: 'QR code has expired. Ask your teacher for a new code.',
    ScanError.ALREADY_MARKED: 'Attendance already marked for this session.',
    ScanError.MALFORMED_PAYLOAD: 'Invalid QR code format.',
}

def current_millis() -> int:
    return int(time.time() * 1000)

@dataclass(frozen=True)
class ScanResult:
    accepted: bool
    reason: Optional[str] = None

    @classmethod
    def reject(cls, reason: str) -> 'ScanResult':
        return cls(accepted=False, reason=reason)

    @property
    def message(self) -> Optional[str]:
        return SCAN_MESSAGES.get(self.reason)

class RotationHandle:
    """
    Periodic token rotation for a single session.

    Every tick builds '<session_id><sep><now_ms>', arms the next tick and
    then asks the store to advance the session's watermark. A failed
    write is logged and the next tick tries again.
    """

    def __init__(self, session_id, store, scheduler, clock=current_millis,
                 interval_seconds: float = ROTATION_INTERVAL_SECONDS,
                 separator: str = DEFAULT_SEPARATOR):
        self.session_id = session_id
        self.interval_seconds = interval_seconds
        self.separator = separator
        self.current_token: Optional[str] = None
        self.issued_at: Optional[int] = None
        self.tick_count = 0

        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self._lock = threading.Lock()
        self._timer = None
        self._started = False
        self._stopped = False

    @property
    def is_running(self) -> bool:
        return self._started and not self._stopped

    def start(self) -> 'RotationHandle':
        """Fire the first tick immediately."""
        with self._lock:
            if self._started:
                return self
            self._started = True
        self._tick()
        return self

    def stop(self) -> bool:
        """Cancel future ticks. Returns False if already stopped."""
        with self._lock:
            if self._stopped:
                return False
            self._stopped = True
            timer, self._timer = self._timer, None

        if timer is not None:
            timer.cancel()
        return True

    def _tick(self) -> None:
        with self._lock:
            if self._stopped:
                return
            timestamp_ms = self._clock()
            self.current_token = QRService.build_token(self.session_id, timestamp_ms, self.separator)
            self.issued_at = timestamp_ms
            self.tick_count += 1
            # countdown restarts from this tick, not from a wall-clock grid
            self._timer = self._scheduler.call_later(self.interval_seconds, self._tick)

        logger.debug("Session %s rotated token (tick %d)", self.session_id, self.tick_count)
        self._renew(timestamp_ms)

    def _renew(self, timestamp_ms: int) -> None:
        try:
            self._store.set_last_renewed_at(self.session_id, timestamp_ms)
        except Exception:
            logger.exception("Failed to persist watermark %s for session %s",
                             timestamp_ms, self.session_id)

    def to_dict(self) -> dict:
        return {
            'session_id': self.session_id,
            'token': self.current_token,
            'issued_at': self.issued_at,
            'tick_count': self.tick_count,
            'interval_seconds': self.interval_seconds,
            'running': self.is_running,
        }

    def __repr__(self) -> str:
        return f'<RotationHandle {self.session_id} ticks={self.tick_count}>'

class SessionLivenessController:
    """Owns rotation handles for active sessions and validates scanned tokens."""

    def __init__(self, store, scheduler, clock=current_millis,
                 interval_seconds: float = ROTATION_INTERVAL_SECONDS,
                 grace_period_ms: int = GRACE_PERIOD_MS,
                 separator: str = DEFAULT_SEPARATOR):
        self.store = store
        self.scheduler = scheduler
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.grace_period_ms = grace_period_ms
        self.separator = separator

        self._handles: Dict[str, RotationHandle] = {}
        self._lock = threading.Lock()

    def start_session(self, session_id) -> RotationHandle:
        """Begin rotating tokens for a persisted session. A running handle is reused."""
        key = str(session_id)
        with self._lock:
            handle = self._handles.get(key)
            if handle is not None and handle.is_running:
                return handle

            handle = RotationHandle(
                session_id,
                store=self.store,
                scheduler=self.scheduler,
                clock=self.clock,
                interval_seconds=self.interval_seconds,
                separator=self.separator,
            )
            self._handles[key] = handle

        logger.info("Starting QR rotation for session %s every %ss", session_id, self.interval_seconds)
        return handle.start()

    def stop_session(self, handle: RotationHandle) -> None:
        """Stop rotation and deactivate the session. Stopping twice is a no-op."""
        if handle is None or not handle.stop():
            return

        key = str(handle.session_id)
        with self._lock:
            if self._handles.get(key) is handle:
                del self._handles[key]

        logger.info("Stopped QR rotation for session %s after %d tick(s)",
                    handle.session_id, handle.tick_count)
        self.store.deactivate(handle.session_id)

    def get_handle(self, session_id) -> Optional[RotationHandle]:
        with self._lock:
            return self._handles.get(str(session_id))

    def stop_all(self) -> None:
        with self._lock:
            handles = list(self._handles.values())
        for handle in handles:
            self.stop_session(handle)

    def validate_scan(self, session_id, presented_timestamp: int) -> ScanResult:
        """
        Decide whether a scanned token is still fresh.

        Checks, in order: the session exists, it is active, and
        presented_timestamp >= last_renewed_at - grace period. There is
        no upper bound on the presented timestamp.
        """
        session = self.store.get_session(session_id)
        if session is None:
            logger.info("Scan rejected for session %s: unknown session", session_id)
            return ScanResult.reject(ScanError.UNKNOWN_SESSION)

        if not session.active:
            logger.info("Scan rejected for session %s: session inactive", session_id)
            return ScanResult.reject(ScanError.SESSION_INACTIVE)

        watermark = session.last_renewed_at
        if presented_timestamp < watermark - self.grace_period_ms:
            logger.info("Scan rejected for session %s: token %s older than watermark %s",
                        session_id, presented_timestamp, watermark)
            return ScanResult.reject(ScanError.EXPIRED)

        return ScanResult(accepted=True)
