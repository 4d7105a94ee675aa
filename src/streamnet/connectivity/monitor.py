"""Connectivity monitor fed by the platform's network path-change signal."""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from datetime import datetime, timezone

from streamnet.types import (
    ConnectionQuality,
    ConnectivityState,
    InterfaceType,
    PathStatus,
)

logger = logging.getLogger(__name__)

_HISTORY_LIMIT = 100

Listener = Callable[[ConnectivityState], None]


def classify_quality(status: PathStatus, interface_type: InterfaceType) -> ConnectionQuality:
    """Quality is a pure function of path status and interface type."""
    if status != PathStatus.SATISFIED:
        return ConnectionQuality.POOR
    if interface_type in (InterfaceType.WIFI, InterfaceType.ETHERNET):
        return ConnectionQuality.EXCELLENT
    if interface_type == InterfaceType.CELLULAR:
        return ConnectionQuality.GOOD
    return ConnectionQuality.POOR


class ConnectivityMonitor:
    """Holds the latest ConnectivityState and notifies listeners on transitions.

    The platform glue calls ``update()`` from whatever thread delivers path
    events. Readers call ``current_state()`` on every request; it only takes
    a short lock and never waits on I/O.
    """

    def __init__(
        self,
        initial: ConnectivityState | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        # Optimistic until the first path event arrives.
        self._state = initial or ConnectivityState(
            is_connected=True,
            interface_type=InterfaceType.WIFI,
            quality=ConnectionQuality.EXCELLENT,
            last_connected_at=self._clock(),
        )
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []
        self._latency_history: deque[float] = deque(maxlen=_HISTORY_LIMIT)
        self._bandwidth_history: deque[float] = deque(maxlen=_HISTORY_LIMIT)
        self._request_count = 0
        self._error_count = 0

    def current_state(self) -> ConnectivityState:
        with self._lock:
            return self._state

    @property
    def is_connected(self) -> bool:
        return self.current_state().is_connected

    def on_change(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def update(self, status: PathStatus, interface_type: InterfaceType) -> ConnectivityState:
        """Apply a raw path event and return the resulting state."""
        connected = status == PathStatus.SATISFIED
        quality = classify_quality(status, interface_type)

        with self._lock:
            previous = self._state
            last_connected_at = previous.last_connected_at
            if connected and not previous.is_connected:
                last_connected_at = self._clock()
            new_state = ConnectivityState(
                is_connected=connected,
                interface_type=interface_type,
                quality=quality,
                last_connected_at=last_connected_at,
            )
            self._state = new_state
            changed = (
                previous.is_connected != new_state.is_connected
                or previous.interface_type != new_state.interface_type
            )
            listeners = list(self._listeners) if changed else []

        if changed:
            logger.info(
                "Connectivity changed: %s",
                self._status_text(new_state),
            )
        for listener in listeners:
            try:
                listener(new_state)
            except Exception:
                logger.exception("Connectivity listener %r failed", listener)
        return new_state

    # ── Link metrics ──

    def record_latency(self, seconds: float) -> None:
        with self._lock:
            self._latency_history.append(seconds)

    def record_bandwidth(self, bytes_per_second: float) -> None:
        with self._lock:
            self._bandwidth_history.append(bytes_per_second)

    def record_request(self) -> None:
        with self._lock:
            self._request_count += 1

    def record_error(self) -> None:
        with self._lock:
            self._error_count += 1

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._request_count

    @property
    def error_count(self) -> int:
        with self._lock:
            return self._error_count

    @property
    def error_rate(self) -> float:
        """Recorded errors over recorded requests (0.0 before any request)."""
        with self._lock:
            requests, errors = self._request_count, self._error_count
        return errors / requests if requests else 0.0

    @property
    def average_latency(self) -> float:
        with self._lock:
            samples = list(self._latency_history)
        return sum(samples) / len(samples) if samples else 0.0

    @property
    def average_bandwidth(self) -> float:
        with self._lock:
            samples = list(self._bandwidth_history)
        return sum(samples) / len(samples) if samples else 0.0

    @property
    def should_use_offline_mode(self) -> bool:
        state = self.current_state()
        return not state.is_connected or state.quality == ConnectionQuality.POOR

    @property
    def status_text(self) -> str:
        return self._status_text(self.current_state())

    @staticmethod
    def _status_text(state: ConnectivityState) -> str:
        if state.is_connected:
            return f"Connected via {state.interface_type.display_name}"
        return "Disconnected"
