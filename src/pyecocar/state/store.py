"""Authoritative telemetry snapshot and change detection.

This is the only component allowed to mutate the snapshot.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from pyecocar._listeners import Listeners
from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import TELEMETRY_FIELDS, FieldId, TelemetryMessage
from pyecocar.state.events import ChangeEvent
from pyecocar.state.policy import value_changed

_logger = logging.getLogger(__name__)

ChangeListener = Callable[[ChangeEvent], None]

_SNAPSHOT_ATTRS: dict[FieldId, str] = {
    FieldId.SPEED: "vehicle_speed",
    FieldId.BATTERY_VOLTAGE: "battery_voltage",
    FieldId.MOTOR_TEMP: "motor_temp",
    FieldId.CONNECTION_STATUS: "connected",
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TelemetrySnapshot(BaseModel):
    """Most recently observed value of every field.

    Fields update independently; a snapshot is not a consistent reading
    taken at one instant.
    """

    model_config = ConfigDict(extra="forbid")

    vehicle_speed: float = 0.0
    battery_voltage: float = 0.0
    motor_temp: float = 0.0
    connected: bool = False


class Reconciler:
    """Owns the :class:`TelemetrySnapshot` and publishes per-field changes.

    Each ``apply_*`` call holds an internal lock only while it mutates the
    snapshot, so calls on one instance never interleave. Listeners run after
    the lock is released, in emission order, on the calling thread.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._snapshot = TelemetrySnapshot()
        self._lock = threading.Lock()
        self._listeners: Listeners[ChangeEvent] = Listeners("Change")

    @property
    def snapshot(self) -> TelemetrySnapshot:
        """A copy of the current snapshot."""
        with self._lock:
            return self._snapshot.model_copy()

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._snapshot.connected

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register *listener* for change events; returns an unsubscribe callable."""
        return self._listeners.add(listener)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply_telemetry(self, messages: Mapping[str, TelemetryMessage | float]) -> list[ChangeEvent]:
        """Merge telemetry readings keyed by field identifier.

        Only speed, battery voltage and motor temperature are considered;
        fields absent from *messages* keep their stored value.
        """
        events: list[ChangeEvent] = []
        with self._lock:
            now = self._clock()
            for field in TELEMETRY_FIELDS:
                if field not in messages:
                    continue
                reading = messages[field]
                value = reading.value if isinstance(reading, TelemetryMessage) else float(reading)
                if self._store(field, value):
                    events.append(ChangeEvent(field=field, new_value=value, observed_at=now))
        self._publish(events)
        return events

    def apply_status(self, status: StatusMessage) -> list[ChangeEvent]:
        """Merge a server-reported connection status."""
        with self._lock:
            events = self._set_connected(status.connected)
        self._publish(events)
        return events

    def apply_fetch_failure(self, reason: str) -> list[ChangeEvent]:
        """Force the disconnected state after a failed fetch.

        Repeated failures are idempotent: only the transition from connected
        produces an event.
        """
        with self._lock:
            events = self._set_connected(False)
        if events:
            _logger.warning("Telemetry connection lost: %s", reason)
        else:
            _logger.debug("Fetch failed while disconnected: %s", reason)
        self._publish(events)
        return events

    def _store(self, field: FieldId, value: float | bool) -> bool:
        attr = _SNAPSHOT_ATTRS[field]
        if not value_changed(getattr(self._snapshot, attr), value):
            return False
        setattr(self._snapshot, attr, value)
        return True

    def _set_connected(self, connected: bool) -> list[ChangeEvent]:
        if not self._store(FieldId.CONNECTION_STATUS, connected):
            return []
        return [ChangeEvent(field=FieldId.CONNECTION_STATUS, new_value=connected, observed_at=self._clock())]

    def _publish(self, events: list[ChangeEvent]) -> None:
        for event in events:
            self._listeners.notify(event)
