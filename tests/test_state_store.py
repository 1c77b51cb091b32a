from __future__ import annotations

from datetime import UTC, datetime

from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import FieldId, TelemetryMessage
from pyecocar.state.events import ChangeEvent
from pyecocar.state.store import Reconciler, TelemetrySnapshot


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _reconciler() -> Reconciler:
    return Reconciler(clock=_dt)


def test_initial_snapshot_is_baseline_and_disconnected() -> None:
    assert _reconciler().snapshot == TelemetrySnapshot(
        vehicle_speed=0.0,
        battery_voltage=0.0,
        motor_temp=0.0,
        connected=False,
    )


def test_speed_change_emits_once_then_repeat_is_silent() -> None:
    reconciler = _reconciler()

    events = reconciler.apply_telemetry({"speed": 42.5})

    assert events == [ChangeEvent(field=FieldId.SPEED, new_value=42.5, observed_at=_dt())]
    assert reconciler.snapshot.vehicle_speed == 42.5
    assert reconciler.apply_telemetry({"speed": 42.5}) == []


def test_accepts_decoded_messages_keyed_by_field_id() -> None:
    reconciler = _reconciler()

    events = reconciler.apply_telemetry(
        {
            FieldId.BATTERY_VOLTAGE: TelemetryMessage(name=FieldId.BATTERY_VOLTAGE, value=48.2),
            FieldId.MOTOR_TEMP: TelemetryMessage(name=FieldId.MOTOR_TEMP, value=61.0),
        }
    )

    assert [e.field for e in events] == [FieldId.BATTERY_VOLTAGE, FieldId.MOTOR_TEMP]
    assert reconciler.snapshot.battery_voltage == 48.2
    assert reconciler.snapshot.motor_temp == 61.0


def test_omitted_fields_are_untouched_and_silent() -> None:
    reconciler = _reconciler()
    reconciler.apply_telemetry({"speed": 10.0, "battery_voltage": 50.0, "motor_temp": 30.0})

    events = reconciler.apply_telemetry({"motor_temp": 31.0})

    assert [e.field for e in events] == [FieldId.MOTOR_TEMP]
    snapshot = reconciler.snapshot
    assert snapshot.vehicle_speed == 10.0
    assert snapshot.battery_voltage == 50.0


def test_unknown_keys_are_ignored() -> None:
    reconciler = _reconciler()

    assert reconciler.apply_telemetry({"throttle": 0.7}) == []
    assert reconciler.snapshot == TelemetrySnapshot()


def test_exact_comparison_reports_tiny_differences() -> None:
    reconciler = _reconciler()
    reconciler.apply_telemetry({"speed": 0.1 + 0.2})

    # 0.1 + 0.2 != 0.3 in binary floating point; no tolerance is applied.
    events = reconciler.apply_telemetry({"speed": 0.3})

    assert len(events) == 1
    assert reconciler.snapshot.vehicle_speed == 0.3


def test_event_sequence_tracks_latest_value() -> None:
    reconciler = _reconciler()
    values = [1.0, 1.0, 2.0, 2.0, 2.0, 1.0, 0.0, 0.0]

    emitted = []
    for value in values:
        emitted.extend(reconciler.apply_telemetry({"speed": value}))

    # The baseline is 0.0, so only actual differences from the previous value count.
    assert [e.new_value for e in emitted] == [1.0, 2.0, 1.0, 0.0]
    assert reconciler.snapshot.vehicle_speed == 0.0


def test_status_connect_emits_once() -> None:
    reconciler = _reconciler()

    events = reconciler.apply_status(StatusMessage(connected=True))

    assert events == [ChangeEvent(field=FieldId.CONNECTION_STATUS, new_value=True, observed_at=_dt())]
    assert reconciler.connected is True
    assert reconciler.apply_status(StatusMessage(connected=True)) == []


def test_status_false_while_disconnected_is_silent() -> None:
    assert _reconciler().apply_status(StatusMessage(connected=False)) == []


def test_consecutive_failures_emit_only_on_transition() -> None:
    reconciler = _reconciler()
    reconciler.apply_status(StatusMessage(connected=True))

    first = reconciler.apply_fetch_failure("connection refused")
    second = reconciler.apply_fetch_failure("connection refused")

    assert [(e.field, e.new_value) for e in first] == [(FieldId.CONNECTION_STATUS, False)]
    assert second == []
    assert reconciler.connected is False


def test_failure_while_disconnected_is_silent() -> None:
    assert _reconciler().apply_fetch_failure("timeout") == []


def test_failure_does_not_touch_readings() -> None:
    reconciler = _reconciler()
    reconciler.apply_telemetry({"speed": 12.0})

    reconciler.apply_fetch_failure("timeout")

    assert reconciler.snapshot.vehicle_speed == 12.0


def test_listeners_receive_events_in_order_and_can_unsubscribe() -> None:
    reconciler = _reconciler()
    received: list[ChangeEvent] = []
    unsubscribe = reconciler.subscribe(received.append)

    reconciler.apply_telemetry({"speed": 5.0, "motor_temp": 40.0})
    unsubscribe()
    reconciler.apply_telemetry({"speed": 6.0})

    assert [e.field for e in received] == [FieldId.SPEED, FieldId.MOTOR_TEMP]


def test_failing_listener_does_not_block_others() -> None:
    reconciler = _reconciler()
    received: list[ChangeEvent] = []

    def _broken(_event: ChangeEvent) -> None:
        raise RuntimeError("render failed")

    reconciler.subscribe(_broken)
    reconciler.subscribe(received.append)

    events = reconciler.apply_telemetry({"speed": 7.0})

    assert received == events
    assert reconciler.snapshot.vehicle_speed == 7.0


def test_snapshot_is_a_copy() -> None:
    reconciler = _reconciler()

    snapshot = reconciler.snapshot
    snapshot.vehicle_speed = 99.0

    assert reconciler.snapshot.vehicle_speed == 0.0
