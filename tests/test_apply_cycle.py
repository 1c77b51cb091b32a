from __future__ import annotations

import pytest

from pyecocar.exceptions import DecodeError, TransportError
from pyecocar.ingestion.apply import apply_cycle
from pyecocar.ingestion.fetcher import FetchResult
from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import FieldId, TelemetryMessage
from pyecocar.state.policy import ConnectivityAction, connectivity_action, value_changed
from pyecocar.state.store import Reconciler


def _latest_ok(**values: float) -> FetchResult[dict[FieldId, TelemetryMessage]]:
    return FetchResult.success(
        {FieldId(name): TelemetryMessage(name=FieldId(name), value=value) for name, value in values.items()}
    )


def _connected(reconciler: Reconciler) -> Reconciler:
    reconciler.apply_status(StatusMessage(connected=True))
    return reconciler


@pytest.mark.parametrize(
    ("latest_ok", "status_ok", "expected"),
    [
        (True, True, ConnectivityAction.APPLY_STATUS),
        (False, True, ConnectivityAction.APPLY_STATUS),
        (True, False, ConnectivityAction.FORCE_DISCONNECT),
        (False, False, ConnectivityAction.FORCE_DISCONNECT),
        (False, None, ConnectivityAction.FORCE_DISCONNECT),
        (True, None, ConnectivityAction.KEEP),
    ],
)
def test_connectivity_action(latest_ok: bool, status_ok: bool | None, expected: ConnectivityAction) -> None:
    assert connectivity_action(latest_ok=latest_ok, status_ok=status_ok) is expected


def test_value_changed_is_exact() -> None:
    assert value_changed(1.0, 1.0 + 1e-15)
    assert not value_changed(1.5, 1.5)


def test_successful_cycle_applies_telemetry_then_status() -> None:
    reconciler = Reconciler()

    outcome = apply_cycle(
        reconciler,
        latest=_latest_ok(speed=42.5),
        status=FetchResult.success(StatusMessage(connected=True)),
    )

    assert [e.field for e in outcome.events] == [FieldId.SPEED, FieldId.CONNECTION_STATUS]
    assert outcome.failures == []
    assert reconciler.snapshot.vehicle_speed == 42.5
    assert reconciler.connected is True


def test_status_success_wins_over_telemetry_failure() -> None:
    reconciler = Reconciler()
    failure = TransportError("Request to /can/latest timed out", endpoint="/can/latest")

    outcome = apply_cycle(
        reconciler,
        latest=FetchResult.failure(failure),
        status=FetchResult.success(StatusMessage(connected=True)),
    )

    assert reconciler.connected is True
    assert [(e.field, e.new_value) for e in outcome.events] == [(FieldId.CONNECTION_STATUS, True)]
    assert outcome.failures == [failure]


def test_status_success_keeps_connected_without_flapping() -> None:
    reconciler = _connected(Reconciler())

    outcome = apply_cycle(
        reconciler,
        latest=FetchResult.failure(DecodeError("Invalid JSON from /can/latest: x", endpoint="/can/latest")),
        status=FetchResult.success(StatusMessage(connected=True)),
    )

    assert outcome.events == []
    assert reconciler.connected is True


def test_status_failure_forces_disconnect_even_with_telemetry() -> None:
    reconciler = _connected(Reconciler())
    failure = TransportError("Request to /can/status failed: refused", endpoint="/can/status")

    outcome = apply_cycle(reconciler, latest=_latest_ok(motor_temp=55.0), status=FetchResult.failure(failure))

    assert [(e.field, e.new_value) for e in outcome.events] == [
        (FieldId.MOTOR_TEMP, 55.0),
        (FieldId.CONNECTION_STATUS, False),
    ]
    assert reconciler.connected is False
    assert outcome.failures == [failure]


def test_both_failures_disconnect_once_and_report_both() -> None:
    reconciler = _connected(Reconciler())
    latest_failure = TransportError("latest down", endpoint="/can/latest")
    status_failure = TransportError("status down", endpoint="/can/status")

    first = apply_cycle(
        reconciler,
        latest=FetchResult.failure(latest_failure),
        status=FetchResult.failure(status_failure),
    )
    second = apply_cycle(
        reconciler,
        latest=FetchResult.failure(latest_failure),
        status=FetchResult.failure(status_failure),
    )

    assert [e.new_value for e in first.events] == [False]
    assert second.events == []
    assert second.failures == [latest_failure, status_failure]


def test_telemetry_failure_without_status_disconnects() -> None:
    reconciler = _connected(Reconciler())

    outcome = apply_cycle(reconciler, latest=FetchResult.failure(TransportError("down", endpoint="/can/latest")))

    assert reconciler.connected is False
    assert [e.field for e in outcome.events] == [FieldId.CONNECTION_STATUS]


def test_telemetry_success_without_status_keeps_connectivity() -> None:
    reconciler = _connected(Reconciler())

    outcome = apply_cycle(reconciler, latest=_latest_ok(battery_voltage=47.9))

    assert reconciler.connected is True
    assert [e.field for e in outcome.events] == [FieldId.BATTERY_VOLTAGE]
