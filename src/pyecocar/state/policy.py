"""Deterministic reconciliation policy.

This module intentionally contains *no* payload parsing. It only answers
two questions: is an incoming value a change, and which of a cycle's
outcomes decides connectivity.
"""

from __future__ import annotations

from enum import StrEnum


class ConnectivityAction(StrEnum):
    APPLY_STATUS = "apply_status"
    FORCE_DISCONNECT = "force_disconnect"
    KEEP = "keep"


def value_changed(current: float | bool, incoming: float | bool) -> bool:
    """Exact comparison; no tolerance is applied to float readings."""
    return current != incoming


def connectivity_action(*, latest_ok: bool, status_ok: bool | None) -> ConnectivityAction:
    """Decide how a cycle's outcomes update the connected flag.

    ``status_ok`` is ``None`` when the status endpoint was not fetched.

    Policy:
    - A successful status fetch wins: the server-reported value is applied
      even if the telemetry fetch of the same cycle failed.
    - A failed status fetch always forces a disconnect.
    - Without a status outcome, a failed telemetry fetch forces a disconnect.
    """
    if status_ok is True:
        return ConnectivityAction.APPLY_STATUS
    if status_ok is False:
        return ConnectivityAction.FORCE_DISCONNECT
    if not latest_ok:
        return ConnectivityAction.FORCE_DISCONNECT
    return ConnectivityAction.KEEP
