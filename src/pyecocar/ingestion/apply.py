"""Cycle application helpers.

This module centralizes how one polling cycle's fetch results are applied to
the reconciler, including the fixed processing order and the connectivity
tie-break between the telemetry and status outcomes.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pyecocar.exceptions import FetchError
from pyecocar.ingestion.fetcher import LatestResult, StatusResult
from pyecocar.state.events import ChangeEvent
from pyecocar.state.policy import ConnectivityAction, connectivity_action
from pyecocar.state.store import Reconciler


@dataclass(slots=True)
class CycleOutcome:
    """Change events and fetch failures produced by one cycle."""

    events: list[ChangeEvent] = field(default_factory=list)
    failures: list[FetchError] = field(default_factory=list)


def apply_cycle(
    reconciler: Reconciler,
    *,
    latest: LatestResult,
    status: StatusResult | None = None,
) -> CycleOutcome:
    """Apply a cycle's results: telemetry first, then connectivity.

    Parameters
    ----------
    latest
        Outcome of the telemetry fetch.
    status
        Outcome of the status fetch, or ``None`` when it was not issued.
    """
    outcome = CycleOutcome()

    if latest.ok and latest.value is not None:
        outcome.events.extend(reconciler.apply_telemetry(latest.value))
    elif latest.error is not None:
        outcome.failures.append(latest.error)

    if status is not None and status.error is not None:
        outcome.failures.append(status.error)

    action = connectivity_action(latest_ok=latest.ok, status_ok=None if status is None else status.ok)
    if action is ConnectivityAction.APPLY_STATUS and status is not None and status.value is not None:
        outcome.events.extend(reconciler.apply_status(status.value))
    elif action is ConnectivityAction.FORCE_DISCONNECT:
        # The status failure (when present) is the one that decides connectivity.
        outcome.events.extend(reconciler.apply_fetch_failure(outcome.failures[-1].reason))

    return outcome
