"""Per-cycle fetches that never raise.

The endpoint modules in :mod:`pyecocar._api` raise :class:`FetchError`
subclasses. :class:`Fetcher` is the boundary that turns those into
:class:`FetchResult` values so a bad cycle can never escape the poller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Generic, TypeVar

from pyecocar._api import can as _can_api
from pyecocar._transport import Transport
from pyecocar.exceptions import FetchError
from pyecocar.models.status import StatusMessage
from pyecocar.models.telemetry import FieldId, TelemetryMessage

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    """Either a decoded value or the :class:`FetchError` that prevented it."""

    value: T | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def reason(self) -> str | None:
        return None if self.error is None else self.error.reason

    @classmethod
    def success(cls, value: T) -> FetchResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: FetchError) -> FetchResult[T]:
        return cls(error=error)


LatestResult = FetchResult[dict[FieldId, TelemetryMessage]]
StatusResult = FetchResult[StatusMessage]


class Fetcher:
    """Issues the telemetry and status GETs of a polling cycle. No retries."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def fetch_latest(self) -> LatestResult:
        try:
            messages = await _can_api.fetch_latest(self._transport)
        except FetchError as exc:
            _logger.debug("Telemetry fetch failed: %s", exc.reason)
            return FetchResult.failure(exc)
        return FetchResult.success(messages)

    async def fetch_status(self) -> StatusResult:
        try:
            status = await _can_api.fetch_status(self._transport)
        except FetchError as exc:
            _logger.debug("Status fetch failed: %s", exc.reason)
            return FetchResult.failure(exc)
        return FetchResult.success(status)

    async def fetch_cycle(self) -> tuple[LatestResult, StatusResult]:
        """Run both fetches concurrently and return once both have finished."""
        latest, status = await asyncio.gather(self.fetch_latest(), self.fetch_status())
        return latest, status
