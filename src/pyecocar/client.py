"""High-level async client for the vehicle telemetry dashboard API."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyecocar._listeners import Listeners
from pyecocar._transport import HttpTransport, Transport
from pyecocar.config import EcoCarConfig
from pyecocar.exceptions import EcoCarError
from pyecocar.ingestion.fetcher import Fetcher
from pyecocar.ingestion.poller import ErrorListener, TelemetryPoller
from pyecocar.state.events import ChangeEvent
from pyecocar.state.store import ChangeListener, Reconciler, TelemetrySnapshot

_logger = logging.getLogger(__name__)


class EcoCarClient:
    """Async client that keeps a live telemetry snapshot.

    Usage::

        async with EcoCarClient(config, on_change=print) as client:
            client.start()
            ...
            await client.stop()
    """

    def __init__(
        self,
        config: EcoCarConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        on_change: Callable[[ChangeEvent], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._config = config if config is not None else EcoCarConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = None
        self._poller: TelemetryPoller | None = None
        self._poll_task: asyncio.Task[None] | None = None
        self._reconciler = Reconciler()
        self._error_listeners: Listeners[str] = Listeners("Error")
        if on_change is not None:
            self._reconciler.subscribe(on_change)
        if on_error is not None:
            self._error_listeners.add(on_error)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> EcoCarClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        self._poller = TelemetryPoller(
            Fetcher(self._transport),
            self._reconciler,
            interval=self._config.poll_interval,
        )
        self._poller.subscribe_errors(self._error_listeners.notify)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None
        self._poller = None

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _require_poller(self) -> TelemetryPoller:
        if self._poller is None:
            raise EcoCarError("Client not initialized. Use 'async with EcoCarClient(...) as client:'")
        return self._poller

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def start(self) -> None:
        """Start polling in the background at ``config.poll_interval``."""
        poller = self._require_poller()
        if self.is_polling:
            return
        _logger.debug("Polling %s every %.3fs", self._config.base_url, self._config.poll_interval)
        self._poll_task = poller.start()

    async def stop(self) -> None:
        """Stop scheduling cycles and wait for the in-flight one to finish."""
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return
        if self._poller is not None:
            self._poller.stop()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def poll_once(self) -> list[ChangeEvent]:
        """Run a single cycle immediately and return its change events.

        Raises :class:`EcoCarError` while background polling is active.
        """
        outcome = await self._require_poller().poll_once()
        return outcome.events

    # ------------------------------------------------------------------
    # Observer surface
    # ------------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns an unsubscribe callable."""
        return self._reconciler.subscribe(listener)

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        """Register a listener for human-readable fetch failure messages."""
        return self._error_listeners.add(listener)

    # ------------------------------------------------------------------
    # Snapshot accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> EcoCarConfig:
        return self._config

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._reconciler.snapshot

    @property
    def vehicle_speed(self) -> float:
        return self._reconciler.snapshot.vehicle_speed

    @property
    def battery_voltage(self) -> float:
        return self._reconciler.snapshot.battery_voltage

    @property
    def motor_temp(self) -> float:
        return self._reconciler.snapshot.motor_temp

    @property
    def connected(self) -> bool:
        return self._reconciler.connected
