"""Fixed-interval polling loop.

This module owns the timer that drives polling cycles. The fetches live in
:mod:`pyecocar.ingestion.fetcher` and the merge in :mod:`pyecocar.state.store`.

Each cycle runs as its own task, so a slow fetch never delays the timer.
When a tick fires while the previous cycle is still in flight the tick is
skipped; results are therefore always applied in the order cycles started.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyecocar._listeners import Listeners
from pyecocar.exceptions import EcoCarError
from pyecocar.ingestion.apply import CycleOutcome, apply_cycle
from pyecocar.ingestion.fetcher import Fetcher
from pyecocar.state.store import Reconciler

_logger = logging.getLogger(__name__)

ErrorListener = Callable[[str], None]


class TelemetryPoller:
    """Drive a :class:`Fetcher` into a :class:`Reconciler` at a fixed rate."""

    def __init__(
        self,
        fetcher: Fetcher,
        reconciler: Reconciler,
        *,
        interval: float,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._fetcher = fetcher
        self._reconciler = reconciler
        self._interval = interval
        self._error_listeners: Listeners[str] = Listeners("Error")
        self._stop_event = asyncio.Event()
        self._inflight: asyncio.Task[None] | None = None
        self._running = False
        self.completed_cycles = 0
        self.skipped_cycles = 0

    @property
    def is_running(self) -> bool:
        return self._running

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        """Register *listener* for fetch failure messages; returns an unsubscribe callable."""
        return self._error_listeners.add(listener)

    async def poll_once(self) -> CycleOutcome:
        """Run one cycle: fetch both endpoints, then apply the results.

        Not allowed while the loop is running, since a manual cycle could
        then land after a later scheduled one.
        """
        if self._running:
            raise EcoCarError("Poller is running; manual cycles are not allowed")
        return await self._poll()

    async def _poll(self) -> CycleOutcome:
        latest, status = await self._fetcher.fetch_cycle()
        outcome = apply_cycle(self._reconciler, latest=latest, status=status)
        for failure in outcome.failures:
            self._error_listeners.notify(failure.reason)
        self.completed_cycles += 1
        return outcome

    def start(self) -> asyncio.Task[None]:
        """Start the loop as a background task and return it.

        The poller counts as running as soon as this returns, so a
        :meth:`stop` issued before the task first runs is not lost.
        """
        if self._running:
            raise EcoCarError("Poller is already running")
        self._running = True
        return asyncio.create_task(self._run_loop())

    async def run(self) -> None:
        """Tick until :meth:`stop` is called.

        Deadlines are computed from the start time so slow cycles do not make
        the schedule drift. On a clean stop the in-flight cycle (bounded by the
        request timeout) is allowed to finish.
        """
        if self._running:
            raise EcoCarError("Poller is already running")
        self._running = True
        await self._run_loop()

    async def _run_loop(self) -> None:
        loop = asyncio.get_running_loop()
        started = loop.time()
        tick = 0

        try:
            try:
                while not self._stop_event.is_set():
                    self._tick()
                    tick += 1
                    delay = started + tick * self._interval - loop.time()
                    if delay < 0:
                        # Fell behind (suspended loop); resume on the next whole tick.
                        tick = int((loop.time() - started) // self._interval) + 1
                        delay = started + tick * self._interval - loop.time()
                    try:
                        await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                    except TimeoutError:
                        pass
            except asyncio.CancelledError:
                if self._inflight is not None:
                    self._inflight.cancel()
                raise

            if self._inflight is not None:
                await asyncio.wait([self._inflight])
        finally:
            self._stop_event.clear()
            self._running = False
        _logger.debug(
            "Poller stopped after %d cycles (%d ticks skipped)",
            self.completed_cycles,
            self.skipped_cycles,
        )

    def stop(self) -> None:
        """Signal the loop to stop scheduling new cycles.

        A no-op when the loop is not running.
        """
        if self._running:
            self._stop_event.set()

    def _tick(self) -> None:
        if self._inflight is not None and not self._inflight.done():
            self.skipped_cycles += 1
            _logger.debug("Previous cycle still in flight; skipping tick")
            return
        self._inflight = asyncio.create_task(self._run_cycle())

    async def _run_cycle(self) -> None:
        try:
            await self._poll()
        except Exception:
            _logger.warning("Polling cycle failed unexpectedly", exc_info=True)
