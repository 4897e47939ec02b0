from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable

from src.app.ports.output import IVehicleSnapshotSource
from src.domain.models import Vehicle

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 2.0
POLL_TIMEOUT_S = 5.0

SnapshotHandler = Callable[[tuple[Vehicle, ...]], None]


@dataclass(slots=True)
class SnapshotPoller:
    """Periodically fetches the full vehicle collection.

    Each tick awaits the fetch and then runs `on_snapshot` synchronously, so
    ticks never overlap. A fetch that exceeds `timeout_s` is abandoned and the
    next tick tries again. Failures are logged and counted; the loop survives.
    """

    source: IVehicleSnapshotSource
    on_snapshot: SnapshotHandler
    interval_s: float = POLL_INTERVAL_S
    timeout_s: float | None = POLL_TIMEOUT_S

    consecutive_failures: int = field(default=0, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling on the running event loop; the first fetch is immediate."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def poll_once(self) -> bool:
        """Run one tick. Returns True if a snapshot was delivered."""

        try:
            if self.timeout_s is not None:
                vehicles = await asyncio.wait_for(
                    self.source.list_vehicles(), timeout=self.timeout_s
                )
            else:
                vehicles = await self.source.list_vehicles()
        except Exception as exc:
            self.consecutive_failures += 1
            logger.warning(
                "Vehicle poll failed (%d in a row): %s",
                self.consecutive_failures,
                str(exc) or exc.__class__.__name__,
            )
            return False

        self.consecutive_failures = 0
        try:
            self.on_snapshot(tuple(vehicles))
        except Exception:
            logger.exception("Snapshot handler failed; keeping previous map state")
            return False
        return True

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval_s)
