from __future__ import annotations

import asyncio
import logging
import os

from src.adapters.maps.logging_map_renderer import LoggingMapRenderer
from src.adapters.realtime.http_vehicle_snapshot_source import (
    HttpVehicleSnapshotSource,
)
from src.app.services.live_map_session import LiveMapSession
from src.app.services.snapshot_poller import POLL_INTERVAL_S

logger = logging.getLogger("fleetpulse.monitor")


def _session_from_env() -> LiveMapSession:
    interval_s = float(os.getenv("FLEET_POLL_INTERVAL_S") or POLL_INTERVAL_S)
    source = HttpVehicleSnapshotSource()
    return LiveMapSession(
        source=source,
        renderer=LoggingMapRenderer(),
        poll_interval_s=interval_s,
        poll_timeout_s=source.timeout_s,
    )


async def run(session: LiveMapSession) -> None:
    session.start()
    try:
        # Runs until cancelled (Ctrl-C); alerts are logged as they are raised.
        await asyncio.Event().wait()
    finally:
        await session.stop()


def main() -> None:
    logging.basicConfig(
        level=(os.getenv("FLEET_LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(_session_from_env()))
    except KeyboardInterrupt:
        logger.info("Monitor stopped")


if __name__ == "__main__":
    main()
