from __future__ import annotations

import logging
from dataclasses import dataclass, field

from src.app.ports.output import IMapRenderer, IVehicleSnapshotSource
from src.app.services.alert_monitor import AlertMonitor
from src.app.services.marker_reconciler import MarkerReconciler, ReconcileStats
from src.app.services.selection_controller import SelectionController
from src.app.services.snapshot_poller import (
    POLL_INTERVAL_S,
    POLL_TIMEOUT_S,
    SnapshotPoller,
)
from src.domain.models import GeoPoint, Vehicle

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LiveMapSession:
    """One dashboard session: polling, marker reconciliation, selection, alerts.

    `start()`/`stop()` correspond to the map being mounted and unmounted (or
    login and logout). All state is owned by the session instance.
    """

    source: IVehicleSnapshotSource
    renderer: IMapRenderer
    poll_interval_s: float = POLL_INTERVAL_S
    poll_timeout_s: float | None = POLL_TIMEOUT_S

    selection: SelectionController = field(init=False)
    reconciler: MarkerReconciler = field(init=False)
    poller: SnapshotPoller = field(init=False)
    alerts: AlertMonitor = field(default_factory=AlertMonitor)
    vehicles: tuple[Vehicle, ...] = field(default=(), init=False)

    def __post_init__(self) -> None:
        self.selection = SelectionController(renderer=self.renderer)
        self.reconciler = MarkerReconciler(
            renderer=self.renderer, selection=self.selection
        )
        self.poller = SnapshotPoller(
            source=self.source,
            on_snapshot=self.apply_snapshot,
            interval_s=self.poll_interval_s,
            timeout_s=self.poll_timeout_s,
        )

    def apply_snapshot(self, vehicles: tuple[Vehicle, ...]) -> ReconcileStats:
        # Snapshots replace client state wholesale; diffing is the reconciler's job.
        self.vehicles = vehicles
        stats = self.reconciler.reconcile(vehicles)
        self.alerts.observe(vehicles)
        return stats

    def start(self) -> None:
        self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()
        self.reconciler.clear()
        self.selection.clear_user_location()
        self.selection.deselect()
        self.vehicles = ()
        self.alerts.forget_fleet()

    def select(self, vehicle_id: str) -> ReconcileStats:
        self.selection.select(vehicle_id)
        return self.reconciler.reconcile(self.vehicles)

    def deselect(self) -> ReconcileStats:
        self.selection.deselect()
        return self.reconciler.reconcile(self.vehicles)

    @property
    def selected_vehicle(self) -> Vehicle | None:
        selected_id = self.selection.selected_vehicle_id
        return next((v for v in self.vehicles if v.id == selected_id), None)

    def locate_me(self, point: GeoPoint) -> None:
        self.selection.show_user_location(point)

    def fit_fleet(self) -> bool:
        return self.selection.fit_fleet(self.vehicles)
