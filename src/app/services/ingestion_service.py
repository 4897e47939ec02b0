from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from src.app.ports.output import IVehicleRepository
from src.domain.algorithms.position_normalizer import (
    normalize_position,
    parse_position_report,
)
from src.domain.exceptions import StorageFailure
from src.domain.models.position import MOVING_THRESHOLD_KMH

logger = logging.getLogger(__name__)


class IngestOutcome(str, Enum):
    UPDATED = "updated"
    UNMATCHED = "unmatched"


@dataclass(slots=True)
class IngestionService:
    """Use case: apply one OsmAnd/Traccar position report to the fleet.

    Reports for unknown trackers are dropped, never turned into vehicles.
    """

    vehicle_repository: IVehicleRepository
    moving_threshold_kmh: float = MOVING_THRESHOLD_KMH

    def ingest(self, payload: Mapping[str, Any]) -> IngestOutcome:
        # Raises MalformedReport before anything touches the store.
        report = parse_position_report(payload)
        position = normalize_position(
            report, moving_threshold_kmh=self.moving_threshold_kmh
        )

        try:
            updated = self.vehicle_repository.apply_position(
                report.device_id, position, updated_at=datetime.now(timezone.utc)
            )
        except Exception as exc:
            logger.exception(
                "Failed to store position", extra={"device_id": report.device_id}
            )
            raise StorageFailure(
                str(exc) or exc.__class__.__name__, device_id=report.device_id
            ) from exc

        if not updated:
            logger.info("Ignored report from unknown tracker '%s'", report.device_id)
            return IngestOutcome.UNMATCHED

        logger.debug(
            "Vehicle updated via tracker '%s' (%s km/h)",
            report.device_id,
            position.speed_kmh,
        )
        return IngestOutcome.UPDATED
