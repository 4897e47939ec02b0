from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.api.dependencies import get_fleet_service
from src.adapters.api.schemas.vehicles import (
    SuccessSchema,
    VehicleActionSchema,
    VehicleSchema,
)
from src.app.services.fleet_service import FleetService
from src.domain.exceptions import TrackerIdConflict, VehicleNotFound

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("", response_model=list[VehicleSchema])
def list_vehicles(
    service: FleetService = Depends(get_fleet_service),
) -> list[VehicleSchema]:
    return [VehicleSchema.from_domain(v) for v in service.list_vehicles()]


@router.post("", response_model=SuccessSchema)
def mutate_vehicle(
    req: VehicleActionSchema,
    service: FleetService = Depends(get_fleet_service),
) -> SuccessSchema:
    try:
        if req.action == "delete":
            service.delete(req.id)
        elif req.action == "toggleLock":
            service.toggle_lock(req.id)
        else:
            if not req.plate:
                raise HTTPException(status_code=422, detail="plate is required")
            service.upsert(req.to_vehicle())
    except VehicleNotFound:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    except TrackerIdConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    return SuccessSchema()
