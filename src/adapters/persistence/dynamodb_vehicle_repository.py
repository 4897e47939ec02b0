from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from botocore.exceptions import ClientError

from src.adapters.aws import dynamodb_client
from src.app.ports.output import IVehicleRepository
from src.domain.exceptions import TrackerIdConflict
from src.domain.models import (
    CanonicalPosition,
    GeofenceConfig,
    Location,
    Vehicle,
    VehicleStatus,
)

TRACKER_INDEX = "tracker_id-index"


def _item_to_vehicle(item: Mapping[str, Any]) -> Vehicle:
    def s(key: str) -> str | None:
        return item.get(key, {}).get("S")

    def n(key: str, default: float) -> float:
        raw = item.get(key, {}).get("N")
        return float(raw) if raw is not None else default

    location = None
    if "lat" in item and "lng" in item:
        location = Location(lat=n("lat", 0.0), lng=n("lng", 0.0))

    last_update = s("last_update")

    return Vehicle(
        id=item["id"]["S"],
        plate=s("plate") or "",
        model=s("model"),
        tracker_id=s("tracker_id"),
        driver_id=s("driver_id"),
        status=VehicleStatus(s("status") or VehicleStatus.STOPPED.value),
        speed_kmh=int(n("speed", 0)),
        fuel_level=int(n("fuel_level", 50)),
        is_locked=bool(item.get("is_locked", {}).get("BOOL", False)),
        geofence=GeofenceConfig(
            active=bool(item.get("geofence_active", {}).get("BOOL", False)),
            radius_m=int(n("geofence_radius", 1000)),
        ),
        location=location,
        last_update=datetime.fromisoformat(last_update) if last_update else None,
    )


def _vehicle_to_item(vehicle: Vehicle) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": {"S": vehicle.id},
        "plate": {"S": vehicle.plate},
        "status": {"S": vehicle.status.value},
        "speed": {"N": str(vehicle.speed_kmh)},
        "fuel_level": {"N": str(vehicle.fuel_level)},
        "is_locked": {"BOOL": vehicle.is_locked},
        "geofence_active": {"BOOL": vehicle.geofence.active},
        "geofence_radius": {"N": str(vehicle.geofence.radius_m)},
        "last_update": {
            "S": (vehicle.last_update or datetime.now(timezone.utc)).isoformat()
        },
    }
    # Optional attributes are omitted rather than stored empty; the GSI is sparse.
    if vehicle.model:
        item["model"] = {"S": vehicle.model}
    if vehicle.tracker_id:
        item["tracker_id"] = {"S": vehicle.tracker_id}
    if vehicle.driver_id:
        item["driver_id"] = {"S": vehicle.driver_id}
    if vehicle.location is not None:
        item["lat"] = {"N": repr(float(vehicle.location.lat))}
        item["lng"] = {"N": repr(float(vehicle.location.lng))}
    return item


def _is_conditional_failure(exc: ClientError) -> bool:
    code = exc.response.get("Error", {}).get("Code")
    return code == "ConditionalCheckFailedException"


@dataclass(slots=True)
class DynamoDbVehicleRepository(IVehicleRepository):
    """Stores vehicles in DynamoDB.

    The table is keyed by `id` and carries a GSI named `tracker_id-index`
    (hash key `tracker_id`) for ingestion lookups.

    Env vars:
      - DDB_VEHICLES_TABLE (default: fleetpulse-vehicles)
      - ENDPOINT_URL (preferred for LocalStack)
      - AWS_REGION
    """

    table_name: str | None = None

    def _table(self) -> str:
        return (
            self.table_name or os.getenv("DDB_VEHICLES_TABLE") or "fleetpulse-vehicles"
        )

    def _id_for_tracker(self, ddb: Any, tracker_id: str) -> str | None:
        resp = ddb.query(
            TableName=self._table(),
            IndexName=TRACKER_INDEX,
            KeyConditionExpression="tracker_id = :t",
            ExpressionAttributeValues={":t": {"S": tracker_id}},
            ProjectionExpression="id",
            Limit=1,
        )
        items = resp.get("Items") or []
        return items[0]["id"]["S"] if items else None

    def list_vehicles(self) -> tuple[Vehicle, ...]:
        ddb = dynamodb_client()
        out: list[Vehicle] = []
        kwargs: dict[str, Any] = {"TableName": self._table()}
        while True:
            resp = ddb.scan(**kwargs)
            out.extend(_item_to_vehicle(item) for item in resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        out.sort(key=lambda v: v.id)
        return tuple(out)

    def get(self, vehicle_id: str) -> Vehicle | None:
        ddb = dynamodb_client()
        resp = ddb.get_item(
            TableName=self._table(),
            Key={"id": {"S": vehicle_id}},
            ConsistentRead=True,
        )
        item = resp.get("Item")
        return _item_to_vehicle(item) if item else None

    def save(self, vehicle: Vehicle) -> None:
        ddb = dynamodb_client()
        if vehicle.tracker_id:
            owner = self._id_for_tracker(ddb, vehicle.tracker_id)
            if owner is not None and owner != vehicle.id:
                raise TrackerIdConflict(
                    f"Tracker '{vehicle.tracker_id}' already bound to vehicle '{owner}'"
                )
        ddb.put_item(TableName=self._table(), Item=_vehicle_to_item(vehicle))

    def delete(self, vehicle_id: str) -> bool:
        ddb = dynamodb_client()
        resp = ddb.delete_item(
            TableName=self._table(),
            Key={"id": {"S": vehicle_id}},
            ReturnValues="ALL_OLD",
        )
        return bool(resp.get("Attributes"))

    def toggle_lock(self, vehicle_id: str) -> Vehicle | None:
        current = self.get(vehicle_id)
        if current is None:
            return None

        ddb = dynamodb_client()
        try:
            resp = ddb.update_item(
                TableName=self._table(),
                Key={"id": {"S": vehicle_id}},
                UpdateExpression="SET is_locked = :new",
                ConditionExpression="attribute_exists(id) AND is_locked = :old",
                ExpressionAttributeValues={
                    ":new": {"BOOL": not current.is_locked},
                    ":old": {"BOOL": current.is_locked},
                },
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                # Deleted or toggled concurrently; report the latest state.
                return self.get(vehicle_id)
            raise
        return _item_to_vehicle(resp["Attributes"])

    def apply_position(
        self, tracker_id: str, position: CanonicalPosition, *, updated_at: datetime
    ) -> bool:
        ddb = dynamodb_client()
        vehicle_id = self._id_for_tracker(ddb, tracker_id)
        if vehicle_id is None:
            return False

        expression = "SET lat = :lat, lng = :lng, speed = :spd, #st = :st, last_update = :u"
        values: dict[str, Any] = {
            ":lat": {"N": repr(float(position.lat))},
            ":lng": {"N": repr(float(position.lng))},
            ":spd": {"N": str(position.speed_kmh)},
            ":st": {"S": position.motion_state.value},
            ":u": {"S": updated_at.isoformat()},
            ":t": {"S": tracker_id},
        }
        if position.fuel_or_battery is not None:
            expression += ", fuel_level = :fuel"
            values[":fuel"] = {"N": str(position.fuel_or_battery)}

        try:
            ddb.update_item(
                TableName=self._table(),
                Key={"id": {"S": vehicle_id}},
                UpdateExpression=expression,
                # Guards against the tracker being reassigned between query and update.
                ConditionExpression="tracker_id = :t",
                ExpressionAttributeNames={"#st": "status"},
                ExpressionAttributeValues=values,
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                return False
            raise
        return True
