from .dynamodb_vehicle_repository import DynamoDbVehicleRepository
from .in_memory_vehicle_repository import InMemoryVehicleRepository
from .sqlite_vehicle_repository import SqliteVehicleRepository

__all__ = [
    "DynamoDbVehicleRepository",
    "InMemoryVehicleRepository",
    "SqliteVehicleRepository",
]
