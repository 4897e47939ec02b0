from __future__ import annotations

import os
from dataclasses import dataclass

import httpx
from pydantic import TypeAdapter

from src.adapters.api.schemas.vehicles import VehicleSchema
from src.app.ports.output import IVehicleSnapshotSource
from src.domain.models import Vehicle

_VEHICLES = TypeAdapter(list[VehicleSchema])


@dataclass(slots=True)
class HttpVehicleSnapshotSource(IVehicleSnapshotSource):
    """Fetches the fleet collection from `GET {base_url}/vehicles`.

    Env vars:
      - FLEET_API_URL: base URL of the fleet API
      - FLEET_API_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - FLEET_POLL_TIMEOUT_S: request timeout (default 5)

    No caching: every call is a fresh snapshot.
    """

    base_url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv("FLEET_API_URL")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("FLEET_API_HEADERS")
        if os.getenv("FLEET_POLL_TIMEOUT_S"):
            self.timeout_s = float(os.environ["FLEET_POLL_TIMEOUT_S"])

    def _headers(self) -> dict[str, str]:
        raw = (self.headers_raw or "").strip()
        headers: dict[str, str] = {"Accept": "application/json"}
        if not raw:
            return headers
        for part in raw.split(";"):
            part = part.strip()
            if not part:
                continue
            if ":" not in part:
                continue
            k, v = part.split(":", 1)
            k = k.strip()
            v = v.strip()
            if k:
                headers[k] = v
        return headers

    def _url(self) -> str:
        if not self.base_url:
            raise RuntimeError("Missing FLEET_API_URL")
        return f"{self.base_url.rstrip('/')}/vehicles"

    async def list_vehicles(self) -> tuple[Vehicle, ...]:
        async with httpx.AsyncClient(
            timeout=self.timeout_s, transport=self.transport
        ) as client:
            resp = await client.get(self._url(), headers=self._headers())
            resp.raise_for_status()
            content = resp.content

        return tuple(v.to_domain() for v in _VEHICLES.validate_json(content))
