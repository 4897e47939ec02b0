from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool

from src.adapters.api.dependencies import get_ingestion_service
from src.app.services.ingestion_service import IngestionService, IngestOutcome
from src.domain.exceptions import MalformedReport, StorageFailure

# Tracker firmware expects plain text acknowledgements, never JSON.
router = APIRouter(tags=["ingest"])


async def _read_payload(request: Request) -> dict[str, Any]:
    """Merge query string and body; body fields win.

    OsmAnd clients commonly POST with every field in the query string and an
    empty body, so both transports are always read.
    """

    payload: dict[str, Any] = dict(request.query_params)
    if request.method != "POST":
        return payload

    content_type = (request.headers.get("content-type") or "").lower()
    if "application/json" in content_type:
        raw = await request.body()
        if not raw.strip():
            return payload
        try:
            body = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedReport("Body is not valid JSON") from exc
        if not isinstance(body, dict):
            raise MalformedReport("Body must be a JSON object")
        payload.update(body)
    elif (
        "application/x-www-form-urlencoded" in content_type
        or "multipart/form-data" in content_type
    ):
        form = await request.form()
        payload.update({k: v for k, v in form.items() if isinstance(v, str)})
    return payload


@router.api_route("/ingest", methods=["GET", "POST"], response_class=PlainTextResponse)
async def ingest(
    request: Request,
    service: IngestionService = Depends(get_ingestion_service),
) -> PlainTextResponse:
    try:
        payload = await _read_payload(request)
        outcome = await run_in_threadpool(service.ingest, payload)
    except MalformedReport as exc:
        return PlainTextResponse(str(exc), status_code=400)
    except StorageFailure as exc:
        return PlainTextResponse(str(exc), status_code=500)

    if outcome is IngestOutcome.UNMATCHED:
        return PlainTextResponse("ignored", status_code=200)
    return PlainTextResponse("OK", status_code=200)
