"""Routes for message tracking, summaries and the report."""

from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from ...exceptions import StorageError
from ...models.tracking import Category, TrackingEntry
from ...services.analysis import dietary_percentages
from ...services.orchestrator import OrchestrationResult
from ...services.report import ReportBuilder
from ...services.tracking import TrackingService

router = APIRouter()


class MessageIn(BaseModel):
    message: str = Field(..., max_length=10_000)


class OverrideIn(BaseModel):
    message: str = Field(..., max_length=10_000)
    category: Category
    current: Optional[list[Category]] = None


@lru_cache
def get_tracking_service() -> TrackingService:
    """Shared tracking service for the app's lifetime."""
    return TrackingService()


def storage_unavailable(e: StorageError) -> JSONResponse:
    return JSONResponse({
        "success": False,
        "error": f"Tracking storage unavailable: {e}",
    }, status_code=503)


def result_to_dict(result: OrchestrationResult) -> dict:
    return {
        "categories": [c.value for c in result.categories],
        "saved": result.saved,
        "summaries": {c.value: s for c, s in result.summaries.items()},
        "entries": [e.model_dump(mode="json") for e in result.entries],
        "duplicates": [{"category": c.value, "summary": s} for c, s in result.duplicates],
        "discarded": result.discarded,
    }


@router.post("/messages")
async def track_message(
    payload: MessageIn,
    service: TrackingService = Depends(get_tracking_service),
):
    """Categorize a chat message and save its tracking entries."""
    try:
        result = await service.process_message(payload.message)
    except StorageError as e:
        return storage_unavailable(e)

    return JSONResponse(result_to_dict(result))


@router.post("/override")
async def override_category(
    payload: OverrideIn,
    service: TrackingService = Depends(get_tracking_service),
):
    """Move a message into another category if the model agrees."""
    try:
        result = await service.override(payload.message, payload.category, payload.current)
    except StorageError as e:
        return storage_unavailable(e)

    return JSONResponse({
        "requested": result.requested.value,
        "accepted": result.accepted,
        "categories": [c.value for c in result.categories],
        "saved": result.saved,
        "entry": result.entry.model_dump(mode="json") if result.entry else None,
        "discarded": result.discarded,
    })


@router.get("/entries")
async def get_entries(
    category: Optional[Category] = Query(default=None),
    service: TrackingService = Depends(get_tracking_service),
):
    """All tracked entries in the order they were saved."""
    entries: list[TrackingEntry] = await service.list_entries()
    if category:
        entries = [e for e in entries if e.category == category]
    return JSONResponse([e.model_dump(mode="json") for e in entries])


@router.delete("/entries")
async def clear_entries(service: TrackingService = Depends(get_tracking_service)):
    """Delete all tracking data."""
    try:
        await service.clear()
    except StorageError as e:
        return storage_unavailable(e)
    return JSONResponse({"success": True})


@router.get("/summary")
async def get_summary(service: TrackingService = Depends(get_tracking_service)):
    """Symptoms, triggers and dietary counts with percentages."""
    summary = await service.summary()
    content = summary.model_dump(mode="json")
    content["dietary_percentages"] = dietary_percentages(summary.dietary)
    return JSONResponse(content)


@router.get("/insight")
async def get_insight(
    refresh: bool = Query(default=False),
    service: TrackingService = Depends(get_tracking_service),
):
    """Written health summary; cached unless a refresh is requested."""
    try:
        text = await service.insight(refresh=refresh)
    except StorageError as e:
        return storage_unavailable(e)
    return JSONResponse({"insight": text})


@router.get("/report", response_class=HTMLResponse)
async def get_report(service: TrackingService = Depends(get_tracking_service)):
    """Printable HTML report."""
    summary = await service.summary()
    insight = await service.insights.cached()
    return HTMLResponse(ReportBuilder().render_html(summary, insight))
