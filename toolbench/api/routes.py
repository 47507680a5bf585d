"""FastAPI routes for system status, usage analytics and the feedback board.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                      Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                GET     Health check + vendor key status
# /api/v1/providers             GET     List vendors and availability
# /api/v1/tools/analytics       GET     Usage report for the last N days
# /api/v1/tools/analytics       POST    Record a page view / api call
# /api/v1/tools/feedback        GET     List feedback, newest first
# /api/v1/tools/feedback        POST    Submit feedback (201)
# /api/v1/tools/feedback        PATCH   Update status / admin note
# /api/v1/tools/feedback        DELETE  Remove an item (?id=)
#
# Vendor tool routes live in tool_routes.py and audio_routes.py.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Query, Request

from toolbench import __version__
from toolbench.api.auth_middleware import current_user
from toolbench.api.dependencies import AnalyticsDep, FeedbackDep
from toolbench.api.schemas import (
    CreateFeedbackRequest,
    ErrorResponse,
    HealthResponse,
    ProvidersResponse,
    TrackEventRequest,
    UpdateFeedbackRequest,
)
from toolbench.models.analytics import AnalyticsEvent, EventType
from toolbench.models.feedback import FeedbackItem, FeedbackStatus, FeedbackType
from toolbench.services.analytics_service import clamp_days
from toolbench.utils.errors import NotFoundError, StorageError
from toolbench.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_FEEDBACK_TYPES = frozenset(t.value for t in FeedbackType)
_FEEDBACK_STATUSES = frozenset(s.value for s in FeedbackStatus)
_EVENT_TYPES = frozenset(t.value for t in EventType)

# Probed by the health check; never written.
_HEALTH_PROBE_KEY = "health/probe.json"


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Application health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and vendor key status.

    ``unhealthy`` when the blob store cannot be read, ``degraded`` when no
    vendor key is configured, otherwise ``healthy``.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    blob_ok = True
    blob_store = getattr(request.app.state, "blob_store", None)
    if blob_store is not None:
        try:
            await blob_store.get_json(_HEALTH_PROBE_KEY)
        except StorageError as exc:
            _logger.warning("health_blob_store_unreachable", error=exc.message)
            blob_ok = False
        providers["blob_store"] = blob_ok

    any_vendor = any(value for key, value in providers.items() if key != "blob_store")

    if not blob_ok:
        status = "unhealthy"
    elif not any_vendor:
        status = "degraded"
    else:
        status = "healthy"

    return HealthResponse(status=status, version=__version__, providers=providers)


@router.get(
    "/providers",
    response_model=ProvidersResponse,
    summary="List configured providers",
)
async def list_providers(request: Request) -> ProvidersResponse:
    """List every vendor, its type, and whether its key is configured."""
    providers: list[dict[str, Any]] = []
    if hasattr(request.app.state, "provider_list"):
        providers = request.app.state.provider_list

    return ProvidersResponse(providers=providers)


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


@router.get("/tools/analytics", summary="Usage report")
async def get_analytics(analytics: AnalyticsDep, days: str | None = Query(default=None)) -> dict[str, Any]:
    """Aggregate the last ``days`` days (1-30, default 7) of usage."""
    report = await analytics.build_report(clamp_days(days))
    return report.model_dump(by_alias=True)


@router.post("/tools/analytics", summary="Record a usage event")
async def track_analytics(
    body: TrackEventRequest,
    request: Request,
    analytics: AnalyticsDep,
) -> dict[str, bool]:
    if not body.path:
        raise HTTPException(status_code=400, detail="Path is required")
    # Unknown types count as page views.
    event_type = EventType(body.type) if body.type in _EVENT_TYPES else EventType.PAGE_VIEW
    event = AnalyticsEvent(
        type=event_type,
        path=body.path,
        user=current_user(request),
        provider=body.provider,
    )
    await analytics.track_event(event)
    return {"success": True}


# ---------------------------------------------------------------------------
# Feedback board
# ---------------------------------------------------------------------------


@router.get("/tools/feedback", summary="List feedback")
async def list_feedback(feedback: FeedbackDep) -> dict[str, Any]:
    items = await feedback.list_items()
    return {"items": [item.to_dict() for item in items]}


@router.post(
    "/tools/feedback",
    status_code=201,
    responses={400: {"model": ErrorResponse}},
    summary="Submit feedback",
)
async def create_feedback(body: CreateFeedbackRequest, feedback: FeedbackDep) -> dict[str, Any]:
    title = body.title.strip()
    if not title or not body.type:
        raise HTTPException(status_code=400, detail="Title and type are required")
    if body.type not in _FEEDBACK_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid feedback type: {body.type}")

    item = FeedbackItem(
        type=body.type,
        title=title,
        description=body.description.strip(),
        tool=body.tool.strip() or "General",
        submitted_by=body.submitted_by.strip() or "Anonymous",
    )
    created = await feedback.create_item(item)
    return {"item": created.to_dict()}


@router.patch(
    "/tools/feedback",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update feedback status or admin note",
)
async def update_feedback(body: UpdateFeedbackRequest, feedback: FeedbackDep) -> dict[str, Any]:
    if not body.id:
        raise HTTPException(status_code=400, detail="Feedback ID is required")
    if body.status and body.status not in _FEEDBACK_STATUSES:
        raise HTTPException(status_code=400, detail=f"Invalid status: {body.status}")

    updated = await feedback.update_item(body.id, status=body.status, admin_note=body.admin_note)
    if updated is None:
        raise NotFoundError(message="Feedback not found")
    return {"item": updated.to_dict()}


@router.delete(
    "/tools/feedback",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete feedback",
)
async def delete_feedback(feedback: FeedbackDep, id: str | None = Query(default=None)) -> dict[str, bool]:
    if not id:
        raise HTTPException(status_code=400, detail="Feedback ID is required")
    if not await feedback.delete_item(id):
        raise NotFoundError(message="Feedback not found")
    return {"success": True}
