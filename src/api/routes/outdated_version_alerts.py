"""Outdated version alert endpoints: queries, updates and fan-out triggers."""

import time

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.auth import get_actor_id, verify_api_key
from src.api.dependencies import get_alert_service
from src.api.models import (
    ErrorResponse,
    OutdatedVersionAlertCountResponse,
    OutdatedVersionAlertItem,
    OutdatedVersionAlertsResponse,
    OutdatedVersionAlertUpdateRequest,
    PluginVersionTriggerRequest,
    TemplateVersionTriggerRequest,
    TriggerResponse,
)
from src.outdated_alerts.errors import (
    AlertConflictError,
    AlertNotFoundError,
    AlertValidationError,
)
from src.outdated_alerts.schemas import AlertFilter, AlertUpdate
from src.outdated_alerts.service import OutdatedVersionAlertService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/outdated-version-alerts")


def _alert_filter(
    resource_id: str | None = Query(default=None, description="Filter by service"),
    block_id: str | None = Query(default=None, description="Filter by plugin installation block"),
    type: str | None = Query(default=None, description="Filter by type: TemplateVersion, PluginVersion"),
    status_: str | None = Query(
        default=None,
        alias="status",
        description="Filter by status: New, Canceled, Resolved",
    ),
    project_id: str | None = Query(default=None, description="Filter by project"),
) -> AlertFilter:
    try:
        return AlertFilter(
            resource_id=resource_id,
            block_id=block_id,
            type=type,
            status=status_,
            project_id=project_id,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )


@router.get(
    "",
    response_model=OutdatedVersionAlertsResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        422: {"model": ErrorResponse, "description": "Invalid filter parameter"},
    },
    summary="List outdated version alerts",
    description=(
        "List alerts of live (not deleted, not archived) services, newest "
        "first, with optional filters."
    ),
)
async def list_alerts(
    where: AlertFilter = Depends(_alert_filter),
    limit: int = Query(default=50, ge=1, le=500, description="Maximum alerts to return"),
    offset: int = Query(default=0, ge=0, description="Offset for pagination"),
    api_key: str = Depends(verify_api_key),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> OutdatedVersionAlertsResponse:
    start_time = time.perf_counter()

    alerts = await service.find_many(where, limit=limit, offset=offset)
    items = [OutdatedVersionAlertItem.from_alert(a) for a in alerts]

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Outdated version alerts listed",
        total=len(items),
        resource_id=where.resource_id,
        status=where.status,
        latency_ms=round(latency_ms, 2),
    )

    return OutdatedVersionAlertsResponse(
        alerts=items,
        total=len(items),
        latency_ms=round(latency_ms, 2),
    )


@router.get(
    "/count",
    response_model=OutdatedVersionAlertCountResponse,
    summary="Count outdated version alerts",
)
async def count_alerts(
    where: AlertFilter = Depends(_alert_filter),
    api_key: str = Depends(verify_api_key),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> OutdatedVersionAlertCountResponse:
    return OutdatedVersionAlertCountResponse(count=await service.count(where))


@router.get(
    "/{alert_id}",
    response_model=OutdatedVersionAlertItem,
    responses={404: {"model": ErrorResponse, "description": "Alert not found"}},
    summary="Get an outdated version alert",
)
async def get_alert(
    alert_id: str,
    api_key: str = Depends(verify_api_key),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> OutdatedVersionAlertItem:
    alert = await service.find_one(alert_id)
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Outdated version alert {alert_id} not found",
        )
    return OutdatedVersionAlertItem.from_alert(alert)


@router.patch(
    "/{alert_id}",
    response_model=OutdatedVersionAlertItem,
    responses={
        401: {"model": ErrorResponse, "description": "Missing API key or user"},
        404: {"model": ErrorResponse, "description": "Alert not found"},
        409: {"model": ErrorResponse, "description": "Scope already has a New alert"},
        422: {"model": ErrorResponse, "description": "Invalid status"},
    },
    summary="Update an outdated version alert",
)
async def update_alert(
    alert_id: str,
    request: OutdatedVersionAlertUpdateRequest,
    api_key: str = Depends(verify_api_key),
    user_id: str = Depends(get_actor_id),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> OutdatedVersionAlertItem:
    try:
        data = AlertUpdate(
            status=request.status,
            outdated_version=request.outdated_version,
            latest_version=request.latest_version,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )

    try:
        alert = await service.update(alert_id, data, user_id=user_id)
    except AlertNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AlertConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return OutdatedVersionAlertItem.from_alert(alert)


@router.post(
    "/trigger/template",
    response_model=TriggerResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Template missing or not a template"},
        401: {"model": ErrorResponse, "description": "Missing API key or user"},
    },
    summary="Alert services of a service template",
    description=(
        "Create a TemplateVersion alert for every service built from the "
        "template and emit a tech debt event per alert. No alerts are "
        "created when outdated_version is null."
    ),
)
async def trigger_template_version(
    request: TemplateVersionTriggerRequest,
    api_key: str = Depends(verify_api_key),
    user_id: str = Depends(get_actor_id),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> TriggerResponse:
    start_time = time.perf_counter()

    try:
        alerts = await service.trigger_alerts_for_template_version(
            request.template_resource_id,
            request.outdated_version,
            request.latest_version,
            user_id,
        )
    except AlertValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Template version alerts triggered",
        template_resource_id=request.template_resource_id,
        total=len(alerts),
        latency_ms=round(latency_ms, 2),
    )
    return TriggerResponse(
        alerts=[OutdatedVersionAlertItem.from_alert(a) for a in alerts],
        total=len(alerts),
        latency_ms=round(latency_ms, 2),
    )


@router.post(
    "/trigger/plugin",
    response_model=TriggerResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Project not found"},
        401: {"model": ErrorResponse, "description": "Missing API key or user"},
    },
    summary="Alert installations of a plugin",
)
async def trigger_plugin_version(
    request: PluginVersionTriggerRequest,
    api_key: str = Depends(verify_api_key),
    user_id: str = Depends(get_actor_id),
    service: OutdatedVersionAlertService = Depends(get_alert_service),
) -> TriggerResponse:
    start_time = time.perf_counter()

    try:
        alerts = await service.trigger_alerts_for_new_plugin_version(
            request.project_id,
            request.plugin_id,
            request.new_version,
            user_id,
        )
    except AlertValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        "Plugin version alerts triggered",
        project_id=request.project_id,
        plugin_id=request.plugin_id,
        total=len(alerts),
        latency_ms=round(latency_ms, 2),
    )
    return TriggerResponse(
        alerts=[OutdatedVersionAlertItem.from_alert(a) for a in alerts],
        total=len(alerts),
        latency_ms=round(latency_ms, 2),
    )
