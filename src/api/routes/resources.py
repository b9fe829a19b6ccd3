"""Resource endpoints that change alert state."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from src.api.auth import verify_api_key
from src.api.dependencies import get_resource_service
from src.api.models import (
    ErrorResponse,
    ServiceTemplateVersionRequest,
    ServiceTemplateVersionResponse,
)
from src.resources.service import ResourceNotFoundError, ResourceService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/resources")


@router.put(
    "/{resource_id}/service-template-version",
    response_model=ServiceTemplateVersionResponse,
    responses={404: {"model": ErrorResponse, "description": "Service not found"}},
    summary="Update a service's template version",
    description=(
        "Point the service at a new version of its template and resolve "
        "its open TemplateVersion alerts."
    ),
)
async def update_service_template_version(
    resource_id: str,
    request: ServiceTemplateVersionRequest,
    api_key: str = Depends(verify_api_key),
    service: ResourceService = Depends(get_resource_service),
) -> ServiceTemplateVersionResponse:
    try:
        resolved = await service.update_service_template_version(
            resource_id, request.version
        )
    except ResourceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    logger.info(
        "Service template version updated",
        resource_id=resource_id,
        version=request.version,
        resolved_alerts=resolved,
    )
    return ServiceTemplateVersionResponse(
        resource_id=resource_id,
        version=request.version,
        resolved_alerts=resolved,
    )
