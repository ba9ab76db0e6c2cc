"""Rollout API routes."""
from fastapi import APIRouter, Depends

from otahub.api.deps import get_orchestrator, require_admin
from otahub.api.errors import to_http_exception
from otahub.schemas import (
    DeviceOTAStateResponse,
    RolloutResponse,
    RolloutTriggerRequest,
    RolloutTriggerResponse,
)
from otahub.services.auth import CallerIdentity
from otahub.services.errors import OTAError
from otahub.services.rollout import RolloutOrchestrator

router = APIRouter(prefix="/api/ota", tags=["ota"])


@router.post("/trigger", response_model=RolloutTriggerResponse)
async def trigger_rollout(
    payload: RolloutTriggerRequest,
    caller: CallerIdentity = Depends(require_admin),
    orchestrator: RolloutOrchestrator = Depends(get_orchestrator),
) -> RolloutTriggerResponse:
    """Push an update command for one firmware version to a set of devices.

    Target either explicit ``device_serials`` or every device of an
    ``organization_id``. Store failures are not retried; trigger again.
    """
    try:
        summary = orchestrator.trigger(
            payload.target_version,
            caller.identity,
            device_serials=payload.device_serials,
            organization_id=payload.organization_id,
            maintenance_window=payload.maintenance_window,
        )
    except OTAError as exc:
        raise to_http_exception(exc) from exc

    return RolloutTriggerResponse(
        message=f"OTA triggered for {summary.device_count} device(s)",
        rollout_id=summary.rollout_id,
        target_version=summary.target_version,
        device_count=summary.device_count,
        devices=summary.devices,
    )


@router.get("/rollouts/{rollout_id}", response_model=RolloutResponse, dependencies=[Depends(require_admin)])
async def get_rollout(
    rollout_id: str,
    orchestrator: RolloutOrchestrator = Depends(get_orchestrator),
) -> RolloutResponse:
    try:
        return RolloutResponse.model_validate(orchestrator.get_rollout(rollout_id))
    except OTAError as exc:
        raise to_http_exception(exc) from exc


@router.get("/devices/{serial}", response_model=DeviceOTAStateResponse, dependencies=[Depends(require_admin)])
async def get_device_state(
    serial: str,
    orchestrator: RolloutOrchestrator = Depends(get_orchestrator),
) -> DeviceOTAStateResponse:
    """Current OTA command and agent-reported progress for one device."""
    try:
        return DeviceOTAStateResponse.model_validate(orchestrator.get_device_state(serial))
    except OTAError as exc:
        raise to_http_exception(exc) from exc
