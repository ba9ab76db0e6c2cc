"""Firmware catalog API routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from otahub.api.deps import get_registry, get_record_store, require_admin
from otahub.api.errors import to_http_exception
from otahub.config import get_settings
from otahub.schemas import (
    FirmwareListResponse,
    FirmwareResponse,
    FirmwareUpdate,
    FirmwareUploadResponse,
    LatestFirmwareResponse,
)
from otahub.services.auth import CallerIdentity
from otahub.services.errors import OTAError
from otahub.services.multipart import UploadDecoder, extract_boundary
from otahub.services.record_store import RecordStore
from otahub.services.registry import FirmwareMetadata, FirmwareRegistry
from otahub.services.resolver import resolve_latest

router = APIRouter(prefix="/api/firmware", tags=["firmware"])
settings = get_settings()

logger = logging.getLogger(__name__)

# Room for part headers and scalar fields on top of the binary itself.
_MULTIPART_OVERHEAD = 64 * 1024


# ============================================================================
# Device-facing endpoints (public)
# ============================================================================


@router.get("/latest", response_model=LatestFirmwareResponse)
async def latest_firmware(
    hardware_version: str | None = None,
    current_version: str | None = None,
    store: RecordStore = Depends(get_record_store),
) -> LatestFirmwareResponse:
    """Return the newest active firmware for a hardware class.

    Called by devices polling for updates.
    """
    try:
        resolution = resolve_latest(store, hardware_version, current_version)
    except OTAError as exc:
        raise to_http_exception(exc, expose_internal=False) from exc

    artifact = resolution.artifact
    return LatestFirmwareResponse(
        version=artifact.version,
        size=artifact.size,
        checksum=artifact.checksum,
        download_url=artifact.download_url,
        changelog=artifact.changelog,
        required=artifact.required,
        update_available=resolution.update_available,
        current_version=resolution.current_version or "unknown",
    )


@router.get("/download/{version}")
async def download_firmware(
    version: str,
    registry: FirmwareRegistry = Depends(get_registry),
) -> RedirectResponse:
    """Redirect to the firmware binary's public URL."""
    try:
        artifact = registry.get(version)
    except OTAError as exc:
        raise to_http_exception(exc, expose_internal=False) from exc
    return RedirectResponse(url=artifact.download_url, status_code=status.HTTP_302_FOUND)


# ============================================================================
# Admin endpoints
# ============================================================================


@router.post("/upload", response_model=FirmwareUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_firmware(
    request: Request,
    caller: CallerIdentity = Depends(require_admin),
    registry: FirmwareRegistry = Depends(get_registry),
) -> FirmwareUploadResponse:
    """Upload a firmware binary with its metadata (multipart/form-data).

    Fields: a ``.bin`` file part, ``version``, and optionally ``changelog``,
    ``hardware_version`` (default "all") and ``required``.
    """
    body_limit = settings.max_upload_bytes + _MULTIPART_OVERHEAD
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > body_limit:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Firmware file too large")

    # Content-Length is absent on chunked requests, so count while streaming.
    received = 0
    try:
        decoder = UploadDecoder(extract_boundary(request.headers.get("content-type")))
        async for chunk in request.stream():
            received += len(chunk)
            if received > body_limit:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Firmware file too large")
            decoder.feed(chunk)
        upload = decoder.finish()
    except OTAError as exc:
        raise to_http_exception(exc) from exc

    if len(upload.binary) > settings.max_upload_bytes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Firmware file too large")
    if not upload.filename.lower().endswith(".bin"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only .bin files are allowed")

    metadata = FirmwareMetadata(
        changelog=upload.changelog,
        hardware_version=upload.hardware_version,
        required=upload.required,
    )
    try:
        artifact = registry.upload(upload.version, upload.binary, metadata, caller.identity)
    except OTAError as exc:
        raise to_http_exception(exc) from exc
    except OSError as exc:
        logger.error("Blob write failed for firmware v%s: %s", upload.version, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Upload failed: {exc}",
        ) from exc

    return FirmwareUploadResponse(firmware=FirmwareResponse.model_validate(artifact))


@router.get("/versions", response_model=FirmwareListResponse, dependencies=[Depends(require_admin)])
async def list_versions(registry: FirmwareRegistry = Depends(get_registry)) -> FirmwareListResponse:
    """List all firmware versions, newest first."""
    return FirmwareListResponse(
        versions=[FirmwareResponse.model_validate(artifact) for artifact in registry.list_versions()]
    )


@router.get("/{version}", response_model=FirmwareResponse, dependencies=[Depends(require_admin)])
async def get_firmware(version: str, registry: FirmwareRegistry = Depends(get_registry)) -> FirmwareResponse:
    try:
        return FirmwareResponse.model_validate(registry.get(version))
    except OTAError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{version}", response_model=FirmwareResponse, dependencies=[Depends(require_admin)])
async def update_firmware(
    version: str,
    firmware_update: FirmwareUpdate,
    registry: FirmwareRegistry = Depends(get_registry),
) -> FirmwareResponse:
    """Enable or disable a version for update resolution."""
    try:
        return FirmwareResponse.model_validate(registry.set_active(version, firmware_update.active))
    except OTAError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{version}", dependencies=[Depends(require_admin)])
async def delete_firmware(version: str, registry: FirmwareRegistry = Depends(get_registry)) -> dict:
    """Delete a firmware version and, best-effort, its binary."""
    try:
        registry.delete(version)
    except OTAError as exc:
        raise to_http_exception(exc) from exc
    return {"success": True, "message": "Firmware deleted"}
