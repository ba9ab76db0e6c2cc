"""Pydantic schemas for firmware and rollout endpoints."""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FirmwareResponse(BaseModel):
    """Firmware artifact as returned to admins."""

    model_config = ConfigDict(from_attributes=True)

    version: str
    filename: str
    storage_path: str
    size: int
    checksum: str = Field(..., description="SHA256 hex digest of the binary")
    uploaded_at: int = Field(..., description="Upload time, epoch milliseconds")
    uploaded_by: str
    changelog: str
    hardware_version: str
    required: bool
    download_url: str
    active: bool


class FirmwareUploadResponse(BaseModel):
    success: bool = True
    message: str = "Firmware uploaded successfully"
    firmware: FirmwareResponse


class FirmwareListResponse(BaseModel):
    versions: list[FirmwareResponse]


class FirmwareUpdate(BaseModel):
    """Only the active flag of an artifact may change after upload."""

    active: bool


class LatestFirmwareResponse(BaseModel):
    """Answer to a device asking which image it should run."""

    version: str
    size: int
    checksum: str
    download_url: str
    changelog: str
    required: bool
    update_available: bool
    current_version: str = Field(..., description="Version reported by the caller, or 'unknown'")


class RolloutTriggerRequest(BaseModel):
    target_version: str = Field(..., min_length=1, max_length=64)
    device_serials: Optional[list[str]] = None
    organization_id: Optional[str] = None
    maintenance_window: Optional[Any] = None


class RolloutTriggerResponse(BaseModel):
    success: bool = True
    message: str
    rollout_id: str
    target_version: str
    device_count: int
    devices: list[str]


class RolloutResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rollout_id: str
    target_version: str
    devices: list[str]
    device_count: int
    organization_id: Optional[str] = None
    triggered_at: int
    triggered_by: str
    maintenance_window: Optional[Any] = None
    status: str


class DeviceOTAStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    device_serial: str
    command: str
    target_version: str
    download_url: str
    checksum: str
    size: int
    status: str
    progress: int
    triggered_at: int
    triggered_by: str
    rollout_id: str
    error: Optional[str] = None
    maintenance_window: Optional[Any] = None
