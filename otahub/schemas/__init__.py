from otahub.schemas.ota import (
    DeviceOTAStateResponse,
    FirmwareListResponse,
    FirmwareResponse,
    FirmwareUpdate,
    FirmwareUploadResponse,
    LatestFirmwareResponse,
    RolloutResponse,
    RolloutTriggerRequest,
    RolloutTriggerResponse,
)

__all__ = [
    "DeviceOTAStateResponse",
    "FirmwareListResponse",
    "FirmwareResponse",
    "FirmwareUpdate",
    "FirmwareUploadResponse",
    "LatestFirmwareResponse",
    "RolloutResponse",
    "RolloutTriggerRequest",
    "RolloutTriggerResponse",
]
