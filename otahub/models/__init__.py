from otahub.models.device import Device
from otahub.models.firmware import WILDCARD_HARDWARE, FirmwareArtifact
from otahub.models.rollout import DeviceOTAState, OTACommand, OTAStatus, Rollout, RolloutStatus

__all__ = [
    "Device",
    "DeviceOTAState",
    "FirmwareArtifact",
    "OTACommand",
    "OTAStatus",
    "Rollout",
    "RolloutStatus",
    "WILDCARD_HARDWARE",
]
