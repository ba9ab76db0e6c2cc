"""Rollout orchestration: fan a firmware version out to a set of devices."""
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from otahub.models import DeviceOTAState, OTACommand, OTAStatus, Rollout, RolloutStatus
from otahub.services.errors import NotFound, ValidationFailed
from otahub.services.record_store import RecordStore
from otahub.services.registry import FirmwareRegistry
from otahub.utils.time import epoch_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RolloutSummary:
    rollout_id: str
    target_version: str
    device_count: int
    devices: list[str]


def new_rollout_id(now_ms: int | None = None) -> str:
    now_ms = now_ms if now_ms is not None else epoch_ms()
    return f"rollout_{now_ms}_{uuid.uuid4().hex[:12]}"


def _normalize_serials(device_serials: list[str]) -> list[str]:
    serials: list[str] = []
    for raw in device_serials:
        serial = raw.strip() if isinstance(raw, str) else ""
        if not serial:
            raise ValidationFailed("Device serials must be non-empty strings")
        if serial not in serials:
            serials.append(serial)
    return serials


class RolloutOrchestrator:
    def __init__(self, store: RecordStore, registry: FirmwareRegistry):
        self.store = store
        self.registry = registry

    def trigger(
        self,
        target_version: str,
        triggered_by: str,
        device_serials: list[str] | None = None,
        organization_id: str | None = None,
        maintenance_window: Any = None,
    ) -> RolloutSummary:
        """Publish an update command for ``target_version`` to every selected device.

        Exactly one selector is accepted: an explicit serial list or an
        organization id resolved through the device directory. The rollout
        record and all device states are written in a single transaction.
        """
        if not target_version:
            raise ValidationFailed("Target version required")
        if device_serials and organization_id:
            raise ValidationFailed("Use device_serials or organization_id, not both")
        if not device_serials and not organization_id:
            raise ValidationFailed("Must specify device_serials or organization_id")

        artifact = self.registry.get(target_version)

        if device_serials:
            devices = _normalize_serials(device_serials)
        else:
            devices = self.store.devices_in_organization(organization_id)
        if not devices:
            raise ValidationFailed("No devices found")

        now_ms = epoch_ms()
        rollout_id = new_rollout_id(now_ms)
        states = [
            DeviceOTAState(
                device_serial=serial,
                command=OTACommand.update.value,
                target_version=artifact.version,
                download_url=artifact.download_url,
                checksum=artifact.checksum,
                size=artifact.size,
                status=OTAStatus.pending.value,
                progress=0,
                triggered_at=now_ms,
                triggered_by=triggered_by,
                rollout_id=rollout_id,
                error=None,
                maintenance_window=maintenance_window,
            )
            for serial in devices
        ]
        rollout = Rollout(
            rollout_id=rollout_id,
            target_version=artifact.version,
            devices=list(devices),
            device_count=len(devices),
            organization_id=organization_id,
            triggered_at=now_ms,
            triggered_by=triggered_by,
            maintenance_window=maintenance_window,
            status=RolloutStatus.in_progress.value,
        )
        self.store.commit_rollout(rollout, states)

        logger.info(
            "Rollout %s: v%s to %d device(s) by %s", rollout_id, artifact.version, len(devices), triggered_by
        )
        return RolloutSummary(
            rollout_id=rollout_id,
            target_version=artifact.version,
            device_count=len(devices),
            devices=list(devices),
        )

    def get_rollout(self, rollout_id: str) -> Rollout:
        rollout = self.store.get_rollout(rollout_id)
        if rollout is None:
            raise NotFound("Rollout not found")
        return rollout

    def get_device_state(self, serial: str) -> DeviceOTAState:
        state = self.store.get_device_state(serial)
        if state is None:
            raise NotFound("No OTA state for device")
        return state
