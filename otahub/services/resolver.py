from dataclasses import dataclass

from otahub.models import FirmwareArtifact
from otahub.services.errors import NotFound
from otahub.services.record_store import RecordStore


@dataclass(frozen=True)
class LatestResolution:
    artifact: FirmwareArtifact
    update_available: bool
    current_version: str | None


def resolve_latest(
    store: RecordStore,
    hardware_version: str | None = None,
    current_version: str | None = None,
) -> LatestResolution:
    """Pick the newest active artifact a device of ``hardware_version`` may install.

    Artifacts tagged ``"all"`` match every hardware class. Newest means the
    latest upload time; equal upload times fall back to the higher version
    string. ``update_available`` is a plain inequality against the device's
    current version, not an ordering.
    """
    hardware_version = hardware_version or None
    current_version = current_version or None

    artifact = store.latest_active_firmware(hardware_version)
    if artifact is None:
        raise NotFound("No firmware available")

    return LatestResolution(
        artifact=artifact,
        update_available=current_version is None or artifact.version != current_version,
        current_version=current_version,
    )
