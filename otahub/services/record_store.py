"""Keyed record access over the SQLAlchemy session.

Every write here either commits as a whole or rolls back and raises
``StoreFailure``; callers never see a half-applied batch.
"""
import logging
from collections.abc import Iterable

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from otahub.models import Device, DeviceOTAState, FirmwareArtifact, Rollout, WILDCARD_HARDWARE
from otahub.services.errors import StoreFailure, VersionConflict

logger = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    # Firmware catalog

    def get_firmware(self, version: str) -> FirmwareArtifact | None:
        return self.db.get(FirmwareArtifact, version)

    def list_firmware(self) -> list[FirmwareArtifact]:
        return (
            self.db.query(FirmwareArtifact)
            .order_by(FirmwareArtifact.uploaded_at.desc(), FirmwareArtifact.version.desc())
            .all()
        )

    def latest_active_firmware(self, hardware_version: str | None = None) -> FirmwareArtifact | None:
        query = self.db.query(FirmwareArtifact).filter(FirmwareArtifact.active.is_(True))
        if hardware_version:
            query = query.filter(
                or_(
                    FirmwareArtifact.hardware_version == WILDCARD_HARDWARE,
                    FirmwareArtifact.hardware_version == hardware_version,
                )
            )
        return query.order_by(FirmwareArtifact.uploaded_at.desc(), FirmwareArtifact.version.desc()).first()

    def create_firmware(self, artifact: FirmwareArtifact) -> FirmwareArtifact:
        """Insert ``artifact`` only if its version is not taken yet."""
        self.db.add(artifact)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise VersionConflict(f"Firmware version {artifact.version} already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to store firmware %s: %s", artifact.version, exc)
            raise StoreFailure(f"Failed to store firmware metadata: {exc}") from exc
        self.db.refresh(artifact)
        return artifact

    def set_firmware_active(self, artifact: FirmwareArtifact, active: bool) -> FirmwareArtifact:
        artifact.active = active
        self._commit(f"update firmware {artifact.version}")
        self.db.refresh(artifact)
        return artifact

    def delete_firmware(self, artifact: FirmwareArtifact) -> None:
        self.db.delete(artifact)
        self._commit(f"delete firmware {artifact.version}")

    # Device directory

    def devices_in_organization(self, organization_id: str) -> list[str]:
        rows = (
            self.db.query(Device.serial)
            .filter(Device.organization_id == organization_id)
            .order_by(Device.serial.asc())
            .all()
        )
        return [row.serial for row in rows]

    # Rollouts

    def get_rollout(self, rollout_id: str) -> Rollout | None:
        return self.db.get(Rollout, rollout_id)

    def get_device_state(self, serial: str) -> DeviceOTAState | None:
        return self.db.get(DeviceOTAState, serial)

    def commit_rollout(self, rollout: Rollout, states: Iterable[DeviceOTAState]) -> None:
        """Write the rollout record and every device state in one transaction."""
        try:
            for state in states:
                self.db.merge(state)
            self.db.add(rollout)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Rollout %s write failed: %s", rollout.rollout_id, exc)
            raise StoreFailure(f"Failed to write rollout: {exc}") from exc

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Failed to %s: %s", action, exc)
            raise StoreFailure(f"Failed to {action}") from exc
