"""Rollout records and per-device OTA command state."""
import enum
from typing import Any

from sqlalchemy import JSON, BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from otahub.db.base import Base


class RolloutStatus(str, enum.Enum):
    in_progress = "in_progress"


class OTACommand(str, enum.Enum):
    update = "update"


class OTAStatus(str, enum.Enum):
    pending = "pending"
    downloading = "downloading"
    installing = "installing"
    success = "success"
    failed = "failed"


class Rollout(Base):
    __tablename__ = "ota_rollouts"

    rollout_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    target_version: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    devices: Mapped[list] = mapped_column(JSON, nullable=False)  # frozen snapshot of serials
    device_count: Mapped[int] = mapped_column(Integer, nullable=False)
    organization_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    triggered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    triggered_by: Mapped[str] = mapped_column(String(255), nullable=False)
    maintenance_window: Mapped[Any] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=RolloutStatus.in_progress.value)

    def __repr__(self) -> str:
        return f"<Rollout {self.rollout_id} v{self.target_version} devices={self.device_count}>"


class DeviceOTAState(Base):
    """Current OTA command for a device. Overwritten by every rollout that targets it."""

    __tablename__ = "device_ota_state"

    device_serial: Mapped[str] = mapped_column(String(128), primary_key=True)
    command: Mapped[str] = mapped_column(String(20), nullable=False)
    target_version: Mapped[str] = mapped_column(String(64), nullable=False)
    download_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    triggered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    triggered_by: Mapped[str] = mapped_column(String(255), nullable=False)
    rollout_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    maintenance_window: Mapped[Any] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<DeviceOTAState {self.device_serial} rollout={self.rollout_id} status={self.status}>"
