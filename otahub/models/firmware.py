"""Firmware artifact catalog model."""
from sqlalchemy import BigInteger, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from otahub.db.base import Base

WILDCARD_HARDWARE = "all"


class FirmwareArtifact(Base):
    """A stored firmware binary's metadata, keyed by its version string."""

    __tablename__ = "firmware_versions"

    version: Mapped[str] = mapped_column(String(64), primary_key=True)
    filename: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    storage_path: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    checksum: Mapped[str] = mapped_column(String(64), nullable=False)  # SHA256 hex

    uploaded_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)  # epoch ms
    uploaded_by: Mapped[str] = mapped_column(String(255), nullable=False)

    changelog: Mapped[str] = mapped_column(Text, nullable=False, default="")
    hardware_version: Mapped[str] = mapped_column(
        String(64), nullable=False, default=WILDCARD_HARDWARE, index=True
    )
    required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    download_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<FirmwareArtifact v{self.version} hw={self.hardware_version} active={self.active}>"
