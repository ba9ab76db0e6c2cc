from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from otahub.db.base import Base


class Device(Base):
    """Device directory entry. Owned by the fleet management side; read-only here."""

    __tablename__ = "devices"

    serial: Mapped[str] = mapped_column(String(128), primary_key=True)
    organization_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
