"""initial firmware catalog, device directory and rollout tables

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 10:00:00.000000
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "firmware_versions",
        sa.Column("version", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("storage_path", sa.String(length=500), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("checksum", sa.String(length=64), nullable=False),
        sa.Column("uploaded_at", sa.BigInteger(), nullable=False),
        sa.Column("uploaded_by", sa.String(length=255), nullable=False),
        sa.Column("changelog", sa.Text(), nullable=False, server_default=""),
        sa.Column("hardware_version", sa.String(length=64), nullable=False, server_default="all"),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("download_url", sa.String(length=1000), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("filename", name="uq_firmware_versions_filename"),
    )
    op.create_index(op.f("ix_firmware_versions_uploaded_at"), "firmware_versions", ["uploaded_at"], unique=False)
    op.create_index(
        op.f("ix_firmware_versions_hardware_version"), "firmware_versions", ["hardware_version"], unique=False
    )

    op.create_table(
        "devices",
        sa.Column("serial", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("organization_id", sa.String(length=128), nullable=True),
    )
    op.create_index(op.f("ix_devices_organization_id"), "devices", ["organization_id"], unique=False)

    op.create_table(
        "ota_rollouts",
        sa.Column("rollout_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("target_version", sa.String(length=64), nullable=False),
        sa.Column("devices", sa.JSON(), nullable=False),
        sa.Column("device_count", sa.Integer(), nullable=False),
        sa.Column("organization_id", sa.String(length=128), nullable=True),
        sa.Column("triggered_at", sa.BigInteger(), nullable=False),
        sa.Column("triggered_by", sa.String(length=255), nullable=False),
        sa.Column("maintenance_window", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
    )
    op.create_index(op.f("ix_ota_rollouts_target_version"), "ota_rollouts", ["target_version"], unique=False)

    op.create_table(
        "device_ota_state",
        sa.Column("device_serial", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("command", sa.String(length=20), nullable=False),
        sa.Column("target_version", sa.String(length=64), nullable=False),
        sa.Column("download_url", sa.String(length=1000), nullable=False),
        sa.Column("checksum", sa.String(length=64), nullable=False),
        sa.Column("size", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("triggered_at", sa.BigInteger(), nullable=False),
        sa.Column("triggered_by", sa.String(length=255), nullable=False),
        sa.Column("rollout_id", sa.String(length=64), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("maintenance_window", sa.JSON(), nullable=True),
    )
    op.create_index(op.f("ix_device_ota_state_rollout_id"), "device_ota_state", ["rollout_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_device_ota_state_rollout_id"), table_name="device_ota_state")
    op.drop_table("device_ota_state")

    op.drop_index(op.f("ix_ota_rollouts_target_version"), table_name="ota_rollouts")
    op.drop_table("ota_rollouts")

    op.drop_index(op.f("ix_devices_organization_id"), table_name="devices")
    op.drop_table("devices")

    op.drop_index(op.f("ix_firmware_versions_hardware_version"), table_name="firmware_versions")
    op.drop_index(op.f("ix_firmware_versions_uploaded_at"), table_name="firmware_versions")
    op.drop_table("firmware_versions")
