"""Versioned firmware catalog."""
import logging
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from otahub.models import WILDCARD_HARDWARE, FirmwareArtifact
from otahub.services import checksum
from otahub.services.blob_store import BlobStore
from otahub.services.errors import NotFound, StoreFailure, ValidationFailed, VersionConflict
from otahub.services.record_store import RecordStore
from otahub.utils.time import epoch_ms

logger = logging.getLogger(__name__)

FIRMWARE_CONTENT_TYPE = "application/octet-stream"
_VERSION_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._+-]{0,63}$")
# Path segments of GET routes that would shadow GET /api/firmware/{version}.
RESERVED_VERSIONS = frozenset({"latest", "versions"})


@dataclass(frozen=True)
class FirmwareMetadata:
    changelog: str = ""
    hardware_version: str = WILDCARD_HARDWARE
    required: bool = False


class FirmwareRegistry:
    """Catalog of firmware artifacts backed by a record store and a blob store."""

    def __init__(self, store: RecordStore, blobs: BlobStore):
        self.store = store
        self.blobs = blobs

    def upload(
        self,
        version: str,
        binary: bytes,
        metadata: FirmwareMetadata,
        uploaded_by: str,
    ) -> FirmwareArtifact:
        """Store a new firmware version.

        Args:
            version: Caller-chosen version string, unique across the catalog
            binary: Raw firmware image
            metadata: Changelog, hardware tag and required flag
            uploaded_by: Identity of the uploading admin

        Returns:
            The created artifact

        Raises:
            ValidationFailed: version malformed or binary empty
            VersionConflict: version already exists
            StoreFailure: metadata could not be written
        """
        if not _VERSION_RE.match(version):
            raise ValidationFailed(f"Invalid version format: {version}")
        if version in RESERVED_VERSIONS:
            raise ValidationFailed(f"Version name is reserved: {version}")
        if not binary:
            raise ValidationFailed("Firmware binary is empty")
        if self.store.get_firmware(version) is not None:
            raise VersionConflict(f"Firmware version {version} already exists")

        file_hash = checksum.digest(binary)
        uploaded_at = epoch_ms()
        filename = f"firmware_v{version}_{uploaded_at}_{uuid.uuid4().hex[:8]}.bin"
        storage_path = f"firmware/{filename}"

        self.blobs.save(
            storage_path,
            binary,
            FIRMWARE_CONTENT_TYPE,
            {
                "version": version,
                "checksum": file_hash,
                "uploaded_by": uploaded_by,
                "uploaded_at": datetime.fromtimestamp(uploaded_at / 1000, tz=timezone.utc).isoformat(),
            },
        )
        if not checksum.verify(self.blobs.read(storage_path), file_hash):
            self._discard_blob(storage_path)
            raise StoreFailure(f"Stored blob for firmware {version} failed integrity check")
        download_url = self.blobs.make_public(storage_path)

        artifact = FirmwareArtifact(
            version=version,
            filename=filename,
            storage_path=storage_path,
            size=len(binary),
            checksum=file_hash,
            uploaded_at=uploaded_at,
            uploaded_by=uploaded_by,
            changelog=metadata.changelog,
            hardware_version=metadata.hardware_version or WILDCARD_HARDWARE,
            required=metadata.required,
            download_url=download_url,
            active=True,
        )
        try:
            artifact = self.store.create_firmware(artifact)
        except (VersionConflict, StoreFailure):
            # The blob path is unique to this call, so only our own copy goes.
            self._discard_blob(storage_path)
            raise

        logger.info(
            "Uploaded firmware v%s (%d bytes, sha256 %s...) by %s",
            version,
            artifact.size,
            file_hash[:16],
            uploaded_by,
        )
        return artifact

    def list_versions(self) -> list[FirmwareArtifact]:
        return self.store.list_firmware()

    def get(self, version: str) -> FirmwareArtifact:
        artifact = self.store.get_firmware(version)
        if artifact is None:
            raise NotFound("Firmware version not found")
        return artifact

    def set_active(self, version: str, active: bool) -> FirmwareArtifact:
        artifact = self.store.set_firmware_active(self.get(version), active)
        logger.info("Firmware v%s marked %s", version, "active" if active else "inactive")
        return artifact

    def delete(self, version: str) -> None:
        """Remove a version. Metadata goes even if the blob cannot be deleted."""
        artifact = self.get(version)
        self._discard_blob(artifact.storage_path)
        self.store.delete_firmware(artifact)
        logger.info("Deleted firmware v%s", version)

    def _discard_blob(self, storage_path: str) -> None:
        try:
            self.blobs.delete(storage_path)
        except Exception as exc:
            logger.warning("Could not delete firmware blob %s: %s", storage_path, exc)
