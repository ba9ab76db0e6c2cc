"""Blob storage for firmware binaries."""
import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

_META_SUFFIX = ".meta.json"


class BlobStore(Protocol):
    def save(self, path: str, data: bytes, content_type: str, attrs: dict[str, str]) -> None: ...

    def make_public(self, path: str) -> str: ...

    def delete(self, path: str) -> None: ...

    def read(self, path: str) -> bytes: ...

class LocalBlobStore:
    """Filesystem-backed blob store.

    Blobs live under ``root``; each gets a JSON sidecar holding its content
    type and attributes. Public URLs are ``public_base_url`` + blob path, which
    the app serves as static files when blob serving is enabled.
    """

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        full_path = (self.root / path.lstrip("/")).resolve()
        if not full_path.is_relative_to(self.root):
            raise ValueError(f"Blob path escapes storage root: {path}")
        return full_path

    def save(self, path: str, data: bytes, content_type: str, attrs: dict[str, str]) -> None:
        full_path = self._resolve(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        sidecar = full_path.with_name(full_path.name + _META_SUFFIX)
        sidecar.write_text(json.dumps({"content_type": content_type, "metadata": attrs}))
        logger.debug("Stored blob %s (%d bytes)", path, len(data))

    def make_public(self, path: str) -> str:
        if not self._resolve(path).exists():
            raise FileNotFoundError(path)
        return f"{self.public_base_url}/{path.lstrip('/')}"

    def delete(self, path: str) -> None:
        full_path = self._resolve(path)
        full_path.unlink()
        full_path.with_name(full_path.name + _META_SUFFIX).unlink(missing_ok=True)

    def read(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()
