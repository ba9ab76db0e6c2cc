from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from otahub.config import get_settings
from otahub.db import SessionLocal
from otahub.services.auth import CallerIdentity, TokenExpired, TokenInvalid, decode_access_token
from otahub.services.blob_store import BlobStore, LocalBlobStore
from otahub.services.record_store import RecordStore
from otahub.services.registry import FirmwareRegistry
from otahub.services.rollout import RolloutOrchestrator

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)
_blob_store: LocalBlobStore | None = None


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store is None:
        _blob_store = LocalBlobStore(settings.blob_storage_path, settings.public_blob_base_url)
    return _blob_store


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


def get_registry(
    store: RecordStore = Depends(get_record_store),
    blobs: BlobStore = Depends(get_blob_store),
) -> FirmwareRegistry:
    return FirmwareRegistry(store, blobs)


def get_orchestrator(
    store: RecordStore = Depends(get_record_store),
    registry: FirmwareRegistry = Depends(get_registry),
) -> RolloutOrchestrator:
    return RolloutOrchestrator(store, registry)


def get_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CallerIdentity:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Missing bearer token")

    try:
        return decode_access_token(credentials.credentials)
    except TokenExpired:
        raise HTTPException(status_code=401, detail="Token expired")
    except TokenInvalid:
        raise HTTPException(status_code=401, detail="Token invalid")


def require_admin(caller: CallerIdentity = Depends(get_caller)) -> CallerIdentity:
    if caller.access_level < settings.admin_access_level:
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller
