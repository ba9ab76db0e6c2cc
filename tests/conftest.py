import itertools
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ALLOW_INSECURE_HTTP", "true")
os.environ.setdefault("BLOB_STORAGE_PATH", tempfile.mkdtemp(prefix="otahub-blobs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from otahub.api.deps import get_blob_store, get_db
from otahub.db.base import Base
from otahub.main import app
from otahub.services import registry as registry_module
from otahub.services.auth import create_access_token
from otahub.services.blob_store import LocalBlobStore
from otahub.services.record_store import RecordStore
from otahub.services.registry import FirmwareRegistry
from otahub.services.rollout import RolloutOrchestrator


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"), "http://testserver/blobs")


@pytest.fixture
def store(db_session):
    return RecordStore(db_session)


@pytest.fixture
def registry(store, blob_store):
    return FirmwareRegistry(store, blob_store)


@pytest.fixture
def orchestrator(store, registry):
    return RolloutOrchestrator(store, registry)


@pytest.fixture
def clock(monkeypatch):
    """Give each upload a distinct, increasing timestamp."""
    ticks = itertools.count(1_700_000_000_000, 1000)
    monkeypatch.setattr(registry_module, "epoch_ms", lambda: next(ticks))
    return ticks


@pytest.fixture
def client(db_session, blob_store):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(identity: str, access_level: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(identity, access_level)}"}


@pytest.fixture
def admin_headers():
    return bearer("admin@example.com", 2)


@pytest.fixture
def viewer_headers():
    return bearer("viewer@example.com", 1)
