import pytest
from sqlalchemy.exc import OperationalError

from otahub.models import Device, DeviceOTAState, Rollout
from otahub.services.errors import NotFound, StoreFailure, ValidationFailed
from otahub.services.registry import FirmwareMetadata
from otahub.services.rollout import new_rollout_id


@pytest.fixture
def artifact(registry, clock):
    return registry.upload("2.0.0", b"\xff" * 1024, FirmwareMetadata(), "admin@example.com")


def test_rollout_to_explicit_devices(orchestrator, store, artifact):
    summary = orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A", "B"])

    assert summary.device_count == 2
    assert summary.devices == ["A", "B"]
    assert summary.target_version == "2.0.0"

    states = store.db.query(DeviceOTAState).order_by(DeviceOTAState.device_serial).all()
    assert [state.device_serial for state in states] == ["A", "B"]
    for state in states:
        assert state.command == "update"
        assert state.status == "pending"
        assert state.progress == 0
        assert state.error is None
        assert state.rollout_id == summary.rollout_id
        assert state.target_version == "2.0.0"
        assert state.download_url == artifact.download_url
        assert state.checksum == artifact.checksum
        assert state.size == 1024
        assert state.triggered_by == "admin@example.com"

    rollout = store.get_rollout(summary.rollout_id)
    assert rollout.device_count == 2
    assert rollout.devices == ["A", "B"]
    assert rollout.status == "in_progress"
    assert rollout.organization_id is None


def test_duplicate_serials_are_collapsed(orchestrator, artifact):
    summary = orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A", " A ", "B"])

    assert summary.devices == ["A", "B"]


def test_rollout_without_selector_writes_nothing(orchestrator, store, artifact):
    with pytest.raises(ValidationFailed):
        orchestrator.trigger("2.0.0", "admin@example.com")

    assert store.db.query(DeviceOTAState).count() == 0
    assert store.db.query(Rollout).count() == 0


def test_rollout_with_both_selectors_is_rejected(orchestrator, artifact):
    with pytest.raises(ValidationFailed):
        orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A"], organization_id="org-1")


def test_rollout_rejects_blank_serial(orchestrator, artifact):
    with pytest.raises(ValidationFailed):
        orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A", "  "])


def test_rollout_unknown_version(orchestrator, store):
    with pytest.raises(NotFound):
        orchestrator.trigger("9.9.9", "admin@example.com", device_serials=["A"])

    assert store.db.query(Rollout).count() == 0


def test_rollout_to_organization(orchestrator, store, artifact):
    store.db.add_all(
        [
            Device(serial="S2", organization_id="org-1"),
            Device(serial="S1", organization_id="org-1"),
            Device(serial="S3", organization_id="org-2"),
        ]
    )
    store.db.commit()

    summary = orchestrator.trigger(
        "2.0.0", "admin@example.com", organization_id="org-1", maintenance_window={"start": "02:00", "end": "04:00"}
    )

    assert summary.devices == ["S1", "S2"]
    rollout = store.get_rollout(summary.rollout_id)
    assert rollout.organization_id == "org-1"
    assert rollout.maintenance_window == {"start": "02:00", "end": "04:00"}
    assert store.get_device_state("S1").maintenance_window == {"start": "02:00", "end": "04:00"}
    assert store.get_device_state("S3") is None


def test_rollout_to_empty_organization(orchestrator, store, artifact):
    with pytest.raises(ValidationFailed, match="No devices"):
        orchestrator.trigger("2.0.0", "admin@example.com", organization_id="org-empty")

    assert store.db.query(Rollout).count() == 0


def test_new_rollout_overwrites_device_state(orchestrator, registry, store, artifact):
    first = orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A"])
    state = store.get_device_state("A")
    state.status = "failed"
    state.progress = 40
    state.error = "flash write error"
    store.db.commit()

    registry.upload("2.0.1", b"\x01" * 10, FirmwareMetadata(), "admin@example.com")
    second = orchestrator.trigger("2.0.1", "ops@example.com", device_serials=["A"])

    state = orchestrator.get_device_state("A")
    assert second.rollout_id != first.rollout_id
    assert state.rollout_id == second.rollout_id
    assert state.target_version == "2.0.1"
    assert state.status == "pending"
    assert state.progress == 0
    assert state.error is None
    assert state.triggered_by == "ops@example.com"
    # The earlier rollout record is history and stays as it was.
    assert orchestrator.get_rollout(first.rollout_id).devices == ["A"]


def test_store_failure_leaves_nothing_behind(orchestrator, store, artifact, monkeypatch):
    real_merge = store.db.merge
    calls = []

    def flaky_merge(instance):
        calls.append(instance)
        if len(calls) == 2:
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        return real_merge(instance)

    monkeypatch.setattr(store.db, "merge", flaky_merge)

    with pytest.raises(StoreFailure):
        orchestrator.trigger("2.0.0", "admin@example.com", device_serials=["A", "B"])

    monkeypatch.undo()
    assert store.db.query(DeviceOTAState).count() == 0
    assert store.db.query(Rollout).count() == 0


def test_rollout_ids_are_unique_within_one_millisecond():
    ids = {new_rollout_id(1_700_000_000_000) for _ in range(100)}

    assert len(ids) == 100
    assert all(rollout_id.startswith("rollout_1700000000000_") for rollout_id in ids)


def test_lookup_unknown_rollout_and_device(orchestrator):
    with pytest.raises(NotFound):
        orchestrator.get_rollout("rollout_0_missing")
    with pytest.raises(NotFound):
        orchestrator.get_device_state("ghost")
