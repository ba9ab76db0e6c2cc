import pytest

from otahub.services.errors import NotFound
from otahub.services.registry import FirmwareMetadata
from otahub.services.resolver import resolve_latest


def upload(registry, version, hardware_version="all"):
    return registry.upload(version, version.encode(), FirmwareMetadata(hardware_version=hardware_version), "a@example.com")


def test_no_firmware_is_not_found(store):
    with pytest.raises(NotFound):
        resolve_latest(store)


def test_picks_most_recent_upload(registry, store, clock):
    upload(registry, "1.0.0")
    upload(registry, "1.1.0")

    assert resolve_latest(store).artifact.version == "1.1.0"


def test_hardware_filter_keeps_exact_and_wildcard(registry, store, clock):
    upload(registry, "1.0.0", "all")
    upload(registry, "1.1.0", "v1")

    assert resolve_latest(store, hardware_version="v2").artifact.version == "1.0.0"
    assert resolve_latest(store, hardware_version="v1").artifact.version == "1.1.0"
    assert resolve_latest(store).artifact.version == "1.1.0"


def test_hardware_filter_without_match(registry, store, clock):
    upload(registry, "1.0.0", "v1")

    with pytest.raises(NotFound):
        resolve_latest(store, hardware_version="v2")


def test_inactive_artifacts_are_skipped(registry, store, clock):
    upload(registry, "1.0.0")
    upload(registry, "1.1.0")
    registry.set_active("1.1.0", False)

    assert resolve_latest(store).artifact.version == "1.0.0"


def test_update_available(registry, store, clock):
    upload(registry, "2.0.0")

    assert resolve_latest(store).update_available is True
    assert resolve_latest(store, current_version="2.0.0").update_available is False
    assert resolve_latest(store, current_version="1.9.0").update_available is True
    # Inequality, not ordering: a device ahead of the catalog is still offered it.
    assert resolve_latest(store, current_version="3.0.0").update_available is True


def test_blank_parameters_mean_absent(registry, store, clock):
    upload(registry, "1.0.0", "v1")

    resolution = resolve_latest(store, hardware_version="", current_version="")

    assert resolution.artifact.version == "1.0.0"
    assert resolution.update_available is True
    assert resolution.current_version is None
