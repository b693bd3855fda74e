from prometheus_client import REGISTRY

from oss_storage.common.config import get_settings
from oss_storage.infra.storage.oss_client import Storage


def _sample(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_storage_errors_are_counted_by_kind(mock_client, client_error):
    store = Storage(mock_client, name="test-bucket")
    mock_client.head_object.side_effect = client_error("NoSuchKey", 404)
    labels = {"scope": "storage", "op": "stat", "kind": "object-not-found"}
    before = _sample("oss_storage_errors_total", labels)
    ops_before = _sample("oss_storage_operations_total", {"scope": "storage", "op": "stat"})

    try:
        store.stat("missing")
    except Exception:
        pass

    assert _sample("oss_storage_errors_total", labels) == before + 1
    assert (
        _sample("oss_storage_operations_total", {"scope": "storage", "op": "stat"})
        == ops_before + 1
    )


def test_internal_errors_use_internal_kind(mock_client):
    store = Storage(mock_client, name="test-bucket")
    labels = {"scope": "storage", "op": "delete", "kind": "internal"}
    before = _sample("oss_storage_errors_total", labels)

    try:
        store.delete("a", unknown=True)
    except Exception:
        pass

    assert _sample("oss_storage_errors_total", labels) == before + 1


def test_metrics_can_be_disabled(mock_client, client_error, monkeypatch):
    monkeypatch.setattr(get_settings(), "ENABLE_METRICS", False)
    store = Storage(mock_client, name="test-bucket")
    mock_client.head_object.side_effect = client_error("AccessDenied", 403)
    labels = {"scope": "storage", "op": "stat", "kind": "permission-denied"}
    before = _sample("oss_storage_errors_total", labels)

    try:
        store.stat("secret")
    except Exception:
        pass

    assert _sample("oss_storage_errors_total", labels) == before
