import pytest

from weekly_reminders.storage import LocalBlobStore


def test_put_get_delete(tmp_path) -> None:
    store = LocalBlobStore(str(tmp_path))
    blob = store.put(b"%PDF-1.4", "week 10.pdf", "application/pdf")

    assert blob.key.startswith("documents/week 10-")
    assert blob.key.endswith(".pdf")
    assert blob.url.startswith("file://")
    assert store.get(blob.key) == b"%PDF-1.4"

    store.delete(blob.key)
    with pytest.raises(FileNotFoundError):
        store.get(blob.key)
    store.delete(blob.key)


def test_same_name_gets_distinct_keys(tmp_path) -> None:
    store = LocalBlobStore(str(tmp_path))
    first = store.put(b"one", "mailing.pdf", "application/pdf")
    second = store.put(b"two", "mailing.pdf", "application/pdf")

    assert first.key != second.key
    assert store.get(first.key) == b"one"


def test_keys_cannot_escape_root(tmp_path) -> None:
    store = LocalBlobStore(str(tmp_path / "blobs"))
    with pytest.raises(ValueError):
        store.get("../outside.pdf")
