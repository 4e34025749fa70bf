import pytest

from event_calendar.utils.storage import LocalBucket


def test_put_get_and_delete(tmp_path):
    bucket = LocalBucket(str(tmp_path))
    bucket.put("events/u1/a.png", b"data", "image/png", {"uploaded_by": "u1"})

    stored = bucket.get("events/u1/a.png")
    assert stored.data == b"data"
    assert stored.content_type == "image/png"
    assert stored.metadata == {"uploaded_by": "u1"}
    assert bucket.list("events/") == ["events/u1/a.png"]

    assert bucket.delete("events/u1/a.png") is True
    assert bucket.get("events/u1/a.png") is None
    assert bucket.delete("events/u1/a.png") is False


def test_keys_outside_root_are_rejected(tmp_path):
    bucket = LocalBucket(str(tmp_path / "root"))
    with pytest.raises(ValueError):
        bucket.put("../escape.png", b"data", "image/png")
    assert bucket.get("../escape.png") is None
