from event_calendar.services.image_service import extract_image_key, is_user_key, owned_image_key


def test_extract_image_key():
    assert extract_image_key("/api/images/events/u1/a.png") == "events/u1/a.png"
    assert extract_image_key("https://cdn.example.com/avatars/u1/b.jpg") == "avatars/u1/b.jpg"
    assert extract_image_key("https://example.com/photo.png") is None
    assert extract_image_key(None) is None


def test_owned_image_key_only_matches_users_own_folder():
    assert owned_image_key("/api/images/events/u1/a.png", "event", "u1") == "events/u1/a.png"
    assert owned_image_key("/api/images/events/u2/a.png", "event", "u1") is None
    assert owned_image_key("/api/images/avatars/u1/a.png", "event", "u1") is None
    assert owned_image_key("https://example.com/photo.png", "event", "u1") is None


def test_is_user_key():
    assert is_user_key("events/u1/a.png", "u1")
    assert is_user_key("avatars/u1/a.png", "u1")
    assert not is_user_key("events/u10/a.png", "u1")
    assert not is_user_key("events/u2/u1/a.png", "u1")
