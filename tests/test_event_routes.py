from event_calendar.extensions import db
from event_calendar.models import Attendee
from event_calendar.repositories import EventRepository

from tests.conftest import auth_headers, future_event_date


def event_payload(**overrides):
    payload = {
        "title": "  Flask勉強会  ",
        "date": future_event_date(),
        "location": "オンライン",
        "description": "Flaskについて話します",
        "capacity": 20,
    }
    payload.update(overrides)
    return payload


def test_list_events_includes_attendee_counts(client, make_event):
    first = make_event(title="A")
    second = make_event(title="B")
    db.session.add(Attendee(event_id=first["id"], user_id="u1", email="u1@example.com"))
    db.session.add(Attendee(event_id=first["id"], user_id="u2", email="u2@example.com"))
    db.session.commit()

    response = client.get("/api/events")
    assert response.status_code == 200
    counts = {event["id"]: event["attendees"] for event in response.get_json()}
    assert counts == {first["id"]: 2, second["id"]: 0}


def test_get_event(client, make_event):
    event = make_event(capacity=3)
    response = client.get(f"/api/events/{event['id']}")
    assert response.status_code == 200
    body = response.get_json()
    assert body["title"] == "テストイベント"
    assert body["capacity"] == 3
    assert body["attendees"] == 0


def test_get_unknown_event(client):
    response = client.get("/api/events/missing")
    assert response.status_code == 404
    assert response.get_json() == {"error": "イベントが見つかりません"}


def test_create_event(client, make_user):
    user, token = make_user()
    response = client.post("/api/events/create", json=event_payload(), headers=auth_headers(token))
    assert response.status_code == 201

    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "イベントが作成されました"
    assert body["event"]["title"] == "Flask勉強会"
    assert body["event"]["creator_id"] == user.id
    assert EventRepository.get_event(body["eventId"])["capacity"] == 20


def test_create_event_requires_login(client):
    response = client.post("/api/events/create", json=event_payload())
    assert response.status_code == 401


def test_create_event_rejects_anonymous_user(client, make_user):
    _, token = make_user(anonymous=True)
    response = client.post("/api/events/create", json=event_payload(), headers=auth_headers(token))
    assert response.status_code == 403


def test_create_event_validation_messages(client, make_user):
    _, token = make_user()
    response = client.post(
        "/api/events/create",
        json={"title": "   ", "date": "", "location": "東京", "capacity": 0},
        headers=auth_headers(token),
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "タイトルは必須です, 開催日時は必須です, 定員は1人以上で設定してください"


def test_create_event_rejects_invalid_image_url(client, make_user):
    _, token = make_user()
    response = client.post(
        "/api/events/create", json=event_payload(image_url="javascript:alert(1)"), headers=auth_headers(token)
    )
    assert response.status_code == 400
    assert response.get_json()["error"] == "有効なURLを入力してください"


def test_update_event(client, make_user, make_event):
    user, token = make_user()
    event = make_event(creator_id=user.id, image_url="https://example.com/a.png")

    response = client.put(
        f"/api/events/{event['id']}/update",
        json={"title": "新しいタイトル", "image_url": ""},
        headers=auth_headers(token),
    )
    assert response.status_code == 200
    updated = response.get_json()["event"]
    assert updated["title"] == "新しいタイトル"
    assert updated["image_url"] is None
    assert updated["location"] == "東京"


def test_update_event_by_other_user_is_forbidden(client, make_user, make_event):
    owner, _ = make_user()
    _, token = make_user()
    event = make_event(creator_id=owner.id)

    response = client.put(f"/api/events/{event['id']}/update", json={"title": "x"}, headers=auth_headers(token))
    assert response.status_code == 403
    assert response.get_json()["error"] == "このイベントを編集する権限がありません"


def test_delete_event(client, make_user, make_event):
    user, token = make_user()
    event = make_event(creator_id=user.id)

    response = client.delete(f"/api/events/{event['id']}/delete", headers=auth_headers(token))
    assert response.status_code == 200
    assert EventRepository.get_event(event["id"]) is None


def test_delete_event_with_attendees_is_rejected(client, make_user, make_event):
    user, token = make_user()
    event = make_event(creator_id=user.id)
    db.session.add(Attendee(event_id=event["id"], user_id="u1", email="u1@example.com"))
    db.session.commit()

    response = client.delete(f"/api/events/{event['id']}/delete", headers=auth_headers(token))
    assert response.status_code == 400
    assert response.get_json()["error"] == "参加者が1人いるため削除できません"
    assert EventRepository.get_event(event["id"]) is not None
